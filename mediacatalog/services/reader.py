"""
Read-only projections of the catalog: listing, single lookup and sitemap.

Reads degrade instead of failing: when the catalog is unavailable (or a read
hits a driver error) callers get an empty result.
"""

import logging
from typing import List, Optional
from xml.etree import ElementTree

from pymongo.errors import PyMongoError

from mediacatalog.core.config import settings
from mediacatalog.core.exceptions import InvalidIdentifier, InvalidInput
from mediacatalog.core.readiness import ReadinessGate
from mediacatalog.database.catalog_store import CatalogPage, is_valid_id
from mediacatalog.database.schemas.media import MediaRecord

logger = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


class CatalogReader:
    def __init__(
        self,
        gate: ReadinessGate,
        store,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
        site_url: Optional[str] = None,
    ):
        self.gate = gate
        self.store = store
        self.default_page_size = default_page_size or settings.DEFAULT_PAGE_SIZE
        self.max_page_size = max_page_size or settings.MAX_PAGE_SIZE
        self.site_url = (site_url or settings.SITE_URL).rstrip("/")

    async def list_all(self) -> List[MediaRecord]:
        if not self.gate.is_ready:
            return []
        try:
            page = await self.store.find_recent()
        except PyMongoError as e:
            logger.error("Listing videos failed: %s", e)
            return []
        return page.records

    async def list_page(self, page: int = 1, limit: Optional[int] = None) -> CatalogPage:
        """1-based page of records, newest first."""
        limit = self.default_page_size if limit is None else limit
        if page < 1:
            raise InvalidInput("page must be >= 1")
        if limit < 1 or limit > self.max_page_size:
            raise InvalidInput(f"limit must be between 1 and {self.max_page_size}")

        skip = (page - 1) * limit
        if not self.gate.is_ready:
            return CatalogPage(records=[], total=0, skip=skip)
        try:
            return await self.store.find_recent(skip=skip, limit=limit)
        except PyMongoError as e:
            logger.error("Listing page %d failed: %s", page, e)
            return CatalogPage(records=[], total=0, skip=skip)

    async def get(self, record_id: str) -> Optional[MediaRecord]:
        if not is_valid_id(record_id):
            raise InvalidIdentifier()
        if not self.gate.is_ready:
            return None
        try:
            return await self.store.get(record_id)
        except PyMongoError as e:
            logger.error("Lookup of id=%s failed: %s", record_id, e)
            return None

    async def list_ids(self) -> List[str]:
        if not self.gate.is_ready:
            return []
        try:
            return await self.store.list_ids()
        except PyMongoError as e:
            logger.error("Listing ids failed: %s", e)
            return []

    async def sitemap_xml(self) -> str:
        urlset = ElementTree.Element("urlset", xmlns=SITEMAP_NS)
        locations = [f"{self.site_url}/"]
        locations.extend(f"{self.site_url}/video/{record_id}" for record_id in await self.list_ids())
        for location in locations:
            url = ElementTree.SubElement(urlset, "url")
            ElementTree.SubElement(url, "loc").text = location
        body = ElementTree.tostring(urlset, encoding="unicode")
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + body
