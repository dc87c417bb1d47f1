"""
MongoDB-backed catalog of MediaRecords.

Each mutating call touches exactly one document through a single atomic
operation (``insert_one``, ``$inc``, ``$push``); none of them upserts, so a
counter or comment call against an unknown id never creates a record.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from bson import ObjectId
from pymongo import DESCENDING

from mediacatalog.database.schemas.media import CounterField, MediaRecord

logger = logging.getLogger(__name__)


def is_valid_id(record_id) -> bool:
    return isinstance(record_id, str) and ObjectId.is_valid(record_id)


@dataclass
class CatalogPage:
    records: List[MediaRecord]
    total: int
    skip: int

    @property
    def has_more(self) -> bool:
        return self.skip + len(self.records) < self.total


class CatalogStore:
    def __init__(self, collection):
        self.collection = collection

    async def create(self, document: dict) -> MediaRecord:
        result = await self.collection.insert_one(document)
        logger.info("Catalog record created: id=%s", result.inserted_id)
        return MediaRecord.from_document({**document, "_id": result.inserted_id})

    async def get(self, record_id: str) -> Optional[MediaRecord]:
        doc = await self.collection.find_one({"_id": ObjectId(record_id)})
        if doc is None:
            return None
        return MediaRecord.from_document(doc)

    async def find_recent(self, skip: int = 0, limit: Optional[int] = None) -> CatalogPage:
        """Records ordered by ``created_at`` descending, optionally windowed."""
        cursor = self.collection.find({}).sort("created_at", DESCENDING)
        if skip:
            cursor = cursor.skip(skip)
        if limit is not None:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=None)
        records = [MediaRecord.from_document(doc) for doc in docs]

        if limit is None and not skip:
            total = len(records)
        else:
            total = await self.collection.count_documents({})
        return CatalogPage(records=records, total=total, skip=skip)

    async def list_ids(self) -> List[str]:
        cursor = self.collection.find({}, {"_id": 1}).sort("created_at", DESCENDING)
        docs = await cursor.to_list(length=None)
        return [str(doc["_id"]) for doc in docs]

    async def increment(self, record_id: str, field: CounterField) -> bool:
        field = CounterField(field)
        result = await self.collection.update_one(
            {"_id": ObjectId(record_id)},
            {"$inc": {field.value: 1}},
        )
        return result.matched_count > 0

    async def append_comment(self, record_id: str, text: str) -> bool:
        result = await self.collection.update_one(
            {"_id": ObjectId(record_id)},
            {"$push": {"comments": text}},
        )
        return result.matched_count > 0
