"""
Out-of-band cleanup of orphaned storage objects.

An orphan is an object in a managed folder that no catalog record references,
left behind when both the catalog write and its compensation failed, or when
a client went away mid-ingestion. Objects younger than the grace period are
never touched: their ingestion may still be writing the record.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Set
from urllib.parse import unquote

from mediacatalog.core.exceptions import StorageError
from mediacatalog.storage.object_storage import StoredObjectInfo

logger = logging.getLogger(__name__)


REFERENCE_FIELDS = {"storage_id": 1, "thumbnail_storage_id": 1, "media_url": 1, "thumbnail_url": 1}


def key_from_url(url: Optional[str], url_prefix: Optional[str]) -> Optional[str]:
    """Object key named by a public URL under ``url_prefix``, if any."""
    if not url or not url_prefix or not url.startswith(url_prefix):
        return None
    key = url[len(url_prefix):].split("?", 1)[0].split("#", 1)[0]
    return unquote(key) or None


def referenced_storage_ids(collection, url_prefix: Optional[str] = None) -> Set[str]:
    """Keys referenced by any record, by storage id or by URL.

    Records saved from a precomputed URL carry no storage id but may still
    point into a managed folder.
    """
    referenced = set()
    for doc in collection.find({}, REFERENCE_FIELDS):
        for field in ("storage_id", "thumbnail_storage_id"):
            if doc.get(field):
                referenced.add(doc[field])
        for field in ("media_url", "thumbnail_url"):
            key = key_from_url(doc.get(field), url_prefix)
            if key:
                referenced.add(key)
    return referenced


def find_orphans(
    objects: Iterable[StoredObjectInfo],
    referenced: Set[str],
    cutoff: datetime,
) -> List[StoredObjectInfo]:
    return [obj for obj in objects if obj.key not in referenced and obj.last_modified < cutoff]


def reconcile_orphans(
    storage,
    collection,
    folders: Iterable[str],
    grace_minutes: int,
    now: Optional[datetime] = None,
) -> dict:
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(minutes=grace_minutes)
    referenced = referenced_storage_ids(collection, url_prefix=storage.public_url(""))

    scanned = deleted = failed = 0
    for folder in folders:
        objects = list(storage.iter_objects(folder))
        scanned += len(objects)
        for orphan in find_orphans(objects, referenced, cutoff):
            try:
                storage.delete_sync(orphan.key)
            except StorageError as e:
                failed += 1
                logger.error("Could not delete orphan %s: %s", orphan.key, e)
            else:
                deleted += 1
                logger.info("Deleted orphan %s (last modified %s)", orphan.key, orphan.last_modified)

    logger.info("Reconciliation finished: scanned=%d deleted=%d failed=%d", scanned, deleted, failed)
    return {"scanned": scanned, "deleted": deleted, "failed": failed}
