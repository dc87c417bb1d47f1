"""
View/like/dislike counters and comments.

Holds no state of its own: every call is a single atomic update on the catalog
store, so any number of instances can serve the same records. Calls succeed
whether or not the record exists; only bad input is reported.
"""

import logging
from typing import Optional

from pymongo.errors import PyMongoError

from mediacatalog.core.exceptions import BackendUnavailable, InvalidIdentifier, InvalidInput
from mediacatalog.core.readiness import ReadinessGate
from mediacatalog.database.catalog_store import is_valid_id
from mediacatalog.database.schemas.media import CounterField

logger = logging.getLogger(__name__)


class InteractionService:
    def __init__(self, gate: ReadinessGate, store):
        self.gate = gate
        self.store = store

    async def record_view(self, record_id: str) -> None:
        await self._increment(record_id, CounterField.VIEWS)

    async def record_like(self, record_id: str) -> None:
        await self._increment(record_id, CounterField.LIKES)

    async def record_dislike(self, record_id: str) -> None:
        await self._increment(record_id, CounterField.DISLIKES)

    async def add_comment(self, record_id: str, text: Optional[str]) -> None:
        self._check_id(record_id)
        if text is None or not text.strip():
            raise InvalidInput("Comment text is required")
        self.gate.require_ready()
        try:
            matched = await self.store.append_comment(record_id, text)
        except PyMongoError as e:
            logger.error("Comment append failed for id=%s: %s", record_id, e)
            raise BackendUnavailable() from e
        if not matched:
            logger.debug("Comment for unknown video id=%s ignored", record_id)

    async def _increment(self, record_id: str, field: CounterField) -> None:
        self._check_id(record_id)
        self.gate.require_ready()
        try:
            matched = await self.store.increment(record_id, field)
        except PyMongoError as e:
            logger.error("Increment of %s failed for id=%s: %s", field.value, record_id, e)
            raise BackendUnavailable() from e
        if not matched:
            logger.debug("%s for unknown video id=%s ignored", field.value, record_id)

    @staticmethod
    def _check_id(record_id: str) -> None:
        if not is_valid_id(record_id):
            raise InvalidIdentifier()
