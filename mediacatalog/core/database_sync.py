import logging

from pymongo import MongoClient
from mediacatalog.core.config import settings

logger = logging.getLogger(__name__)


class MongoDBSync:
    def __init__(self):
        self.client = None
        self.db = None

    def connect(self):
        if self.db is not None:
            return  # already connected

        self.client = MongoClient(
            settings.MONGO_URI,
            serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
        )
        self.db = self.client[settings.MONGO_DB]
        logger.info("Celery MongoDB connected: %s", self.db.name)

    def videos(self):
        if self.db is None:
            raise RuntimeError("MongoDB (sync) not initialized")
        return self.db[settings.MONGO_COLLECTION]

mongodb_sync = MongoDBSync()
