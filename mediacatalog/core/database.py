import logging

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from .config import settings
from .readiness import GateTopologyListener, ReadinessGate

logger = logging.getLogger(__name__)


class MongoDB:
    client: AsyncIOMotorClient = None
    db = None

mongodb = MongoDB()

async def connect_to_mongo(gate: ReadinessGate):
    """Open the motor client and report the first ping result to ``gate``.

    A failed ping does not abort startup: the topology listener flips the
    gate once the server becomes reachable.
    """
    gate.mark_disconnected()
    mongodb.client = AsyncIOMotorClient(
        settings.MONGO_URI,
        serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
        event_listeners=[GateTopologyListener(gate)],
    )
    mongodb.db = mongodb.client[settings.MONGO_DB]
    try:
        await mongodb.client.admin.command("ping")
    except PyMongoError as e:
        gate.mark_error(str(e))
        logger.error("MongoDB ping failed for db=%s: %s", settings.MONGO_DB, e)
    else:
        gate.mark_connected()
        logger.info("Connected to MongoDB: %s", settings.MONGO_DB)
    return mongodb.db

def get_videos_collection():
    return mongodb.db[settings.MONGO_COLLECTION]

async def close_mongo_connection(gate: ReadinessGate):
    if mongodb.client is not None:
        mongodb.client.close()
        mongodb.client = None
        mongodb.db = None
    gate.mark_disconnected()
    logger.info("MongoDB connection closed")
