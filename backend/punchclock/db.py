import os
import logging
from motor.motor_asyncio import AsyncIOMotorClient
from punchclock.store.base import AttendanceStore
from punchclock.store.memory_store import MemoryStore

logger = logging.getLogger(__name__)

# Store setup
client = None
store: AttendanceStore = None


def init_db(app):
    global client, store
    backend = os.getenv("STORE_BACKEND", "mongo").lower()
    if backend == "memory":
        logger.warning("Using in-memory store; data is lost on restart")
        store = MemoryStore()
    else:
        from punchclock.store.mongo_store import MongoStore

        mongodb_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017/punchclock")
        client = AsyncIOMotorClient(mongodb_uri, tz_aware=True)
        store = MongoStore(client.get_default_database())
    app.state.store = store


def use_store(new_store: AttendanceStore):
    global store
    store = new_store


def get_store() -> AttendanceStore:
    return store
