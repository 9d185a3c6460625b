from punchclock.store.base import AttendanceStore
from punchclock.store.memory_store import MemoryStore

__all__ = ["AttendanceStore", "MemoryStore"]
