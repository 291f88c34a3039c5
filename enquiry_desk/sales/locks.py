"""
Record Locks
============
One asyncio.Lock per record id. An entry only lives while some task
holds or waits on it, so ids that are never seen again cost nothing.
"""

import asyncio
from contextlib import asynccontextmanager


class RecordLocks:

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, record_id: str):
        lock = self._locks.get(record_id)
        if lock is None:
            lock = self._locks[record_id] = asyncio.Lock()
        self._users[record_id] = self._users.get(record_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[record_id] -= 1
            if not self._users[record_id]:
                del self._users[record_id]
                del self._locks[record_id]
