"""
In-process keyed locks.

Serializes check-then-write sequences that touch the same key (a business's
calendar for one date) while leaving other keys fully concurrent.

With several worker processes the partial unique index on bookings keeps
one active booking per slot; these locks only make the in-process path
deterministic.
"""

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Hashable


class KeyedLock:
    def __init__(self):
        # Structure: {key: lock}, plus waiter counts so idle keys are dropped.
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._waiters: Dict[Hashable, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._waiters[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)


calendar_locks = KeyedLock()
