# This project was developed with assistance from AI tools.
"""Per-case write serialization.

Every mutating case operation runs under ``case_lock(case_id)`` so that
concurrent writers to the same case (e.g. bank sync racing a staff edit)
apply one after the other instead of last-write-wins. Locks live only
while someone holds or waits on them.
"""

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(case_id: int) -> asyncio.Lock:
    lock = _locks.get(case_id)
    if lock is None:
        lock = asyncio.Lock()
        _locks[case_id] = lock
    return lock


@asynccontextmanager
async def case_lock(case_id: int) -> AsyncIterator[None]:
    """Hold the in-process mutex for one case."""
    lock = _lock_for(case_id)
    async with lock:
        yield
