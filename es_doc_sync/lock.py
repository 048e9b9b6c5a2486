"""이름 기반 상호 배제 락"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncContextManager, AsyncIterator, Awaitable, Callable, Protocol


class LockService(Protocol):
    """hold(name) 동안만 name 락을 보유. 분산 락도 같은 인터페이스로 주입."""

    def hold(self, name: str) -> AsyncContextManager[None]: ...


class LocalLockService:
    """프로세스 내부 락 (이름마다 asyncio.Lock 하나)"""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}

    def locked(self, name: str) -> bool:
        lock = self._locks.get(name)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, name: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(name, asyncio.Lock())
        async with lock:
            yield


async def with_lock(
    locks: LockService, name: str, fn: Callable[[], Awaitable[Any]]
) -> Any:
    """name 락을 잡은 상태에서 fn 실행. 실패해도 락은 항상 해제."""
    async with locks.hold(name):
        return await fn()
