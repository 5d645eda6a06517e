"""Concurrency helpers: safe task spawning, lock-timeout tracking and a bounded task pool."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 1000
DEFAULT_QUEUE_SIZE = 20000


def spawn_safe(coro: Coroutine[Any, Any, Any]) -> asyncio.Task[None]:
    """Run ``coro`` as a task whose exceptions are logged instead of propagated."""

    async def _guarded() -> None:
        try:
            await coro
        except Exception:
            logger.exception("[spawn_safe] task failed")

    return asyncio.get_running_loop().create_task(_guarded())


class LockCounter:
    """Thread-safe count of in-flight row locks plus an active flag."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count = 0
        self._active = False

    def increment(self) -> None:
        with self._lock:
            self._count += 1

    def decrement(self) -> None:
        with self._lock:
            self._count -= 1

    def set_active(self, value: bool) -> None:
        with self._lock:
            self._active = bool(value)

    def load_count(self) -> int:
        with self._lock:
            return self._count

    def is_active(self) -> bool:
        with self._lock:
            return self._active


_LOCK_COUNTER = LockCounter()


def lock_counter() -> LockCounter:
    """Return the process-wide lock counter."""
    return _LOCK_COUNTER


def lock_timeout() -> int:
    """Seconds to wait on a row lock: 10 when inactive, else 16 - count clamped to [1, 15]."""
    if not _LOCK_COUNTER.is_active():
        return 10
    return max(1, min(15, 16 - _LOCK_COUNTER.load_count()))


class TaskPool:
    """Runs coroutines as tasks with at most ``concurrency`` running at once."""

    def __init__(self, concurrency: int, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.queue_size = queue_size
        self._limit = concurrency
        self._active = 0
        self._waiters: list[asyncio.Future[None]] = []
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def limit(self) -> int:
        """Current concurrency limit."""
        return self._limit

    @property
    def active(self) -> int:
        """Number of tasks currently holding a slot."""
        return self._active

    async def submit(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Wait for a free slot, then start ``coro`` as a task and return it."""
        try:
            await self._acquire()
        except BaseException:
            coro.close()
            raise
        task = asyncio.get_running_loop().create_task(self._run(coro))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def resize(self, new_concurrency: int) -> None:
        """Change the concurrency limit; waiting submitters are woken if it grows."""
        if new_concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {new_concurrency}")
        self._limit = new_concurrency
        self._wake_waiters()

    async def _acquire(self) -> None:
        loop = asyncio.get_running_loop()
        while self._active >= self._limit:
            waiter: asyncio.Future[None] = loop.create_future()
            self._waiters.append(waiter)
            try:
                await waiter
            finally:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)
        self._active += 1

    async def _run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        try:
            return await coro
        finally:
            self._active -= 1
            self._wake_waiters()

    def _wake_waiters(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)


_pool_lock = threading.Lock()
_global_pool: TaskPool | None = None


def get_pool() -> TaskPool:
    """Return the process-wide task pool, creating it on first use."""
    global _global_pool
    with _pool_lock:
        if _global_pool is None:
            _global_pool = TaskPool(DEFAULT_POOL_SIZE, DEFAULT_QUEUE_SIZE)
        return _global_pool