import asyncio

from config import settings


class WorkerGate:
    """Bounds how many encodes run at once.

    Each active slot may hold a fully decoded bitmap, so the default size
    is min(CPU count, 4) rather than one slot per batch item.
    """

    def __init__(self, size: int | None = None):
        self._size = size or settings.batch_max_workers
        if self._size < 1:
            raise ValueError(f"Worker gate size must be >= 1, got {self._size}")
        self._semaphore = asyncio.Semaphore(self._size)
        self._active = 0

    async def acquire(self):
        """Wait for a free worker slot."""
        await self._semaphore.acquire()
        self._active += 1

    def release(self):
        """Release a worker slot."""
        self._active -= 1
        self._semaphore.release()

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.release()

    @property
    def size(self) -> int:
        return self._size

    @property
    def active_jobs(self) -> int:
        return self._active
