"""
Per-room mutual exclusion for the create path.

`RoomLockRegistry.hold(room_id)` serialises bookers of the same room inside
this process. Across processes the row lock taken by
`BookingRepository.lock_room` (SELECT ... FOR UPDATE) does the same job on
databases that support it.

Entries are reference counted: a room's lock lives in the registry only
while some thread holds it or waits for it.
"""

from contextlib import contextmanager
import logging
import threading
import time
from typing import Dict, Iterator

from app.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)


class RoomLockRegistry:
    def __init__(self, timeout_s: float = 5.0, retries: int = 3, backoff_s: float = 0.05):
        self.timeout_s = timeout_s
        self.retries = retries
        self.backoff_s = backoff_s
        self._locks: Dict[str, threading.Lock] = {}
        self._users: Dict[str, int] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, room_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = self._locks[room_id] = threading.Lock()
            self._users[room_id] = self._users.get(room_id, 0) + 1
            return lock

    def _checkin(self, room_id: str) -> None:
        with self._guard:
            self._users[room_id] -= 1
            if self._users[room_id] == 0:
                del self._users[room_id]
                del self._locks[room_id]

    def acquire(self, room_id: str) -> None:
        """Take the room's lock, retrying with backoff; pair with `release`."""
        lock = self._checkout(room_id)
        for attempt in range(1, self.retries + 1):
            if lock.acquire(timeout=self.timeout_s):
                return
            logger.warning(
                "room_lock_acquire_timeout",
                extra={"room_id": room_id, "attempt": attempt},
            )
            if attempt < self.retries:
                time.sleep(self.backoff_s * (2 ** (attempt - 1)))
        self._checkin(room_id)
        raise LockTimeoutError(room_id, self.retries)

    def release(self, room_id: str) -> None:
        with self._guard:
            lock = self._locks[room_id]
        lock.release()
        self._checkin(room_id)

    @contextmanager
    def hold(self, room_id: str) -> Iterator[None]:
        self.acquire(room_id)
        try:
            yield
        finally:
            self.release(room_id)
