from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock

from roombook.core.exceptions import StorageUnavailable


class RoomDayLocks:
    """Process-local exclusive locks keyed by (room_id, day_of_week).

    Complements the database row lock: SQLite ignores ``FOR UPDATE``, and on
    PostgreSQL it keeps same-process writers from queueing on the database.
    """

    def __init__(self, timeout_seconds: float = 10.0) -> None:
        self._locks: dict[tuple[int, int], Lock] = {}
        self._guard = Lock()
        self._timeout = timeout_seconds

    def _lock_for(self, key: tuple[int, int]) -> Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = Lock()
            return lock

    @contextmanager
    def hold(self, room_id: int, day_of_week: int) -> Iterator[None]:
        lock = self._lock_for((room_id, day_of_week))
        if not lock.acquire(timeout=self._timeout):
            raise StorageUnavailable(
                "Timed out waiting for the room/day booking lock",
                details={"roomId": room_id, "dayOfWeek": day_of_week},
            )
        try:
            yield
        finally:
            lock.release()

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


_room_day_locks: RoomDayLocks | None = None


def get_room_day_locks(timeout_seconds: float = 10.0) -> RoomDayLocks:
    global _room_day_locks
    if _room_day_locks is None:
        _room_day_locks = RoomDayLocks(timeout_seconds)
    return _room_day_locks
