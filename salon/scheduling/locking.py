from contextlib import contextmanager
from datetime import date
from threading import Lock

from sqlalchemy import text
from sqlalchemy.orm import Session

LOCK_POOL_SIZE = 64


class BookingLocks:
    """Per-date critical sections for the check-then-insert booking path.

    The lock is scoped to the whole day because an "any stylist" booking is
    checked against every stylist's appointments on that date. Dates share a
    fixed pool of locks, so two dates may occasionally serialize each other.
    """

    def __init__(self, pool_size: int = LOCK_POOL_SIZE) -> None:
        self._locks = tuple(Lock() for _ in range(pool_size))

    def _lock_for(self, slot_date: date) -> Lock:
        return self._locks[slot_date.toordinal() % len(self._locks)]

    @contextmanager
    def hold(self, db: Session, slot_date: date):
        with self._lock_for(slot_date):
            acquire_database_lock(db, slot_date)
            yield


def acquire_database_lock(db: Session, slot_date: date) -> None:
    # Serializes bookings across worker processes; released on commit/rollback.
    if db.get_bind().dialect.name == 'postgresql':
        db.execute(text('SELECT pg_advisory_xact_lock(:key)'), {'key': slot_date.toordinal()})
