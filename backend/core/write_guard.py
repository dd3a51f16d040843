"""Serialization of conflicting schedule writes.

A schedule write reads the teacher's and the section's existing entries,
validates, then inserts. Two writes touching the same teacher or section
must not interleave between the read and the commit, otherwise both can
pass validation and together break the no-overlap invariant.

The guard is held around the whole read-validate-write unit by the
schedule service. Keys look like ``teacher:<id>`` and ``section:<id>``.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.section import Section
from models.teacher import Teacher


logger = logging.getLogger(__name__)


def teacher_key(teacher_id) -> str:
    return f"teacher:{teacher_id}"


def section_key(section_id) -> str:
    return f"section:{section_id}"


def contended_keys(*pairs: tuple[object, object]) -> list[str]:
    """Keys for every (teacher_id, section_id) pair, deduplicated and sorted."""

    keys: set[str] = set()
    for teacher_id, section_id in pairs:
        if teacher_id is not None:
            keys.add(teacher_key(teacher_id))
        if section_id is not None:
            keys.add(section_key(section_id))
    return sorted(keys)


class ScheduleWriteGuard:
    name = "base"

    @contextmanager
    def hold(self, keys: Iterable[str]) -> Iterator[None]:
        raise NotImplementedError


class NullWriteGuard(ScheduleWriteGuard):
    """Relies on the database isolation level alone."""

    name = "none"

    @contextmanager
    def hold(self, keys: Iterable[str]) -> Iterator[None]:
        yield


class KeyedLockGuard(ScheduleWriteGuard):
    """Process-local lock per key.

    Locks are always taken in sorted key order so two writers holding
    overlapping key sets cannot deadlock. Only valid when a single worker
    process serves writes.

    One lock is kept per key ever seen and never evicted, so the registry
    grows to at most one entry per teacher and section row. Evicting a lock
    another writer may still be waiting on would let a third writer take a
    fresh lock for the same key.
    """

    name = "keyed_lock"

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    @property
    def key_count(self) -> int:
        with self._registry_lock:
            return len(self._locks)

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, keys: Iterable[str]) -> Iterator[None]:
        ordered = sorted(set(keys))
        acquired: list[threading.Lock] = []
        try:
            for key in ordered:
                lock = self._lock_for(key)
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


class RowLockGuard(ScheduleWriteGuard):
    """SELECT ... FOR UPDATE on the teacher and section rows.

    The row locks live in the session's transaction, so they are released
    by the service's commit or rollback rather than on context exit.
    SQLite ignores FOR UPDATE; use keyed_lock there.
    """

    name = "row_lock"

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def hold(self, keys: Iterable[str]) -> Iterator[None]:
        for key in sorted(set(keys)):
            kind, _, raw_id = key.partition(":")
            model = Teacher if kind == "teacher" else Section
            self.db.execute(select(model.id).where(model.id == uuid.UUID(raw_id)).with_for_update())
        yield


_PROCESS_GUARD = KeyedLockGuard()


def build_write_guard(name: str, db: Session) -> ScheduleWriteGuard:
    name = (name or "keyed_lock").strip().lower()
    if name == "row_lock":
        return RowLockGuard(db)
    if name == "none":
        return NullWriteGuard()
    if name != "keyed_lock":
        logger.warning("Unknown write guard %r; falling back to keyed_lock", name)
    return _PROCESS_GUARD
