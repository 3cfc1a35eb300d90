"""Explicit unit of work: one transaction plus the locks guarding it.

A ``UnitOfWork`` is opened by a service, passed into the operations that
must share its transaction, and closed by the ``with`` block:

    with UnitOfWork(lock_keys=[product_key(pid) for pid in ids]) as uow:
        reservation.reserve(uow, items)
        ...

Entering acquires a process-local lock per key (sorted, so two units of
work never wait on each other in opposite order) and then opens a durable
``transaction.atomic``.  A unit of work cannot be nested inside another
transaction: exiting commits on success or rolls back on any exception,
and only then releases the locks.  Database row locks
(``SELECT ... FOR UPDATE``) taken inside the block cover multi-process
deployments; the process-local locks cover backends that ignore row locks
(SQLite).

A key stays in the lock registry only while some unit of work holds or
waits on it.
"""

from __future__ import annotations

import threading
from types import TracebackType
from typing import Callable, Iterable, Optional, Type

import structlog
from django.db import DEFAULT_DB_ALIAS, transaction

logger = structlog.get_logger(__name__)


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


_registry_guard = threading.Lock()
_resource_locks: dict[str, _KeyLock] = {}


def product_key(product_id: object) -> str:
    return f"product:{product_id}"


def order_key(order_id: object) -> str:
    return f"order:{order_id}"


def _checkout(key: str) -> threading.Lock:
    with _registry_guard:
        entry = _resource_locks.get(key)
        if entry is None:
            entry = _resource_locks[key] = _KeyLock()
        entry.users += 1
        return entry.lock


def _checkin(key: str) -> None:
    with _registry_guard:
        entry = _resource_locks[key]
        entry.users -= 1
        if entry.users == 0:
            del _resource_locks[key]


def registry_size() -> int:
    with _registry_guard:
        return len(_resource_locks)


def is_locked(key: str) -> bool:
    with _registry_guard:
        entry = _resource_locks.get(key)
        return entry is not None and entry.lock.locked()


class UnitOfWork:
    """Scoped transaction with guaranteed lock release."""

    def __init__(
        self,
        lock_keys: Iterable[str] = (),
        using: str = DEFAULT_DB_ALIAS,
    ) -> None:
        self._keys = sorted(set(lock_keys))
        self._using = using
        self._held: list[tuple[str, threading.Lock]] = []
        self._atomic: Optional[transaction.Atomic] = None
        self.committed = False

    @property
    def active(self) -> bool:
        return self._atomic is not None

    @property
    def lock_keys(self) -> list[str]:
        return list(self._keys)

    def on_commit(self, func: Callable[[], None]) -> None:
        """Run *func* once the transaction commits (never on rollback)."""
        transaction.on_commit(func, using=self._using, robust=True)

    def __enter__(self) -> UnitOfWork:
        if self.active:
            raise RuntimeError("UnitOfWork is already open.")
        try:
            for key in self._keys:
                lock = _checkout(key)
                try:
                    lock.acquire()
                except BaseException:
                    _checkin(key)
                    raise
                self._held.append((key, lock))
            atomic = transaction.atomic(using=self._using, durable=True)
            atomic.__enter__()
            self._atomic = atomic
        except BaseException:
            self._release()
            raise
        logger.debug("uow.opened", lock_keys=self._keys)
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        atomic, self._atomic = self._atomic, None
        try:
            if atomic is not None:
                atomic.__exit__(exc_type, exc, tb)
            self.committed = exc_type is None
        finally:
            self._release()
        if exc_type is None:
            logger.debug("uow.committed", lock_keys=self._keys)
        else:
            logger.info(
                "uow.rolled_back",
                lock_keys=self._keys,
                error=exc_type.__name__,
            )

    def _release(self) -> None:
        while self._held:
            key, lock = self._held.pop()
            lock.release()
            _checkin(key)


UnitOfWorkFactory = Callable[..., UnitOfWork]
