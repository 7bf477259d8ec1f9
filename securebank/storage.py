"""Shared account table, priority write buffer and the background disk writer."""

from __future__ import annotations

import fcntl
import logging
import os
import struct
import sys
import tempfile
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from multiprocessing import shared_memory
from pathlib import Path
from typing import Iterable, Iterator

from .files import write_account_at
from .models import MAX_ACCOUNTS, RECORD_SIZE, Account, Priority

log = logging.getLogger(__name__)

BUFFER_CAPACITY = 64

_HEADER = struct.Struct("<ii")
_PRIORITY = struct.Struct("<i")
_OP_SIZE = _PRIORITY.size + RECORD_SIZE
_ACCOUNTS_OFFSET = _HEADER.size
_OPS_OFFSET = _ACCOUNTS_OFFSET + MAX_ACCOUNTS * RECORD_SIZE
TABLE_SIZE = _OPS_OFFSET + BUFFER_CAPACITY * _OP_SIZE


@dataclass
class Operation:
    """A pending write of an account snapshot."""

    priority: Priority
    snapshot: Account


@dataclass
class PriorityBuffer:
    """Bounded queue ordered by priority, first-in first-out within a priority."""

    ops: list[Operation] = field(default_factory=list)
    capacity: int = BUFFER_CAPACITY

    def push(self, account: Account, priority: Priority) -> bool:
        """Queue a copy of the account; return False if the buffer is full."""
        if len(self.ops) >= self.capacity:
            return False
        position = next(
            (i for i, op in enumerate(self.ops) if op.priority < priority),
            len(self.ops),
        )
        self.ops.insert(position, Operation(Priority(priority), replace(account)))
        return True

    def pop(self) -> Operation:
        """Remove and return the highest-priority operation."""
        if not self.ops:
            raise IndexError("pop from empty buffer")
        return self.ops.pop(0)

    def __len__(self) -> int:
        return len(self.ops)


@dataclass
class TableState:
    """A decoded view of the shared table."""

    accounts: list[Account] = field(default_factory=list)
    buffer: PriorityBuffer = field(default_factory=PriorityBuffer)

    def find(self, number: int) -> int | None:
        """Return the index of the account with that number, if any."""
        return next(
            (i for i, account in enumerate(self.accounts) if account.number == number),
            None,
        )


def _decode(buf: memoryview) -> TableState:
    count, pending = _HEADER.unpack_from(buf, 0)
    count = max(0, min(count, MAX_ACCOUNTS))
    pending = max(0, min(pending, BUFFER_CAPACITY))
    accounts = [
        Account.unpack(bytes(buf[start : start + RECORD_SIZE]))
        for start in range(
            _ACCOUNTS_OFFSET, _ACCOUNTS_OFFSET + count * RECORD_SIZE, RECORD_SIZE
        )
    ]
    ops = []
    for start in range(_OPS_OFFSET, _OPS_OFFSET + pending * _OP_SIZE, _OP_SIZE):
        (priority,) = _PRIORITY.unpack_from(buf, start)
        body = start + _PRIORITY.size
        ops.append(
            Operation(Priority(priority), Account.unpack(bytes(buf[body : body + RECORD_SIZE])))
        )
    return TableState(accounts, PriorityBuffer(ops))


def _encode(state: TableState, buf: memoryview) -> None:
    if len(state.accounts) > MAX_ACCOUNTS:
        raise ValueError(f"at most {MAX_ACCOUNTS} accounts fit in the table")
    if len(state.buffer) > BUFFER_CAPACITY:
        raise ValueError(f"at most {BUFFER_CAPACITY} pending operations fit")
    _HEADER.pack_into(buf, 0, len(state.accounts), len(state.buffer))
    for i, account in enumerate(state.accounts):
        start = _ACCOUNTS_OFFSET + i * RECORD_SIZE
        buf[start : start + RECORD_SIZE] = account.pack()
    for i, op in enumerate(state.buffer.ops):
        start = _OPS_OFFSET + i * _OP_SIZE
        _PRIORITY.pack_into(buf, start, int(op.priority))
        body = start + _PRIORITY.size
        buf[body : body + RECORD_SIZE] = op.snapshot.pack()


def _lock_path(name: str) -> Path:
    return Path(tempfile.gettempdir()) / f"securebank-{name.lstrip('/')}.lock"


class AccountTable:
    """Account table in shared memory, guarded by a lock shared across processes."""

    def __init__(self, shm: shared_memory.SharedMemory) -> None:
        self._shm = shm
        self._lock_file = _lock_path(shm.name)
        self._thread_lock = threading.Lock()
        self._lock_fd: int | None = os.open(
            self._lock_file, os.O_RDWR | os.O_CREAT, 0o666
        )

    @property
    def name(self) -> str:
        """Name other processes use to attach to this table."""
        return self._shm.name

    @classmethod
    def create(cls, accounts: Iterable[Account]) -> AccountTable:
        """Create a new shared table holding the given accounts."""
        accounts = [replace(account) for account in accounts]
        if len(accounts) > MAX_ACCOUNTS:
            raise ValueError(f"at most {MAX_ACCOUNTS} accounts fit in the table")
        shm = shared_memory.SharedMemory(create=True, size=TABLE_SIZE)
        shm.buf[:TABLE_SIZE] = bytes(TABLE_SIZE)
        table = cls(shm)
        with table.transaction() as state:
            state.accounts = accounts
        return table

    @classmethod
    def attach(cls, name: str) -> AccountTable:
        """Attach to a table created by another process."""
        if sys.version_info >= (3, 13):
            shm = shared_memory.SharedMemory(name=name, track=False)
        else:
            shm = shared_memory.SharedMemory(name=name)
            # Only the creating process may remove the segment.
            from multiprocessing import resource_tracker

            resource_tracker.unregister(shm._name, "shared_memory")
        return cls(shm)

    @contextmanager
    def transaction(self) -> Iterator[TableState]:
        """Lock the table and yield its state; changes are saved on success."""
        if self._lock_fd is None:
            raise ValueError("table is closed")
        with self._thread_lock:
            fcntl.flock(self._lock_fd, fcntl.LOCK_EX)
            try:
                state = _decode(self._shm.buf)
                yield state
                _encode(state, self._shm.buf)
            finally:
                fcntl.flock(self._lock_fd, fcntl.LOCK_UN)

    def snapshot(self) -> TableState:
        """Return a consistent copy of the table without changing it."""
        if self._lock_fd is None:
            raise ValueError("table is closed")
        with self._thread_lock:
            fcntl.flock(self._lock_fd, fcntl.LOCK_EX)
            try:
                return _decode(self._shm.buf)
            finally:
                fcntl.flock(self._lock_fd, fcntl.LOCK_UN)

    def close(self) -> None:
        """Detach from the shared memory."""
        if self._lock_fd is not None:
            os.close(self._lock_fd)
            self._lock_fd = None
            self._shm.close()

    def unlink(self) -> None:
        """Remove the shared memory segment and its lock file."""
        self._shm.unlink()
        self._lock_file.unlink(missing_ok=True)

    def __enter__(self) -> AccountTable:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class DiskWriter(threading.Thread):
    """Background thread that writes buffered account snapshots to disk."""

    def __init__(self, table: AccountTable, path, interval: float = 0.02) -> None:
        super().__init__(name="securebank-io", daemon=True)
        self.table = table
        self.path = path
        self.interval = interval
        self._stopped = threading.Event()

    def process_one(self) -> bool:
        """Write the next pending snapshot; return False if nothing was pending."""
        with self.table.transaction() as state:
            if not state.buffer:
                return False
            op = state.buffer.pop()
            index = state.find(op.snapshot.number)
        if index is None:
            return True
        try:
            write_account_at(self.path, index, op.snapshot)
        except OSError as exc:
            log.warning("could not write account %d: %s", op.snapshot.number, exc)
        return True

    def run(self) -> None:
        while not self._stopped.is_set():
            if not self.process_one():
                self._stopped.wait(self.interval)

    def stop(self) -> None:
        """Ask the thread to finish."""
        self._stopped.set()