"""Account records, operation priorities and configuration."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

MAX_ACCOUNTS = 100
HOLDER_SIZE = 50

# int number, char holder[50], 2 bytes of padding, float balance, int blocked
_RECORD = struct.Struct("<i50s2xfi")
RECORD_SIZE = _RECORD.size


@dataclass
class Account:
    """One bank account as stored in the accounts file."""

    number: int
    holder: str
    balance: float
    blocked: bool = False

    def pack(self) -> bytes:
        """Encode the account as a fixed-size binary record."""
        raw = self.holder.encode("utf-8")[: HOLDER_SIZE - 1]
        holder = raw.decode("utf-8", errors="ignore").encode("utf-8")
        return _RECORD.pack(self.number, holder, self.balance, int(self.blocked))

    @classmethod
    def unpack(cls, data: bytes) -> Account:
        """Decode an account from a binary record."""
        if len(data) != RECORD_SIZE:
            raise ValueError(
                f"account record must be {RECORD_SIZE} bytes, got {len(data)}"
            )
        number, holder, balance, blocked = _RECORD.unpack(data)
        name = holder.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        return cls(number, name, balance, bool(blocked))


class Priority(IntEnum):
    """Priority of a pending disk write."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2


@dataclass
class Config:
    """Settings read from the configuration file."""

    withdrawal_limit: int = 0
    transfer_limit: int = 0
    withdrawal_threshold: int = 0
    transfer_threshold: int = 0
    num_users: int = 0
    accounts_file: str = ""
    log_file: str = ""


def initial_accounts() -> list[Account]:
    """Return the accounts a fresh accounts file starts with."""
    return [
        Account(1001, "John Doe", 5000.00),
        Account(1002, "Jane Smith", 3000.00),
        Account(1003, "Carlos Ruiz", 7000.00),
    ]