"""Configuration, accounts file and log file handling."""

from __future__ import annotations

import os
import re
import time
from pathlib import Path
from typing import Iterable

from .models import MAX_ACCOUNTS, RECORD_SIZE, Account, Config

_INT_KEYS = {
    "LIMITE_RETIRO": "withdrawal_limit",
    "LIMITE_TRANSFERENCIA": "transfer_limit",
    "UMBRAL_RETIROS": "withdrawal_threshold",
    "UMBRAL_TRANSFERENCIAS": "transfer_threshold",
    "NUM_HILOS": "num_users",
}
_STR_KEYS = {
    "ARCHIVO_CUENTAS": "accounts_file",
    "ARCHIVO_LOG": "log_file",
}
_INT_PATTERNS = {
    attr: re.compile(rf"{key}=\s*([+-]?\d+)") for key, attr in _INT_KEYS.items()
}
_STR_PATTERNS = {
    attr: re.compile(rf"{key}=\s*(\S{{1,49}})") for key, attr in _STR_KEYS.items()
}

PathLike = "str | os.PathLike[str]"


def read_config(path) -> Config:
    """Read KEY=value settings; comments and very short lines are skipped."""
    cfg = Config()
    with open(path, encoding="utf-8") as fh:
        for line in fh:
            if line.startswith("#") or len(line) < 3:
                continue
            for attr, pattern in _INT_PATTERNS.items():
                match = pattern.match(line)
                if match:
                    setattr(cfg, attr, int(match.group(1)))
            for attr, pattern in _STR_PATTERNS.items():
                match = pattern.match(line)
                if match:
                    setattr(cfg, attr, match.group(1))
    return cfg


def load_accounts(path) -> list[Account]:
    """Read up to MAX_ACCOUNTS complete records from the accounts file."""
    with open(path, "rb") as fh:
        data = fh.read(MAX_ACCOUNTS * RECORD_SIZE)
    count = len(data) // RECORD_SIZE
    return [
        Account.unpack(data[i * RECORD_SIZE : (i + 1) * RECORD_SIZE])
        for i in range(count)
    ]


def dump_accounts(path, accounts: Iterable[Account]) -> None:
    """Overwrite the accounts file with the given accounts."""
    with open(path, "wb") as fh:
        fh.write(b"".join(account.pack() for account in accounts))


def write_account_at(path, index: int, account: Account) -> None:
    """Overwrite the record at position ``index`` in place."""
    if index < 0:
        raise ValueError("record index must not be negative")
    with open(path, "r+b") as fh:
        fh.seek(index * RECORD_SIZE)
        fh.write(account.pack())


def timestamp() -> str:
    """Return the local time formatted as ``[YYYY-MM-DD HH:MM:SS]``."""
    return time.strftime("[%Y-%m-%d %H:%M:%S]", time.localtime())


def append_log(log_path, line: str) -> None:
    """Append a timestamped line to a log file."""
    with open(log_path, "a", encoding="utf-8") as fh:
        fh.write(f"{timestamp()} {line}\n")


def log_account_transaction(account: int, line: str, base_dir="transacciones") -> Path:
    """Append a timestamped line to the account's own transaction log."""
    directory = Path(base_dir) / str(account)
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / "transacciones.log"
    append_log(log_path, line)
    return log_path