import re
from datetime import datetime

import pytest

from securebank.files import (
    append_log,
    dump_accounts,
    load_accounts,
    log_account_transaction,
    read_config,
    timestamp,
    write_account_at,
)
from securebank.models import MAX_ACCOUNTS, Account

TS_RE = r"\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\]"


def _write(tmp_path, text):
    path = tmp_path / "config.txt"
    path.write_text(text, encoding="utf-8")
    return path


def test_read_config_all_keys(tmp_path):
    path = _write(
        tmp_path,
        "LIMITE_RETIRO=500\n"
        "LIMITE_TRANSFERENCIA=2000\n"
        "UMBRAL_RETIROS=3\n"
        "UMBRAL_TRANSFERENCIAS=4\n"
        "NUM_HILOS=2\n"
        "ARCHIVO_CUENTAS=cuentas.dat\n"
        "ARCHIVO_LOG=transacciones.log\n",
    )
    cfg = read_config(path)
    assert cfg.withdrawal_limit == 500
    assert cfg.transfer_limit == 2000
    assert cfg.withdrawal_threshold == 3
    assert cfg.transfer_threshold == 4
    assert cfg.num_users == 2
    assert cfg.accounts_file == "cuentas.dat"
    assert cfg.log_file == "transacciones.log"


def test_read_config_skips_comments_and_keeps_defaults(tmp_path):
    path = _write(tmp_path, "# LIMITE_RETIRO=999\n\nNUM_HILOS=5\n")
    cfg = read_config(path)
    assert cfg.withdrawal_limit == 0
    assert cfg.num_users == 5
    assert cfg.log_file == ""


def test_read_config_truncates_long_file_names(tmp_path):
    name = "a" * 60
    cfg = read_config(_write(tmp_path, f"ARCHIVO_LOG={name}\n"))
    assert cfg.log_file == name[:49]


def test_read_config_ignores_malformed_value(tmp_path):
    cfg = read_config(_write(tmp_path, "LIMITE_RETIRO=abc\n"))
    assert cfg.withdrawal_limit == 0


def test_read_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_config(tmp_path / "nope.txt")


def test_dump_and_load_round_trip(tmp_path):
    accounts = [Account(1, "Ana", 10.5), Account(2, "Luis", 20.25, True)]
    path = tmp_path / "cuentas.dat"
    dump_accounts(path, accounts)
    assert load_accounts(path) == accounts


def test_load_caps_at_max_accounts(tmp_path):
    path = tmp_path / "cuentas.dat"
    dump_accounts(path, [Account(i, f"H{i}", 1.0) for i in range(MAX_ACCOUNTS + 5)])
    loaded = load_accounts(path)
    assert len(loaded) == MAX_ACCOUNTS
    assert loaded[-1].number == MAX_ACCOUNTS - 1


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_accounts(tmp_path / "missing.dat")


def test_write_account_at_replaces_single_record(tmp_path):
    path = tmp_path / "cuentas.dat"
    original = [Account(1, "A", 1.0), Account(2, "B", 2.0), Account(3, "C", 3.0)]
    dump_accounts(path, original)
    write_account_at(path, 1, Account(2, "B", 99.5))
    loaded = load_accounts(path)
    assert loaded[0] == original[0]
    assert loaded[1] == Account(2, "B", 99.5)
    assert loaded[2] == original[2]


def test_write_account_at_rejects_negative_index(tmp_path):
    path = tmp_path / "cuentas.dat"
    dump_accounts(path, [Account(1, "A", 1.0)])
    with pytest.raises(ValueError):
        write_account_at(path, -1, Account(1, "A", 1.0))


def test_timestamp_format():
    value = timestamp()
    assert len(value) == 21
    parsed = datetime.strptime(value, "[%Y-%m-%d %H:%M:%S]")
    assert abs((datetime.now() - parsed).total_seconds()) < 5


def test_append_log_adds_timestamped_lines(tmp_path):
    log = tmp_path / "app.log"
    append_log(log, "first")
    append_log(log, "second")
    lines = log.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert re.fullmatch(TS_RE + " first", lines[0])
    assert re.fullmatch(TS_RE + " second", lines[1])


def test_log_account_transaction_creates_directories(tmp_path):
    base = tmp_path / "transacciones"
    path = log_account_transaction(1001, "Retiro: -5.00", base_dir=base)
    assert path == base / "1001" / "transacciones.log"
    content = path.read_text(encoding="utf-8")
    assert re.fullmatch(TS_RE + " Retiro: -5.00\n", content)