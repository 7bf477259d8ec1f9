import os
import shutil
import tempfile
import threading
import time
from pathlib import Path

import pytest

from securebank.messaging import send_to_monitor
from securebank.monitor import FraudDetector, main


def test_withdrawal_alert_at_threshold():
    detector = FraudDetector(3, 3)
    assert detector.analyze("RETIRO 1001 10.00") is None
    assert detector.analyze("RETIRO 1001 10.00") is None
    assert detector.analyze("RETIRO 1001 10.00") == "ALERTA: 3 retiros seguidos en cuenta 1001"


def test_withdrawal_counter_resets_after_alert():
    detector = FraudDetector(2, 5)
    results = [detector.analyze("RETIRO 1002 5.00") for _ in range(4)]
    assert results[0] is None and results[2] is None
    assert results[1] == results[3] == "ALERTA: 2 retiros seguidos en cuenta 1002"


def test_deposit_resets_withdrawals():
    detector = FraudDetector(2, 5)
    assert detector.analyze("RETIRO 1001 1.00") is None
    assert detector.analyze("DEPOSITO 1001 1.00") is None
    assert detector.analyze("RETIRO 1001 1.00") is None


def test_withdrawals_counted_per_account():
    detector = FraudDetector(2, 5)
    assert detector.analyze("RETIRO 1001 1.00") is None
    assert detector.analyze("RETIRO 1002 1.00") is None
    assert detector.analyze("RETIRO 1001 1.00") == "ALERTA: 2 retiros seguidos en cuenta 1001"


def test_transfers_counted_per_pair():
    detector = FraudDetector(5, 2)
    assert detector.analyze("TRANSFERENCIA 1001 1002 1.00") is None
    assert detector.analyze("TRANSFERENCIA 1001 1003 1.00") is None
    assert (
        detector.analyze("TRANSFERENCIA 1001 1002 1.00")
        == "ALERTA: 2 transferencias seguidas de 1001 a 1002"
    )


def test_deposit_does_not_reset_transfers():
    detector = FraudDetector(5, 2)
    detector.analyze("TRANSFERENCIA 1001 1002 1.00")
    detector.analyze("DEPOSITO 1001 3.00")
    assert (
        detector.analyze("TRANSFERENCIA 1001 1002 1.00")
        == "ALERTA: 2 transferencias seguidas de 1001 a 1002"
    )


def test_missing_config_fails():
    directory = tempfile.mkdtemp(prefix="sb")
    try:
        assert main(["--config", os.path.join(directory, "nada.txt")]) == 1
    finally:
        shutil.rmtree(directory, ignore_errors=True)


def test_main_logs_messages_and_alerts():
    directory = tempfile.mkdtemp(prefix="sb")
    try:
        log_path = os.path.join(directory, "log.txt")
        config = os.path.join(directory, "c.txt")
        address = os.path.join(directory, "m.sock")
        Path(config).write_text(
            f"UMBRAL_RETIROS=2\nUMBRAL_TRANSFERENCIAS=2\nARCHIVO_LOG={log_path}\n"
        )

        detector = FraudDetector(2, 2)
        assert detector.analyze("RETIRO 1001 10.00") is None
        alert = detector.analyze("RETIRO 1001 10.00")
        assert alert == "ALERTA: 2 retiros seguidos en cuenta 1001"

        thread = threading.Thread(
            target=main, args=(["--config", config, "--address", address],), daemon=True
        )
        thread.start()
        deadline = time.monotonic() + 5
        while not Path(address).exists() and time.monotonic() < deadline:
            time.sleep(0.01)
        send_to_monitor("RETIRO 1001 10.00", address)
        send_to_monitor("RETIRO 1001 10.00", address)
        content = ""
        while "ALERTA" not in content and time.monotonic() < deadline:
            time.sleep(0.02)
            if Path(log_path).exists():
                content = Path(log_path).read_text(encoding="utf-8")
        entries = [line.split("] ", 1)[1] for line in content.splitlines()]
        assert entries == [
            "RETIRO 1001 10.00",
            "RETIRO 1001 10.00",
            alert,
        ]
    finally:
        shutil.rmtree(directory, ignore_errors=True)