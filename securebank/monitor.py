"""Monitor process: shows incoming transactions, logs them and flags fraud patterns."""

from __future__ import annotations

import argparse
import re
import sys
from collections import Counter

from .files import append_log, read_config, timestamp
from .messaging import MonitorInbox

_INT = r"([+-]?\d+)"
_FLOAT = r"([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
_WITHDRAWAL = re.compile(rf"RETIRO\s*{_INT}\s*{_FLOAT}")
_TRANSFER = re.compile(rf"TRANSFERENCIA\s*{_INT}\s*{_INT}\s*{_FLOAT}")
_DEPOSIT = re.compile(rf"DEPOSITO\s*{_INT}\s*{_FLOAT}")


class FraudDetector:
    """Counts repeated withdrawals and transfers and raises alerts at a threshold."""

    def __init__(self, withdrawal_threshold: int, transfer_threshold: int) -> None:
        self.withdrawal_threshold = withdrawal_threshold
        self.transfer_threshold = transfer_threshold
        self._withdrawals: Counter[int] = Counter()
        self._transfers: Counter[tuple[int, int]] = Counter()

    def analyze(self, message: str) -> str | None:
        """Update the counters with one message and return an alert, if any."""
        match = _WITHDRAWAL.match(message)
        if match:
            origin = int(match.group(1))
            self._withdrawals[origin] += 1
            if self._withdrawals[origin] >= self.withdrawal_threshold:
                self._withdrawals[origin] = 0
                return (
                    f"ALERTA: {self.withdrawal_threshold} retiros seguidos "
                    f"en cuenta {origin}"
                )
            return None
        match = _TRANSFER.match(message)
        if match:
            pair = (int(match.group(1)), int(match.group(2)))
            self._transfers[pair] += 1
            if self._transfers[pair] >= self.transfer_threshold:
                self._transfers[pair] = 0
                return (
                    f"ALERTA: {self.transfer_threshold} transferencias seguidas "
                    f"de {pair[0]} a {pair[1]}"
                )
            return None
        match = _DEPOSIT.match(message)
        if match:
            self._withdrawals[int(match.group(1))] = 0
        return None


def _log(path: str, line: str) -> None:
    try:
        append_log(path, line)
    except OSError as exc:
        print(f"log file: {exc}", file=sys.stderr)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Watch transactions for fraud.")
    parser.add_argument("--config", default="config.txt")
    parser.add_argument("--address", default=None)
    args = parser.parse_args(argv)
    try:
        cfg = read_config(args.config)
    except OSError as exc:
        print(f"{args.config}: {exc}", file=sys.stderr)
        return 1

    detector = FraudDetector(cfg.withdrawal_threshold, cfg.transfer_threshold)
    with MonitorInbox(args.address) as inbox:
        print("Monitor activo. Esperando transacciones…", flush=True)
        try:
            while True:
                text = inbox.receive()
                print(f"{timestamp()} {text}", flush=True)
                _log(cfg.log_file, text)
                alert = detector.analyze(text)
                if alert:
                    print(alert, flush=True)
                    _log(cfg.log_file, alert)
        except KeyboardInterrupt:
            pass
        except OSError as exc:
            print(f"receive: {exc}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())