"""Short text messages from teller sessions to the monitor process."""

from __future__ import annotations

import logging
import socket
import tempfile
from pathlib import Path

log = logging.getLogger(__name__)

MESSAGE_SIZE = 128
DEFAULT_ADDRESS = str(Path(tempfile.gettempdir()) / "securebank-monitor.sock")


def _encode(text: str) -> bytes:
    raw = text.encode("utf-8")[: MESSAGE_SIZE - 1]
    return raw.decode("utf-8", errors="ignore").encode("utf-8")


def send_to_monitor(text: str, address=None) -> bool:
    """Send one message to the monitor; return False if it could not be delivered."""
    target = str(address or DEFAULT_ADDRESS)
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM) as sock:
            sock.sendto(_encode(text), target)
    except OSError as exc:
        log.warning("could not reach monitor at %s: %s", target, exc)
        return False
    return True


class MonitorInbox:
    """Receiving end of the monitor's message queue."""

    def __init__(self, address=None) -> None:
        self.address = Path(address or DEFAULT_ADDRESS)
        if self.address.exists() or self.address.is_symlink():
            self.address.unlink()
        self._sock: socket.socket | None = socket.socket(
            socket.AF_UNIX, socket.SOCK_DGRAM
        )
        try:
            self._sock.bind(str(self.address))
        except OSError:
            self._sock.close()
            self._sock = None
            raise

    def receive(self) -> str:
        """Block until a message arrives and return its text."""
        if self._sock is None:
            raise ValueError("inbox is closed")
        data = self._sock.recv(MESSAGE_SIZE)
        return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")

    def close(self) -> None:
        """Stop listening and remove the socket file."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
            self.address.unlink(missing_ok=True)

    def __enter__(self) -> MonitorInbox:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()