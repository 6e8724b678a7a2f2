"""Newline-delimited JSON framing over a blocking socket with an absolute deadline."""

import socket
import threading
import time
from datetime import datetime
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from wow.cancellation import DeadlineExceeded, monotonic_deadline
from wow.errors import ConfigurationError, ProtocolError

MAX_MESSAGE_BYTES = 64 * 1024
RECV_CHUNK_BYTES = 4096

M = TypeVar("M", bound=BaseModel)


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (``:port`` for all interfaces, ``[v6]:port`` for IPv6)."""
    if not address:
        raise ConfigurationError("address is required")

    host, sep, port = address.rpartition(":")
    if not sep:
        raise ConfigurationError(f"address {address!r} must be host:port")

    try:
        port_number = int(port)
    except ValueError:
        raise ConfigurationError(f"invalid port in address {address!r}") from None

    if not 0 <= port_number <= 65535:
        raise ConfigurationError(f"port out of range in address {address!r}")

    return host.strip("[]"), port_number


class Connection:
    def __init__(self, sock: socket.socket):
        self.sock = sock
        self._buffer = bytearray()
        self._deadline: float | None = None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def set_deadline(self, deadline: datetime | float | None) -> None:
        """
        Bound every following read and write.

        Accepts a wall-clock datetime or a ``time.monotonic()`` value.
        """
        if isinstance(deadline, datetime):
            deadline = monotonic_deadline(deadline)
        self._deadline = deadline

    def _arm(self) -> None:
        if self._deadline is None:
            self.sock.settimeout(None)
            return
        remaining = self._deadline - time.monotonic()
        # settimeout(0) would switch the socket to non-blocking mode
        if remaining <= 0:
            raise DeadlineExceeded("i/o deadline exceeded")
        self.sock.settimeout(remaining)

    def write_message(self, message: BaseModel) -> None:
        data = message.model_dump_json(exclude_none=True).encode() + b"\n"
        self._arm()
        try:
            self.sock.sendall(data)
        except TimeoutError as e:
            raise DeadlineExceeded("write deadline exceeded") from e

    def read_line(self) -> bytes:
        while True:
            idx = self._buffer.find(b"\n")
            if idx > MAX_MESSAGE_BYTES:
                raise ProtocolError(f"message exceeds {MAX_MESSAGE_BYTES} bytes")
            if idx >= 0:
                line = bytes(self._buffer[:idx])
                del self._buffer[: idx + 1]
                return line

            if len(self._buffer) > MAX_MESSAGE_BYTES:
                raise ProtocolError(f"message exceeds {MAX_MESSAGE_BYTES} bytes")

            self._arm()
            try:
                chunk = self.sock.recv(RECV_CHUNK_BYTES)
            except TimeoutError as e:
                raise DeadlineExceeded("read deadline exceeded") from e

            if not chunk:
                raise ProtocolError("connection closed before a complete message")
            self._buffer += chunk

    def read_message(self, model: type[M]) -> M:
        return self.decode(self.read_line(), model)

    @staticmethod
    def decode(line: bytes, model: type[M]) -> M:
        try:
            return model.model_validate_json(line)
        except ValidationError as e:
            detail = e.errors(include_url=False, include_context=False, include_input=False)
            raise ProtocolError(
                f"cannot decode {model.__name__.lower()}: invalid message", detail=detail
            ) from e

    def abort(self) -> None:
        """Wake a reader blocked in another thread."""
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # already disconnected

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.sock.close()
