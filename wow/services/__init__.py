"""Capability interfaces the services and transports are built against."""

import socket
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from wow.cancellation import CancelToken
    from wow.schemas.proto import Quote


class EntropySource(Protocol):
    def random_bytes(self, n: int) -> bytes: ...

    def uniform_int(self, start: int, end: int) -> int: ...


class QuoteRepository(Protocol):
    def count(self) -> int: ...

    def get_by_id(self, quote_id: int) -> "Quote": ...


class RewardProvider(Protocol):
    def get_random_quote(self, token: "CancelToken | None" = None) -> "Quote": ...


class Dialer(Protocol):
    def __call__(self, address: tuple[str, int], timeout: float | None = None) -> socket.socket: ...
