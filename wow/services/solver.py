"""Client-side brute-force search for proof-of-work nonces."""

import hashlib
import time

from wow.cancellation import CancelToken
from wow.errors import SearchExhausted
from wow.services.bits import has_leading_zero_bits

NONCE_SIZE_BYTES = 8
MAX_COUNTER = 2 ** (NONCE_SIZE_BYTES * 8) - 1


def solve(
    prefix: bytes, difficulty: int, token: CancelToken | None = None, *, start: int = 0
) -> bytes:
    """
    Find an 8-byte nonce such that SHA-256(prefix || nonce) has ``difficulty``
    leading zero bits.

    The nonce is a little-endian counter starting at ``start``. The token is
    polled before every hash; Cancelled or DeadlineExceeded is raised as soon
    as it fires. SearchExhausted is raised instead of wrapping past 2**64 - 1.
    """
    if not 0 <= start <= MAX_COUNTER:
        raise ValueError(f"start must fit in {NONCE_SIZE_BYTES} bytes")

    # Hash the prefix once and copy the state for every candidate
    base = hashlib.sha256(prefix)
    deadline = token.deadline if token is not None else None

    counter = start
    while True:
        if token is not None and (
            token.cancelled or (deadline is not None and time.monotonic() >= deadline)
        ):
            token.raise_if_done()

        nonce = counter.to_bytes(NONCE_SIZE_BYTES, "little")
        h = base.copy()
        h.update(nonce)

        if has_leading_zero_bits(h.digest(), difficulty):
            return nonce

        if counter == MAX_COUNTER:
            raise SearchExhausted(f"no nonce found for difficulty {difficulty}")
        counter += 1
