import secrets

from wow.errors import EntropyError


class Randomizer:
    """Cryptographically secure EntropySource backed by the ``secrets`` module."""

    def random_bytes(self, n: int) -> bytes:
        if n <= 0:
            raise EntropyError(f"invalid number of bytes: {n}")
        return secrets.token_bytes(n)

    def uniform_int(self, start: int, end: int) -> int:
        """Return a random integer in [start, end)."""
        if start >= end:
            raise EntropyError(f"invalid range: start ({start}) >= end ({end})")
        return start + secrets.randbelow(end - start)
