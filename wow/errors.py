"""Exception types shared by the server, the client and the puzzle service."""


class WowError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(WowError, ValueError):
    """A component was constructed with invalid parameters."""


class SolutionRejected(WowError, ValueError):
    """A submitted task/solution pair failed validation."""

    message = "solution rejected"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class TaskMissing(SolutionRejected):
    message = "task is missing"


class SolutionMissing(SolutionRejected):
    message = "solution is missing"


class PrefixLengthMismatch(SolutionRejected):
    def __init__(self, expected: int, got: int):
        super().__init__(f"invalid task prefix length: expected {expected}, got {got}")
        self.expected = expected
        self.got = got


class EmptyNonce(SolutionRejected):
    message = "solution nonce is empty"


class InvalidSolution(SolutionRejected):
    message = "invalid solution"


class RewardUnavailable(WowError):
    """The reward could not be produced after a valid solution."""


class EntropyError(WowError):
    """The random source failed or was asked for something impossible."""


class QuoteNotFound(WowError, LookupError):
    pass


class ProtocolError(WowError):
    """A peer sent a malformed, oversized or truncated message."""

    def __init__(self, message: str, detail=None):
        super().__init__(message)
        # Validation errors for server-side logs; never sent to the peer
        self.detail = detail


class ServerError(WowError):
    """The server answered a solution with an error result."""


class SearchExhausted(WowError):
    """The solver ran out of 8-byte nonces without finding a solution."""
