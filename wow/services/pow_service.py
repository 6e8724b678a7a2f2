import hashlib
from datetime import UTC, datetime, timedelta

from wow.cancellation import CancelToken
from wow.errors import (
    ConfigurationError,
    EmptyNonce,
    EntropyError,
    InvalidSolution,
    PrefixLengthMismatch,
    RewardUnavailable,
    SolutionMissing,
    TaskMissing,
)
from wow.schemas.proto import Quote, Solution, Task
from wow.services import EntropySource, RewardProvider
from wow.services.bits import has_leading_zero_bits

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 32


class PuzzleService:
    """
    Issues proof-of-work challenges and trades valid solutions for quotes.

    The service keeps no record of issued challenges: any task/solution pair
    that satisfies the hash check is accepted.
    """

    def __init__(
        self,
        entropy: EntropySource,
        rewards: RewardProvider,
        *,
        difficulty: int,
        prefix_length: int,
        ttl_seconds: float,
    ):
        if not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
            raise ConfigurationError(
                f"difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}"
            )
        if prefix_length < 1:
            raise ConfigurationError("prefix length must be at least 1 byte")

        self.entropy = entropy
        self.rewards = rewards
        self.difficulty = difficulty
        self.prefix_length = prefix_length
        self.ttl = timedelta(seconds=ttl_seconds)

    def generate_challenge(self) -> tuple[Task, datetime]:
        """Generate a new challenge and the deadline by which it must be answered."""
        try:
            prefix = self.entropy.random_bytes(self.prefix_length)
        except Exception as e:
            raise EntropyError(f"cannot get random bytes: {e}") from e

        deadline = datetime.now(UTC) + self.ttl

        return Task(prefix=prefix, difficulty=self.difficulty), deadline

    def validate(
        self, task: Task | None, solution: Solution | None, token: CancelToken | None = None
    ) -> Quote:
        """
        Verify a proof-of-work solution and return the reward.

        Raises a SolutionRejected subclass for a bad task/solution and
        RewardUnavailable when the quote cannot be fetched.
        """
        if task is None:
            raise TaskMissing()

        if solution is None:
            raise SolutionMissing()

        if len(task.prefix) != self.prefix_length:
            raise PrefixLengthMismatch(self.prefix_length, len(task.prefix))

        if not solution.nonce:
            raise EmptyNonce()

        digest = hashlib.sha256(task.prefix + solution.nonce).digest()

        if not has_leading_zero_bits(digest, task.difficulty):
            raise InvalidSolution()

        try:
            return self.rewards.get_random_quote(token)
        except Exception as e:
            raise RewardUnavailable(f"cannot get random quote: {e}") from e
