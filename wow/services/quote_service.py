from wow.cancellation import CancelToken
from wow.errors import RewardUnavailable
from wow.schemas.proto import Quote
from wow.services import EntropySource, QuoteRepository


class QuoteService:
    """RewardProvider that picks a uniformly random quote from a repository."""

    def __init__(self, repository: QuoteRepository, entropy: EntropySource):
        self.repository = repository
        self.entropy = entropy

    def get_random_quote(self, token: CancelToken | None = None) -> Quote:
        # Lookups are in-memory; the token matters only to blocking repositories
        count = self.repository.count()

        try:
            quote_id = self.entropy.uniform_int(0, count)
        except Exception as e:
            raise RewardUnavailable(f"cannot get random quote id: {e}") from e

        try:
            return self.repository.get_by_id(quote_id)
        except Exception as e:
            raise RewardUnavailable(f"cannot get quote {quote_id}: {e}") from e
