from pathlib import Path

from wow.errors import ConfigurationError, QuoteNotFound
from wow.schemas.proto import Quote

SEPARATOR = " - "


def parse_quote(line: str) -> Quote:
    """Split ``content - author`` on the last separator."""
    content, sep, author = line.rpartition(SEPARATOR)
    if not sep:
        return Quote(content=line)
    return Quote(content=content, author=author)


class FileQuoteRepository:
    """Quotes loaded once from a text file, one per line."""

    def __init__(self, path: str | Path):
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"cannot read quotes file {str(path)!r}: {e}") from e

        self.quotes = [parse_quote(line.strip()) for line in text.splitlines() if line.strip()]

    def count(self) -> int:
        return len(self.quotes)

    def get_by_id(self, quote_id: int) -> Quote:
        if not 0 <= quote_id < len(self.quotes):
            raise QuoteNotFound(f"quote {quote_id} not found")
        return self.quotes[quote_id]
