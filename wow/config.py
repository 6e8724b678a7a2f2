from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_QUOTES_FILE = Path(__file__).parent / "assets" / "quotes.txt"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    server_address: str = ":7700"
    quotes_file_path: Path = DEFAULT_QUOTES_FILE

    # Proof of Work
    pow_difficulty: int = 22  # ~4M hashes on average
    pow_prefix_bytes: int = 8
    pow_challenge_ttl_seconds: float = 5.0

    # Client
    client_address: str = "127.0.0.1:7700"
    client_timeout_seconds: float = 5.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" | "json"

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Accept only the renderers setup_logging knows about."""
        v = v.lower()
        if v not in ("console", "json"):
            raise ValueError("log_format must be 'console' or 'json'")
        return v


settings = Settings()
