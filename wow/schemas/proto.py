import base64
import re
from typing import Annotated

from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")


def strict_base64_decode(value: str | bytes) -> bytes:
    """
    Strictly validate and decode a base64 string.

    Rejects strings with invalid characters, incorrect padding, or whitespace.
    Raw bytes are passed through so models can be built in code.
    """
    if isinstance(value, bytes | bytearray):
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError("Expected a base64 string")
    if not _BASE64_RE.match(value):
        raise ValueError("Invalid base64 characters")
    if len(value) % 4 != 0:
        raise ValueError("Invalid base64 length (must be multiple of 4)")
    try:
        return base64.b64decode(value, validate=True)
    except ValueError:
        raise ValueError("Invalid base64 encoding")


WireBytes = Annotated[
    bytes,
    BeforeValidator(strict_base64_decode),
    PlainSerializer(lambda v: base64.b64encode(v).decode("ascii"), return_type=str),
]


class Task(BaseModel):
    """Proof-of-work challenge sent from the server to the client."""

    prefix: WireBytes
    difficulty: int = Field(..., ge=0, le=255)


class Solution(BaseModel):
    """The client's answer to a Task."""

    # Absent nonce decodes as empty so validation reports it, not the codec
    nonce: WireBytes = b""

    @field_validator("nonce", mode="before")
    @classmethod
    def null_nonce_is_empty(cls, v):
        return b"" if v is None else v


class Quote(BaseModel):
    content: str
    author: str = ""


class Result(BaseModel):
    """Server reply to a Solution: either an error message or a quote."""

    error: str | None = None
    quote: Quote | None = None

    @model_validator(mode="after")
    def check_exactly_one(self) -> "Result":
        if (self.error is None) == (self.quote is None):
            raise ValueError("result must carry exactly one of error or quote")
        return self
