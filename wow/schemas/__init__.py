from wow.schemas.proto import Quote, Result, Solution, Task, strict_base64_decode

__all__ = [
    "Quote",
    "Result",
    "Solution",
    "Task",
    "strict_base64_decode",
]
