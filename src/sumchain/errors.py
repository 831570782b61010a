from __future__ import annotations

CHAIN_IO_FAILURE = "CHAIN_0x01"
NO_MATCH = "CHAIN_0x02"
HASHER_REUSED = "CHAIN_0x03"
UNSUPPORTED_HASHER = "CHAIN_0x04"


class ChainError(Exception):
    code: str = ""

    def __init__(self, detail: str, code: str | None = None):
        resolved = code or self.code
        super().__init__(f"{resolved}: {detail}")
        self.code = resolved
        self.detail = detail


class ChainIOError(ChainError):
    """Reading the stream, writing the sink, or feeding the hasher failed."""

    code = CHAIN_IO_FAILURE


class NoMatchError(ChainError):
    """No digest of the receiver appears in the other chain."""

    code = NO_MATCH

    def __init__(self, detail: str = "chains do not match", code: str | None = None):
        super().__init__(detail, code)


class HasherReusedError(ChainError):
    code = HASHER_REUSED


class UnsupportedHasherError(ChainError):
    code = UNSUPPORTED_HASHER


__all__ = [
    "CHAIN_IO_FAILURE",
    "NO_MATCH",
    "HASHER_REUSED",
    "UNSUPPORTED_HASHER",
    "ChainError",
    "ChainIOError",
    "NoMatchError",
    "HasherReusedError",
    "UnsupportedHasherError",
]
