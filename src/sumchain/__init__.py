"""
Provenance chains: one digest per generation of a file, and the tools to
find where two such histories converge or diverge.
"""

from .chain import DEFAULT_CHUNK_SIZE, Chain
from .config import SumchainConfig, load_config
from .errors import ChainError, ChainIOError, HasherReusedError, NoMatchError, UnsupportedHasherError
from .hashing import new_hasher

__all__ = [
    "Chain",
    "DEFAULT_CHUNK_SIZE",
    "ChainError",
    "ChainIOError",
    "HasherReusedError",
    "NoMatchError",
    "UnsupportedHasherError",
    "SumchainConfig",
    "load_config",
    "new_hasher",
]
