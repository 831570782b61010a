from __future__ import annotations

import hashlib
from typing import Any, Callable

from sumchain.errors import HasherReusedError, UnsupportedHasherError

DEFAULT_ALGORITHM = "sha512"


def _normalize(algorithm: str) -> str:
    return (algorithm or "").strip().lower()


def new_hasher(algorithm: str = DEFAULT_ALGORITHM) -> Any:
    name = _normalize(algorithm)
    try:
        hasher = hashlib.new(name)
    except (TypeError, ValueError) as exc:
        raise UnsupportedHasherError(f"unknown hash algorithm {algorithm!r}") from exc
    if not hasher.digest_size:
        raise UnsupportedHasherError(f"{name} produces variable-length digests")
    return hasher


def hasher_factory(algorithm: str = DEFAULT_ALGORITHM) -> Callable[[], Any]:
    name = _normalize(algorithm)
    # Fail on the first call site rather than on first ingestion.
    new_hasher(name)

    def _factory() -> Any:
        return new_hasher(name)

    return _factory


def is_supported(algorithm: str) -> bool:
    try:
        new_hasher(algorithm)
    except UnsupportedHasherError:
        return False
    return True


def ensure_fresh(hasher: Any) -> None:
    """Reject hashers that cannot produce a fixed digest or have already absorbed data.

    Freshness is judged against a new instance of the same named algorithm.
    Hashers without a resolvable name, and BLAKE2 instances (which may be keyed,
    salted or personalized), have no canonical empty state and pass unchecked.
    """
    if not callable(getattr(hasher, "update", None)) or not callable(getattr(hasher, "digest", None)):
        raise UnsupportedHasherError("hasher must provide update() and digest()")
    if getattr(hasher, "digest_size", None) == 0:
        raise UnsupportedHasherError("variable-length hashers cannot be chained")

    name = getattr(hasher, "name", None)
    if not isinstance(name, str) or name.startswith("blake2"):
        return
    try:
        reference = hashlib.new(name)
    except (TypeError, ValueError):
        return
    if reference.digest_size != getattr(hasher, "digest_size", reference.digest_size):
        return
    if hasher.digest() != reference.digest():
        raise HasherReusedError(f"{name} hasher was already used; pass a fresh instance per call")


__all__ = [
    "DEFAULT_ALGORITHM",
    "new_hasher",
    "hasher_factory",
    "is_supported",
    "ensure_fresh",
]
