"""
Chains of digests recording successive generations of a single file.
"""

from __future__ import annotations

import binascii
from typing import Any, BinaryIO, Iterable, Iterator

from sumchain.errors import ChainIOError, NoMatchError
from sumchain.hashing import ensure_fresh

DEFAULT_CHUNK_SIZE = 64 * 1024


def _find(digests: list[bytes], needle: bytes) -> int | None:
    for index, candidate in enumerate(digests):
        if candidate == needle:
            return index
    return None


def _write_all(sink: BinaryIO, chunk: bytes) -> None:
    # Raw sinks may accept fewer bytes than offered; buffered ones return None or the full count.
    while chunk:
        written = sink.write(chunk)
        if written is None:
            return
        if written <= 0:
            raise ChainIOError(f"Short write: sink accepted {written} of {len(chunk)} bytes")
        chunk = chunk[written:]


class Chain:
    """Append-only sequence of digests, oldest generation first.

    Grow it with ``add`` or ``add_inline``; always use the same hash algorithm
    within one chain, but never the same hasher object twice.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self) -> None:
        self._digests: list[bytes] = []

    @classmethod
    def _from_digests(cls, digests: Iterable[bytes]) -> "Chain":
        chain = cls()
        chain._digests = list(digests)
        return chain

    @classmethod
    def from_sums(cls, sums: Iterable[str]) -> "Chain":
        digests = []
        for position, value in enumerate(sums):
            try:
                digest = bytes.fromhex(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid hex digest at position {position}: {value!r}") from exc
            # only lowercase hex without separators, so sums round-trip exactly
            if digest.hex() != value:
                raise ValueError(f"Non-canonical hex digest at position {position}: {value!r}")
            digests.append(digest)
        return cls._from_digests(digests)

    def __len__(self) -> int:
        return len(self._digests)

    def __iter__(self) -> Iterator[bytes]:
        return iter(list(self._digests))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chain):
            return NotImplemented
        return self._digests == other._digests

    def __repr__(self) -> str:
        return f"Chain(len={len(self._digests)})"

    def _append(self, digest: bytes) -> str:
        self._digests.append(digest)
        return binascii.hexlify(digest).decode("ascii")

    def add(self, stream: BinaryIO, hasher: Any, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
        """Digest everything left in ``stream`` and append it. Returns the hex sum."""
        ensure_fresh(hasher)
        try:
            while True:
                chunk = stream.read(chunk_size)
                if not chunk:
                    break
                hasher.update(chunk)
        except (OSError, ValueError) as exc:
            raise ChainIOError(f"Could not digest reader: {exc}") from exc

        return self._append(hasher.digest())

    def add_inline(
        self, sink: BinaryIO, stream: BinaryIO, hasher: Any, *, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> str:
        """Same as ``add`` but copies every byte read into ``sink`` on the way.

        Bytes already written to ``sink`` stay there if the copy fails.
        """
        ensure_fresh(hasher)
        try:
            while True:
                chunk = stream.read(chunk_size)
                if not chunk:
                    break
                hasher.update(chunk)
                _write_all(sink, chunk)
        except (OSError, ValueError) as exc:
            raise ChainIOError(f"Could not copy from reader: {exc}") from exc

        return self._append(hasher.digest())

    def all_sums(self) -> list[str]:
        return [binascii.hexlify(digest).decode("ascii") for digest in self._digests]

    def sum(self, hasher: Any) -> str:
        """Digest of every digest in the chain, in order."""
        ensure_fresh(hasher)
        try:
            for digest in self._digests:
                hasher.update(digest)
        except (OSError, ValueError) as exc:
            raise ChainIOError(f"Failed to hash chain: {exc}") from exc

        return binascii.hexlify(hasher.digest()).decode("ascii")

    def first_match(self, other: "Chain") -> "Chain":
        """Return ``other`` from the first digest it shares with this chain.

        The scan runs over this chain's digests in order and, for each, over
        ``other`` from its start; the first pair found wins. The result is a
        copy and does not follow later appends to ``other``.
        """
        for digest in self._digests:
            index = _find(other._digests, digest)
            if index is not None:
                return Chain._from_digests(other._digests[index:])

        raise NoMatchError()

    def last_match(self, other: "Chain") -> "Chain":
        """Return what follows the shared prefix in ``other``, which may be empty.

        Walks this chain until one of its digests is missing from ``other``
        after at least one was found, then returns ``other`` after the most
        recent match. The result is a copy.
        """
        last_index: int | None = None
        for digest in self._digests:
            index = _find(other._digests, digest)
            if index is not None:
                last_index = index
                continue
            if last_index is not None:
                return Chain._from_digests(other._digests[last_index + 1 :])

        if last_index is None:
            raise NoMatchError()

        # every digest after the first match matched: fully overlapping
        return Chain()


__all__ = ["Chain", "DEFAULT_CHUNK_SIZE"]
