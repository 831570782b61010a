import hashlib
import io
import unittest

from sumchain.chain import Chain
from sumchain.errors import ChainIOError, HasherReusedError, UnsupportedHasherError

BUFFER_SUM = (
    "6cdd012b8c0f1286f868ae4b9a7c6f559a5b83e1273b34eba9ac143dfa37097d"
    "37657aff9a492479ec310ae1af01bbbcea02676c52d1b9d6ee66481074343b9b"
)
BUFFER2_SUM = (
    "be3724850f3fbfd673052614631df78b53e882fab130d50792c9bdf97eb46967"
    "9f355bcf43c0183ac94ecf0ab63bd7e40349357cc5932d1b60234887fe4631bc"
)


class _FailingReader:
    def __init__(self, head: bytes) -> None:
        self._head = head
        self._served = False

    def read(self, size: int = -1) -> bytes:
        if not self._served:
            self._served = True
            return self._head
        raise OSError("device went away")


class _FailingWriter:
    def __init__(self) -> None:
        self.written = b""

    def write(self, data: bytes) -> int:
        if self.written:
            raise OSError("disk full")
        self.written += data
        return len(data)


class _TrickleWriter:
    """Accepts at most ``limit`` bytes per call, like a raw pipe."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.written = b""

    def write(self, data: bytes) -> int:
        accepted = bytes(data[: self.limit])
        self.written += accepted
        return len(accepted)


class _XorHasher:
    """Minimal non-hashlib accumulator."""

    digest_size = 1

    def __init__(self) -> None:
        self._value = 0

    def update(self, data: bytes) -> None:
        for byte in data:
            self._value ^= byte

    def digest(self) -> bytes:
        return bytes([self._value])


class ChainIngestTest(unittest.TestCase):
    def test_add_returns_known_sha512_sums(self) -> None:
        chain = Chain()
        self.assertEqual(chain.add(io.BytesIO(b"buffer"), hashlib.sha512()), BUFFER_SUM)
        self.assertEqual(chain.add(io.BytesIO(b"buffer2"), hashlib.sha512()), BUFFER2_SUM)
        self.assertEqual(chain.all_sums(), [BUFFER_SUM, BUFFER2_SUM])

    def test_add_hex_decodes_to_algorithm_digest(self) -> None:
        content = b"generation one\n" * 1000
        for algorithm in ("md5", "sha1", "sha256", "sha3_512", "blake2b"):
            with self.subTest(algorithm=algorithm):
                chain = Chain()
                result = chain.add(io.BytesIO(content), hashlib.new(algorithm), chunk_size=7)
                self.assertEqual(bytes.fromhex(result), hashlib.new(algorithm, content).digest())
                self.assertEqual(list(chain), [hashlib.new(algorithm, content).digest()])

    def test_add_empty_stream(self) -> None:
        chain = Chain()
        result = chain.add(io.BytesIO(b""), hashlib.sha256())
        self.assertEqual(result, hashlib.sha256(b"").hexdigest())
        self.assertEqual(len(chain), 1)

    def test_add_inline_copies_stream_to_sink(self) -> None:
        chain = Chain()
        sink = io.BytesIO()
        result = chain.add_inline(sink, io.BytesIO(b"buffer"), hashlib.sha512())
        self.assertEqual(result, BUFFER_SUM)
        self.assertEqual(sink.getvalue(), b"buffer")

    def test_add_inline_large_stream_in_small_chunks(self) -> None:
        content = bytes(range(256)) * 513
        chain = Chain()
        sink = io.BytesIO()
        result = chain.add_inline(sink, io.BytesIO(content), hashlib.sha256(), chunk_size=1000)
        self.assertEqual(sink.getvalue(), content)
        self.assertEqual(result, hashlib.sha256(content).hexdigest())

    def test_all_sums_is_a_fresh_list_in_insertion_order(self) -> None:
        chain = Chain()
        contents = [b"a", b"b", b"c", b"a"]
        for content in contents:
            chain.add(io.BytesIO(content), hashlib.sha1())
        sums = chain.all_sums()
        self.assertEqual(sums, [hashlib.sha1(content).hexdigest() for content in contents])
        sums.clear()
        self.assertEqual(len(chain.all_sums()), 4)

    def test_read_failure_leaves_chain_unmodified(self) -> None:
        chain = Chain()
        chain.add(io.BytesIO(b"buffer"), hashlib.sha512())
        with self.assertRaises(ChainIOError) as ctx:
            chain.add(_FailingReader(b"partial"), hashlib.sha512())
        self.assertIsInstance(ctx.exception.__cause__, OSError)
        self.assertEqual(chain.all_sums(), [BUFFER_SUM])

    def test_inline_failures_leave_chain_unmodified(self) -> None:
        chain = Chain()
        sink = io.BytesIO()
        with self.assertRaises(ChainIOError):
            chain.add_inline(sink, _FailingReader(b"partial"), hashlib.sha512())
        self.assertEqual(len(chain), 0)
        self.assertEqual(sink.getvalue(), b"partial")

        writer = _FailingWriter()
        with self.assertRaises(ChainIOError):
            chain.add_inline(writer, io.BytesIO(b"0123456789"), hashlib.sha512(), chunk_size=4)
        self.assertEqual(len(chain), 0)
        self.assertEqual(writer.written, b"0123")

    def test_closed_stream_and_sink_raise_chain_io_error(self) -> None:
        chain = Chain()
        closed_stream = io.BytesIO(b"buffer")
        closed_stream.close()
        with self.assertRaises(ChainIOError) as ctx:
            chain.add(closed_stream, hashlib.sha256())
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

        closed_stream = io.BytesIO(b"buffer")
        closed_stream.close()
        with self.assertRaises(ChainIOError):
            chain.add_inline(io.BytesIO(), closed_stream, hashlib.sha256())

        closed_sink = io.BytesIO()
        closed_sink.close()
        with self.assertRaises(ChainIOError):
            chain.add_inline(closed_sink, io.BytesIO(b"buffer"), hashlib.sha256())
        self.assertEqual(len(chain), 0)

    def test_short_writes_are_retried_until_complete(self) -> None:
        content = b"0123456789" * 10
        chain = Chain()
        writer = _TrickleWriter(limit=3)
        result = chain.add_inline(writer, io.BytesIO(content), hashlib.sha256(), chunk_size=16)
        self.assertEqual(writer.written, content)
        self.assertEqual(result, hashlib.sha256(content).hexdigest())

    def test_stalled_sink_raises_chain_io_error(self) -> None:
        chain = Chain()
        with self.assertRaises(ChainIOError):
            chain.add_inline(_TrickleWriter(limit=0), io.BytesIO(b"buffer"), hashlib.sha256())
        self.assertEqual(len(chain), 0)

    def test_reused_hasher_is_rejected(self) -> None:
        chain = Chain()
        hasher = hashlib.sha512()
        chain.add(io.BytesIO(b"buffer"), hasher)
        with self.assertRaises(HasherReusedError):
            chain.add(io.BytesIO(b"buffer2"), hasher)
        with self.assertRaises(HasherReusedError):
            chain.add_inline(io.BytesIO(), io.BytesIO(b"buffer2"), hasher)
        self.assertEqual(len(chain), 1)

    def test_variable_length_hasher_is_rejected(self) -> None:
        with self.assertRaises(UnsupportedHasherError):
            Chain().add(io.BytesIO(b"x"), hashlib.shake_128())

    def test_object_without_digest_is_rejected(self) -> None:
        with self.assertRaises(UnsupportedHasherError):
            Chain().add(io.BytesIO(b"x"), object())

    def test_custom_accumulator_is_accepted(self) -> None:
        chain = Chain()
        self.assertEqual(chain.add(io.BytesIO(b"\x01\x02"), _XorHasher()), "03")

    def test_mixed_algorithms_are_not_policed(self) -> None:
        chain = Chain()
        chain.add(io.BytesIO(b"x"), hashlib.md5())
        chain.add(io.BytesIO(b"x"), hashlib.sha512())
        self.assertEqual([len(digest) for digest in chain], [16, 64])


if __name__ == "__main__":
    unittest.main()
