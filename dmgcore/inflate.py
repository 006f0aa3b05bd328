"""Decompression of raw deflate streams and gzip-wrapped data."""

from __future__ import annotations

__all__ = ["InflateError", "inflate", "gunzip"]


class InflateError(ValueError):
    """Raised when compressed data is malformed or truncated."""


_MAX_BITS = 15
_WINDOW_SIZE = 32768

_CODE_LENGTH_ORDER = (16, 17, 18, 0, 8, 7, 9, 6, 10, 5, 11, 4, 12, 3, 13, 2, 14, 1, 15)

# (base length, extra bits) for literal/length symbols 257..285
_LENGTHS = (
    (3, 0), (4, 0), (5, 0), (6, 0), (7, 0), (8, 0), (9, 0), (10, 0),
    (11, 1), (13, 1), (15, 1), (17, 1),
    (19, 2), (23, 2), (27, 2), (31, 2),
    (35, 3), (43, 3), (51, 3), (59, 3),
    (67, 4), (83, 4), (99, 4), (115, 4),
    (131, 5), (163, 5), (195, 5), (227, 5),
    (258, 0),
)

# (base distance, extra bits) for distance symbols 0..29
_DISTANCES = (
    (1, 0), (2, 0), (3, 0), (4, 0),
    (5, 1), (7, 1), (9, 2), (13, 2),
    (17, 3), (25, 3), (33, 4), (49, 4),
    (65, 5), (97, 5), (129, 6), (193, 6),
    (257, 7), (385, 7), (513, 8), (769, 8),
    (1025, 9), (1537, 9), (2049, 10), (3073, 10),
    (4097, 11), (6145, 11), (8193, 12), (12289, 12),
    (16385, 13), (24577, 13),
)

_FIXED_LITERAL_LENGTHS = [8] * 144 + [9] * 112 + [7] * 24 + [8] * 8
_FIXED_DISTANCE_LENGTHS = [5] * 30

_GZIP_FHCRC = 0x02
_GZIP_FEXTRA = 0x04
_GZIP_FNAME = 0x08
_GZIP_FCOMMENT = 0x10


class _BitReader:
    """Reads little-endian bit fields from a byte string."""

    def __init__(self, data: bytes, position: int = 0) -> None:
        self._data = data
        self._bit = position * 8

    def read(self, count: int) -> int:
        value = 0
        for shift in range(count):
            index = self._bit >> 3
            if index >= len(self._data):
                raise InflateError("unexpected end of compressed data")
            value |= ((self._data[index] >> (self._bit & 7)) & 1) << shift
            self._bit += 1
        return value

    def align(self) -> None:
        self._bit = (self._bit + 7) & ~7

    def skip_bytes(self, count: int) -> None:
        self._bit += count * 8

    def read_zero_terminated(self) -> None:
        while self.read(8):
            pass


class _Huffman:
    """Canonical Huffman code built from a table of code lengths."""

    def __init__(self, lengths: list[int]) -> None:
        self._codes: dict[tuple[int, int], int] = {}
        code = 0
        for length in range(1, _MAX_BITS + 1):
            for symbol, size in enumerate(lengths):
                if size == length:
                    self._codes[(length, code)] = symbol
                    code += 1
            code <<= 1
        self._max_length = max(lengths, default=0)

    def decode(self, reader: _BitReader) -> int:
        code = 0
        for length in range(1, self._max_length + 1):
            code = (code << 1) | reader.read(1)
            symbol = self._codes.get((length, code))
            if symbol is not None:
                return symbol
        raise InflateError("invalid Huffman code")


def _read_dynamic_tables(reader: _BitReader) -> tuple[_Huffman, _Huffman]:
    literal_count = reader.read(5) + 257
    distance_count = reader.read(5) + 1
    clen_count = reader.read(4) + 4

    clen_lengths = [0] * len(_CODE_LENGTH_ORDER)
    for symbol in _CODE_LENGTH_ORDER[:clen_count]:
        clen_lengths[symbol] = reader.read(3)
    clen_code = _Huffman(clen_lengths)

    total = literal_count + distance_count
    lengths: list[int] = []
    while len(lengths) < total:
        symbol = clen_code.decode(reader)
        if symbol < 16:
            lengths.append(symbol)
            continue
        if symbol == 16:
            if not lengths:
                raise InflateError("repeat code with no previous length")
            value, repeat = lengths[-1], reader.read(2) + 3
        elif symbol == 17:
            value, repeat = 0, reader.read(3) + 3
        else:
            value, repeat = 0, reader.read(7) + 11
        lengths.extend([value] * min(repeat, total - len(lengths)))

    return _Huffman(lengths[:literal_count]), _Huffman(lengths[literal_count:])


def _inflate_block(
    reader: _BitReader, literals: _Huffman, distances: _Huffman, out: bytearray
) -> None:
    while True:
        symbol = literals.decode(reader)
        if symbol < 256:
            out.append(symbol)
            continue
        if symbol == 256:
            return
        if symbol - 257 >= len(_LENGTHS):
            raise InflateError(f"invalid length symbol {symbol}")
        base, extra = _LENGTHS[symbol - 257]
        length = base + reader.read(extra)

        dsymbol = distances.decode(reader)
        if dsymbol >= len(_DISTANCES):
            raise InflateError(f"invalid distance symbol {dsymbol}")
        base, extra = _DISTANCES[dsymbol]
        distance = base + reader.read(extra)
        if distance > len(out) or distance > _WINDOW_SIZE:
            raise InflateError("back reference beyond start of output")

        start = len(out) - distance
        for offset in range(length):
            out.append(out[start + offset])


def _inflate(reader: _BitReader) -> bytes:
    out = bytearray()
    final = False
    while not final:
        final = bool(reader.read(1))
        block_type = reader.read(2)
        if block_type == 0:
            reader.align()
            length = reader.read(16)
            reader.read(16)  # one's complement of the length, not checked
            out.extend(reader.read(8) for _ in range(length))
        elif block_type == 1:
            _inflate_block(
                reader,
                _Huffman(_FIXED_LITERAL_LENGTHS),
                _Huffman(_FIXED_DISTANCE_LENGTHS),
                out,
            )
        elif block_type == 2:
            literals, distances = _read_dynamic_tables(reader)
            _inflate_block(reader, literals, distances, out)
        else:
            raise InflateError("invalid block type 3")
    return bytes(out)


def inflate(data: bytes) -> bytes:
    """Decompress a raw deflate stream and return the decompressed bytes."""
    return _inflate(_BitReader(bytes(data)))


def gunzip(data: bytes) -> bytes:
    """Decompress gzip data; the trailing CRC32 and size are not checked."""
    reader = _BitReader(bytes(data))
    if reader.read(8) != 0x1F or reader.read(8) != 0x8B:
        raise InflateError("not gzip data")
    if reader.read(8) != 0x08:
        raise InflateError("unsupported compression method")
    flags = reader.read(8)
    reader.read(32)  # modification time
    reader.read(8)  # extra flags
    reader.read(8)  # operating system
    if flags & _GZIP_FEXTRA:
        reader.skip_bytes(reader.read(16))
    if flags & _GZIP_FNAME:
        reader.read_zero_terminated()
    if flags & _GZIP_FCOMMENT:
        reader.read_zero_terminated()
    if flags & _GZIP_FHCRC:
        reader.read(16)
    return _inflate(reader)