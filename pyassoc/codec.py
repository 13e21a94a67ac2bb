"""Big endian integer and length-prefixed string coding for PDUs.

All reads take an explicit `offset` into the buffer, there is no cursor
state shared between calls. Reads that would go past the end of the buffer
raise :class:`~pyassoc.exceptions.MalformedPDUError` rather than returning
truncated values.
"""

from struct import Struct, error as StructError

from pyassoc.exceptions import MalformedPDUError
from pyassoc.utils import decode_bytes


# Predefine some structs to make decoding and encoding faster
UCHAR = Struct("B")
UINT2 = Struct(">H")
UINT4 = Struct(">I")
CHAR = Struct("b")
INT2 = Struct(">h")
INT4 = Struct(">i")

UNPACK_UCHAR = UCHAR.unpack
UNPACK_UINT2 = UINT2.unpack
UNPACK_UINT4 = UINT4.unpack

PACK_UCHAR = UCHAR.pack
PACK_UINT2 = UINT2.pack
PACK_UINT4 = UINT4.pack


def subrange(bytestream: bytes, offset: int, length: int) -> bytes:
    """Return `length` bytes of `bytestream` starting at `offset`.

    Raises
    ------
    pyassoc.exceptions.MalformedPDUError
        If the range isn't entirely within `bytestream`.
    """
    if offset < 0 or length < 0 or offset + length > len(bytestream):
        raise MalformedPDUError(
            f"Unable to read {length} bytes at offset {offset}, only "
            f"{len(bytestream)} bytes available"
        )

    return bytestream[offset : offset + length]


def _read(packer: Struct, bytestream: bytes, offset: int) -> int:
    return packer.unpack(subrange(bytestream, offset, packer.size))[0]


def _write(packer: Struct, value: int) -> bytes:
    try:
        return packer.pack(value)
    except StructError as exc:
        raise ValueError(
            f"Unable to encode '{value}' using {packer.size} byte(s)"
        ) from exc


def read_uint8(bytestream: bytes, offset: int) -> int:
    """Return the unsigned 8-bit integer at `offset`."""
    return _read(UCHAR, bytestream, offset)


def read_uint16(bytestream: bytes, offset: int) -> int:
    """Return the big endian unsigned 16-bit integer at `offset`."""
    return _read(UINT2, bytestream, offset)


def read_uint32(bytestream: bytes, offset: int) -> int:
    """Return the big endian unsigned 32-bit integer at `offset`."""
    return _read(UINT4, bytestream, offset)


def read_int8(bytestream: bytes, offset: int) -> int:
    """Return the signed 8-bit integer at `offset`."""
    return _read(CHAR, bytestream, offset)


def read_int16(bytestream: bytes, offset: int) -> int:
    """Return the big endian signed 16-bit integer at `offset`."""
    return _read(INT2, bytestream, offset)


def read_int32(bytestream: bytes, offset: int) -> int:
    """Return the big endian signed 32-bit integer at `offset`."""
    return _read(INT4, bytestream, offset)


def write_uint8(value: int) -> bytes:
    return _write(UCHAR, value)


def write_uint16(value: int) -> bytes:
    return _write(UINT2, value)


def write_uint32(value: int) -> bytes:
    return _write(UINT4, value)


def write_int8(value: int) -> bytes:
    return _write(CHAR, value)


def write_int16(value: int) -> bytes:
    return _write(INT2, value)


def write_int32(value: int) -> bytes:
    return _write(INT4, value)


def read_str(bytestream: bytes, offset: int) -> tuple[str, int]:
    """Return a length-prefixed string and the offset following it.

    Parameters
    ----------
    bytestream : bytes
        The encoded data.
    offset : int
        The offset of the 2-byte big endian length that precedes the encoded
        string.

    Returns
    -------
    str, int
        The decoded string and the offset of the first byte after it.

    Raises
    ------
    pyassoc.exceptions.MalformedPDUError
        If the length or the string runs past the end of `bytestream` or the
        value can't be decoded with the configured codecs.
    """
    length = read_uint16(bytestream, offset)
    encoded = subrange(bytestream, offset + 2, length)
    try:
        value = decode_bytes(encoded)
    except ValueError as exc:
        raise MalformedPDUError(str(exc)) from exc

    return value, offset + 2 + length


def write_str(value: str) -> bytes:
    """Return `value` UTF-8 encoded and prefixed by its 2-byte length."""
    encoded = value.encode("utf-8")
    return write_uint16(len(encoded)) + encoded
