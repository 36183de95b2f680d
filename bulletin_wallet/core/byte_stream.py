"""
Methods for reading and writing byte streams
"""
import struct
from io import BytesIO
from typing import Union, Optional, Literal

from .exceptions import ReadError

__all__ = ["SERIALIZED", "get_stream", "read_stream", "read_little_int", "read_big_int", "read_compact_size",
           "write_compact_size"]

SERIALIZED = Union[bytes, BytesIO]
BYTEORDER = Literal['big', 'little']


def get_stream(byte_stream: SERIALIZED):
    """Convert bytes or BytesIO to BytesIO stream"""
    if isinstance(byte_stream, bytes):
        return BytesIO(byte_stream)
    elif isinstance(byte_stream, BytesIO):
        return byte_stream
    else:
        raise TypeError(f"Expected bytes or BytesIO but received: {type(byte_stream)}")


def read_stream(stream: BytesIO, length: int, data_type: Optional[str] = None) -> bytes:
    """Read exact number of bytes from stream with error checking"""
    data = stream.read(length)

    if len(data) != length:
        if data_type:
            raise ReadError(f"Error reading stream. Insufficient data. Data type: {data_type}")
        else:
            raise ReadError("Error reading stream. Insufficient data.")

    return data


def _read_int(stream: BytesIO, length: int, byteorder: BYTEORDER, data_type: Optional[str] = None) -> int:
    data = read_stream(stream, length, data_type)
    return int.from_bytes(data, byteorder)


def read_little_int(stream: BytesIO, length: int, data_type: Optional[str] = None) -> int:
    """Read little-endian integer from stream"""
    return _read_int(stream, length, "little", data_type)


def read_big_int(stream: BytesIO, length: int, data_type: Optional[str] = None) -> int:
    """Read big-endian integer from stream"""
    return _read_int(stream, length, "big", data_type)


def read_compact_size(stream: BytesIO, data_type: str = "compact-size") -> int:
    """
    Returns the integer value associated with the compact-size encoding at the head of the data stream
    """
    prefix_val = read_stream(stream, 1, f"{data_type} prefix")[0]

    if prefix_val < 0xfd:
        return prefix_val
    elif prefix_val == 0xfd:
        raw = read_stream(stream, 2, f"{data_type} 0xfd value")
    elif prefix_val == 0xfe:
        raw = read_stream(stream, 4, f"{data_type} 0xfe value")
    else:
        raw = read_stream(stream, 8, f"{data_type} 0xff value")
    return int.from_bytes(raw, "little")


def write_compact_size(value: int) -> bytes:
    """
    Encodes an integer into a CompactSize (varint) byte sequence.
    """
    if value < 0:
        raise ValueError("Negative values are not allowed in CompactSize encoding.")

    if value < 0xfd:
        return struct.pack("B", value)
    elif value <= 0xffff:
        return b'\xfd' + struct.pack("<H", value)
    elif value <= 0xffffffff:
        return b'\xfe' + struct.pack("<I", value)
    else:
        return b'\xff' + struct.pack("<Q", value)
