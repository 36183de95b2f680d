"""
Test for CompactSize encoding and stream reads
"""
from io import BytesIO
from random import randint

import pytest

from bulletin_wallet.core import read_compact_size, write_compact_size, read_stream, ReadError

RANGES = [
    (0, 0xfc, b''),
    (0xfd, 0xffff, b'\xfd'),
    (0x10000, 0xffffffff, b'\xfe'),
    (0x100000000, 0xffffffffffffffff, b'\xff'),
]


def test_compact_size():
    """
    One random integer from each encoding range is written and read back
    """
    for low, high, prefix in RANGES:
        value = randint(low, high)
        encoded = write_compact_size(value)

        assert encoded[:len(prefix)] == prefix, f"Wrong CompactSize prefix for {value}"
        assert read_compact_size(BytesIO(encoded)) == value, f"CompactSize decoding fails for {value}"

    with pytest.raises(ValueError):
        write_compact_size(-1)


def test_truncated_reads():
    with pytest.raises(ReadError):
        read_compact_size(BytesIO(b'\xfd\x01'))
    with pytest.raises(ReadError):
        read_stream(BytesIO(b'\x00' * 3), 4, "txid")
