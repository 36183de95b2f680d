"""
Methods for testing encoding and decoding
"""
from secrets import token_bytes, randbelow

import pytest

from bulletin_wallet.core import DataEncodingError, NETWORKS, InvalidAddress
from bulletin_wallet.cryptography import encode_base58, decode_base58, encode_base58check, decode_base58check, \
    encode_der_signature, decode_der_signature, SECP256K1
from bulletin_wallet.script.script_types import Address, ScriptClass, decode_address


def test_base58_leading_zeros():
    assert encode_base58(b'\x00\x00\x01') == "112"
    assert decode_base58("112") == b'\x00\x00\x01'


def test_base58check():
    data = b'\x6f' + token_bytes(20)
    encoded = encode_base58check(data)

    assert decode_base58check(encoded) == data, "Base58Check round trip failed"

    # Flip the last character to break the checksum
    last = "2" if encoded[-1] != "2" else "3"
    with pytest.raises(DataEncodingError):
        decode_base58check(encoded[:-1] + last)

    with pytest.raises(DataEncodingError):
        decode_base58("0OIl")


def test_known_address():
    """
    The all-zero pubkey hash on mainnet
    """
    mainnet = NETWORKS["mainnet"]
    address = decode_address("1111111111111111111114oLvT2", mainnet)

    assert address.script_class == ScriptClass.PUBKEY_HASH
    assert address.hash160 == b'\x00' * 20
    assert Address(ScriptClass.PUBKEY_HASH, b'\x00' * 20, mainnet).encode() == "1111111111111111111114oLvT2"


def test_address_network():
    testnet = NETWORKS["testnet"]
    mainnet = NETWORKS["mainnet"]
    address = Address(ScriptClass.PUBKEY_HASH, token_bytes(20), testnet).encode()

    assert decode_address(address, testnet).encode() == address
    with pytest.raises(InvalidAddress):
        decode_address(address, mainnet)
    with pytest.raises(InvalidAddress):
        decode_address("not an address", testnet)


def test_der_signature():
    r = randbelow(SECP256K1.order - 1) + 1
    s = randbelow(SECP256K1.order - 1) + 1
    der = encode_der_signature(r, s)

    assert der[0] == 0x30, "DER signature does not start with a sequence tag"
    assert decode_der_signature(der) == (r, s)

    with pytest.raises(DataEncodingError):
        decode_der_signature(b'\x30\x01\x00')
