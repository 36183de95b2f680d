"""
We generate random signatures and verify
"""
from secrets import token_bytes, randbelow

import pytest

from bulletin_wallet.core import ECCError
from bulletin_wallet.cryptography import ecdsa, verify_ecdsa, SECP256K1, PrivKey, PubKey


def test_ecdsa():
    messages = [token_bytes(n) for n in (16, 32, 64)]

    priv_key = randbelow(SECP256K1.order - 1) + 1
    pub_key = SECP256K1.multiply_generator(priv_key)

    for message in messages:
        signature = ecdsa(priv_key, message)
        assert verify_ecdsa(signature, message, pub_key), "Failed to verify ECDSA signature for random data"
        assert signature[1] <= SECP256K1.order // 2, "Signature s value is not low"

    # Wrong message
    signature = ecdsa(priv_key, messages[0])
    assert not verify_ecdsa(signature, messages[1], pub_key)


def test_generator_pubkey():
    key = PrivKey(1)
    assert key.pubkey.compressed().hex() == "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"


def test_pubkey_serialization():
    key = PrivKey(token_bytes(32))
    compressed = key.pubkey.compressed()
    uncompressed = key.pubkey.serial_pubkey()

    assert PubKey.from_bytes(compressed) == key.pubkey
    assert PubKey.from_bytes(uncompressed) == key.pubkey
    assert len(compressed) == 33 and len(uncompressed) == 65


def test_privkey_bounds():
    with pytest.raises(ECCError):
        PrivKey(0)
    with pytest.raises(ECCError):
        PrivKey(SECP256K1.order)
