"""
Tests for extended keys, using the BIP32 test vector 1 seed
"""
import pytest

from bulletin_wallet.core import ExtendedKeyError, XKEYS
from bulletin_wallet.wallet import ExtendedKey, bip44_path

SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
H = XKEYS.HARDENED_OFFSET


def test_master_key():
    master = ExtendedKey.from_master_seed(SEED)

    assert master.key_data.hex() == "e8f32e723decf4051aefac8e2c93c9c5b214313817cdb01a1494b917c8436b35"
    assert master.chain_code.hex() == "873dff81c02f525623fd1fe5167eac3a55a049de3d314bb42ee227ffed37d508"
    assert master.pubkey.compressed().hex() == "0339a36013301597daef41fbe593a02cc513d0b55527ec2df1050e2e8ff49c85c2"
    assert master.fingerprint().hex() == "3442193e"


def test_hardened_child():
    """
    m/0H
    """
    master = ExtendedKey.from_master_seed(SEED)
    child = master.derive_child(0 + H)

    assert child.key_data.hex() == "edb2e14f9ee77d26dd93b4ecede8d16ed408ce149b6cd80b0715a2d911a0afea"
    assert child.chain_code.hex() == "47fdacbd0f1097043b78c63c20c34ef4ed9a111d980047ad16282c7ae6236141"
    assert child.depth == 1
    assert child.parent_fingerprint == master.fingerprint()
    assert child.child_number == H


def test_normal_child():
    """
    m/0H/1
    """
    key = ExtendedKey.from_master_seed(SEED).derive_path([0 + H, 1])

    assert key.key_data.hex() == "3c6cb8d0f6a264c91ea8b5030fadaa8e538b020f0a387421a12de9319dc93368"
    assert key.chain_code.hex() == "2a7857631386ba23dacac34180dd1983734e444fdbf774041578e9b6adb37c19"


def test_bip44_path():
    assert bip44_path(1, 5) == [44 + H, 1 + H, 0 + H, 0, 5]


def test_invalid_seed_and_index():
    with pytest.raises(ExtendedKeyError):
        ExtendedKey.from_master_seed(b'\x01' * 8)
    with pytest.raises(ExtendedKeyError):
        ExtendedKey.from_master_seed(b'\x01' * 65)
    with pytest.raises(ExtendedKeyError):
        ExtendedKey.from_master_seed(SEED).derive_child(2 * H)
