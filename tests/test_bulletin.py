"""
Tests for bulletin payload encoding
"""
from secrets import token_bytes

import pytest

from bulletin_wallet.bulletin import Bulletin
from bulletin_wallet.core import BULLETIN, NETWORKS, BulletinError, InvalidAddress
from bulletin_wallet.script.script_types import Address, ScriptClass, classify, p2pkh_script, p2pkh_scriptsig
from bulletin_wallet.tx import Transaction, TxInput, TxOutput

NET = NETWORKS["testnet"]


@pytest.fixture()
def author(key_manager):
    return key_manager.addresses()[0].encode()


def test_payload(author):
    bulletin = Bulletin(author, "test", "hello world", NET)
    payload = bulletin.payload()

    assert payload[:4] == BULLETIN.MAGIC
    assert payload[4] == BULLETIN.VERSION
    assert payload[5] == 4 and payload[6:10] == b"test"
    assert payload[10] == 11 and payload[11:] == b"hello world"


def test_chunks(author):
    bulletin = Bulletin(author, "test", "a" * 20, NET)
    chunks = bulletin.chunks()
    payload = bulletin.payload()

    # 4 + 1 + 1 + 4 + 1 + 20 = 31 bytes
    assert len(chunks) == 2
    assert all(len(c) == BULLETIN.CHUNK_BYTES for c in chunks)
    assert b''.join(chunks) == payload + b'\x00' * 9


def test_tx_outputs(author):
    outputs = Bulletin(author, "", "x" * 100, NET).tx_outputs(dust_amount=700)

    assert all(o.amount == 700 for o in outputs)
    assert all(classify(o.scriptpubkey) == ScriptClass.PUBKEY_HASH for o in outputs)
    # 4 + 1 + 1 + 0 + 1 + 100 = 107 bytes
    assert len(outputs) == 6


def test_limits(author):
    Bulletin(author, "b" * BULLETIN.MAX_BOARD_BYTES, "m" * BULLETIN.MAX_MESSAGE_BYTES, NET)

    with pytest.raises(BulletinError):
        Bulletin(author, "b" * (BULLETIN.MAX_BOARD_BYTES + 1), "message", NET)
    with pytest.raises(BulletinError):
        Bulletin(author, "board", "m" * (BULLETIN.MAX_MESSAGE_BYTES + 1), NET)
    with pytest.raises(BulletinError):
        Bulletin(author, "board", "", NET)

    # Multi-byte characters count by encoded length
    with pytest.raises(BulletinError):
        Bulletin(author, "é" * 16, "message", NET)


def test_unencodable_text(author):
    """
    Lone surrogates have no UTF-8 encoding
    """
    with pytest.raises(BulletinError):
        Bulletin(author, "board", "hi \ud800", NET)
    with pytest.raises(BulletinError):
        Bulletin(author, "\udfff", "message", NET)


def test_invalid_author():
    p2sh = Address(ScriptClass.SCRIPT_HASH, token_bytes(20), NET).encode()
    with pytest.raises(InvalidAddress):
        Bulletin(p2sh, "board", "message", NET)
    with pytest.raises(InvalidAddress):
        Bulletin("bogus", "board", "message", NET)


def test_from_tx(key_manager, author):
    """
    The author is recovered from the pubkey pushed by the first input
    """
    pubkey = key_manager.address(key_manager.addresses()[0]).pubkey
    bulletin = Bulletin(author, "news", "The quick brown fox jumps over the lazy dog", NET)

    scriptsig = p2pkh_scriptsig(token_bytes(71), pubkey)
    outputs = bulletin.tx_outputs() + [TxOutput(5000, p2pkh_script(token_bytes(20)))]
    tx = Transaction([TxInput(token_bytes(32), 0, scriptsig)], outputs)

    assert Bulletin.from_tx(tx, NET) == bulletin


def test_from_tx_not_a_bulletin(key_manager):
    pubkey = key_manager.address(key_manager.addresses()[0]).pubkey
    scriptsig = p2pkh_scriptsig(token_bytes(71), pubkey)
    tx = Transaction([TxInput(token_bytes(32), 0, scriptsig)], [TxOutput(5000, p2pkh_script(b'\x00' * 20))])

    with pytest.raises(BulletinError):
        Bulletin.from_tx(tx, NET)
