"""
We test the various parts of a wallet transaction
"""
from secrets import token_bytes

import pytest

from bulletin_wallet.core import TX, ReadError
from bulletin_wallet.tx import TxInput, TxOutput, Transaction, Credit, UNMINED_HEIGHT
from conftest import getrand_txinput, getrand_txoutput, getrand_tx


def test_txinput():
    """
    We test the serialization and class method of TxInput
    """
    random_txinput = getrand_txinput()
    recovered_txinput = TxInput.from_bytes(random_txinput.to_bytes())

    assert recovered_txinput == random_txinput, "Failed to reconstruct TxInput using to_bytes -> from_bytes method"
    assert random_txinput.outpoint == random_txinput.txid + random_txinput.vout.to_bytes(TX.VOUT, "little")


def test_txoutput():
    random_txoutput = getrand_txoutput()
    recovered_txoutput = TxOutput.from_bytes(random_txoutput.to_bytes())

    assert recovered_txoutput == random_txoutput, "Failed to reconstruct TxOutput using to_bytes -> from_bytes method"


def test_tx():
    random_tx = getrand_tx()
    recovered_tx = Transaction.from_hex(random_tx.to_hex())

    assert recovered_tx == random_tx, "Failed to reconstruct Transaction from hex"
    assert random_tx.txid_hex == random_tx.txid[::-1].hex(), "Display txid is not the reversed txid"
    assert random_tx.total_out == sum(o.amount for o in random_tx.outputs)


def test_tx_trailing_data():
    random_tx = getrand_tx()
    with pytest.raises(ReadError):
        Transaction.from_bytes(random_tx.to_bytes() + b'\x00')


def test_tx_clone_is_independent():
    random_tx = getrand_tx()
    clone = random_tx.clone()
    clone.inputs[0].scriptsig = b''

    assert clone != random_tx, "Modifying the clone changed the original transaction"


def test_credit_confirmations():
    credit = Credit(token_bytes(32), 1, 5000, token_bytes(25), block_height=100)
    unmined = Credit(token_bytes(32), 1, 5000, token_bytes(25), block_height=UNMINED_HEIGHT)

    assert credit.confirmations(100) == 1
    assert credit.confirmations(199) == 100
    assert unmined.confirmations(500) == 0

    with pytest.raises(AttributeError):
        credit.amount = 1


def test_coinbase_maturity():
    coinbase = Credit(token_bytes(32), 0, 5000, token_bytes(25), block_height=100, is_coinbase=True)

    assert not coinbase.is_mature(100 + TX.COINBASE_MATURITY - 2)
    assert coinbase.is_mature(100 + TX.COINBASE_MATURITY - 1)
