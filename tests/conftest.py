"""
Fixtures used in the tests
"""
from random import randint
from secrets import token_bytes

import pytest

from bulletin_wallet.chain.client import BlockStamp, ChainClient, ChainRPCError
from bulletin_wallet.core import TX, ChainUnavailable, WalletConfig
from bulletin_wallet.database.tx_store import TxStore
from bulletin_wallet.script import ScriptEngine
from bulletin_wallet.script.script_types import Address
from bulletin_wallet.tx import TxInput, TxOutput, Transaction, Credit
from bulletin_wallet.wallet import KeyManager, Wallet

# Low PBKDF2 cost so wallet creation is quick under test
TEST_ITERATIONS = 1000
TEST_SEED = bytes(range(32))
TEST_PASSPHRASE = b"passphrase"
CHAIN_HEIGHT = 200


# --- Generate Random Tx Elements --- #

def getrand_txinput():
    txid = token_bytes(TX.TXID)
    vout = int.from_bytes(token_bytes(TX.VOUT), "little")
    scriptsig = token_bytes(randint(40, 60))
    sequence = int.from_bytes(token_bytes(TX.SEQUENCE), "little")

    return TxInput(txid, vout, scriptsig, sequence)


def getrand_txoutput():
    amount = int.from_bytes(token_bytes(TX.AMOUNT), "little")
    scriptpubkey = token_bytes(randint(40, 60))

    return TxOutput(amount, scriptpubkey)


def getrand_tx():
    inputs = [getrand_txinput() for _ in range(randint(1, 4))]
    outputs = [getrand_txoutput() for _ in range(randint(1, 4))]
    locktime = int.from_bytes(token_bytes(TX.LOCKTIME), "little")
    return Transaction(inputs, outputs, locktime)


# --- Chain --- #

class FakeChain(ChainClient):
    """
    In-memory chain server. Records broadcast transactions.
    """

    def __init__(self, height: int = CHAIN_HEIGHT):
        self.height = height
        self.connected = True
        self.reject = False
        self.broadcast: list[Transaction] = []

    def block_stamp(self) -> BlockStamp:
        if not self.connected:
            raise ChainUnavailable("Chain server unreachable")
        return BlockStamp(self.height, "00" * 32)

    def send_raw_transaction(self, tx: Transaction) -> str:
        if not self.connected:
            raise ChainUnavailable("Chain server unreachable")
        if self.reject:
            raise ChainRPCError(-26, "txn-mempool-conflict")
        self.broadcast.append(Transaction.from_bytes(tx.to_bytes()))
        return tx.txid_hex

    def is_connected(self) -> bool:
        return self.connected


# --- Fixtures --- #

@pytest.fixture()
def script_engine():
    return ScriptEngine()


@pytest.fixture()
def key_manager():
    return KeyManager.create(TEST_PASSPHRASE, "testnet", seed=TEST_SEED, iterations=TEST_ITERATIONS)


@pytest.fixture()
def wallet(key_manager):
    return Wallet(key_manager, TxStore(), fee_increment=1000, dust_amount=600)


@pytest.fixture()
def chain():
    return FakeChain()


@pytest.fixture()
def config(tmp_path):
    return WalletConfig(data_dir=tmp_path, network="testnet", rpc_port=0)


@pytest.fixture()
def make_credit():
    """
    Returns a factory for confirmed credits paying an address
    """

    def _make_credit(address: Address, amount: int, block_height: int = 100, is_coinbase: bool = False) -> Credit:
        return Credit(token_bytes(TX.TXID), 0, amount, address.script(), block_height, is_coinbase)

    return _make_credit
