"""
The Credit class - a spendable output controlled by the wallet
"""
from bulletin_wallet.core import TX, NetParams
from bulletin_wallet.script.script_types import Address, ScriptClass, extract_addresses
from bulletin_wallet.tx.tx import TxOutput

__all__ = ["Credit", "UNMINED_HEIGHT"]

UNMINED_HEIGHT = -1


class Credit:
    """
    Unspent Transaction Output the wallet may spend. Immutable once materialized.
    """
    __slots__ = ("txid", "vout", "amount", "scriptpubkey", "block_height", "is_coinbase")

    def __init__(self, txid: bytes, vout: int, amount: int, scriptpubkey: bytes,
                 block_height: int = UNMINED_HEIGHT, is_coinbase: bool = False):
        object.__setattr__(self, "txid", txid)
        object.__setattr__(self, "vout", vout)
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "scriptpubkey", scriptpubkey)
        object.__setattr__(self, "block_height", block_height)
        object.__setattr__(self, "is_coinbase", is_coinbase)

    def __setattr__(self, key, value):
        raise AttributeError("Credit is immutable")

    @classmethod
    def from_txoutput(cls, txid: bytes, vout: int, txoutput: TxOutput,
                      block_height: int = UNMINED_HEIGHT, is_coinbase: bool = False):
        """Create Credit from a TxOutput"""
        return cls(txid, vout, txoutput.amount, txoutput.scriptpubkey, block_height, is_coinbase)

    @property
    def outpoint(self) -> bytes:
        """Return txid + vout for referencing. Key in the store."""
        return self.txid + self.vout.to_bytes(TX.VOUT, "little")

    def confirmations(self, current_height: int) -> int:
        if self.block_height == UNMINED_HEIGHT:
            return 0
        return current_height - self.block_height + 1

    def is_mature(self, current_height: int) -> bool:
        """Check if coinbase output is mature (100 blocks)"""
        if not self.is_coinbase:
            return True
        return self.confirmations(current_height) >= TX.COINBASE_MATURITY

    def addresses(self, net: NetParams) -> tuple[ScriptClass, list[Address]]:
        return extract_addresses(self.scriptpubkey, net)

    def to_dict(self):
        return {
            "txid": self.txid[::-1].hex(),
            "vout": self.vout,
            "amount": self.amount,
            "scriptpubkey": self.scriptpubkey.hex(),
            "block_height": self.block_height,
            "is_coinbase": self.is_coinbase
        }

    def __eq__(self, other):
        if not isinstance(other, Credit):
            return False
        return self.outpoint == other.outpoint

    def __hash__(self):
        return hash(self.outpoint)

    def __str__(self):
        return f"Credit({self.txid[::-1].hex()[:8]}...:{self.vout}, {self.amount} sats)"
