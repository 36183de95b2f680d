"""
The protocol formats and constants
"""
from dataclasses import dataclass
from typing import Final

__all__ = ["ECC", "XKEYS", "TX", "FEES", "BULLETIN", "SETUP", "SCRIPT", "NetParams", "NETWORKS", "get_network"]


class ECC:
    COORD_BYTES: Final[int] = 32
    PRIVKEY_BYTES: Final[int] = 32


class XKEYS:
    """
    Constants related to BIP32 key derivation
    """
    SEED_KEY: Final[bytes] = b'Bitcoin seed'
    CHAIN_LENGTH: Final[int] = 32
    HARDENED_OFFSET: Final[int] = 0x80000000
    MIN_SEED_BYTES: Final[int] = 16
    MAX_SEED_BYTES: Final[int] = 64
    DEFAULT_SEED_BYTES: Final[int] = 32


class TX:
    """
    Transaction byte sizes and defaults
    """
    TXID: Final[int] = 32
    VOUT: Final[int] = 4
    SEQUENCE: Final[int] = 4
    AMOUNT: Final[int] = 8
    VERSION: Final[int] = 4
    LOCKTIME: Final[int] = 4
    DEFAULT_VERSION: Final[int] = 1
    MAX_SEQUENCE: Final[int] = 0xffffffff
    COINBASE_MATURITY: Final[int] = 100
    MAX_SATOSHI: Final[int] = 21_000_000 * 100_000_000
    SATOSHI_PER_BITCENT: Final[int] = 1_000_000


class FEES:
    """
    Size estimates used before a transaction is signed.
    A signed P2PKH input: outpoint + sequence + scriptsig length + (sig push + pubkey push)
    """
    TXIN_ESTIMATE: Final[int] = 32 + 4 + 1 + 107 + 4
    TXOUT_ESTIMATE: Final[int] = 8 + 1 + 25
    TX_OVERHEAD_ESTIMATE: Final[int] = 4 + 1 + 1 + 4
    SIZE_UNIT: Final[int] = 1000
    DEFAULT_FEE_INCREMENT: Final[int] = 1000
    DEFAULT_MIN_CONF: Final[int] = 1
    FREE_TX_PRIORITY: Final[float] = 100_000_000 * 144 / 250


class BULLETIN:
    """
    Bulletin payload encoding
    """
    MAGIC: Final[bytes] = b'BLTN'
    VERSION: Final[int] = 1
    CHUNK_BYTES: Final[int] = 20
    MAX_MESSAGE_BYTES: Final[int] = 500
    MAX_BOARD_BYTES: Final[int] = 30
    DEFAULT_DUST_AMOUNT: Final[int] = 600


class SETUP:
    """
    Bootstrap constants
    """
    MIN_PASSPHRASE_BYTES: Final[int] = 6
    KEYSTORE_FILE: Final[str] = "wallet.json"
    TXSTORE_FILE: Final[str] = "txstore.db"
    PBKDF2_ITERATIONS: Final[int] = 100_000
    SALT_BYTES: Final[int] = 16
    NONCE_BYTES: Final[int] = 12


class SCRIPT:
    """
    Constants in use in the Script
    """
    MAX_STACK: Final[int] = 1000
    MAX_PUSH: Final[int] = 520


@dataclass(frozen=True)
class NetParams:
    name: str
    p2pkh_prefix: bytes
    p2sh_prefix: bytes
    coin_type: int
    rpc_port: int
    wallet_rpc_port: int


NETWORKS = {
    "mainnet": NetParams("mainnet", b'\x00', b'\x05', 0, 8332, 8336),
    "testnet": NetParams("testnet", b'\x6f', b'\xc4', 1, 18332, 18336),
}


def get_network(name: str) -> NetParams:
    try:
        return NETWORKS[name]
    except KeyError:
        raise ValueError(f"Unknown network: {name}") from None
