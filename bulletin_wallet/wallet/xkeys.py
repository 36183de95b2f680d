"""
Extended private keys for the wallet's key manager
Implements BIP32 hierarchical deterministic private key derivation along the BIP44 account path

"""
from bulletin_wallet.core import ExtendedKeyError, XKEYS
from bulletin_wallet.cryptography import SECP256K1, hash160, hmac_sha512, PrivKey, PubKey

__all__ = ["ExtendedKey", "bip44_path"]

HARDENED_INDEX = XKEYS.HARDENED_OFFSET
SEED_KEY = XKEYS.SEED_KEY
CHAIN_LENGTH = XKEYS.CHAIN_LENGTH


def bip44_path(coin_type: int, index: int, account: int = 0, change: int = 0) -> list[int]:
    """
    m / 44' / coin_type' / account' / change / index
    """
    return [44 + HARDENED_INDEX, coin_type + HARDENED_INDEX, account + HARDENED_INDEX, change, index]


class ExtendedKey:
    """
    Extended private key: 32-byte key and 32-byte chain code at a position in the derivation tree
    """
    __slots__ = ('depth', 'parent_fingerprint', 'child_number', 'chain_code', 'key_data')

    def __init__(self, key_data: bytes, chain_code: bytes, depth: int = 0, parent_fingerprint: bytes = b'\x00' * 4,
                 child_number: int = 0):
        # --- Validation --- #
        if len(key_data) != 32:
            raise ExtendedKeyError("Private key data must be 32 bytes")
        if len(parent_fingerprint) != 4:
            raise ExtendedKeyError("Parent fingerprint must be 4 bytes")
        if len(chain_code) != CHAIN_LENGTH:
            raise ExtendedKeyError("Chain code must be 32 bytes")

        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.child_number = child_number
        self.chain_code = chain_code
        self.key_data = key_data

    def __eq__(self, other) -> bool:
        if not isinstance(other, ExtendedKey):
            return False
        return (self.key_data, self.chain_code, self.depth, self.child_number) == \
            (other.key_data, other.chain_code, other.depth, other.child_number)

    def __hash__(self) -> int:
        return hash((self.key_data, self.chain_code))

    @classmethod
    def from_master_seed(cls, seed: bytes):
        if not XKEYS.MIN_SEED_BYTES <= len(seed) <= XKEYS.MAX_SEED_BYTES:
            raise ExtendedKeyError(f"Seed must be between {XKEYS.MIN_SEED_BYTES} and {XKEYS.MAX_SEED_BYTES} bytes")

        # 1. Run the HMAC-512
        seed_hash = hmac_sha512(key=SEED_KEY, message=seed)

        # 2. Get private_key in bytes and chain code
        privkey, chain_code = seed_hash[:32], seed_hash[32:]
        privkey_int = int.from_bytes(privkey, "big")
        if privkey_int == 0 or privkey_int >= SECP256K1.order:
            raise ExtendedKeyError("Seed produces an invalid master key")

        return cls(privkey, chain_code)

    # --- PROPERTIES --- #

    @property
    def private_key(self) -> PrivKey:
        return PrivKey(self.key_data)

    @property
    def pubkey(self) -> PubKey:
        return self.private_key.pubkey

    def fingerprint(self) -> bytes:
        return hash160(self.pubkey.compressed())[:4]

    # --- DERIVATION --- #

    def derive_child(self, index: int) -> "ExtendedKey":
        """
        Derive a child at the given index. Indices at or above the hardened offset use hardened derivation.
        """
        if not 0 <= index < 2 * HARDENED_INDEX:
            raise ExtendedKeyError(f"Child index {index} out of range")

        index_bytes = index.to_bytes(4, "big")
        if index >= HARDENED_INDEX:
            data = b'\x00' + self.key_data + index_bytes
        else:
            data = self.pubkey.compressed() + index_bytes

        key_hash = hmac_sha512(key=self.chain_code, message=data)
        tweak_int = int.from_bytes(key_hash[:32], "big")
        child_chain_code = key_hash[32:]

        child_priv_key = (int.from_bytes(self.key_data, "big") + tweak_int) % SECP256K1.order

        # Invalid child: move on to the next index
        if tweak_int >= SECP256K1.order or child_priv_key == 0:
            return self.derive_child(index + 1)

        return ExtendedKey(
            key_data=child_priv_key.to_bytes(32, "big"),
            chain_code=child_chain_code,
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint(),
            child_number=index
        )

    def derive_path(self, path: list[int]) -> "ExtendedKey":
        key = self
        for index in path:
            key = key.derive_child(index)
        return key
