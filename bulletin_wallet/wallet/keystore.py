"""
The Keystore class - the on-disk wallet file

The seed is stored encrypted under a key derived from the wallet passphrase. Public keys for every derived address are
kept in the clear so addresses can be looked up while the wallet is locked.
"""
import json
import os
import secrets
from pathlib import Path

from bulletin_wallet.core import SETUP, WalletExists, WalletLocked, get_logger, get_network
from bulletin_wallet.cryptography import derive_key, passphrase_verifier, check_passphrase, encrypt_secret, \
    decrypt_secret

__all__ = ["Keystore"]

logger = get_logger(__name__)

KEYSTORE_VERSION = 1


class Keystore:
    __slots__ = ("network", "salt", "iterations", "verifier", "nonce", "encrypted_seed", "pubkeys")

    def __init__(self, network: str, salt: bytes, iterations: int, verifier: bytes, nonce: bytes,
                 encrypted_seed: bytes, pubkeys: list[bytes] = None):
        get_network(network)
        self.network = network
        self.salt = salt
        self.iterations = iterations
        self.verifier = verifier
        self.nonce = nonce
        self.encrypted_seed = encrypted_seed
        self.pubkeys = pubkeys or []

    @classmethod
    def create(cls, seed: bytes, passphrase: bytes, network: str, iterations: int = SETUP.PBKDF2_ITERATIONS):
        salt = secrets.token_bytes(SETUP.SALT_BYTES)
        key = derive_key(passphrase, salt, iterations)
        nonce, encrypted_seed = encrypt_secret(key, seed)
        return cls(network, salt, iterations, passphrase_verifier(key), nonce, encrypted_seed)

    def decrypt_seed(self, passphrase: bytes) -> bytes:
        """
        Returns the plaintext seed. Raises WalletLocked if the passphrase is wrong.
        """
        key = derive_key(passphrase, self.salt, self.iterations)
        if not check_passphrase(key, self.verifier):
            raise WalletLocked("Incorrect wallet passphrase")
        seed = decrypt_secret(key, self.nonce, self.encrypted_seed)
        if seed is None:
            raise WalletLocked("Wallet seed failed to decrypt")
        return seed

    # --- SERIALIZATION --- #

    def to_dict(self) -> dict:
        return {
            "version": KEYSTORE_VERSION,
            "network": self.network,
            "salt": self.salt.hex(),
            "iterations": self.iterations,
            "verifier": self.verifier.hex(),
            "nonce": self.nonce.hex(),
            "encrypted_seed": self.encrypted_seed.hex(),
            "pubkeys": [pk.hex() for pk in self.pubkeys]
        }

    @classmethod
    def from_dict(cls, data: dict):
        if data.get("version") != KEYSTORE_VERSION:
            raise ValueError(f"Unsupported keystore version {data.get('version')!r}")
        return cls(
            network=data["network"],
            salt=bytes.fromhex(data["salt"]),
            iterations=int(data["iterations"]),
            verifier=bytes.fromhex(data["verifier"]),
            nonce=bytes.fromhex(data["nonce"]),
            encrypted_seed=bytes.fromhex(data["encrypted_seed"]),
            pubkeys=[bytes.fromhex(pk) for pk in data.get("pubkeys", [])]
        )

    def save(self, path: Path, overwrite: bool = True):
        """
        Write the keystore, replacing the previous file in one step
        """
        path = Path(path)
        if not overwrite and path.exists():
            raise WalletExists(f"Keystore already exists at {path}")
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        os.replace(tmp_path, path)
        logger.debug(f"Keystore written to {path}")

    @classmethod
    def load(cls, path: Path):
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))
