"""
The KeyManager class - address derivation, address lookup and private key access
"""
import secrets
import threading
from pathlib import Path
from typing import Optional

from bulletin_wallet.core import XKEYS, SETUP, NetParams, UnknownAddress, WalletLocked, WalletExists, get_logger, \
    get_network
from bulletin_wallet.cryptography import PrivKey, hash160
from bulletin_wallet.script.script_types import Address, ScriptClass
from bulletin_wallet.wallet.keystore import Keystore
from bulletin_wallet.wallet.xkeys import ExtendedKey, bip44_path

__all__ = ["KeyManager", "ManagedAddress"]

logger = get_logger(__name__)


class ManagedAddress:
    """
    A pay-to-pubkey-hash address derived by the key manager
    """
    __slots__ = ("address", "index", "pubkey")

    def __init__(self, address: Address, index: int, pubkey: bytes):
        self.address = address
        self.index = index
        self.pubkey = pubkey

    def __repr__(self):
        return f"ManagedAddress({self.address}, index={self.index})"


class KeyManager:
    """
    Derives keys along m/44'/coin'/0'/0/i from the keystore seed. Address lookups work while locked; private keys
    and new addresses need the wallet unlocked.
    """

    def __init__(self, keystore: Keystore, path: Optional[Path] = None):
        self.keystore = keystore
        self.path = Path(path) if path is not None else None
        self.net: NetParams = get_network(keystore.network)
        self._master: Optional[ExtendedKey] = None
        self._lock = threading.Lock()
        self._addresses: dict[Address, ManagedAddress] = {}
        for index, pubkey in enumerate(keystore.pubkeys):
            self._register(index, pubkey)

    # --- CONSTRUCTION --- #

    @classmethod
    def create(cls, passphrase: bytes, network: str, seed: bytes = None, path: Path = None,
               iterations: int = SETUP.PBKDF2_ITERATIONS) -> "KeyManager":
        """
        Create a new key manager from the seed (random if not given), derive the first address and write the
        keystore if a path is given. The returned manager is unlocked.
        """
        if path is not None and Path(path).exists():
            raise WalletExists(f"Keystore already exists at {path}")
        seed = seed if seed is not None else secrets.token_bytes(XKEYS.DEFAULT_SEED_BYTES)
        master = ExtendedKey.from_master_seed(seed)
        keystore = Keystore.create(seed, passphrase, network, iterations)
        manager = cls(keystore, path)
        manager._master = master
        manager.next_address()
        if path is not None:
            keystore.save(path, overwrite=False)
        return manager

    @classmethod
    def open(cls, path: Path) -> "KeyManager":
        return cls(Keystore.load(path), path)

    # --- LOCKING --- #

    @property
    def is_locked(self) -> bool:
        return self._master is None

    def unlock(self, passphrase: bytes):
        seed = self.keystore.decrypt_seed(passphrase)
        self._master = ExtendedKey.from_master_seed(seed)
        logger.debug("Key manager unlocked")

    def lock(self):
        self._master = None
        logger.debug("Key manager locked")

    # --- ADDRESSES --- #

    def _register(self, index: int, pubkey: bytes) -> ManagedAddress:
        address = Address(ScriptClass.PUBKEY_HASH, hash160(pubkey), self.net)
        managed = ManagedAddress(address, index, pubkey)
        self._addresses[address] = managed
        return managed

    def _derive(self, index: int) -> ExtendedKey:
        if self._master is None:
            raise WalletLocked("Wallet is locked")
        return self._master.derive_path(bip44_path(self.net.coin_type, index))

    def addresses(self) -> list[Address]:
        return [m.address for m in sorted(self._addresses.values(), key=lambda m: m.index)]

    def address(self, address: Address) -> ManagedAddress:
        managed = self._addresses.get(address)
        if managed is None:
            raise UnknownAddress(f"Address {address} is not known to this wallet")
        return managed

    def has_address(self, address: Address) -> bool:
        return address in self._addresses

    def next_address(self) -> Address:
        with self._lock:
            index = len(self.keystore.pubkeys)
            pubkey = self._derive(index).pubkey.compressed()
            self.keystore.pubkeys.append(pubkey)
            managed = self._register(index, pubkey)
            if self.path is not None and self.path.exists():
                self.keystore.save(self.path)
        logger.info(f"Derived address {managed.address} at index {index}")
        return managed.address

    def private_key(self, address: Address) -> PrivKey:
        managed = self.address(address)
        key = self._derive(managed.index).private_key
        if key.pubkey.compressed() != managed.pubkey:
            raise UnknownAddress(f"Derived key does not match address {address}")
        return key
