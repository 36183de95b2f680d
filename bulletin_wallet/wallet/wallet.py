"""
The Wallet class - ties together the KeyManager and the TxStore, and guards them with the unlock credential
"""
import threading
from contextlib import contextmanager
from typing import Iterator

from bulletin_wallet.core import FEES, BULLETIN, SETUP, NetParams, WalletConfig, WalletLocked, PassphraseTooShort, \
    WalletError, get_logger
from bulletin_wallet.database.tx_store import TxStore
from bulletin_wallet.script.script_types import classify, ScriptClass, extract_addresses
from bulletin_wallet.tx.utxo import Credit
from bulletin_wallet.wallet.key_manager import KeyManager
from bulletin_wallet.wallet.selector import eligible_outputs

__all__ = ["Wallet", "Reservation"]

logger = get_logger(__name__)


class Reservation:
    """
    Outpoints claimed by one in-flight build. Other builds do not see them as eligible until released.
    """

    def __init__(self, wallet: "Wallet"):
        self._wallet = wallet
        self.outpoints: set[bytes] = set()

    def add(self, credit: Credit):
        with self._wallet._reserve_lock:
            self._wallet._reserved.add(credit.outpoint)
            self.outpoints.add(credit.outpoint)

    def release(self):
        with self._wallet._reserve_lock:
            self._wallet._reserved.difference_update(self.outpoints)
            self.outpoints.clear()


class Wallet:
    """
    Shared by every request handler. Signing state is guarded by the unlock credential from hold_unlock().
    """

    def __init__(self, manager: KeyManager, store: TxStore, fee_increment: int = FEES.DEFAULT_FEE_INCREMENT,
                 dust_amount: int = BULLETIN.DEFAULT_DUST_AMOUNT, min_conf: int = FEES.DEFAULT_MIN_CONF,
                 allow_free: bool = False):
        self.manager = manager
        self.store = store
        self.fee_increment = fee_increment
        self.dust_amount = dust_amount
        self.min_conf = min_conf
        self.allow_free = allow_free

        self._unlock = threading.RLock()
        self._holders = 0
        self._reserve_lock = threading.Lock()
        self._reserved: set[bytes] = set()

    # --- CONSTRUCTION --- #

    @classmethod
    def create(cls, config: WalletConfig, passphrase: bytes, seed: bytes = None,
               iterations: int = SETUP.PBKDF2_ITERATIONS) -> "Wallet":
        """
        Create the keystore and an empty store in the config's network directory. The returned wallet is unlocked.
        """
        if len(passphrase) < SETUP.MIN_PASSPHRASE_BYTES:
            raise PassphraseTooShort(f"Passphrase must be at least {SETUP.MIN_PASSPHRASE_BYTES} bytes")
        manager = KeyManager.create(passphrase, config.network, seed=seed, path=config.keystore_path,
                                    iterations=iterations)
        store = TxStore(config.txstore_path)
        store.mark_dirty()
        store.flush()
        logger.info(f"Created wallet in {config.network_dir}")
        return cls.from_config(config, manager, store)

    @classmethod
    def open(cls, config: WalletConfig) -> "Wallet":
        if not config.keystore_path.exists():
            raise WalletError(f"Keystore missing from {config.network_dir}")
        manager = KeyManager.open(config.keystore_path)
        store = TxStore.open(config.txstore_path)
        return cls.from_config(config, manager, store)

    @classmethod
    def from_config(cls, config: WalletConfig, manager: KeyManager, store: TxStore) -> "Wallet":
        return cls(manager, store, config.fee_increment, config.dust_amount, config.min_conf, config.allow_free)

    @property
    def net(self) -> NetParams:
        return self.manager.net

    # --- UNLOCK CREDENTIAL --- #

    @contextmanager
    def hold_unlock(self) -> Iterator[None]:
        """
        Hold the wallet unlocked for the duration of the block. Re-entrant in one thread; blocks other threads until
        released. Raises WalletLocked if the key manager is locked.
        """
        with self._unlock:
            if self.manager.is_locked:
                raise WalletLocked("Wallet is locked")
            self._holders += 1
            try:
                yield
            finally:
                self._holders -= 1

    @property
    def is_held(self) -> bool:
        return self._holders > 0

    def unlock(self, passphrase: bytes):
        with self._unlock:
            self.manager.unlock(passphrase)

    def lock(self):
        # Waits for any holder to release
        with self._unlock:
            self.manager.lock()

    # --- OUTPUTS --- #

    @contextmanager
    def reservation(self) -> Iterator[Reservation]:
        reservation = Reservation(self)
        try:
            yield reservation
        finally:
            reservation.release()

    def reserved(self) -> frozenset[bytes]:
        with self._reserve_lock:
            return frozenset(self._reserved)

    def find_eligible_outputs(self, min_conf: int, height: int) -> tuple[Credit, ...]:
        return eligible_outputs(self.store.unspent_credits(), min_conf, height, self.reserved())

    def is_mine(self, scriptpubkey: bytes) -> bool:
        if classify(scriptpubkey) != ScriptClass.PUBKEY_HASH:
            return False
        _, addrs = extract_addresses(scriptpubkey, self.net)
        return self.manager.has_address(addrs[0])
