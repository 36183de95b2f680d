"""
The bootstrap gate - the restricted request server that runs while no wallet exists

States: NoWallet -> AwaitingSetup -> Initialized. While awaiting setup only ping, getwalletstate and walletsetup are
served. A successful walletsetup creates the wallet and sends it once through the SetupSignal, which releases
wait_for_setup().
"""
import threading
from concurrent.futures import Future, InvalidStateError, TimeoutError as FutureTimeout
from enum import Enum
from typing import Callable, Optional

from bulletin_wallet.core import SETUP, XKEYS, WalletConfig, Unsupported, PassphraseTooShort, SetupTimeout, \
    SetupAlreadyComplete, get_logger
from bulletin_wallet.rpc.errors import JSONRPCError, RPCErrorCode
from bulletin_wallet.rpc.handlers import parse_params
from bulletin_wallet.rpc.server import RPCDispatcher, RPCServer
from bulletin_wallet.wallet.wallet import Wallet

__all__ = ["GateState", "SetupSignal", "BootstrapGate", "GateDispatcher", "wait_for_setup"]

logger = get_logger(__name__)


class GateState(Enum):
    NO_WALLET = "nowallet"
    AWAITING_SETUP = "awaitingsetup"
    INITIALIZED = "initialized"


class SetupSignal:
    """
    One-shot completion signal carrying the created wallet. Any number of waiters are released by the single send.
    """

    def __init__(self):
        self._future: Future = Future()

    def send(self, wallet: Wallet):
        try:
            self._future.set_result(wallet)
        except InvalidStateError as e:
            raise SetupAlreadyComplete("Setup signal already sent") from e

    def wait(self, timeout: Optional[float] = None) -> Wallet:
        try:
            return self._future.result(timeout)
        except FutureTimeout as e:
            raise SetupTimeout(f"Wallet setup not completed within {timeout} seconds") from e

    @property
    def done(self) -> bool:
        return self._future.done()


class BootstrapGate:
    PERMITTED = ("ping", "getwalletstate", "walletsetup")

    def __init__(self, config: WalletConfig, signal: SetupSignal, iterations: int = SETUP.PBKDF2_ITERATIONS):
        self.config = config
        self.signal = signal
        self.iterations = iterations
        self.state = GateState.NO_WALLET
        self._lock = threading.Lock()

    def open(self):
        with self._lock:
            if self.state != GateState.NO_WALLET:
                raise Unsupported(f"Gate cannot open from state {self.state.value}")
            self.state = GateState.AWAITING_SETUP
        logger.info("Bootstrap gate awaiting wallet setup")

    def close(self):
        with self._lock:
            if self.state == GateState.AWAITING_SETUP:
                self.state = GateState.NO_WALLET

    def call(self, method: str, params=None):
        if self.state != GateState.AWAITING_SETUP:
            raise Unsupported(f"Bootstrap gate is not accepting requests ({self.state.value})")
        if method not in self.PERMITTED:
            raise Unsupported(f"Command {method!r} is unsupported until the wallet is set up")

        match method:
            case "ping":
                parse_params(params, [])
                return None
            case "getwalletstate":
                parse_params(params, [])
                return {"haswallet": False, "chainserver": False}
            case _:
                return self.wallet_setup(params)

    def wallet_setup(self, params) -> str:
        """
        Create the wallet from the passphrase and optional hex seed. Returns the first address.
        """
        passphrase, seed_hex = parse_params(params, ["passphrase", "seed"], required=1)
        if not isinstance(passphrase, str):
            raise JSONRPCError(RPCErrorCode.INVALID_PARAMETER, "passphrase must be a string")
        try:
            passphrase = passphrase.encode("utf-8")
        except UnicodeEncodeError:
            raise JSONRPCError(RPCErrorCode.INVALID_PARAMETER, "passphrase must be valid UTF-8 text")
        if len(passphrase) < SETUP.MIN_PASSPHRASE_BYTES:
            raise PassphraseTooShort(f"Passphrase must be at least {SETUP.MIN_PASSPHRASE_BYTES} bytes")
        seed = self._parse_seed(seed_hex)

        with self._lock:
            if self.state != GateState.AWAITING_SETUP:
                raise SetupAlreadyComplete("Wallet setup already completed")
            wallet = Wallet.create(self.config, passphrase, seed, self.iterations)
            self.state = GateState.INITIALIZED
            self.signal.send(wallet)

        address = wallet.manager.addresses()[0]
        logger.info(f"Wallet created with initial address {address}")
        return address.encode()

    @staticmethod
    def _parse_seed(seed_hex) -> Optional[bytes]:
        if seed_hex is None:
            return None
        try:
            seed = bytes.fromhex(seed_hex)
        except (TypeError, ValueError):
            raise JSONRPCError(RPCErrorCode.INVALID_PARAMETER, "seed must be a hex string")
        if not XKEYS.MIN_SEED_BYTES <= len(seed) <= XKEYS.MAX_SEED_BYTES:
            raise JSONRPCError(RPCErrorCode.INVALID_PARAMETER,
                               f"seed must be between {XKEYS.MIN_SEED_BYTES} and {XKEYS.MAX_SEED_BYTES} bytes")
        return seed


class GateDispatcher(RPCDispatcher):
    def __init__(self, gate: BootstrapGate):
        super().__init__({}, gate)

    def call(self, method: str, params=None):
        return self.context.call(method, params)


def wait_for_setup(config: WalletConfig, iterations: int = SETUP.PBKDF2_ITERATIONS,
                   on_listening: Callable[[RPCServer], None] = None) -> Wallet:
    """
    Return the wallet for the config. If none exists, serve the bootstrap gate until a walletsetup request creates
    one. Blocks forever unless config.setup_timeout is set, in which case SetupTimeout is raised.
    """
    if config.wallet_exists():
        return Wallet.open(config)

    config.network_dir.mkdir(parents=True, exist_ok=True)
    signal = SetupSignal()
    gate = BootstrapGate(config, signal, iterations)
    server = RPCServer(GateDispatcher(gate), config.rpc_host, config.listen_port, name="initialization")
    gate.open()
    server.start()
    try:
        if on_listening is not None:
            on_listening(server)
        return signal.wait(config.setup_timeout)
    finally:
        gate.close()
        server.shutdown()
