"""
Runtime configuration for the wallet service
"""
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional

from .formats import BULLETIN, FEES, SETUP, NetParams, get_network

__all__ = ["WalletConfig", "DEFAULT_DATA_DIR"]

DEFAULT_DATA_DIR = Path.home() / ".bulletin_wallet"
ENV_PREFIX = "BULLETIN_"


@dataclass(frozen=True)
class WalletConfig:
    data_dir: Path = DEFAULT_DATA_DIR
    network: str = "testnet"
    fee_increment: int = FEES.DEFAULT_FEE_INCREMENT
    dust_amount: int = BULLETIN.DEFAULT_DUST_AMOUNT
    min_conf: int = FEES.DEFAULT_MIN_CONF
    rpc_host: str = "127.0.0.1"
    rpc_port: Optional[int] = None
    chain_url: Optional[str] = None
    chain_user: str = ""
    chain_password: str = field(default="", repr=False)
    setup_timeout: Optional[float] = None
    store_retries: int = 2
    allow_free: bool = False
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        # Fail early on a bad network name
        get_network(self.network)
        if self.fee_increment <= 0:
            raise ValueError("fee_increment must be positive")
        if self.dust_amount <= 0:
            raise ValueError("dust_amount must be positive")

    @property
    def net_params(self) -> NetParams:
        return get_network(self.network)

    @property
    def network_dir(self) -> Path:
        return Path(self.data_dir) / self.network

    @property
    def keystore_path(self) -> Path:
        return self.network_dir / SETUP.KEYSTORE_FILE

    @property
    def txstore_path(self) -> Path:
        return self.network_dir / SETUP.TXSTORE_FILE

    @property
    def listen_port(self) -> int:
        return self.rpc_port if self.rpc_port is not None else self.net_params.wallet_rpc_port

    @property
    def chain_server_url(self) -> str:
        if self.chain_url:
            return self.chain_url
        return f"http://127.0.0.1:{self.net_params.rpc_port}"

    def wallet_exists(self) -> bool:
        return self.keystore_path.exists() or self.txstore_path.exists()

    @classmethod
    def from_env(cls, base: Optional["WalletConfig"] = None, environ: Optional[dict] = None) -> "WalletConfig":
        """
        Overlay BULLETIN_<FIELD> environment variables on the base config
        """
        base = base or cls()
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            current = getattr(base, f.name)
            if f.name == "data_dir":
                overrides[f.name] = Path(raw)
            elif f.name == "log_file":
                overrides[f.name] = Path(raw) if raw else None
            elif f.name in ("rpc_port", "fee_increment", "dust_amount", "min_conf", "store_retries"):
                overrides[f.name] = int(raw)
            elif f.name == "allow_free":
                overrides[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif f.name == "setup_timeout":
                overrides[f.name] = float(raw) if raw else None
            elif isinstance(current, str) or current is None:
                overrides[f.name] = raw
        return replace(base, **overrides)
