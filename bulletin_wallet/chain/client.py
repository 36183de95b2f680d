"""
Chain server clients: the current chain tip and raw transaction broadcast
"""
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass

import requests

from bulletin_wallet.core import ChainUnavailable, get_logger
from bulletin_wallet.tx.tx import Transaction

__all__ = ["BlockStamp", "ChainClient", "RPCChainClient", "ChainRPCError"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class BlockStamp:
    height: int
    block_hash: str


class ChainRPCError(Exception):
    """
    The chain server answered with a JSON-RPC error object
    """

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"Chain server error {code}: {message}")


class ChainClient(ABC):
    """
    The chain queries the wallet needs
    """

    @abstractmethod
    def block_stamp(self) -> BlockStamp:
        """Current chain tip. Raises ChainUnavailable if the server cannot be reached."""
        ...

    @abstractmethod
    def send_raw_transaction(self, tx: Transaction) -> str:
        """Broadcast the transaction and return its display txid"""
        ...

    @abstractmethod
    def is_connected(self) -> bool:
        ...


class RPCChainClient(ChainClient):
    """
    bitcoind-style JSON-RPC over HTTP
    """

    def __init__(self, url: str, user: str = "", password: str = "", timeout: float = 10.0,
                 session: requests.Session = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        if user or password:
            self.session.auth = (user, password)
        self._ids = itertools.count(1)

    def call(self, method: str, *params):
        payload = {"jsonrpc": "1.0", "id": next(self._ids), "method": method, "params": list(params)}
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ChainUnavailable(f"Chain server unreachable at {self.url}: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            # bitcoind answers RPC errors with a non-200 status and a JSON body, so the status alone is not checked
            raise ChainUnavailable(f"Chain server returned HTTP {resp.status_code} without a JSON body to {method}")

        error = body.get("error")
        if error:
            raise ChainRPCError(error.get("code", -1), error.get("message", ""))
        return body.get("result")

    def block_stamp(self) -> BlockStamp:
        height = self.call("getblockcount")
        block_hash = self.call("getblockhash", height)
        return BlockStamp(height, block_hash)

    def send_raw_transaction(self, tx: Transaction) -> str:
        txid = self.call("sendrawtransaction", tx.to_hex())
        logger.debug(f"Chain server accepted tx {txid}")
        return txid

    def is_connected(self) -> bool:
        try:
            self.call("getblockcount")
        except (ChainUnavailable, ChainRPCError):
            return False
        return True
