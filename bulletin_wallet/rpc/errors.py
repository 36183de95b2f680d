"""
JSON-RPC error codes and the mapping from wallet exceptions to error objects
"""
from enum import IntEnum
from typing import Any

from bulletin_wallet.chain.client import ChainRPCError
from bulletin_wallet.core import InvalidAddress, UnknownAddress, ChainUnavailable, NoEligibleOutputForAddress, \
    InsufficientFunds, ScriptValidationFailed, Unsupported, PassphraseTooShort, InternalStoreFailure, \
    TransactionUnrecorded, BulletinError, WalletLocked, WalletExists, WalletError, SetupAlreadyComplete

__all__ = ["RPCErrorCode", "JSONRPCError", "to_rpc_error"]


class RPCErrorCode(IntEnum):
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    PARSE_ERROR = -32700

    WALLET_ERROR = -4
    INVALID_ADDRESS_OR_KEY = -5
    WALLET_INSUFFICIENT_FUNDS = -6
    INVALID_PARAMETER = -8
    CLIENT_NOT_CONNECTED = -9
    WALLET_UNLOCK_NEEDED = -13


class JSONRPCError(Exception):
    """
    An error to be returned to the RPC caller as {code, message, data}
    """

    def __init__(self, code: int, message: str, data: Any = None):
        self.code = int(code)
        self.message = message
        self.data = data
        super().__init__(f"{self.code}: {message}")

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


def to_rpc_error(exc: Exception) -> JSONRPCError:
    if isinstance(exc, JSONRPCError):
        return exc
    message = str(exc)

    match exc:
        case InsufficientFunds():
            return JSONRPCError(RPCErrorCode.WALLET_INSUFFICIENT_FUNDS, message,
                                {"have": exc.have, "needed": exc.needed, "fee": exc.fee})
        case InvalidAddress() | UnknownAddress():
            return JSONRPCError(RPCErrorCode.INVALID_ADDRESS_OR_KEY, message)
        case BulletinError() | PassphraseTooShort():
            return JSONRPCError(RPCErrorCode.INVALID_PARAMETER, message)
        case WalletLocked():
            return JSONRPCError(RPCErrorCode.WALLET_UNLOCK_NEEDED, message)
        case ChainUnavailable():
            return JSONRPCError(RPCErrorCode.CLIENT_NOT_CONNECTED, message)
        case ChainRPCError():
            return JSONRPCError(exc.code, exc.message)
        case Unsupported():
            return JSONRPCError(RPCErrorCode.METHOD_NOT_FOUND, message)
        case TransactionUnrecorded():
            return JSONRPCError(RPCErrorCode.INTERNAL_ERROR, message, {"txid": exc.txid, "broadcast": True})
        case ScriptValidationFailed():
            return JSONRPCError(RPCErrorCode.INTERNAL_ERROR, message, {"input_index": exc.input_index})
        case InternalStoreFailure():
            return JSONRPCError(RPCErrorCode.INTERNAL_ERROR, message)
        case NoEligibleOutputForAddress() | WalletExists() | SetupAlreadyComplete() | WalletError():
            return JSONRPCError(RPCErrorCode.WALLET_ERROR, message)
        case _:
            return JSONRPCError(RPCErrorCode.INTERNAL_ERROR, "Internal error")
