"""
Request handlers for the full wallet service

Each handler takes the HandlerContext and the request params (a list or a dict) and returns a JSON-serializable
result, raising on failure.
"""
from dataclasses import dataclass
from typing import Any, Callable

from bulletin_wallet.chain.client import ChainClient
from bulletin_wallet.core import InternalStoreFailure, TransactionUnrecorded, get_logger
from bulletin_wallet.database.tx_store import TxRecord
from bulletin_wallet.rpc.errors import JSONRPCError, RPCErrorCode
from bulletin_wallet.tx.tx import Transaction
from bulletin_wallet.wallet.builder import BulletinRequest, build_bulletin_transaction
from bulletin_wallet.wallet.wallet import Wallet

__all__ = ["HandlerContext", "HANDLERS", "send_bulletin", "compose_bulletin", "get_new_address", "get_wallet_state",
           "ping", "insert_into_store", "parse_params"]

logger = get_logger(__name__)


@dataclass
class HandlerContext:
    wallet: Wallet
    chain: ChainClient
    store_retries: int = 2


def parse_params(params, names: list[str], required: int = None) -> list:
    """
    Return the params as a list in the order of names. Accepts positional or named params.
    """
    required = len(names) if required is None else required
    if params is None:
        params = []
    if isinstance(params, dict):
        unknown = set(params) - set(names)
        if unknown:
            raise JSONRPCError(RPCErrorCode.INVALID_PARAMS, f"Unexpected params: {', '.join(sorted(unknown))}")
        values = [params.get(n) for n in names]
        missing = [n for n in names[:required] if params.get(n) is None]
    elif isinstance(params, list):
        if len(params) > len(names):
            raise JSONRPCError(RPCErrorCode.INVALID_PARAMS, f"Expected at most {len(names)} params")
        values = list(params) + [None] * (len(names) - len(params))
        missing = names[len(params):required]
    else:
        raise JSONRPCError(RPCErrorCode.INVALID_PARAMS, "Params must be a list or an object")

    if missing:
        raise JSONRPCError(RPCErrorCode.INVALID_PARAMS, f"Missing params: {', '.join(missing)}")
    return values


def _bulletin_request(params) -> BulletinRequest:
    address, board, message = parse_params(params, ["address", "board", "message"])
    for name, value in (("address", address), ("board", board), ("message", message)):
        if not isinstance(value, str):
            raise JSONRPCError(RPCErrorCode.INVALID_PARAMETER, f"{name} must be a string")
    return BulletinRequest(address, board, message)


# --- STORE --- #

def insert_into_store(wallet: Wallet, tx: Transaction, retries: int = 2) -> TxRecord:
    """
    Record a broadcast transaction: history, debits against spent credits, change credits and the dirty mark.
    Retries on store failure, then raises TransactionUnrecorded.
    """
    store = wallet.store
    last_error = None
    for attempt in range(1, retries + 2):
        try:
            record = store.insert_tx(tx)
            record.add_debits()
            store.add_wallet_credits(record, wallet.is_mine)
            store.mark_dirty()
            return record
        except InternalStoreFailure as e:
            logger.error(f"Error adding sent tx history (attempt {attempt}): {e}")
            last_error = e
    raise TransactionUnrecorded(tx.txid_hex, str(last_error)) from last_error


# --- HANDLERS --- #

def send_bulletin(ctx: HandlerContext, params) -> str:
    """
    Build, sign and broadcast a bulletin. Returns the txid.
    """
    request = _bulletin_request(params)
    wallet = ctx.wallet
    with wallet.reservation() as reservation:
        candidate = build_bulletin_transaction(wallet, ctx.chain, request, reservation)
        txid = ctx.chain.send_raw_transaction(candidate.tx)
        logger.info(f"Successfully sent bulletin {txid}")
        insert_into_store(wallet, candidate.tx, ctx.store_retries)
    return txid


def compose_bulletin(ctx: HandlerContext, params) -> str:
    """
    Build and sign a bulletin without broadcasting. Returns the raw transaction hex.
    """
    request = _bulletin_request(params)
    candidate = build_bulletin_transaction(ctx.wallet, ctx.chain, request)
    return candidate.tx.to_hex()


def get_new_address(ctx: HandlerContext, params) -> str:
    parse_params(params, [])
    with ctx.wallet.hold_unlock():
        return ctx.wallet.manager.next_address().encode()


def get_wallet_state(ctx: HandlerContext, params) -> dict:
    parse_params(params, [])
    return {
        "haswallet": True,
        "chainserver": ctx.chain.is_connected(),
        "locked": ctx.wallet.manager.is_locked
    }


def ping(ctx: Any, params) -> None:
    parse_params(params, [])
    return None


HANDLERS: dict[str, Callable[[HandlerContext, Any], Any]] = {
    "sendbulletin": send_bulletin,
    "composebulletin": compose_bulletin,
    "getnewaddress": get_new_address,
    "getwalletstate": get_wallet_state,
    "ping": ping,
}
