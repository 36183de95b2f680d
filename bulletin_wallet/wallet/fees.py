"""
Fee estimation for the transaction builder

Fees are charged per started block of SIZE_UNIT bytes: a transaction of n bytes pays (1 + n // 1000) increments.
"""
from typing import Iterable

from bulletin_wallet.core import FEES, TX
from bulletin_wallet.tx.tx import TxOutput
from bulletin_wallet.tx.utxo import Credit

__all__ = ["estimate_tx_size", "fee_for_size", "minimum_fee", "fee_converged", "priority", "allow_no_fee_tx"]


def estimate_tx_size(num_inputs: int, num_outputs: int) -> int:
    """
    Upper estimate of the signed size of a pay-to-pubkey-hash transaction
    """
    return FEES.TX_OVERHEAD_ESTIMATE + FEES.TXIN_ESTIMATE * num_inputs + FEES.TXOUT_ESTIMATE * num_outputs


def fee_for_size(increment: int, size: int) -> int:
    return (1 + size // FEES.SIZE_UNIT) * increment


def priority(credits: Iterable[Credit], height: int, size: int) -> float:
    """Sum of amount * confirmations over the spent credits, per byte"""
    return sum(c.amount * c.confirmations(height) for c in credits) / size


def allow_no_fee_tx(credits: Iterable[Credit], height: int, size: int) -> bool:
    return priority(credits, height, size) >= FEES.FREE_TX_PRIORITY


def minimum_fee(increment: int, size: int, outputs: list[TxOutput], credits: Iterable[Credit] = (), height: int = 0,
                allow_free: bool = False) -> int:
    """
    The size-based fee. A small high-priority transaction may go free when allow_free is set, but any output below
    a bitcent raises a fee below one increment back to one increment. Capped at the maximum amount.
    """
    fee = fee_for_size(increment, size)
    if allow_free and size < FEES.SIZE_UNIT and allow_no_fee_tx(credits, height, size):
        fee = 0
    if fee < increment and any(o.amount < TX.SATOSHI_PER_BITCENT for o in outputs):
        return increment
    if fee < 0 or fee > TX.MAX_SATOSHI:
        fee = TX.MAX_SATOSHI
    return fee


def fee_converged(increment: int, signed_size: int, fee_estimate: int) -> bool:
    """
    True once the fee required for the actual signed size is covered by the estimate
    """
    return fee_for_size(increment, signed_size) <= fee_estimate
