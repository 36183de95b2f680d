"""
Spendable output selection
"""
from typing import Iterable

from bulletin_wallet.core import NetParams, NoEligibleOutputForAddress
from bulletin_wallet.script.script_types import Address, ScriptClass
from bulletin_wallet.tx.utxo import Credit

__all__ = ["eligible_outputs", "find_addr_credit", "by_amount_desc"]


def eligible_outputs(credits: Iterable[Credit], min_conf: int, height: int,
                     reserved: frozenset[bytes] = frozenset()) -> tuple[Credit, ...]:
    """
    Credits with at least min_conf confirmations at the given height, skipping reserved outpoints and immature
    coinbase outputs
    """
    return tuple(
        c for c in credits
        if c.outpoint not in reserved and c.confirmations(height) >= min_conf and c.is_mature(height)
    )


def find_addr_credit(credits: tuple[Credit, ...], target: Address, net: NetParams) -> int:
    """
    Index of the pay-to-pubkey-hash credit paying the target address. When several match, the last one is used.
    """
    idx = -1
    for i, credit in enumerate(credits):
        script_class, addrs = credit.addresses(net)
        # Ignore all non P2PKH outputs
        if script_class != ScriptClass.PUBKEY_HASH:
            continue
        if addrs[0] == target:
            idx = i

    if idx == -1:
        raise NoEligibleOutputForAddress(f"No eligible outputs for address {target}")
    return idx


def by_amount_desc(credits: Iterable[Credit]) -> tuple[Credit, ...]:
    return tuple(sorted(credits, key=lambda c: c.amount, reverse=True))
