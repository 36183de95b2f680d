"""
The BulletinTxBuilder class - funds, signs and validates bulletin transactions

Natural call sequence:
builder = BulletinTxBuilder(wallet, chain)
candidate = builder.build(BulletinRequest(address, board, message))
raw_tx = candidate.tx.to_hex()

The authoring credit is always input 0. Remaining inputs are taken largest first until the burn and the fee are
covered, then the fee estimate is raised one increment at a time until it covers the signed size.
"""
from dataclasses import dataclass
from typing import Optional

from bulletin_wallet.bulletin.bulletin import Bulletin
from bulletin_wallet.chain.client import ChainClient, ChainRPCError
from bulletin_wallet.core import FEES, ChainUnavailable, InsufficientFunds, get_logger
from bulletin_wallet.script.script_types import Address, decode_address, pay_to_addr_script
from bulletin_wallet.tx.tx import Transaction, TxInput, TxOutput
from bulletin_wallet.tx.utxo import Credit
from bulletin_wallet.wallet.fees import estimate_tx_size, minimum_fee, fee_converged
from bulletin_wallet.wallet.selector import find_addr_credit, by_amount_desc
from bulletin_wallet.wallet.signer import sign_tx, validate_tx
from bulletin_wallet.wallet.wallet import Wallet, Reservation

__all__ = ["BulletinRequest", "CandidateTransaction", "BulletinTxBuilder", "build_bulletin_transaction"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class BulletinRequest:
    address: str
    board: str
    message: str


class CandidateTransaction:
    """
    A signed and validated bulletin transaction along with the credits it spends
    """
    __slots__ = ("tx", "credits", "burn", "fee_estimate", "change_index")

    def __init__(self, tx: Transaction, credits: list[Credit], burn: int, fee_estimate: int,
                 change_index: Optional[int]):
        self.tx = tx
        self.credits = credits
        self.burn = burn
        self.fee_estimate = fee_estimate
        self.change_index = change_index

    @property
    def total_in(self) -> int:
        return sum(c.amount for c in self.credits)

    @property
    def fee(self) -> int:
        return self.total_in - self.tx.total_out

    @property
    def change(self) -> int:
        return self.tx.outputs[self.change_index].amount if self.change_index is not None else 0

    def to_dict(self):
        return {
            "txid": self.tx.txid_hex,
            "burn": self.burn,
            "fee": self.fee,
            "change": self.change,
            "inputs": [c.to_dict() for c in self.credits]
        }


class BulletinTxBuilder:
    """
    Builds one bulletin transaction per call to build(). Not shared across threads.
    """

    def __init__(self, wallet: Wallet, chain: ChainClient):
        self.wallet = wallet
        self.chain = chain

        # Per-build state
        self._tx: Optional[Transaction] = None
        self._inputs: list[Credit] = []
        self._pool: tuple[Credit, ...] = ()
        self._pool_idx = 0
        self._total_in = 0
        self._reservation: Optional[Reservation] = None
        self._height = 0

    def build(self, request: BulletinRequest, reservation: Reservation = None) -> CandidateTransaction:
        """
        Build, sign and validate the bulletin transaction for the request.

        Credits taken as inputs are added to the reservation. When no reservation is given they are only reserved
        until this call returns.
        """
        if reservation is None:
            with self.wallet.reservation() as reservation:
                return self.build(request, reservation)

        with self.wallet.hold_unlock():
            logger.debug("Grabbed wallet unlock")
            self._reset(reservation)
            try:
                return self._build(request)
            finally:
                self._reset(None)

    # --- INTERNAL --- #

    def _reset(self, reservation: Optional[Reservation]):
        self._tx = Transaction()
        self._inputs = []
        self._pool = ()
        self._pool_idx = 0
        self._total_in = 0
        self._reservation = reservation
        self._height = 0

    def _add_input(self, credit: Credit):
        self._reservation.add(credit)
        self._inputs.append(credit)
        self._tx.add_input(TxInput(credit.txid, credit.vout))
        self._total_in += credit.amount

    def _take_next(self, burn: int, fee_estimate: int):
        """
        Add the next credit from the pool. Raises InsufficientFunds when the pool is exhausted.
        """
        if self._pool_idx >= len(self._pool):
            raise InsufficientFunds(self._total_in, burn, fee_estimate)
        credit = self._pool[self._pool_idx]
        self._pool_idx += 1
        self._add_input(credit)

    def _minimum_fee(self, size_estimate: int) -> int:
        wallet = self.wallet
        return minimum_fee(wallet.fee_increment, size_estimate, self._tx.outputs, self._inputs, self._height,
                           wallet.allow_free)

    def _cover_fee(self, burn: int, fee_estimate: int, size_estimate: int) -> tuple[int, int]:
        """
        Add inputs until burn + fee_estimate is covered, raising the estimate for each added input.
        Returns (fee_estimate, size_estimate).
        """
        while self._total_in < burn + fee_estimate:
            self._take_next(burn, fee_estimate)
            size_estimate += FEES.TXIN_ESTIMATE
            fee_estimate = max(fee_estimate, self._minimum_fee(size_estimate))
        return fee_estimate, size_estimate

    def _block_height(self) -> int:
        try:
            return self.chain.block_stamp().height
        except ChainRPCError as e:
            raise ChainUnavailable(f"Chain server could not report the chain tip: {e}") from e

    def _build(self, request: BulletinRequest) -> CandidateTransaction:
        wallet = self.wallet
        net = wallet.net
        increment = wallet.fee_increment

        address: Address = decode_address(request.address, net)
        # Raises UnknownAddress if the address is not in the wallet
        wallet.manager.address(address)

        height = self._height = self._block_height()
        eligible = wallet.find_eligible_outputs(wallet.min_conf, height)
        logger.debug(f"Found {len(eligible)} eligible outputs at height {height}")

        # Bulletin outputs
        bulletin = Bulletin(request.address, request.board, request.message, net)
        for txout in bulletin.tx_outputs(wallet.dust_amount):
            self._tx.add_output(txout)
        burn = self._tx.total_out

        # Authoring input
        i = find_addr_credit(eligible, address, net)
        self._add_input(eligible[i])
        self._pool = by_amount_desc(eligible[:i] + eligible[i + 1:])

        while self._total_in < burn:
            self._take_next(burn, 0)

        size_estimate = estimate_tx_size(len(self._inputs), len(self._tx.outputs))
        fee_estimate = self._minimum_fee(size_estimate)
        fee_estimate, size_estimate = self._cover_fee(burn, fee_estimate, size_estimate)
        logger.debug(f"Initial fee estimate {fee_estimate} for estimated size {size_estimate}")

        change_script = pay_to_addr_script(address)
        while True:
            change = self._total_in - burn - fee_estimate
            change_index = None
            if change > 0:
                self._tx.add_output(TxOutput(change, change_script))
                change_index = len(self._tx.outputs) - 1

            logger.debug(f"Signing {len(self._inputs)} inputs with fee estimate {fee_estimate}")
            sign_tx(self._tx, self._inputs, wallet.manager)

            if fee_converged(increment, self._tx.length, fee_estimate):
                break

            if change_index is not None:
                self._tx.outputs = self._tx.outputs[:change_index] + self._tx.outputs[change_index + 1:]
            fee_estimate += increment
            fee_estimate, size_estimate = self._cover_fee(burn, fee_estimate, size_estimate)

        validate_tx(self._tx, self._inputs)
        logger.debug(f"Built bulletin tx {self._tx.txid_hex}: burn {burn}, fee {fee_estimate}, change {max(change, 0)}")
        return CandidateTransaction(self._tx, list(self._inputs), burn, fee_estimate, change_index)


def build_bulletin_transaction(wallet: Wallet, chain: ChainClient, request: BulletinRequest,
                               reservation: Reservation = None) -> CandidateTransaction:
    return BulletinTxBuilder(wallet, chain).build(request, reservation)
