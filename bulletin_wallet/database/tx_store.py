"""
The TxStore class - the wallet's credit inventory and transaction history

State is held in memory and written to a sqlite file on flush() whenever it has been marked dirty.
"""
import sqlite3
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from bulletin_wallet.core import InternalStoreFailure, get_logger
from bulletin_wallet.tx.tx import Transaction
from bulletin_wallet.tx.utxo import Credit, UNMINED_HEIGHT

__all__ = ["TxStore", "TxRecord", "StoreFlusher"]

logger = get_logger(__name__)


class TxRecord:
    """
    A transaction inserted into the store's history
    """
    __slots__ = ("store", "tx", "txid", "block_height", "received")

    def __init__(self, store: "TxStore", tx: Transaction, block_height: int = UNMINED_HEIGHT, received: int = None):
        self.store = store
        self.tx = tx
        self.txid = tx.txid
        self.block_height = block_height
        self.received = received if received is not None else int(time.time())

    def add_debits(self) -> list[Credit]:
        """
        Mark every wallet credit spent by this transaction as spent
        """
        return self.store._add_debits(self)

    def to_dict(self):
        return {
            "txid": self.txid[::-1].hex(),
            "block_height": self.block_height,
            "received": self.received,
            "tx": self.tx.to_hex()
        }


class TxStore:
    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path is not None else None
        self._lock = threading.RLock()
        self._credits: dict[bytes, Credit] = {}
        self._spent: dict[bytes, bytes] = {}  # outpoint -> spending txid
        self._history: dict[bytes, TxRecord] = {}
        self._dirty = False

    # --- CREDITS --- #

    def add_credit(self, credit: Credit):
        with self._lock:
            self._credits[credit.outpoint] = credit
            self._dirty = True

    def get_credit(self, outpoint: bytes) -> Credit | None:
        with self._lock:
            return self._credits.get(outpoint)

    def is_spent(self, outpoint: bytes) -> bool:
        with self._lock:
            return outpoint in self._spent

    def unspent_credits(self) -> list[Credit]:
        with self._lock:
            return [c for op, c in self._credits.items() if op not in self._spent]

    def balance(self) -> int:
        return sum(c.amount for c in self.unspent_credits())

    # --- HISTORY --- #

    def insert_tx(self, tx: Transaction, block_height: int = UNMINED_HEIGHT) -> TxRecord:
        """
        Record the transaction in the history. Inserting the same transaction again returns the existing record.
        """
        with self._lock:
            txid = tx.txid
            existing = self._history.get(txid)
            if existing is not None:
                return existing
            record = TxRecord(self, tx, block_height)
            self._history[txid] = record
            self._dirty = True
            logger.debug(f"Inserted tx {record.txid[::-1].hex()} into history")
            return record

    def get_tx(self, txid: bytes) -> TxRecord | None:
        with self._lock:
            return self._history.get(txid)

    def history(self) -> list[TxRecord]:
        with self._lock:
            return sorted(self._history.values(), key=lambda r: r.received)

    def _add_debits(self, record: TxRecord) -> list[Credit]:
        with self._lock:
            if record.txid not in self._history:
                raise InternalStoreFailure(f"Transaction {record.txid[::-1].hex()} is not in the store")

            # Validate everything before changing anything
            debits = []
            for txin in record.tx.inputs:
                outpoint = txin.outpoint
                credit = self._credits.get(outpoint)
                if credit is None:
                    raise InternalStoreFailure(f"Input {outpoint.hex()} does not spend a wallet credit")
                spender = self._spent.get(outpoint)
                if spender is not None and spender != record.txid:
                    raise InternalStoreFailure(f"Credit {credit} already spent by {spender[::-1].hex()}")
                if spender is None:
                    debits.append(credit)

            for credit in debits:
                self._spent[credit.outpoint] = record.txid
            if debits:
                self._dirty = True
            return debits

    def add_wallet_credits(self, record: TxRecord, is_mine: Callable[[bytes], bool]) -> list[Credit]:
        """
        Add the outputs of the recorded transaction whose scriptpubkey the wallet controls as new credits
        """
        added = []
        with self._lock:
            for vout, txout in enumerate(record.tx.outputs):
                if not is_mine(txout.scriptpubkey):
                    continue
                credit = Credit.from_txoutput(record.txid, vout, txout, record.block_height)
                if credit.outpoint not in self._credits:
                    self._credits[credit.outpoint] = credit
                    added.append(credit)
            if added:
                self._dirty = True
        return added

    # --- PERSISTENCE --- #

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self):
        with self._lock:
            self._dirty = True

    @staticmethod
    def _initialize_database(conn: sqlite3.Connection):
        """Creates necessary tables if they do not exist."""
        c = conn.cursor()
        c.execute('''
            CREATE TABLE IF NOT EXISTS credits (
                outpoint      BLOB    NOT NULL,   -- 36 bytes
                amount        INTEGER NOT NULL,   -- satoshis
                script_pubkey BLOB    NOT NULL,   -- raw bytes
                height        INTEGER NOT NULL,
                coinbase      INTEGER NOT NULL DEFAULT 0 CHECK (coinbase IN (0,1)),
                spent_by      BLOB,               -- spending txid or NULL
                PRIMARY KEY (outpoint)
            ) WITHOUT ROWID
        ''')
        c.execute('''
            CREATE TABLE IF NOT EXISTS transactions (
                txid          BLOB    NOT NULL,   -- 32 bytes
                raw_tx        BLOB    NOT NULL,
                height        INTEGER NOT NULL,
                received      INTEGER NOT NULL,
                PRIMARY KEY (txid)
            ) WITHOUT ROWID
        ''')

    def flush(self) -> bool:
        """
        Write the store to its sqlite file if dirty. Returns True if anything was written.
        """
        with self._lock:
            if not self._dirty or self.db_path is None:
                return False
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            try:
                with conn:
                    self._initialize_database(conn)
                    conn.execute("DELETE FROM credits")
                    conn.execute("DELETE FROM transactions")
                    conn.executemany(
                        "INSERT INTO credits(outpoint, amount, script_pubkey, height, coinbase, spent_by) "
                        "VALUES (?, ?, ?, ?, ?, ?)",
                        [(op, c.amount, c.scriptpubkey, c.block_height, 1 if c.is_coinbase else 0, self._spent.get(op))
                         for op, c in self._credits.items()]
                    )
                    conn.executemany(
                        "INSERT INTO transactions(txid, raw_tx, height, received) VALUES (?, ?, ?, ?)",
                        [(r.txid, r.tx.to_bytes(), r.block_height, r.received) for r in self._history.values()]
                    )
            except sqlite3.Error as e:
                raise InternalStoreFailure(f"Failed to flush store: {e}") from e
            finally:
                conn.close()
            self._dirty = False
            logger.debug(f"Flushed {len(self._credits)} credits and {len(self._history)} txs to {self.db_path}")
            return True

    @classmethod
    def open(cls, db_path: Path) -> "TxStore":
        store = cls(db_path)
        if not store.db_path.exists():
            return store
        conn = sqlite3.connect(store.db_path)
        try:
            cls._initialize_database(conn)
            for op, amt, spk, h, cb, spent_by in conn.execute(
                    "SELECT outpoint, amount, script_pubkey, height, coinbase, spent_by FROM credits"):
                credit = Credit(op[:32], int.from_bytes(op[32:], "little"), amt, spk, h, bool(cb))
                store._credits[op] = credit
                if spent_by is not None:
                    store._spent[op] = spent_by
            for txid, raw_tx, h, received in conn.execute(
                    "SELECT txid, raw_tx, height, received FROM transactions"):
                store._history[txid] = TxRecord(store, Transaction.from_bytes(raw_tx), h, received)
        except sqlite3.Error as e:
            raise InternalStoreFailure(f"Failed to open store: {e}") from e
        finally:
            conn.close()
        return store


class StoreFlusher:
    """
    Background thread flushing a dirty store every interval seconds, with a final flush on stop()
    """

    def __init__(self, store: TxStore, interval: float = 10.0):
        self.store = store
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _run(self):
        while not self._stop.wait(self.interval):
            try:
                self.store.flush()
            except InternalStoreFailure as e:
                logger.error(f"Background flush failed: {e}")

    def start(self):
        self._thread = threading.Thread(target=self._run, name="store-flusher", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self.store.flush()
