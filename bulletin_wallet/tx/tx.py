"""
The classes for wire-format transactions
"""
from bulletin_wallet.core import Serializable, SERIALIZED, get_stream, read_little_int, read_stream, \
    read_compact_size, write_compact_size, TX, ReadError
from bulletin_wallet.cryptography import hash256

__all__ = ["TxInput", "TxOutput", "Transaction"]


class TxInput(Serializable):
    """
    =============================================================================
    |   name            |   data type   |   format              |   byte size   |
    =============================================================================
    |   txid            |   bytes       |   natural byte order  |   32          |
    |   vout            |   int         |   little-endian       |   4           |
    |   scriptsig_size  |               |   compactSize         |   var         |
    |   scriptsig       |   bytes       |   script bytes        |   var         |
    |   sequence        |   int         |   little-endian       |   4           |
    =============================================================================
    """
    __slots__ = ("txid", "vout", "scriptsig", "sequence")

    def __init__(self, txid: bytes, vout: int, scriptsig: bytes = b'', sequence: int = TX.MAX_SEQUENCE):
        self.txid = txid
        self.vout = vout
        self.scriptsig = scriptsig
        self.sequence = sequence

    @property
    def outpoint(self) -> bytes:
        return self.txid + self.vout.to_bytes(TX.VOUT, "little")

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        stream = get_stream(byte_stream)

        txid = read_stream(stream, TX.TXID, "txid")
        vout = read_little_int(stream, TX.VOUT, "vout")
        scriptsig_size = read_compact_size(stream, "scriptsig_size")
        scriptsig = read_stream(stream, scriptsig_size, "scriptsig")
        sequence = read_little_int(stream, TX.SEQUENCE, "sequence")

        return cls(txid, vout, scriptsig, sequence)

    def to_bytes(self) -> bytes:
        """
        txid || vout || scriptsig_size || scriptsig || sequence
        """
        parts = [
            self.txid,
            self.vout.to_bytes(TX.VOUT, "little"),
            write_compact_size(len(self.scriptsig)),
            self.scriptsig,
            self.sequence.to_bytes(TX.SEQUENCE, "little")
        ]
        return b''.join(parts)

    def to_dict(self) -> dict:
        return {
            "txid": self.txid[::-1].hex(),
            "vout": self.vout,
            "scriptsig": self.scriptsig.hex(),
            "sequence": self.sequence
        }


class TxOutput(Serializable):
    """
    -----------------------------------------------------------------
    |   Field               |   Byte Size   |   Format              |
    -----------------------------------------------------------------
    |   Amount              |   8           |   little-endian       |
    |   scriptpubkey_size   |   var         |   CompactSize         |
    |   scriptpubkey        |   var         |   Script              |
    -----------------------------------------------------------------
    """
    __slots__ = ("amount", "scriptpubkey")

    def __init__(self, amount: int, scriptpubkey: bytes):
        self.amount = amount
        self.scriptpubkey = scriptpubkey

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        stream = get_stream(byte_stream)

        amount = read_little_int(stream, TX.AMOUNT, "amount")
        scriptpubkey_size = read_compact_size(stream, "scriptpubkey_size")
        scriptpubkey = read_stream(stream, scriptpubkey_size, "scriptpubkey")

        return cls(amount, scriptpubkey)

    def to_bytes(self) -> bytes:
        """
        amount || scriptpubkey_size || scriptpubkey
        """
        return self.amount.to_bytes(TX.AMOUNT, "little") + write_compact_size(len(self.scriptpubkey)) + \
            self.scriptpubkey

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "scriptpubkey": self.scriptpubkey.hex()
        }


class Transaction(Serializable):
    """
    -------------------------------------------------------------
    |   Field           |   Byte Size   |   Format              |
    -------------------------------------------------------------
    |   Version         |   4           |   little-endian       |
    |   input_count     |   var         |   CompactSize         |
    |   inputs          |   var         |   TxInput             |
    |   output_count    |   var         |   CompactSize         |
    |   outputs         |   var         |   TxOutput            |
    |   locktime        |   4           |   little-endian       |
    -------------------------------------------------------------
    Legacy serialization only. Inputs and outputs are mutable while a transaction is being built, so nothing
    derived from the serialization is cached.
    """
    __slots__ = ("version", "inputs", "outputs", "locktime")

    def __init__(self, inputs: list[TxInput] = None, outputs: list[TxOutput] = None, locktime: int = 0,
                 version: int = TX.DEFAULT_VERSION):
        self.inputs = inputs or []
        self.outputs = outputs or []
        self.locktime = locktime
        self.version = version

    def add_input(self, txin: TxInput):
        self.inputs.append(txin)

    def add_output(self, txout: TxOutput):
        self.outputs.append(txout)

    def clone(self) -> "Transaction":
        return Transaction.from_bytes(self.to_bytes())

    @property
    def txid(self) -> bytes:
        """hash256 of the serialization, in natural byte order"""
        return hash256(self.to_bytes())

    @property
    def txid_hex(self) -> str:
        """Display txid: byte-reversed hex"""
        return self.txid[::-1].hex()

    @property
    def total_out(self) -> int:
        return sum(o.amount for o in self.outputs)

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        stream = get_stream(byte_stream)

        version = read_little_int(stream, TX.VERSION, "version")

        num_inputs = read_compact_size(stream, "input_count")
        inputs = [TxInput.from_bytes(stream) for _ in range(num_inputs)]

        num_outputs = read_compact_size(stream, "output_count")
        outputs = [TxOutput.from_bytes(stream) for _ in range(num_outputs)]

        locktime = read_little_int(stream, TX.LOCKTIME, "locktime")

        if isinstance(byte_stream, bytes) and stream.read(1):
            raise ReadError("Trailing data after transaction")

        return cls(inputs, outputs, locktime, version)

    def to_bytes(self) -> bytes:
        parts = [
            self.version.to_bytes(TX.VERSION, "little"),
            write_compact_size(len(self.inputs)),
            b''.join(i.to_bytes() for i in self.inputs),
            write_compact_size(len(self.outputs)),
            b''.join(o.to_bytes() for o in self.outputs),
            self.locktime.to_bytes(TX.LOCKTIME, "little")
        ]
        return b''.join(parts)

    def to_dict(self) -> dict:
        return {
            "txid": self.txid_hex,
            "bytes": self.length,
            "version": self.version,
            "inputs": [i.to_dict() for i in self.inputs],
            "outputs": [o.to_dict() for o in self.outputs],
            "locktime": self.locktime
        }
