"""
The Bulletin class - a board message authored by a wallet address

=====================================================================
|   Field           |   Byte Size   |   Format                      |
=====================================================================
|   magic           |   4           |   b"BLTN"                     |
|   version         |   1           |   int                         |
|   board_length    |   var         |   CompactSize                 |
|   board           |   var         |   UTF-8                       |
|   message_length  |   var         |   CompactSize                 |
|   message         |   var         |   UTF-8                       |
=====================================================================
The payload is cut into 20-byte chunks (last chunk zero-padded) and each chunk is carried as the hash of a
pay-to-pubkey-hash output.
"""
from io import BytesIO

from bulletin_wallet.core import BULLETIN, NetParams, BulletinError, InvalidAddress, ReadError, ScriptEngineError, \
    read_stream, read_compact_size, write_compact_size
from bulletin_wallet.cryptography import hash160
from bulletin_wallet.script.script_types import Address, ScriptClass, classify, decode_address, p2pkh_script, \
    parse_pushes
from bulletin_wallet.tx.tx import Transaction, TxOutput

__all__ = ["Bulletin"]

CHUNK = BULLETIN.CHUNK_BYTES


class Bulletin:
    __slots__ = ("author", "board", "message", "net")

    def __init__(self, author: str, board: str, message: str, net: NetParams):
        """
        Raises InvalidAddress for a bad author and BulletinError for a bad board or message
        """
        address = decode_address(author, net)
        if address.script_class != ScriptClass.PUBKEY_HASH:
            raise InvalidAddress(f"Author {author!r} is not a pay-to-pubkey-hash address")

        if not isinstance(board, str) or not isinstance(message, str):
            raise BulletinError("Board and message must be strings")
        try:
            board_bytes = board.encode("utf-8")
            message_bytes = message.encode("utf-8")
        except UnicodeEncodeError as e:
            raise BulletinError(f"Board and message must be valid UTF-8 text: {e.reason}") from e
        if len(board_bytes) > BULLETIN.MAX_BOARD_BYTES:
            raise BulletinError(f"Board exceeds {BULLETIN.MAX_BOARD_BYTES} bytes")
        if not message_bytes:
            raise BulletinError("Message is empty")
        if len(message_bytes) > BULLETIN.MAX_MESSAGE_BYTES:
            raise BulletinError(f"Message exceeds {BULLETIN.MAX_MESSAGE_BYTES} bytes")

        self.author = address
        self.board = board
        self.message = message
        self.net = net

    def payload(self) -> bytes:
        board_bytes = self.board.encode("utf-8")
        message_bytes = self.message.encode("utf-8")
        parts = [
            BULLETIN.MAGIC,
            BULLETIN.VERSION.to_bytes(1, "little"),
            write_compact_size(len(board_bytes)),
            board_bytes,
            write_compact_size(len(message_bytes)),
            message_bytes
        ]
        return b''.join(parts)

    def chunks(self) -> list[bytes]:
        payload = self.payload()
        padded = payload + b'\x00' * (-len(payload) % CHUNK)
        return [padded[i:i + CHUNK] for i in range(0, len(padded), CHUNK)]

    def tx_outputs(self, dust_amount: int = BULLETIN.DEFAULT_DUST_AMOUNT) -> list[TxOutput]:
        return [TxOutput(dust_amount, p2pkh_script(chunk)) for chunk in self.chunks()]

    @classmethod
    def from_tx(cls, tx: Transaction, net: NetParams) -> "Bulletin":
        """
        Recover the bulletin from a signed transaction. The author is read from the pubkey in the first input.
        """
        if not tx.inputs:
            raise BulletinError("Transaction has no inputs")
        try:
            pushes = parse_pushes(tx.inputs[0].scriptsig)
        except ScriptEngineError as e:
            raise BulletinError(f"Unreadable authoring input: {e}") from e
        if len(pushes) != 2:
            raise BulletinError("Authoring input is not a pay-to-pubkey-hash spend")
        author = Address(ScriptClass.PUBKEY_HASH, hash160(pushes[1]), net)

        data = b''
        for txout in tx.outputs:
            if classify(txout.scriptpubkey) != ScriptClass.PUBKEY_HASH:
                break
            data += txout.scriptpubkey[3:23]

        stream = BytesIO(data)
        try:
            if read_stream(stream, len(BULLETIN.MAGIC), "magic") != BULLETIN.MAGIC:
                raise BulletinError("Transaction does not carry a bulletin")
            version = read_stream(stream, 1, "version")[0]
            if version != BULLETIN.VERSION:
                raise BulletinError(f"Unsupported bulletin version {version}")
            board = read_stream(stream, read_compact_size(stream, "board_length"), "board")
            message = read_stream(stream, read_compact_size(stream, "message_length"), "message")
            return cls(author.encode(), board.decode("utf-8"), message.decode("utf-8"), net)
        except (ReadError, UnicodeDecodeError) as e:
            raise BulletinError(f"Malformed bulletin payload: {e}") from e

    def to_dict(self):
        return {
            "author": self.author.encode(),
            "board": self.board,
            "message": self.message
        }

    def __eq__(self, other):
        if not isinstance(other, Bulletin):
            return False
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Bulletin({self.author}, board={self.board!r}, {len(self.message)} chars)"
