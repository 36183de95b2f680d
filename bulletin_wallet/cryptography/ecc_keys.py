"""
The PubKey and PrivKey classes - secp256k1 keypairs along with methods for serialization
"""
from bulletin_wallet.core import ECC, ECCError, SERIALIZED, get_stream, read_stream, read_big_int
from bulletin_wallet.cryptography.ecc import SECP256K1, Point
from bulletin_wallet.cryptography.ecdsa import ecdsa, verify_ecdsa
from bulletin_wallet.cryptography.hash_functions import hash160

__all__ = ["PubKey", "PrivKey"]
BYTE_LEN = ECC.COORD_BYTES


class PubKey:
    __slots__ = ("point",)

    def __init__(self, point: Point):
        if not point or not SECP256K1.is_point_on_curve(point):
            raise ECCError("Public key point is not on the curve")
        self.point = point

    def __eq__(self, other):
        if not isinstance(other, PubKey):
            return False
        return self.point == other.point

    def __hash__(self):
        return hash((self.point.x, self.point.y))

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        stream = get_stream(byte_stream)

        type_byte = read_stream(stream, 1, "pubkey type")
        x_int = read_big_int(stream, BYTE_LEN, "pubkey_x")

        if type_byte == b'\x02':
            y_int = SECP256K1.find_y_from_x(x_int, even=True)
        elif type_byte == b'\x03':
            y_int = SECP256K1.find_y_from_x(x_int, even=False)
        elif type_byte == b'\x04':
            y_int = read_big_int(stream, BYTE_LEN, "pubkey_y")
        else:
            raise ECCError("Unidentified type byte for Public Key")

        return cls(Point(x_int, y_int))

    def _x_bytes(self):
        return self.point.x.to_bytes(length=BYTE_LEN, byteorder='big')

    def _y_bytes(self):
        return self.point.y.to_bytes(length=BYTE_LEN, byteorder='big')

    def serial_pubkey(self) -> bytes:
        """Return the serialized 65-byte pubkey"""
        return b''.join([b'\x04', self._x_bytes(), self._y_bytes()])

    def compressed(self) -> bytes:
        """Returns the serialized compressed pubkey"""
        init_byte = b'\x02' if self.point.y % 2 == 0 else b'\x03'
        return init_byte + self._x_bytes()

    def pubkey_hash(self) -> bytes:
        return hash160(self.compressed())

    def verify(self, signature: tuple, message: bytes) -> bool:
        return verify_ecdsa(signature, message, self.point)


class PrivKey:
    __slots__ = ("secret", "pubkey")

    def __init__(self, secret: int | bytes):
        secret = secret if isinstance(secret, int) else int.from_bytes(secret, "big")
        if not (1 <= secret < SECP256K1.order):
            raise ECCError("Private key out of bounds for secp256k1")
        self.secret = secret
        self.pubkey = PubKey(SECP256K1.multiply_generator(secret))

    def to_bytes(self) -> bytes:
        return self.secret.to_bytes(ECC.PRIVKEY_BYTES, "big")

    def sign(self, message: bytes) -> tuple[int, int]:
        return ecdsa(self.secret, message)
