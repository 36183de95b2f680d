"""
The secp256k1 elliptic curve in affine coordinates
"""
import json
from dataclasses import dataclass
from typing import Optional, Tuple

__all__ = ["EllipticCurve", "Point", "SECP256K1"]


@dataclass(frozen=True)
class Point:
    """Immutable point representation. (None, None) is the point at infinity"""
    x: Optional[int] = None
    y: Optional[int] = None

    def __post_init__(self):
        if (self.x is None) != (self.y is None):
            raise ValueError("Point at infinity must have both coordinates as None")

    def __bool__(self) -> bool:
        """Point at infinity is falsy"""
        return self.x is not None and self.y is not None

    def __iter__(self):
        """Allow tuple unpacking: x, y = point"""
        return iter((self.x, self.y))


class EllipticCurve:

    def __init__(self, a: int, b: int, p: int, order: int, generator: Tuple[int, int] | Point,
                 curve: Optional[str] = None):
        """
        We instantiate an elliptic curve E of the form

            y^2 = x^3 + ax + b (mod p).

        The order variable refers to the order of the group of rational points, generated by the given generator.
        """
        disc = (4 * pow(a, 3) + 27 * pow(b, 2)) % p
        if disc == 0:
            raise ValueError("Cannot use Singular curve in ECC")

        self.a = a
        self.b = b
        self.p = p
        self.order = order
        self.generator = Point(*generator) if isinstance(generator, tuple) else generator
        self.curve = curve

        # G, 2G, 4G, ... for generator multiplication
        self._generator_doubles = self._precompute_generator_doubles()

    def __repr__(self):
        hex_dict = {
            'a': hex(self.a),
            'b': hex(self.b),
            'p': hex(self.p),
            'order': hex(self.order),
            'generator': (hex(self.generator.x), hex(self.generator.y)),
        }
        if self.curve:
            hex_dict.update({'curve': self.curve})
        return json.dumps(hex_dict)

    def _precompute_generator_doubles(self) -> list[Point]:
        doubles = []
        current = self.generator
        for _ in range(self.order.bit_length()):
            doubles.append(current)
            current = self._double_point(current)
        return doubles

    def x_terms(self, x: int) -> int:
        """Compute x^3 + ax + b mod p"""
        return (pow(x, 3, self.p) + self.a * x + self.b) % self.p

    def is_point_on_curve(self, point: Point) -> bool:
        if not point:
            return True
        return (point.y * point.y - self.x_terms(point.x)) % self.p == 0

    def find_y_from_x(self, x: int, even: bool = True) -> int:
        """
        Return the y coordinate for x with the requested parity. Requires p = 3 (mod 4).
        """
        rhs = self.x_terms(x)
        y = pow(rhs, (self.p + 1) >> 2, self.p)
        if (y * y) % self.p != rhs:
            raise ValueError(f"Given x coordinate {x} is not on the curve.")
        if (y % 2 == 0) != even:
            y = self.p - y
        return y

    # --- Group operations --- #

    def _double_point(self, point: Point) -> Point:
        if not point or point.y == 0:
            return Point()

        x, y = point
        m = ((3 * x * x + self.a) * pow(2 * y, -1, self.p)) % self.p
        x3 = (m * m - 2 * x) % self.p
        y3 = (m * (x - x3) - y) % self.p
        return Point(x3, y3)

    def add_points(self, point1: Point, point2: Point) -> Point:
        if not point1:
            return point2
        if not point2:
            return point1

        x1, y1 = point1
        x2, y2 = point2

        if x1 == x2:
            if y1 == y2:
                return self._double_point(point1)
            return Point()  # Points are inverses

        m = ((y2 - y1) * pow(x2 - x1, -1, self.p)) % self.p
        x3 = (m * m - x1 - x2) % self.p
        y3 = (m * (x1 - x3) - y1) % self.p
        return Point(x3, y3)

    def scalar_multiplication(self, n: int, point: Point) -> Point:
        """
        Double-and-add, reading n from the least significant bit
        """
        n = n % self.order
        if not point or n == 0:
            return Point()
        if point == self.generator:
            return self.multiply_generator(n)

        result = Point()
        addend = point
        while n > 0:
            if n & 1:
                result = self.add_points(result, addend)
            addend = self._double_point(addend)
            n >>= 1
        return result

    def multiply_generator(self, n: int) -> Point:
        n = n % self.order
        result = Point()
        for i, double in enumerate(self._generator_doubles):
            if n >> i == 0:
                break
            if (n >> i) & 1:
                result = self.add_points(result, double)
        return result


SECP256K1 = EllipticCurve(
    a=0,
    b=7,
    p=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F,
    order=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141,
    generator=(0x79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798,
               0x483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8),
    curve="secp256k1"
)
