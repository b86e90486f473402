"""
Affine points on secp256k1.

Points support addition, subtraction, negation and multiplication by an
integer scalar written as ``k * point``. Two byte encodings are provided: the
33-byte SEC 1 compressed form, used wherever a point is hashed into a
session identifier or a proof, and the 32-byte x-only form of BIP340, used for
public keys and for the R half of a signature.
"""

from __future__ import annotations
from typing import Optional
from .constants import P, Q, G_x, G_y


class Point:
    """Class representing an elliptic curve point."""

    def __init__(self, x: Optional[int] = None, y: Optional[int] = None):
        """
        Create a point from its affine coordinates.

        Parameters:
        x (Optional[int]): The x-coordinate, or None for the point at infinity.
        y (Optional[int]): The y-coordinate, or None for the point at infinity.
        """
        self.x = x
        self.y = y

    @staticmethod
    def _sqrt_y(x: int) -> int:
        """Return a square root of x^3 + 7, raising ValueError if none exists."""
        if not 0 <= x < P:
            raise ValueError("The x-coordinate is not a field element.")
        y_squared = (pow(x, 3, P) + 7) % P
        y = pow(y_squared, (P + 1) // 4, P)
        if pow(y, 2, P) != y_squared:
            raise ValueError("The x-coordinate is not on the curve.")
        return y

    @classmethod
    def sec_deserialize(cls, data: bytes) -> Point:
        """
        Parse a SEC 1 compressed point.

        Parameters:
        data (bytes): 33 bytes, a 0x02/0x03 parity prefix followed by x.

        Returns:
        Point: The decoded point.

        Raises:
        ValueError: If the length or prefix is wrong, or x is not on the curve.
        """
        if len(data) != 33:
            raise ValueError(
                "Input must be exactly 33 bytes long for SEC 1 compressed format."
            )
        if data[0] not in (2, 3):
            raise ValueError("Invalid SEC 1 prefix.")

        x = int.from_bytes(data[1:], "big")
        y = cls._sqrt_y(x)
        if y % 2 != data[0] - 2:
            y = P - y
        return cls(x, y)

    def sec_serialize(self) -> bytes:
        """
        Serialize the point to its SEC 1 compressed format.

        Raises:
        ValueError: If the point is at infinity.
        """
        if self.x is None or self.y is None:
            raise ValueError("Cannot serialize the point at infinity.")

        prefix = b"\x02" if self.y % 2 == 0 else b"\x03"
        return prefix + self.x.to_bytes(32, "big")

    @classmethod
    def lift_x(cls, data: bytes) -> Point:
        """
        Decode a BIP340 x-only public key to the point with that x-coordinate
        and an even y-coordinate.

        Parameters:
        data (bytes): 32 bytes holding the big-endian x-coordinate.

        Returns:
        Point: The even-y point.

        Raises:
        ValueError: If the length is wrong or x is not on the curve.
        """
        if len(data) != 32:
            raise ValueError("Input must be exactly 32 bytes long for x-only format.")

        x = int.from_bytes(data, "big")
        y = cls._sqrt_y(x)
        return cls(x, y if y % 2 == 0 else P - y)

    def xonly_serialize(self) -> bytes:
        """
        Serialize the x-coordinate of the point to 32 big-endian bytes.

        Raises:
        ValueError: If the point is at infinity.
        """
        if self.x is None:
            raise ValueError("The x-coordinate is not finite.")

        return self.x.to_bytes(32, "big")

    def has_even_y(self) -> bool:
        """
        Report whether the y-coordinate is even, which is the representative
        BIP340 picks for an x-only key.

        Raises:
        ValueError: If the point is at infinity.
        """
        if self.y is None:
            raise ValueError("The point at infinity has no y-coordinate.")
        return self.y % 2 == 0

    def is_zero(self) -> bool:
        """Return True for the point at infinity."""
        return self.x is None or self.y is None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __neg__(self) -> Point:
        if self.x is None or self.y is None:
            return self

        return self.__class__(self.x, P - self.y)

    def _dbl(self) -> Point:
        # A point with y = 0 has order 2, so doubling it gives infinity.
        if self.x is None or self.y is None or self.y == 0:
            return self.__class__()

        x = self.x
        y = self.y
        s = (3 * x * x * pow(2 * y, P - 2, P)) % P
        sum_x = (s * s - 2 * x) % P
        sum_y = (s * (x - sum_x) - y) % P

        return self.__class__(sum_x, sum_y)

    def __add__(self, other: Point) -> Point:
        """
        Add two points.

        Raises:
        ValueError: If other is not a Point.
        """
        if not isinstance(other, Point):
            raise ValueError("The other object must be an instance of Point")

        if self == other:
            return self._dbl()
        if self.x is None or self.y is None:
            return other
        if other.x is None or other.y is None:
            return self
        if self.x == other.x:
            return self.__class__()
        s = ((other.y - self.y) * pow(other.x - self.x, P - 2, P)) % P
        sum_x = (s * s - self.x - other.x) % P
        sum_y = (s * (self.x - sum_x) - self.y) % P

        return self.__class__(sum_x, sum_y)

    def __sub__(self, other: Point) -> Point:
        if not isinstance(other, Point):
            raise ValueError("The other object must be an instance of Point")

        return self + -other

    def __rmul__(self, scalar: int) -> Point:
        """
        Multiply the point by an integer using double-and-add. The scalar is
        reduced modulo Q first, so negative scalars negate the result.

        Raises:
        ValueError: If the scalar is not an integer.
        """
        if not isinstance(scalar, int):
            raise ValueError("The scalar must be an integer")

        scalar %= Q
        p = self
        r = self.__class__()

        while scalar:
            if scalar & 1:
                r = r + p
            p = p._dbl()
            scalar >>= 1

        return r

    def __str__(self) -> str:
        if self.is_zero():
            return "0"
        return f"X: 0x{self.x:x}\nY: 0x{self.y:x}"

    def __repr__(self) -> str:
        if self.is_zero():
            return f"{self.__class__.__name__}(x=None, y=None)"
        return f"{self.__class__.__name__}(x={self.x}, y={self.y})"


# The generator point G
G: Point = Point(G_x, G_y)
