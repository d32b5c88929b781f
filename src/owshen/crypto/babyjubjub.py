"""Baby Jubjub twisted Edwards curve over the BN254 scalar field.

    a*x^2 + y^2 = 1 + d*x^2*y^2   (a = 168700, d = 168696)

The curve is defined over the same field the withdrawal circuit works in,
so key operations can be checked inside the circuit cheaply. The addition
law is complete, which lets scalar multiplication run as a fixed-length
Montgomery ladder with no special cases for the identity.

Parameters follow EIP-2494. Keys use the prime-order subgroup generated by
``BASE_POINT`` (circomlib's Base8).
"""

from dataclasses import dataclass

from owshen.crypto.field import FIELD_MODULUS

A = 168700
D = 168696

SUBGROUP_ORDER = 2736030358979909402780800718157159386076813972158567259200215660948447373041

# Ladder length; every scalar fed to the ladder is below 2^254
SCALAR_BITS = 254


@dataclass(frozen=True)
class Point:
    """Affine point with coordinates reduced mod the field prime."""

    x: int
    y: int

    def __add__(self, other: "Point") -> "Point":
        p = FIELD_MODULUS
        x1, y1, x2, y2 = self.x, self.y, other.x, other.y
        t = D * x1 * x2 * y1 * y2 % p
        x3 = (x1 * y2 + y1 * x2) * pow(1 + t, -1, p) % p
        y3 = (y1 * y2 - A * x1 * x2) * pow(1 - t, -1, p) % p
        return Point(x3, y3)

    def __neg__(self) -> "Point":
        return Point(-self.x % FIELD_MODULUS, self.y)

    def __mul__(self, scalar: int) -> "Point":
        return scalar_mul(scalar, self)

    __rmul__ = __mul__

    def is_on_curve(self) -> bool:
        p = FIELD_MODULUS
        if not (0 <= self.x < p and 0 <= self.y < p):
            return False
        xx = self.x * self.x % p
        yy = self.y * self.y % p
        return (A * xx + yy) % p == (1 + D * xx * yy) % p

    def in_subgroup(self) -> bool:
        return scalar_mul(SUBGROUP_ORDER, self) == IDENTITY


IDENTITY = Point(0, 1)

BASE_POINT = Point(
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)


def scalar_mul(scalar: int, point: Point) -> Point:
    """
    Multiply a point by a non-negative scalar with a Montgomery ladder.

    The ladder always walks SCALAR_BITS bits and performs one addition and
    one doubling per bit, whatever the scalar's value.

    Raises:
        ValueError: If the scalar is negative or too wide for the ladder
    """
    if scalar < 0 or scalar >> SCALAR_BITS:
        raise ValueError(f"Scalar must be in [0, 2^{SCALAR_BITS})")

    r0, r1 = IDENTITY, point
    for i in reversed(range(SCALAR_BITS)):
        if (scalar >> i) & 1:
            r0, r1 = r0 + r1, r1 + r1
        else:
            r0, r1 = r0 + r0, r0 + r1
    return r0
