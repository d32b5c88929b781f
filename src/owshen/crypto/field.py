"""Field element type for the BN254 scalar field.

Every hash input and output, leaf value, key scalar and nullifier lives in
this field, the native field of the withdrawal circuit.
"""

import string
from typing import Union

from py_ecc import bn128
from py_ecc.fields import bn128_FQ

FIELD_MODULUS = bn128.curve_order


class FieldElement(bn128_FQ):
    """Integer modulo the BN254 scalar field prime.

    Construction always reduces, so the stored ``n`` is the canonical
    representative in ``[0, FIELD_MODULUS)``.
    """

    field_modulus = FIELD_MODULUS

    def __hash__(self) -> int:
        return hash((FIELD_MODULUS, self.n))

    def __int__(self) -> int:
        return self.n

    @classmethod
    def from_hex(cls, hex_str: str) -> "FieldElement":
        """Parse a 0x-prefixed (or bare) big-endian hex string.

        Raises:
            ValueError: If the string is not hex or is not a reduced value
        """
        if not isinstance(hex_str, str):
            raise ValueError(f"Expected str, got {type(hex_str).__name__}")
        digits = hex_str[2:] if hex_str.startswith("0x") else hex_str
        if not digits or any(c not in string.hexdigits for c in digits):
            raise ValueError(f"Not a hex string: {hex_str!r}")
        value = int(digits, 16)
        if value >= FIELD_MODULUS:
            raise ValueError("Value is not a canonical field element")
        return cls(value)

    def hex(self) -> str:
        """Return the 32-byte big-endian hex encoding with 0x prefix."""
        return "0x" + self.n.to_bytes(32, byteorder="big").hex()

    def to_bytes(self) -> bytes:
        return self.n.to_bytes(32, byteorder="big")


FieldLike = Union[int, FieldElement]


def to_field(value: FieldLike) -> FieldElement:
    """Coerce an int or field element into a FieldElement."""
    if isinstance(value, FieldElement):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected int or FieldElement, got {type(value).__name__}")
    return FieldElement(value)
