"""Encoding and decoding utilities."""

import string

from owshen.crypto.field import FIELD_MODULUS
from owshen.exceptions import DecodeError


def int_to_hex32(value: int) -> str:
    """
    Convert a field integer to a fixed-width 64-character hex string.

    Args:
        value: Integer in [0, 2^256)

    Returns:
        str: Big-endian hex without prefix
    """
    return value.to_bytes(32, byteorder="big").hex()


def hex32_to_int(hex_str: str) -> int:
    """
    Convert a 64-character hex string to a canonical field integer.

    Args:
        hex_str: Big-endian hex without prefix

    Returns:
        int: Decoded value

    Raises:
        DecodeError: If the string is not 64 hex digits or not reduced
    """
    if len(hex_str) != 64 or any(c not in string.hexdigits for c in hex_str):
        raise DecodeError("Field element must be 64 hex characters")
    value = int(hex_str, 16)
    if value >= FIELD_MODULUS:
        raise DecodeError("Field element is not reduced")
    return value
