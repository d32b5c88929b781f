"""Keypairs, stealth addresses and nullifiers.

A deposit is never sent to a recipient's long-term public key ``P``.
Instead the sender picks a fresh scalar ``r`` and publishes::

    R  = r*B                                (ephemeral key)
    P' = P + H(r*P)*B                        (stealth address)

The recipient, holding ``sk`` with ``P = sk*B``, computes the same shared
point as ``sk*R`` and the matching one-time private key
``sk' = sk + H(sk*R)``. Nobody else can link ``P'`` back to ``P``.

Keys are shown to users and accepted from requests as ``"OoOo"`` followed
by the hex x and y coordinates (32 bytes each, big-endian).
"""

from typing import Tuple

from Crypto.Random import random as strong_random

from owshen.crypto.babyjubjub import BASE_POINT, SUBGROUP_ORDER, Point, scalar_mul
from owshen.crypto.field import FieldElement
from owshen.utils.encoding import hex32_to_int, int_to_hex32
from owshen.utils.hash import DEFAULT_TREE_DEPTH, compute_nullifier, hash_pair
from owshen.models.schemas import InfoResponse, StealthRequest, StealthResponse
from owshen.exceptions import DecodeError

ADDRESS_PREFIX = "OoOo"


def _random_scalar(rng) -> int:
    rng = rng if rng is not None else strong_random
    return rng.randrange(1, SUBGROUP_ORDER)


def _shared_scalar(shared: Point) -> int:
    return hash_pair(shared.x, shared.y).n % SUBGROUP_ORDER


def _encode_point(point: Point) -> str:
    return ADDRESS_PREFIX + int_to_hex32(point.x) + int_to_hex32(point.y)


def _decode_point(text: str) -> Point:
    if not isinstance(text, str):
        raise DecodeError(f"Expected str, got {type(text).__name__}")
    if not text.startswith(ADDRESS_PREFIX):
        raise DecodeError(f"Address must start with {ADDRESS_PREFIX!r}")
    body = text[len(ADDRESS_PREFIX):]
    if len(body) != 128:
        raise DecodeError("Address must carry 128 hex characters")

    point = Point(hex32_to_int(body[:64]), hex32_to_int(body[64:]))
    if not point.is_on_curve():
        raise DecodeError("Point is not on the curve")
    if not point.in_subgroup():
        raise DecodeError("Point is not in the prime-order subgroup")
    return point


class _PointKey:
    """Shared behaviour of keys that wrap a curve point."""

    __slots__ = ("point",)

    def __init__(self, point: Point):
        self.point = point

    @classmethod
    def parse(cls, text: str):
        """
        Decode the canonical text form.

        Raises:
            DecodeError: If the text is malformed or not a valid subgroup point
        """
        return cls(_decode_point(text))

    def __str__(self) -> str:
        return _encode_point(self.point)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)[:20]}...)"

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.point == other.point

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.point))


class EphemeralKey(_PointKey):
    """Ephemeral point R published alongside a deposit."""


class PublicKey(_PointKey):
    """Long-term or stealth public key."""

    @classmethod
    def from_private(cls, private_key: "PrivateKey") -> "PublicKey":
        return cls(scalar_mul(private_key.secret.n, BASE_POINT))

    def derive(self, rng=None) -> Tuple[EphemeralKey, "PublicKey"]:
        """
        Derive a fresh one-time stealth address for this key.

        Args:
            rng: Object with ``randrange``; defaults to a CSPRNG

        Returns:
            Tuple of the ephemeral key to publish and the stealth public key
        """
        r = _random_scalar(rng)
        ephemeral = scalar_mul(r, BASE_POINT)
        shared = scalar_mul(r, self.point)
        stealth = self.point + scalar_mul(_shared_scalar(shared), BASE_POINT)
        return EphemeralKey(ephemeral), PublicKey(stealth)


class PrivateKey:
    """Secret scalar in [1, l) of the Baby Jubjub subgroup."""

    __slots__ = ("secret",)

    def __init__(self, secret):
        secret = int(secret)
        if not 0 < secret < SUBGROUP_ORDER:
            raise ValueError("Private key must be in [1, subgroup order)")
        self.secret = FieldElement(secret)

    @classmethod
    def generate(cls, rng=None) -> "PrivateKey":
        """Sample a uniformly random private key."""
        return cls(_random_scalar(rng))

    @classmethod
    def from_hex(cls, hex_str: str) -> "PrivateKey":
        """
        Load a private key stored as 0x-hex.

        Raises:
            DecodeError: If the text is not a valid key
        """
        try:
            return cls(FieldElement.from_hex(hex_str).n)
        except ValueError as e:
            raise DecodeError(f"Invalid private key: {e}") from e

    def hex(self) -> str:
        return self.secret.hex()

    @property
    def public_key(self) -> PublicKey:
        return PublicKey.from_private(self)

    def derive(self, ephemeral: EphemeralKey) -> "PrivateKey":
        """
        Recover the one-time private key for a deposit.

        Args:
            ephemeral: Ephemeral key published with the deposit

        Returns:
            PrivateKey: Key whose public key is the deposit's stealth address
        """
        shared = scalar_mul(self.secret.n, ephemeral.point)
        secret = (self.secret.n + _shared_scalar(shared)) % SUBGROUP_ORDER
        return PrivateKey(secret)

    def owns(self, ephemeral: EphemeralKey, address: PublicKey) -> bool:
        """Check whether a deposit's stealth address belongs to this key."""
        return self.derive(ephemeral).public_key == address

    def nullifier(self, index: int, depth: int = DEFAULT_TREE_DEPTH) -> FieldElement:
        """
        Nullifier for the note at leaf ``index``.

        Raises:
            InvalidIndexError: If index is outside [0, 2^depth)
        """
        return compute_nullifier(self.secret, index, depth)

    def __eq__(self, other) -> bool:
        return isinstance(other, PrivateKey) and self.secret == other.secret

    def __hash__(self) -> int:
        return hash(("PrivateKey", self.secret.n))

    def __repr__(self) -> str:
        return "PrivateKey(<hidden>)"


def stealth_address(address: str, rng=None) -> Tuple[EphemeralKey, PublicKey]:
    """
    Parse a textual address and derive a stealth address from it.

    Raises:
        DecodeError: If ``address`` is malformed
    """
    return PublicKey.parse(address).derive(rng)


def stealth_response(request: StealthRequest, rng=None) -> StealthResponse:
    """
    Answer a stealth address request with canonical text keys.

    Raises:
        DecodeError: If the requested address is malformed
    """
    ephemeral, address = stealth_address(request.address, rng)
    return StealthResponse(address=str(address), ephemeral=str(ephemeral))


def info_response(private_key: PrivateKey) -> InfoResponse:
    """Describe the wallet by the long-term address senders should use."""
    return InfoResponse(address=str(private_key.public_key))
