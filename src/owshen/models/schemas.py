"""Pydantic data models for the Owshen core boundaries."""

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from owshen.crypto.field import FIELD_MODULUS

G1 = Tuple[int, int]
G2 = Tuple[Tuple[int, int], Tuple[int, int]]


class Proof(BaseModel):
    """Groth16 proof in the layout the pairing verifier expects.

    ``b`` holds the G2 coordinates with limbs ordered (c1, c0), as the
    Solidity verifier reads them.
    """

    model_config = ConfigDict(frozen=True)

    a: G1 = (0, 0)
    b: G2 = ((0, 0), (0, 0))
    c: G1 = (0, 0)

    @field_validator("a", "b", "c", mode="before")
    @classmethod
    def _parse_decimal_strings(cls, value: Any) -> Any:
        # snarkjs and JSON clients send field elements as decimal strings
        if isinstance(value, (list, tuple)):
            return tuple(cls._parse_decimal_strings(v) for v in value)
        if isinstance(value, str):
            return int(value, 0)
        return value

    @field_validator("a", "b", "c")
    @classmethod
    def _check_coordinates(cls, value: Any) -> Any:
        flat = [v for pair in value for v in pair] if isinstance(value[0], tuple) else list(value)
        if any(v < 0 for v in flat):
            raise ValueError("Proof coordinates must be non-negative")
        return value

    @classmethod
    def from_snarkjs(cls, data: Dict[str, Any]) -> "Proof":
        """
        Build a proof from snarkjs ``proof.json``.

        snarkjs writes projective coordinates (pi_a, pi_b, pi_c) with G2
        limbs as (c0, c1); the verifier wants affine (x, y) and (c1, c0).
        """
        pi_a, pi_b, pi_c = data["pi_a"], data["pi_b"], data["pi_c"]
        return cls(
            a=(pi_a[0], pi_a[1]),
            b=((pi_b[0][1], pi_b[0][0]), (pi_b[1][1], pi_b[1][0])),
            c=(pi_c[0], pi_c[1]),
        )

    def to_calldata(self) -> List[Any]:
        """Return [a, b, c] with every coordinate as a 0x-hex string."""
        return [
            [hex(v) for v in self.a],
            [[hex(v) for v in pair] for pair in self.b],
            [hex(v) for v in self.c],
        ]


class PublicInputs(BaseModel):
    """Public inputs checked by the verifier, always in the order
    [root, nullifier, fee_a, fee_b]."""

    model_config = ConfigDict(frozen=True)

    root: int = Field(..., ge=0, lt=FIELD_MODULUS)
    nullifier: int = Field(..., ge=0, lt=FIELD_MODULUS)
    fee_a: int = Field(..., ge=0, lt=FIELD_MODULUS)
    fee_b: int = Field(..., ge=0, lt=FIELD_MODULUS)

    def as_list(self) -> List[int]:
        return [self.root, self.nullifier, self.fee_a, self.fee_b]


class StealthRequest(BaseModel):
    """Request for a one-time stealth address."""
    address: str = Field(..., description="Recipient address (OoOo...)")


class StealthResponse(BaseModel):
    """Response carrying the stealth address and its ephemeral key."""
    address: str = Field(..., description="One-time stealth public key (OoOo...)")
    ephemeral: str = Field(..., description="Ephemeral key to publish with the deposit (OoOo...)")


class InfoResponse(BaseModel):
    """Wallet info: the long-term address to share with senders."""
    address: str


class WithdrawResponse(BaseModel):
    """Proof returned to the chain-interaction layer."""
    proof: Proof = Field(default_factory=Proof)
    public_inputs: List[int] = Field(default_factory=list)
