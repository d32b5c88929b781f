"""Boundary data models."""

from owshen.models.schemas import (
    InfoResponse,
    Proof,
    PublicInputs,
    StealthRequest,
    StealthResponse,
    WithdrawResponse,
)

__all__ = [
    "InfoResponse",
    "Proof",
    "PublicInputs",
    "StealthRequest",
    "StealthResponse",
    "WithdrawResponse",
]
