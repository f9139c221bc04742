"""Data models for the allocation engine."""

from fairdrop.models.sale import (
    ZERO_ADDRESS,
    ClaimKey,
    ClaimMode,
    CommitRecord,
    SalePhase,
    normalize_principal,
)

__all__ = [
    "ZERO_ADDRESS",
    "ClaimKey",
    "ClaimMode",
    "CommitRecord",
    "SalePhase",
    "normalize_principal",
]
