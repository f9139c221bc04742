"""Sale models — phases, claim modes, commit records and principals.

Principals are 20-byte account addresses carried as EIP-55 checksummed
hex strings. Amounts are integers in the smallest native unit (wei).

Phase lifecycle: CLOSED → PRESALE → PUBLIC (operator-driven, monotonic).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from eth_utils import is_address, to_checksum_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# A claim key is a principal (PER_PRINCIPAL) or a whitelist position (PER_POSITION).
ClaimKey = Union[str, int]


class SalePhase(int, enum.Enum):
    """Distribution phase. Values match the on-chain mint state selector."""
    CLOSED = 0
    PRESALE = 1
    PUBLIC = 2


class ClaimMode(int, enum.Enum):
    """Claim-tracking strategy, fixed at construction."""
    PER_PRINCIPAL = 0  # principal -> flag
    PER_POSITION = 1   # position -> bit in a packed word


@dataclass(frozen=True)
class CommitRecord:
    """A pending commitment awaiting reveal.

    The claim key is captured at commit time so reveal marks the same
    key the whitelist check was made against.
    """
    principal: str
    digest: str
    position: int
    claim_key: ClaimKey


def normalize_principal(value: str) -> str:
    """Return the checksummed form of an address, or raise ValueError."""
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Not a valid address: {value!r}")
    return to_checksum_address(value)
