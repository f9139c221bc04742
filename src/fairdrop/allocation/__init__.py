"""Allocation engine — whitelist, claims, phases and the two mint paths."""

from fairdrop.allocation.claims import (
    ClaimTracker,
    PositionClaimTracker,
    PrincipalClaimTracker,
    make_claim_tracker,
)
from fairdrop.allocation.commit_reveal import CommitRevealAllocator
from fairdrop.allocation.entropy import BlockContextEntropy, EntropyProvider, StaticEntropy
from fairdrop.allocation.phase import SaleStateMachine
from fairdrop.allocation.pool import TokenAllocationPool
from fairdrop.allocation.public_sale import PublicSaleGate
from fairdrop.allocation.whitelist import WhitelistVerifier

__all__ = [
    "BlockContextEntropy",
    "ClaimTracker",
    "CommitRevealAllocator",
    "EntropyProvider",
    "PositionClaimTracker",
    "PrincipalClaimTracker",
    "PublicSaleGate",
    "SaleStateMachine",
    "StaticEntropy",
    "TokenAllocationPool",
    "WhitelistVerifier",
    "make_claim_tracker",
]
