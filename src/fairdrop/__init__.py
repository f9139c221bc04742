"""Fairdrop — whitelist commit-reveal token distribution engine.

A fixed supply of unique tokens is distributed in two paid-or-proven phases:
a presale where whitelisted principals commit and then reveal to receive a
randomly assigned identifier, and a public sale open to anyone paying the
fee. A pull-payment ledger and a transfer-only multicall sit alongside.
"""

from fairdrop.config import DropConfig
from fairdrop.models.sale import ClaimMode, SalePhase
from fairdrop.service import DropService, ServiceResult

__all__ = ["ClaimMode", "DropConfig", "DropService", "SalePhase", "ServiceResult"]
