"""Settlement — pull-payment contribution ledger and treasury."""

from fairdrop.compensation.ledger import ContributionLedger
from fairdrop.compensation.treasury import Treasury

__all__ = ["ContributionLedger", "Treasury"]
