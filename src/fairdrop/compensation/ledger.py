"""Contribution ledger — pull-payment account book.

Funds owed to a principal are recorded here and paid out only when that
principal withdraws. Withdrawal zeroes the balance before the payout call,
so a re-entrant withdrawal during the payout sees nothing owed.

Amounts are integer wei.
"""

from __future__ import annotations

from typing import Callable, Dict

from fairdrop.errors import NothingToWithdraw, ZeroContribution
from fairdrop.models.sale import normalize_principal

# send(principal, amount) performs the external value transfer.
PayoutFn = Callable[[str, int], None]


class ContributionLedger:
    """Owed balances per principal.

    Usage:
        ledger = ContributionLedger()
        ledger.credit(alice, 10**17)
        ledger.withdraw(alice, treasury.pay)  # pays 10**17, balance now 0
    """

    def __init__(self) -> None:
        self._owed: Dict[str, int] = {}

    def credit(self, principal: str, amount: int) -> int:
        """Increase principal's owed balance. Returns the new balance."""
        if amount <= 0:
            raise ZeroContribution(str(amount))
        principal = normalize_principal(principal)
        balance = self._owed.get(principal, 0) + amount
        self._owed[principal] = balance
        return balance

    def owed(self, principal: str) -> int:
        return self._owed.get(normalize_principal(principal), 0)

    @property
    def total_owed(self) -> int:
        return sum(self._owed.values())

    def withdraw(self, principal: str, send: PayoutFn) -> int:
        """Pay out principal's whole balance. Returns the amount paid."""
        principal = normalize_principal(principal)
        amount = self._owed.get(principal, 0)
        if amount == 0:
            raise NothingToWithdraw(principal)
        self._owed[principal] = 0
        send(principal, amount)
        return amount

    def snapshot(self) -> Dict[str, int]:
        return dict(self._owed)

    def restore(self, snapshot: Dict[str, int]) -> None:
        self._owed = dict(snapshot)
