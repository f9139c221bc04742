"""Treasury — native value held by the distribution and paid out of it.

Tracks the contract's own balance (mint fees and contributions received)
and the native balances of principals that have been paid. A payout hook,
if installed, runs after the value moves and stands in for the recipient's
code executing during the transfer; it may call back into the service.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from fairdrop.models.sale import normalize_principal

PayoutHook = Callable[[str, int], None]


class Treasury:
    """Contract balance plus paid-out principal balances."""

    def __init__(self, payout_hook: Optional[PayoutHook] = None) -> None:
        self._balance = 0
        self._paid: Dict[str, int] = {}
        self._payout_hook = payout_hook

    @property
    def balance(self) -> int:
        return self._balance

    def native_balance(self, principal: str) -> int:
        return self._paid.get(normalize_principal(principal), 0)

    def set_payout_hook(self, hook: Optional[PayoutHook]) -> None:
        self._payout_hook = hook

    def receive(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot receive a negative amount")
        self._balance += amount

    def pay(self, principal: str, amount: int) -> None:
        """Send amount to principal, then run the payout hook."""
        if amount > self._balance:
            raise RuntimeError(
                f"Treasury holds {self._balance}, cannot pay {amount}"
            )
        principal = normalize_principal(principal)
        self._balance -= amount
        self._paid[principal] = self._paid.get(principal, 0) + amount
        if self._payout_hook is not None:
            self._payout_hook(principal, amount)

    def snapshot(self) -> dict[str, Any]:
        return {"balance": self._balance, "paid": dict(self._paid)}

    def restore(self, snapshot: dict[str, Any]) -> None:
        self._balance = snapshot["balance"]
        self._paid = dict(snapshot["paid"])
