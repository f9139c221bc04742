"""Token registry — ownership, balances, enumeration and transfers.

This is the base token capability the allocation engine consumes. It is
deliberately minimal: no metadata, no safe-transfer receiver hooks.
"""

from __future__ import annotations

from typing import Any, Optional

from fairdrop.errors import NotOwnerNorApproved, TokenAlreadyMinted, UnknownToken, ZeroRecipient
from fairdrop.models.sale import ZERO_ADDRESS, normalize_principal


class TokenRegistry:
    """In-memory ownership ledger for unique token identifiers.

    Usage:
        registry = TokenRegistry("AirdropNFT", "ADN")
        registry.mint(alice, 7)
        registry.transfer_from(alice, alice, bob, 7)
        registry.owner_of(7)  # bob
    """

    def __init__(self, name: str, symbol: str) -> None:
        self.name = name
        self.symbol = symbol
        self._owners: dict[int, str] = {}
        self._owned: dict[str, list[int]] = {}
        self._approvals: dict[int, str] = {}
        self._operators: dict[str, set[str]] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        if owner is None:
            raise UnknownToken(str(token_id))
        return owner

    def exists(self, token_id: int) -> bool:
        return token_id in self._owners

    def balance_of(self, owner: str) -> int:
        return len(self._owned.get(normalize_principal(owner), []))

    def tokens_of_owner(self, owner: str) -> list[int]:
        return list(self._owned.get(normalize_principal(owner), []))

    def token_of_owner_by_index(self, owner: str, index: int) -> int:
        tokens = self._owned.get(normalize_principal(owner), [])
        if not 0 <= index < len(tokens):
            raise IndexError(f"Owner index out of bounds: {index}")
        return tokens[index]

    @property
    def total_supply(self) -> int:
        return len(self._owners)

    def get_approved(self, token_id: int) -> Optional[str]:
        self.owner_of(token_id)
        return self._approvals.get(token_id)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return normalize_principal(operator) in self._operators.get(
            normalize_principal(owner), set()
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mint(self, to: str, token_id: int) -> None:
        to = normalize_principal(to)
        if to == ZERO_ADDRESS:
            raise ZeroRecipient()
        if token_id in self._owners:
            raise TokenAlreadyMinted(str(token_id))
        self._owners[token_id] = to
        self._owned.setdefault(to, []).append(token_id)

    def approve(self, caller: str, spender: str, token_id: int) -> None:
        caller = normalize_principal(caller)
        owner = self.owner_of(token_id)
        if caller != owner and not self.is_approved_for_all(owner, caller):
            raise NotOwnerNorApproved(f"cannot approve token {token_id}")
        self._approvals[token_id] = normalize_principal(spender)

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        caller = normalize_principal(caller)
        operators = self._operators.setdefault(caller, set())
        if approved:
            operators.add(normalize_principal(operator))
        else:
            operators.discard(normalize_principal(operator))

    def transfer_from(
        self,
        caller: str,
        sender: str,
        recipient: str,
        token_id: int,
    ) -> None:
        """Move token_id from sender to recipient on behalf of caller.

        Caller must be the owner, the token's approved address, or an
        operator approved for all of the owner's tokens.
        """
        caller = normalize_principal(caller)
        sender = normalize_principal(sender)
        recipient = normalize_principal(recipient)
        owner = self.owner_of(token_id)
        if owner != sender:
            raise NotOwnerNorApproved(f"token {token_id} is not owned by {sender}")
        if recipient == ZERO_ADDRESS:
            raise ZeroRecipient()
        if not (
            caller == owner
            or self._approvals.get(token_id) == caller
            or self.is_approved_for_all(owner, caller)
        ):
            raise NotOwnerNorApproved(f"{caller} may not move token {token_id}")

        self._approvals.pop(token_id, None)
        self._owned[owner].remove(token_id)
        self._owners[token_id] = recipient
        self._owned.setdefault(recipient, []).append(token_id)

    def snapshot(self) -> dict[str, Any]:
        return {
            "owners": dict(self._owners),
            "owned": {k: list(v) for k, v in self._owned.items()},
            "approvals": dict(self._approvals),
            "operators": {k: set(v) for k, v in self._operators.items()},
        }

    def restore(self, snapshot: dict[str, Any]) -> None:
        self._owners = dict(snapshot["owners"])
        self._owned = {k: list(v) for k, v in snapshot["owned"].items()}
        self._approvals = dict(snapshot["approvals"])
        self._operators = {k: set(v) for k, v in snapshot["operators"].items()}
