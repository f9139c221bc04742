"""Public sale gate — open, fee-paying mints once the phase is PUBLIC.

No whitelist or claim checks apply. Identifiers come from the same
allocation pool as presale reveals, so they never collide with them.
"""

from __future__ import annotations

from web3 import Web3

from fairdrop.allocation.entropy import EntropyProvider
from fairdrop.allocation.phase import SaleStateMachine
from fairdrop.allocation.pool import TokenAllocationPool
from fairdrop.errors import InsufficientPayment
from fairdrop.models.sale import SalePhase, normalize_principal
from fairdrop.tokens.registry import TokenRegistry


class PublicSaleGate:
    """Admits paid mints during the public phase."""

    def __init__(
        self,
        phases: SaleStateMachine,
        pool: TokenAllocationPool,
        registry: TokenRegistry,
        entropy: EntropyProvider,
        fee: int,
    ) -> None:
        if fee < 0:
            raise ValueError("Public mint fee must be non-negative")
        self._phases = phases
        self._pool = pool
        self._registry = registry
        self._entropy = entropy
        self._fee = fee
        self._nonce = 0

    @property
    def fee(self) -> int:
        return self._fee

    def mint(self, caller: str, payment: int) -> int:
        """Mint one token to caller. Overpayment is kept, not refunded."""
        self._phases.require(SalePhase.PUBLIC)
        caller = normalize_principal(caller)
        if payment < self._fee:
            raise InsufficientPayment(f"sent {payment}, fee {self._fee}")

        seed = bytes(Web3.solidity_keccak(
            ["bytes32", "address", "uint256"],
            [self._entropy.draw(), caller, self._nonce],
        ))
        token_id = self._pool.claim(seed)
        self._nonce += 1
        self._registry.mint(caller, token_id)
        return token_id

    def snapshot(self) -> int:
        return self._nonce

    def restore(self, snapshot: int) -> None:
        self._nonce = snapshot
