"""Token allocation pool — the set of minted identifiers and the supply cap.

Identifiers live in [0, max_supply). A seed picks a starting slot; on
collision the pool probes forward one slot at a time (wrapping), so a free
identifier is always found while supply remains.
"""

from __future__ import annotations

from web3 import Web3

from fairdrop.errors import SupplyExhausted, TokenAlreadyMinted


class TokenAllocationPool:
    """Tracks allocated identifiers and derives collision-free new ones."""

    def __init__(self, max_supply: int) -> None:
        if max_supply <= 0:
            raise ValueError("max_supply must be positive")
        self._max_supply = max_supply
        self._allocated: set[int] = set()

    @property
    def max_supply(self) -> int:
        return self._max_supply

    @property
    def remaining(self) -> int:
        return self._max_supply - len(self._allocated)

    def is_allocated(self, token_id: int) -> bool:
        return token_id in self._allocated

    def derive(self, seed: bytes) -> int:
        """Map a seed to the first free identifier at or after its slot.

        Pure: does not allocate. Raises SupplyExhausted when full.
        """
        if self.remaining == 0:
            raise SupplyExhausted(f"all {self._max_supply} identifiers minted")
        start = int.from_bytes(Web3.keccak(seed), "big") % self._max_supply
        for probe in range(self._max_supply):
            candidate = (start + probe) % self._max_supply
            if candidate not in self._allocated:
                return candidate
        raise SupplyExhausted(f"all {self._max_supply} identifiers minted")

    def mark(self, token_id: int) -> None:
        if not 0 <= token_id < self._max_supply:
            raise ValueError(f"Token ID out of range: {token_id}")
        if token_id in self._allocated:
            raise TokenAlreadyMinted(str(token_id))
        self._allocated.add(token_id)

    def claim(self, seed: bytes) -> int:
        """Derive and allocate in one step."""
        token_id = self.derive(seed)
        self.mark(token_id)
        return token_id

    def snapshot(self) -> frozenset[int]:
        return frozenset(self._allocated)

    def restore(self, snapshot: frozenset[int]) -> None:
        self._allocated = set(snapshot)
