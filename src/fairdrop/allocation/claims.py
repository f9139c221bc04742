"""Claim tracking — records which keys have already claimed.

Two strategies, chosen once at construction and never mixed:

- PER_PRINCIPAL: principal -> flag. Uniqueness is keyed by identity.
- PER_POSITION: position -> one bit inside a packed 256-bit word. Uniqueness
  is keyed by whitelist slot.

Once set, a claim mark is never cleared.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from fairdrop.errors import AlreadyClaimed
from fairdrop.models.sale import ClaimKey, ClaimMode, normalize_principal

WORD_BITS = 256


class ClaimTracker(ABC):
    """Capability interface shared by both claim-tracking strategies."""

    mode: ClaimMode

    @abstractmethod
    def key_for(self, principal: str, position: int) -> ClaimKey:
        """Select the claim key this strategy tracks for an entry."""

    @abstractmethod
    def has_claimed(self, key: ClaimKey) -> bool:
        """Return True if the key has already claimed."""

    @abstractmethod
    def mark_claimed(self, key: ClaimKey) -> None:
        """Mark the key as claimed. Raises AlreadyClaimed if already set."""

    @abstractmethod
    def snapshot(self) -> Any:
        """Capture state for rollback."""

    @abstractmethod
    def restore(self, snapshot: Any) -> None:
        """Restore state captured by snapshot()."""

    def has_claimed_principal(self, principal: str) -> bool:
        return False

    def has_claimed_position(self, position: int) -> bool:
        return False


class PrincipalClaimTracker(ClaimTracker):
    """Per-principal boolean flags."""

    mode = ClaimMode.PER_PRINCIPAL

    def __init__(self) -> None:
        self._claimed: dict[str, bool] = {}

    def key_for(self, principal: str, position: int) -> ClaimKey:
        return normalize_principal(principal)

    def has_claimed(self, key: ClaimKey) -> bool:
        return self._claimed.get(self._principal(key), False)

    def mark_claimed(self, key: ClaimKey) -> None:
        principal = self._principal(key)
        if self._claimed.get(principal, False):
            raise AlreadyClaimed(principal)
        self._claimed[principal] = True

    def has_claimed_principal(self, principal: str) -> bool:
        return self.has_claimed(principal)

    def snapshot(self) -> dict[str, bool]:
        return dict(self._claimed)

    def restore(self, snapshot: dict[str, bool]) -> None:
        self._claimed = dict(snapshot)

    @staticmethod
    def _principal(key: ClaimKey) -> str:
        if not isinstance(key, str):
            raise TypeError("PER_PRINCIPAL claim keys are addresses")
        return normalize_principal(key)


class PositionClaimTracker(ClaimTracker):
    """Per-position bits packed into 256-bit words."""

    mode = ClaimMode.PER_POSITION

    def __init__(self) -> None:
        self._words: dict[int, int] = {}

    def key_for(self, principal: str, position: int) -> ClaimKey:
        return position

    def has_claimed(self, key: ClaimKey) -> bool:
        word, mask = self._locate(key)
        return bool(self._words.get(word, 0) & mask)

    def mark_claimed(self, key: ClaimKey) -> None:
        word, mask = self._locate(key)
        current = self._words.get(word, 0)
        if current & mask:
            raise AlreadyClaimed(f"position {key}")
        self._words[word] = current | mask

    def has_claimed_position(self, position: int) -> bool:
        return self.has_claimed(position)

    def claimed_word(self, word_index: int) -> int:
        """Raw packed word, as stored."""
        return self._words.get(word_index, 0)

    def snapshot(self) -> dict[int, int]:
        return dict(self._words)

    def restore(self, snapshot: dict[int, int]) -> None:
        self._words = dict(snapshot)

    @staticmethod
    def _locate(key: ClaimKey) -> tuple[int, int]:
        if isinstance(key, bool) or not isinstance(key, int):
            raise TypeError("PER_POSITION claim keys are integer positions")
        if key < 0:
            raise ValueError("Position must be non-negative")
        return key // WORD_BITS, 1 << (key % WORD_BITS)


def make_claim_tracker(mode: ClaimMode) -> ClaimTracker:
    """Build the tracker for a claim mode."""
    if mode == ClaimMode.PER_PRINCIPAL:
        return PrincipalClaimTracker()
    if mode == ClaimMode.PER_POSITION:
        return PositionClaimTracker()
    raise ValueError(f"Unknown claim mode: {mode!r}")
