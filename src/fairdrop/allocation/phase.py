"""Sale state machine — holds the distribution phase and gates entry points.

Phase lifecycle:
    CLOSED → PRESALE → PUBLIC
    CLOSED → PUBLIC

Only the owner may change the phase. Transitions never move backwards;
re-setting the current phase is a no-op. Changing the phase never touches
issued tokens or ledger balances.
"""

from __future__ import annotations

from fairdrop.errors import NotOwner, PhaseRegression, WrongPhase
from fairdrop.models.sale import SalePhase, normalize_principal


# Valid transitions: {from_phase: {allowed_to_phases}}
_TRANSITIONS: dict[SalePhase, set[SalePhase]] = {
    SalePhase.CLOSED: {SalePhase.PRESALE, SalePhase.PUBLIC},
    SalePhase.PRESALE: {SalePhase.PUBLIC},
    SalePhase.PUBLIC: set(),
}


class SaleStateMachine:
    """Owner-driven, monotonic sale phase."""

    def __init__(self, owner: str, phase: SalePhase = SalePhase.CLOSED) -> None:
        self._owner = normalize_principal(owner)
        self._phase = phase

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def phase(self) -> SalePhase:
        return self._phase

    def set_phase(self, caller: str, target: SalePhase) -> SalePhase:
        """Move to target. Returns the previous phase."""
        if normalize_principal(caller) != self._owner:
            raise NotOwner(caller)
        target = SalePhase(target)
        previous = self._phase
        if target == previous:
            return previous
        if target not in _TRANSITIONS[previous]:
            raise PhaseRegression(f"{previous.name} → {target.name}")
        self._phase = target
        return previous

    def require(self, phase: SalePhase) -> None:
        """Raise WrongPhase unless the current phase is phase."""
        if self._phase != phase:
            raise WrongPhase(f"requires {phase.name}, current {self._phase.name}")

    @staticmethod
    def valid_transitions(phase: SalePhase) -> set[SalePhase]:
        """Return the set of valid target phases from the given phase."""
        return set(_TRANSITIONS.get(phase, set()))

    def snapshot(self) -> SalePhase:
        return self._phase

    def restore(self, snapshot: SalePhase) -> None:
        self._phase = snapshot
