"""Error taxonomy for the allocation engine.

Every rejected operation surfaces one of these. Each class carries a stable
``reason`` string (the literal reject message callers and tests assert on)
and a ``code`` equal to the class name.

Four families:
- AuthorizationError: caller lacks phase, whitelist or ownership standing.
- ValidationError: malformed or insufficient input.
- StateError: conflicts with already-recorded state.
- GuardError: batch contains a disallowed operation.
"""

from __future__ import annotations

from typing import Optional


class DropError(Exception):
    """Base class for all expected business-rule rejections."""

    reason: str = "Operation rejected"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        message = self.reason if detail is None else f"{self.reason}: {detail}"
        super().__init__(message)

    @property
    def code(self) -> str:
        return type(self).__name__


class AuthorizationError(DropError):
    """Caller lacks the right phase, whitelist or ownership standing."""


class ValidationError(DropError):
    """Malformed or insufficient input."""


class StateError(DropError):
    """Operation conflicts with already-recorded state."""


class GuardError(DropError):
    """Batch contains an operation outside the allow-list."""


# -- Authorization -----------------------------------------------------------

class WrongPhase(AuthorizationError):
    reason = "Wrong sale phase"


class NotWhitelisted(AuthorizationError):
    reason = "Not whitelisted"


class NotOwner(AuthorizationError):
    reason = "Caller is not the owner"


class NotOwnerNorApproved(AuthorizationError):
    reason = "Caller is not token owner or approved"


# -- Validation --------------------------------------------------------------

class InsufficientPayment(ValidationError):
    reason = "Insufficient ETH"


class ZeroSender(ValidationError):
    reason = "from cannot be zero"


class SecretMismatch(ValidationError):
    reason = "Invalid secret"


class ZeroRecipient(ValidationError):
    reason = "Transfer to the zero address"


class ZeroContribution(ValidationError):
    reason = "Contribution must be positive"


# -- State -------------------------------------------------------------------

class AlreadyClaimed(StateError):
    reason = "Already claimed"


class NoCommitFound(StateError):
    reason = "No commit found"


class NothingToWithdraw(StateError):
    reason = "Nothing to withdraw"


class SupplyExhausted(StateError):
    reason = "Max supply reached"


class PhaseRegression(StateError):
    reason = "Sale phase cannot move backwards"


class UnknownToken(StateError):
    reason = "Token does not exist"


class TokenAlreadyMinted(StateError):
    reason = "Token already minted"


# -- Guard -------------------------------------------------------------------

class DisallowedOperation(GuardError):
    reason = "Only transfer calls allowed"
