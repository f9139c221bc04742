"""Drop service — unified facade for the distribution engine.

This is the primary interface for programmatic access. It wires every
component together and gives each operation transaction semantics:

- The caller principal is an explicit argument of every operation.
- Each operation runs in a fresh execution context (entropy advances).
- On any error, every store is restored to its state before the
  operation and no events are recorded. Nothing partial survives.
- Expected rejections come back as a failed ServiceResult carrying the
  stable reason string and error code. Anything else propagates.

Operations may nest: a payout hook can call back into the service while a
withdrawal is in flight. Events are flushed to the log only when the
outermost operation succeeds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from fairdrop.allocation.claims import make_claim_tracker
from fairdrop.allocation.commit_reveal import CommitRevealAllocator
from fairdrop.allocation.entropy import BlockContextEntropy, EntropyProvider
from fairdrop.allocation.phase import SaleStateMachine
from fairdrop.allocation.pool import TokenAllocationPool
from fairdrop.allocation.public_sale import PublicSaleGate
from fairdrop.allocation.whitelist import ProofElement, WhitelistVerifier
from fairdrop.compensation.ledger import ContributionLedger
from fairdrop.compensation.treasury import PayoutHook, Treasury
from fairdrop.config import DropConfig
from fairdrop.errors import DropError
from fairdrop.models.sale import ClaimMode, SalePhase, normalize_principal
from fairdrop.persistence.event_log import EventKind, EventLog, EventRecord
from fairdrop.tokens.batch import GuardedBatchExecutor
from fairdrop.tokens.registry import TokenRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    code: Optional[str] = None


class DropService:
    """Distribution engine facade.

    Usage:
        service = DropService(config)
        service.set_phase(owner, SalePhase.PRESALE)

        # Presale
        result = service.commit(alice, entry.index, entry.proof, "my-secret")
        result = service.reveal(alice, "my-secret")
        result.data["token_id"]

        # Public sale
        service.set_phase(owner, SalePhase.PUBLIC)
        result = service.public_mint(bob, payment=service.public_mint_fee)

        # Pull payments
        service.credit(owner, alice, payment=10**17)
        service.withdraw(alice)
    """

    def __init__(
        self,
        config: DropConfig,
        entropy: Optional[EntropyProvider] = None,
        event_log: Optional[EventLog] = None,
        payout_hook: Optional[PayoutHook] = None,
    ) -> None:
        self._config = config
        self._entropy = entropy or BlockContextEntropy()
        self._event_log = event_log if event_log is not None else EventLog()

        self._verifier = WhitelistVerifier(config.whitelist_root)
        self._claims = make_claim_tracker(config.claim_mode)
        self._phases = SaleStateMachine(config.owner)
        self._pool = TokenAllocationPool(config.max_supply)
        self._registry = TokenRegistry(config.name, config.symbol)
        self._allocator = CommitRevealAllocator(
            self._verifier,
            self._claims,
            self._phases,
            self._pool,
            self._registry,
            self._entropy,
        )
        self._public_sale = PublicSaleGate(
            self._phases,
            self._pool,
            self._registry,
            self._entropy,
            config.public_mint_fee,
        )
        self._batch = GuardedBatchExecutor(self._registry)
        self._ledger = ContributionLedger()
        self._treasury = Treasury(payout_hook)

        # Every store that must roll back together on a failed operation.
        self._stores = (
            self._claims,
            self._phases,
            self._pool,
            self._registry,
            self._allocator,
            self._public_sale,
            self._ledger,
            self._treasury,
        )
        self._pending_events: list[tuple[EventKind, str, dict[str, Any]]] = []
        self._depth = 0
        # Initialize counter from persisted log to avoid ID collision on restart
        self._event_counter = self._event_log.count

    # ------------------------------------------------------------------
    # Operator
    # ------------------------------------------------------------------

    def set_phase(self, caller: str, phase: SalePhase) -> ServiceResult:
        """Advance the sale phase. Owner only; never moves backwards."""
        def run() -> dict[str, Any]:
            previous = self._phases.set_phase(caller, phase)
            current = self._phases.phase
            if previous != current:
                self._emit(EventKind.SALE_PHASE_CHANGED, caller, {
                    "from": previous.name,
                    "to": current.name,
                })
            return {"previous": previous.name, "phase": current.name}

        return self._execute("set_phase", caller, run)

    # ------------------------------------------------------------------
    # Presale: commit / reveal
    # ------------------------------------------------------------------

    def commit(
        self,
        caller: str,
        position: int,
        proof: Sequence[ProofElement],
        secret: str,
    ) -> ServiceResult:
        def run() -> dict[str, Any]:
            record = self._allocator.commit(caller, position, proof, secret)
            self._emit(EventKind.COMMIT_RECORDED, record.principal, {
                "position": record.position,
                "digest": record.digest,
            })
            return {"digest": record.digest, "position": record.position}

        return self._execute("commit", caller, run)

    def reveal(self, caller: str, secret: str) -> ServiceResult:
        def run() -> dict[str, Any]:
            record = self._allocator.pending_commit(caller)
            token_id = self._allocator.reveal(caller, secret)
            principal = normalize_principal(caller)
            self._emit(EventKind.TOKEN_REVEALED, principal, {
                "token_id": token_id,
                "position": record.position if record else None,
            })
            return {"token_id": token_id}

        return self._execute("reveal", caller, run)

    # ------------------------------------------------------------------
    # Public sale
    # ------------------------------------------------------------------

    def public_mint(self, caller: str, payment: int) -> ServiceResult:
        def run() -> dict[str, Any]:
            token_id = self._public_sale.mint(caller, payment)
            self._treasury.receive(payment)
            self._emit(EventKind.PUBLIC_MINTED, normalize_principal(caller), {
                "token_id": token_id,
                "payment": payment,
            })
            return {"token_id": token_id, "payment": payment}

        return self._execute("public_mint", caller, run)

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def transfer_from(
        self,
        caller: str,
        sender: str,
        recipient: str,
        token_id: int,
    ) -> ServiceResult:
        def run() -> dict[str, Any]:
            self._registry.transfer_from(caller, sender, recipient, token_id)
            self._emit_transfer(caller, sender, recipient, token_id)
            return {"token_id": token_id, "owner": self._registry.owner_of(token_id)}

        return self._execute("transfer_from", caller, run)

    def approve(self, caller: str, spender: str, token_id: int) -> ServiceResult:
        def run() -> dict[str, Any]:
            self._registry.approve(caller, spender, token_id)
            self._emit(EventKind.TOKEN_APPROVED, normalize_principal(caller), {
                "spender": normalize_principal(spender),
                "token_id": token_id,
            })
            return {"token_id": token_id}

        return self._execute("approve", caller, run)

    def execute_batch(self, caller: str, calls: Sequence[bytes]) -> ServiceResult:
        """Run a batch of encoded transferFrom calls, all or nothing."""
        def run() -> dict[str, Any]:
            transfers = self._batch.execute_batch(caller, calls)
            for transfer in transfers:
                self._emit_transfer(
                    caller, transfer.sender, transfer.recipient, transfer.token_id
                )
            self._emit(EventKind.BATCH_EXECUTED, normalize_principal(caller), {
                "calls": len(transfers),
            })
            return {"transfers": [t.token_id for t in transfers]}

        return self._execute("execute_batch", caller, run)

    # ------------------------------------------------------------------
    # Pull payments
    # ------------------------------------------------------------------

    def credit(self, caller: str, principal: str, payment: int) -> ServiceResult:
        """Fund principal's ledger entry with exactly the attached payment."""
        def run() -> dict[str, Any]:
            balance = self._ledger.credit(principal, payment)
            self._treasury.receive(payment)
            self._emit(EventKind.CONTRIBUTION_CREDITED, normalize_principal(principal), {
                "amount": payment,
                "funded_by": normalize_principal(caller),
            })
            return {"owed": balance}

        return self._execute("credit", caller, run)

    def withdraw(self, caller: str) -> ServiceResult:
        def run() -> dict[str, Any]:
            amount = self._ledger.withdraw(caller, self._treasury.pay)
            self._emit(EventKind.WITHDRAWAL_SETTLED, normalize_principal(caller), {
                "amount": amount,
            })
            return {"amount": amount}

        return self._execute("withdraw", caller, run)

    def set_payout_hook(self, hook: Optional[PayoutHook]) -> None:
        self._treasury.set_payout_hook(hook)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    @property
    def config(self) -> DropConfig:
        return self._config

    @property
    def phase(self) -> SalePhase:
        return self._phases.phase

    @property
    def owner(self) -> str:
        return self._phases.owner

    @property
    def claim_mode(self) -> ClaimMode:
        return self._claims.mode

    @property
    def whitelist_root(self) -> str:
        return self._verifier.root

    @property
    def public_mint_fee(self) -> int:
        return self._public_sale.fee

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    def get_committed_secret(self, principal: str) -> Optional[str]:
        return self._allocator.committed_secret(principal)

    def has_claimed_principal(self, principal: str) -> bool:
        return self._claims.has_claimed_principal(principal)

    def has_claimed_position(self, position: int) -> bool:
        return self._claims.has_claimed_position(position)

    def verify_whitelist(
        self, position: int, principal: str, proof: Sequence[ProofElement]
    ) -> bool:
        return self._verifier.verify(position, principal, proof)

    def owner_of(self, token_id: int) -> str:
        return self._registry.owner_of(token_id)

    def balance_of(self, principal: str) -> int:
        return self._registry.balance_of(principal)

    def token_of_owner_by_index(self, principal: str, index: int) -> int:
        return self._registry.token_of_owner_by_index(principal, index)

    def tokens_of_owner(self, principal: str) -> list[int]:
        return self._registry.tokens_of_owner(principal)

    @property
    def total_supply(self) -> int:
        return self._registry.total_supply

    @property
    def remaining_supply(self) -> int:
        return self._pool.remaining

    def owed(self, principal: str) -> int:
        return self._ledger.owed(principal)

    @property
    def contract_balance(self) -> int:
        return self._treasury.balance

    def native_balance(self, principal: str) -> int:
        """Native value paid out to principal by this distribution."""
        return self._treasury.native_balance(principal)

    def status(self) -> dict[str, Any]:
        return {
            "name": self._config.name,
            "symbol": self._config.symbol,
            "phase": self.phase.name,
            "claim_mode": self.claim_mode.name,
            "whitelist_root": self.whitelist_root,
            "total_supply": self.total_supply,
            "max_supply": self._pool.max_supply,
            "public_mint_fee": self.public_mint_fee,
            "contract_balance": self.contract_balance,
            "total_owed": self._ledger.total_owed,
            "pending_commits": self._allocator.pending_count,
            "events": self._event_log.count,
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _execute(
        self,
        operation: str,
        caller: str,
        run: Callable[[], dict[str, Any]],
    ) -> ServiceResult:
        """Run an operation atomically.

        Snapshots every store first. A DropError restores them and becomes
        a failed result; any other exception restores them and propagates.
        """
        snapshots = [(store, store.snapshot()) for store in self._stores]
        event_mark = len(self._pending_events)
        self._entropy.advance()
        self._depth += 1
        try:
            data = run()
        except DropError as exc:
            self._rollback(snapshots, event_mark)
            logger.warning("%s rejected for %s: %s", operation, caller, exc)
            return ServiceResult(
                success=False,
                errors=[exc.reason],
                data={"detail": exc.detail} if exc.detail else {},
                code=exc.code,
            )
        except Exception:
            self._rollback(snapshots, event_mark)
            logger.exception("%s failed for %s", operation, caller)
            raise
        finally:
            self._depth -= 1

        if self._depth == 0:
            self._flush_events()
        logger.info("%s ok for %s", operation, caller)
        return ServiceResult(success=True, data=data)

    def _rollback(self, snapshots: list[tuple[Any, Any]], event_mark: int) -> None:
        for store, snapshot in reversed(snapshots):
            store.restore(snapshot)
        del self._pending_events[event_mark:]

    def _emit(self, kind: EventKind, actor_id: str, payload: dict[str, Any]) -> None:
        self._pending_events.append((kind, actor_id, payload))

    def _emit_transfer(self, caller: str, sender: str, recipient: str, token_id: int) -> None:
        self._emit(EventKind.TOKEN_TRANSFERRED, normalize_principal(caller), {
            "from": normalize_principal(sender),
            "to": normalize_principal(recipient),
            "token_id": token_id,
        })

    def _flush_events(self) -> None:
        pending, self._pending_events = self._pending_events, []
        for kind, actor_id, payload in pending:
            self._event_log.append(EventRecord.create(
                event_id=self._next_event_id(),
                event_kind=kind,
                actor_id=actor_id,
                payload=payload,
            ))

    def _next_event_id(self) -> str:
        self._event_counter += 1
        return f"EVT-{self._event_counter:08d}"
