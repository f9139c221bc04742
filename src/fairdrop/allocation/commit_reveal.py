"""Commit-reveal allocator — presale token assignment without front-running.

A whitelisted participant first commits keccak(caller ‖ secret). Nothing is
minted and nothing is marked claimed at that point. On reveal, the secret is
checked against the stored digest and the token identifier is derived from
the secret, the caller and entropy drawn at reveal time. Because that entropy
did not exist at commit time, choosing the secret gives no control over
which identifier comes out.

Ordering on reveal: the commit record is cleared and the claim key marked
before the token is minted.
"""

from __future__ import annotations

from typing import Optional, Sequence

from web3 import Web3

from fairdrop.allocation.claims import ClaimTracker
from fairdrop.allocation.entropy import EntropyProvider
from fairdrop.allocation.phase import SaleStateMachine
from fairdrop.allocation.pool import TokenAllocationPool
from fairdrop.allocation.whitelist import ProofElement, WhitelistVerifier
from fairdrop.crypto.hashing import commit_digest, to_hex
from fairdrop.errors import AlreadyClaimed, NoCommitFound, NotWhitelisted, SecretMismatch
from fairdrop.models.sale import CommitRecord, SalePhase, normalize_principal
from fairdrop.tokens.registry import TokenRegistry


class CommitRevealAllocator:
    """Runs the two-step commit/reveal protocol for whitelisted principals.

    Usage:
        allocator.commit(alice, entry.index, entry.proof, "my-secret")
        token_id = allocator.reveal(alice, "my-secret")
    """

    def __init__(
        self,
        verifier: WhitelistVerifier,
        claims: ClaimTracker,
        phases: SaleStateMachine,
        pool: TokenAllocationPool,
        registry: TokenRegistry,
        entropy: EntropyProvider,
    ) -> None:
        self._verifier = verifier
        self._claims = claims
        self._phases = phases
        self._pool = pool
        self._registry = registry
        self._entropy = entropy
        self._commits: dict[str, CommitRecord] = {}

    def commit(
        self,
        caller: str,
        position: int,
        proof: Sequence[ProofElement],
        secret: str,
    ) -> CommitRecord:
        """Record a commitment for a whitelisted entry.

        A pending commitment from the same caller is overwritten.
        """
        caller = normalize_principal(caller)
        # Whitelist standing is checked before the phase.
        if not self._verifier.verify(position, caller, proof):
            raise NotWhitelisted(caller)
        self._phases.require(SalePhase.PRESALE)

        claim_key = self._claims.key_for(caller, position)
        if self._claims.has_claimed(claim_key):
            raise AlreadyClaimed(str(claim_key))

        record = CommitRecord(
            principal=caller,
            digest=to_hex(commit_digest(caller, secret)),
            position=position,
            claim_key=claim_key,
        )
        self._commits[caller] = record
        return record

    def reveal(self, caller: str, secret: str) -> int:
        """Redeem a commitment. Returns the minted token identifier."""
        caller = normalize_principal(caller)
        record = self._commits.get(caller)
        if record is None:
            raise NoCommitFound(caller)
        if to_hex(commit_digest(caller, secret)) != record.digest:
            raise SecretMismatch(caller)
        # Another caller may have redeemed the same position since this commit.
        if self._claims.has_claimed(record.claim_key):
            raise AlreadyClaimed(str(record.claim_key))

        token_id = self._pool.derive(self._token_seed(caller, secret))

        del self._commits[caller]
        self._claims.mark_claimed(record.claim_key)
        self._pool.mark(token_id)
        self._registry.mint(caller, token_id)
        return token_id

    def committed_secret(self, principal: str) -> Optional[str]:
        """Stored digest for a principal's pending commitment, if any."""
        record = self._commits.get(normalize_principal(principal))
        return record.digest if record else None

    def pending_commit(self, principal: str) -> Optional[CommitRecord]:
        return self._commits.get(normalize_principal(principal))

    @property
    def pending_count(self) -> int:
        return len(self._commits)

    def snapshot(self) -> dict[str, CommitRecord]:
        return dict(self._commits)

    def restore(self, snapshot: dict[str, CommitRecord]) -> None:
        self._commits = dict(snapshot)

    def _token_seed(self, caller: str, secret: str) -> bytes:
        return bytes(Web3.solidity_keccak(
            ["string", "address", "bytes32"],
            [secret, caller, self._entropy.draw()],
        ))
