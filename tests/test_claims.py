"""Tests for claim tracking — both strategies and their isolation."""

import pytest

from fairdrop.allocation.claims import (
    PositionClaimTracker,
    PrincipalClaimTracker,
    make_claim_tracker,
)
from fairdrop.errors import AlreadyClaimed, StateError
from fairdrop.models.sale import ClaimMode


class TestPrincipalClaims:
    def test_mark_and_query(self, alice: str, bob: str) -> None:
        claims = PrincipalClaimTracker()
        assert not claims.has_claimed(alice)
        claims.mark_claimed(alice)
        assert claims.has_claimed(alice)
        assert not claims.has_claimed(bob)

    def test_double_mark_rejected(self, alice: str) -> None:
        claims = PrincipalClaimTracker()
        claims.mark_claimed(alice)
        with pytest.raises(AlreadyClaimed) as excinfo:
            claims.mark_claimed(alice.lower())
        assert isinstance(excinfo.value, StateError)
        assert excinfo.value.reason == "Already claimed"

    def test_key_is_principal(self, alice: str) -> None:
        assert PrincipalClaimTracker().key_for(alice.lower(), 5) == alice

    def test_position_queries_never_match(self, alice: str) -> None:
        claims = PrincipalClaimTracker()
        claims.mark_claimed(alice)
        assert claims.has_claimed_principal(alice)
        assert not claims.has_claimed_position(0)

    def test_position_key_is_type_error(self) -> None:
        with pytest.raises(TypeError):
            PrincipalClaimTracker().mark_claimed(0)


class TestPositionClaims:
    def test_mark_and_query(self) -> None:
        claims = PositionClaimTracker()
        claims.mark_claimed(3)
        assert claims.has_claimed(3)
        assert not claims.has_claimed(2)

    def test_double_mark_rejected(self) -> None:
        claims = PositionClaimTracker()
        claims.mark_claimed(0)
        with pytest.raises(AlreadyClaimed):
            claims.mark_claimed(0)

    def test_bits_pack_into_words(self) -> None:
        claims = PositionClaimTracker()
        claims.mark_claimed(0)
        claims.mark_claimed(5)
        claims.mark_claimed(256)
        assert claims.claimed_word(0) == (1 << 0) | (1 << 5)
        assert claims.claimed_word(1) == 1

    def test_key_is_position(self, alice: str) -> None:
        assert PositionClaimTracker().key_for(alice, 7) == 7

    def test_principal_queries_never_match(self, alice: str) -> None:
        claims = PositionClaimTracker()
        claims.mark_claimed(0)
        assert claims.has_claimed_position(0)
        assert not claims.has_claimed_principal(alice)

    def test_principal_key_is_type_error(self, alice: str) -> None:
        with pytest.raises(TypeError):
            PositionClaimTracker().has_claimed(alice)

    def test_negative_position(self) -> None:
        with pytest.raises(ValueError):
            PositionClaimTracker().mark_claimed(-1)


class TestFactoryAndRollback:
    def test_factory_selects_strategy(self) -> None:
        assert isinstance(make_claim_tracker(ClaimMode.PER_PRINCIPAL), PrincipalClaimTracker)
        assert isinstance(make_claim_tracker(ClaimMode.PER_POSITION), PositionClaimTracker)

    def test_restore_undoes_mark(self) -> None:
        claims = PositionClaimTracker()
        snapshot = claims.snapshot()
        claims.mark_claimed(1)
        claims.restore(snapshot)
        assert not claims.has_claimed(1)
