"""Tests for the guarded transfer multicall."""

import pytest

from fairdrop.errors import DisallowedOperation, GuardError, NotOwnerNorApproved, ZeroSender
from fairdrop.models.sale import ZERO_ADDRESS, SalePhase
from fairdrop.service import DropService
from fairdrop.tokens.batch import (
    TRANSFER_FROM_SELECTOR,
    GuardedBatchExecutor,
    decode_transfer_call,
    encode_call,
    encode_transfer_from,
)
from fairdrop.tokens.registry import TokenRegistry


@pytest.fixture
def minted(service: DropService, owner: str, alice: str) -> int:
    """Alice holds one publicly minted token."""
    service.set_phase(owner, SalePhase.PUBLIC)
    service.public_mint(alice, payment=service.public_mint_fee)
    return service.token_of_owner_by_index(alice, 0)


class TestEncoding:
    def test_selector(self) -> None:
        assert TRANSFER_FROM_SELECTOR.hex() == "23b872dd"

    def test_decode_round_trip(self, alice: str, bob: str) -> None:
        call = decode_transfer_call(encode_transfer_from(alice, bob, 42))
        assert (call.sender, call.recipient, call.token_id) == (alice, bob, 42)

    def test_other_selector(self) -> None:
        with pytest.raises(DisallowedOperation) as excinfo:
            decode_transfer_call(encode_call("publicMint()", [], []))
        assert isinstance(excinfo.value, GuardError)

    def test_truncated_body(self, alice: str, bob: str) -> None:
        data = encode_transfer_from(alice, bob, 1)
        with pytest.raises(DisallowedOperation):
            decode_transfer_call(data[:40])

    def test_empty_call(self) -> None:
        with pytest.raises(DisallowedOperation):
            decode_transfer_call(b"")

    def test_zero_sender(self, bob: str) -> None:
        with pytest.raises(ZeroSender):
            decode_transfer_call(encode_transfer_from(ZERO_ADDRESS, bob, 1))


class TestExecuteBatch:
    def test_transfer_moves_ownership(self, service: DropService, minted: int, alice: str, owner: str) -> None:
        result = service.execute_batch(alice, [encode_transfer_from(alice, owner, minted)])
        assert result.success
        assert service.owner_of(minted) == owner
        assert result.data["transfers"] == [minted]

    def test_mint_call_rejected(self, service: DropService, minted: int, alice: str) -> None:
        result = service.execute_batch(alice, [encode_call("publicMint()", [], [])])
        assert not result.success
        assert result.errors == ["Only transfer calls allowed"]
        assert result.code == "DisallowedOperation"

    def test_zero_sender_rejected(self, service: DropService, minted: int, alice: str, owner: str) -> None:
        result = service.execute_batch(alice, [encode_transfer_from(ZERO_ADDRESS, owner, minted)])
        assert result.errors == ["from cannot be zero"]
        assert result.code == "ZeroSender"
        assert service.owner_of(minted) == alice

    def test_validated_before_dispatch(self, service: DropService, minted: int, alice: str, owner: str) -> None:
        calls = [
            encode_transfer_from(alice, owner, minted),
            encode_call("publicMint()", [], []),
        ]
        assert service.execute_batch(alice, calls).code == "DisallowedOperation"
        assert service.owner_of(minted) == alice

    def test_failed_dispatch_rolls_back_batch(self, service: DropService, minted: int, alice: str, bob: str, owner: str) -> None:
        service.public_mint(bob, payment=service.public_mint_fee)
        bobs_token = service.token_of_owner_by_index(bob, 0)
        calls = [
            encode_transfer_from(alice, owner, minted),
            encode_transfer_from(bob, owner, bobs_token),  # alice may not move bob's token
        ]
        result = service.execute_batch(alice, calls)
        assert result.code == "NotOwnerNorApproved"
        assert service.owner_of(minted) == alice
        assert service.owner_of(bobs_token) == bob

    def test_batch_runs_as_caller(self, service: DropService, minted: int, alice: str, bob: str) -> None:
        # Bob cannot batch-move alice's token without approval.
        result = service.execute_batch(bob, [encode_transfer_from(alice, bob, minted)])
        assert not result.success
        assert service.approve(alice, bob, minted).success
        assert service.execute_batch(bob, [encode_transfer_from(alice, bob, minted)]).success
        assert service.owner_of(minted) == bob

    def test_multiple_transfers(self, service: DropService, minted: int, alice: str, bob: str, carol: str) -> None:
        service.public_mint(alice, payment=service.public_mint_fee)
        second = service.token_of_owner_by_index(alice, 1)
        calls = [
            encode_transfer_from(alice, bob, minted),
            encode_transfer_from(alice, carol, second),
        ]
        assert service.execute_batch(alice, calls).success
        assert service.owner_of(minted) == bob
        assert service.owner_of(second) == carol
        assert service.balance_of(alice) == 0


class TestExecutorOnRegistry:
    def test_failed_call_undoes_earlier_transfers(self, alice: str, bob: str, carol: str) -> None:
        registry = TokenRegistry("AirdropNFT", "ADN")
        registry.mint(alice, 1)
        registry.mint(bob, 2)
        executor = GuardedBatchExecutor(registry)
        calls = [
            encode_transfer_from(alice, carol, 1),
            encode_transfer_from(bob, carol, 2),
        ]

        with pytest.raises(NotOwnerNorApproved):
            executor.execute_batch(alice, calls)
        assert registry.owner_of(1) == alice
        assert registry.owner_of(2) == bob
        assert registry.balance_of(carol) == 0

    def test_returns_decoded_transfers(self, alice: str, bob: str) -> None:
        registry = TokenRegistry("AirdropNFT", "ADN")
        registry.mint(alice, 1)
        transfers = GuardedBatchExecutor(registry).execute_batch(
            alice, [encode_transfer_from(alice, bob, 1)]
        )
        assert [(t.sender, t.recipient, t.token_id) for t in transfers] == [(alice, bob, 1)]
        assert registry.owner_of(1) == bob
