"""Tests for the pull-payment contribution ledger."""

import pytest

from fairdrop.compensation.ledger import ContributionLedger
from fairdrop.compensation.treasury import Treasury
from fairdrop.errors import NothingToWithdraw, ZeroContribution
from fairdrop.service import DropService

AMOUNT = 10 ** 17  # 0.1 ether


class TestLedger:
    def test_credit_accumulates(self, alice: str) -> None:
        ledger = ContributionLedger()
        assert ledger.credit(alice, 5) == 5
        assert ledger.credit(alice.lower(), 7) == 12
        assert ledger.owed(alice) == 12
        assert ledger.total_owed == 12

    def test_zero_credit_rejected(self, alice: str) -> None:
        with pytest.raises(ZeroContribution):
            ContributionLedger().credit(alice, 0)

    def test_withdraw_zeroes_before_send(self, alice: str) -> None:
        ledger = ContributionLedger()
        ledger.credit(alice, 9)
        seen = []

        def send(principal: str, amount: int) -> None:
            seen.append((principal, amount, ledger.owed(principal)))

        assert ledger.withdraw(alice, send) == 9
        assert seen == [(alice, 9, 0)]

    def test_nothing_to_withdraw(self, alice: str) -> None:
        with pytest.raises(NothingToWithdraw):
            ContributionLedger().withdraw(alice, lambda p, a: None)


class TestServiceSettlement:
    def test_credit_then_withdraw(self, service: DropService, owner: str, alice: str) -> None:
        result = service.credit(owner, alice, payment=AMOUNT)
        assert result.success
        assert service.owed(alice) == AMOUNT
        assert service.contract_balance == AMOUNT

        result = service.withdraw(alice)
        assert result.success
        assert result.data["amount"] == AMOUNT
        assert service.native_balance(alice) == AMOUNT
        assert service.owed(alice) == 0
        assert service.contract_balance == 0

    def test_repeat_withdraw_fails_cleanly(self, service: DropService, owner: str, alice: str) -> None:
        service.credit(owner, alice, payment=AMOUNT)
        service.withdraw(alice)
        result = service.withdraw(alice)
        assert result.code == "NothingToWithdraw"
        assert service.native_balance(alice) == AMOUNT

    def test_any_phase(self, service: DropService, alice: str, bob: str) -> None:
        # Bob funds alice while the sale is still closed.
        assert service.credit(bob, alice, payment=3).success
        assert service.withdraw(alice).success

    def test_zero_payment_rejected(self, service: DropService, owner: str, alice: str) -> None:
        assert service.credit(owner, alice, payment=0).code == "ZeroContribution"

    def test_reentrant_withdraw_sees_zero(self, service: DropService, owner: str, alice: str) -> None:
        service.credit(owner, alice, payment=AMOUNT)
        inner_results = []

        def reenter(principal: str, amount: int) -> None:
            inner_results.append(service.withdraw(principal))

        service.set_payout_hook(reenter)
        assert service.withdraw(alice).success
        assert [r.code for r in inner_results] == ["NothingToWithdraw"]
        assert service.native_balance(alice) == AMOUNT
        assert service.contract_balance == 0

    def test_failed_payout_restores_balance(self, service: DropService, owner: str, alice: str) -> None:
        service.credit(owner, alice, payment=AMOUNT)

        def reject(principal: str, amount: int) -> None:
            raise RuntimeError("recipient rejected value")

        service.set_payout_hook(reject)
        with pytest.raises(RuntimeError):
            service.withdraw(alice)
        assert service.owed(alice) == AMOUNT
        assert service.native_balance(alice) == 0
        assert service.contract_balance == AMOUNT


class TestTreasury:
    def test_cannot_overpay(self, alice: str) -> None:
        treasury = Treasury()
        treasury.receive(5)
        with pytest.raises(RuntimeError):
            treasury.pay(alice, 6)
