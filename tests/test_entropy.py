"""Tests for reveal-time entropy providers."""

import pytest

from fairdrop.allocation.entropy import BlockContextEntropy, StaticEntropy


class TestBlockContextEntropy:
    def test_advance_moves_block(self) -> None:
        entropy = BlockContextEntropy(start_block=100, clock=lambda: 1_700_000_000)
        first = entropy.context
        first_draw = entropy.draw()
        assert entropy.draw() == first_draw

        entropy.advance()
        second = entropy.context
        assert second.number == 101
        assert second.timestamp == first.timestamp + 1
        assert len(entropy.draw()) == 32
        assert entropy.draw() != first_draw

    def test_timestamp_follows_clock(self) -> None:
        now = [1_700_000_000]
        entropy = BlockContextEntropy(clock=lambda: now[0])
        now[0] += 60
        entropy.advance()
        assert entropy.context.timestamp == 1_700_000_060


class TestStaticEntropy:
    def test_fixed_value(self) -> None:
        entropy = StaticEntropy(b"\x07" * 32)
        entropy.advance()
        assert entropy.draw() == b"\x07" * 32

    def test_rejects_wrong_length(self) -> None:
        with pytest.raises(ValueError):
            StaticEntropy(b"\x07")
