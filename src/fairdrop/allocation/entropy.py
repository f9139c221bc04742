"""Entropy providers for reveal-time token ID derivation.

Reveal mixes in entropy that did not exist when the participant committed,
so a secret cannot be chosen to target an identifier. A deployment draws it
from execution-context data; tests inject a fixed value.
"""

from __future__ import annotations

import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from web3 import Web3


@dataclass(frozen=True)
class BlockContext:
    """Execution-context data visible to a single operation."""
    number: int
    timestamp: int
    prevrandao: bytes


class EntropyProvider(ABC):
    """Source of 32-byte entropy values."""

    @abstractmethod
    def draw(self) -> bytes:
        """Return entropy for the current operation."""

    def advance(self) -> None:
        """Move to the context of the next operation."""


class BlockContextEntropy(EntropyProvider):
    """Entropy from a simulated block context that advances per operation.

    Every operation runs in a fresh block: the number increments, the
    timestamp never goes backwards, and prevrandao is fresh randomness.
    """

    def __init__(
        self,
        start_block: int = 1,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._clock = clock or time.time
        self._context = BlockContext(
            number=start_block,
            timestamp=int(self._clock()),
            prevrandao=secrets.token_bytes(32),
        )

    @property
    def context(self) -> BlockContext:
        return self._context

    def advance(self) -> None:
        previous = self._context
        self._context = BlockContext(
            number=previous.number + 1,
            timestamp=max(previous.timestamp + 1, int(self._clock())),
            prevrandao=secrets.token_bytes(32),
        )

    def draw(self) -> bytes:
        ctx = self._context
        return bytes(Web3.solidity_keccak(
            ["bytes32", "uint256", "uint256"],
            [ctx.prevrandao, ctx.number, ctx.timestamp],
        ))


class StaticEntropy(EntropyProvider):
    """Deterministic stub: always returns the same value."""

    def __init__(self, value: bytes = b"\x00" * 32) -> None:
        if len(value) != 32:
            raise ValueError("Entropy value must be 32 bytes")
        self._value = value

    def draw(self) -> bytes:
        return self._value
