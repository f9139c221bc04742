"""Shared fixtures: deterministic principals, a built whitelist, a service."""

from typing import Callable

import pytest
from eth_account import Account

from fairdrop.allocation.entropy import StaticEntropy
from fairdrop.config import DropConfig
from fairdrop.crypto.merkle import WhitelistSnapshot, build_whitelist
from fairdrop.models.sale import ClaimMode
from fairdrop.service import DropService


def _address(n: int) -> str:
    return Account.from_key("0x" + f"{n:064x}").address


@pytest.fixture
def owner() -> str:
    return _address(1)


@pytest.fixture
def alice() -> str:
    return _address(2)


@pytest.fixture
def bob() -> str:
    return _address(3)


@pytest.fixture
def carol() -> str:
    return _address(4)


@pytest.fixture
def outsider() -> str:
    return _address(5)


@pytest.fixture
def whitelist(alice: str, bob: str, carol: str) -> WhitelistSnapshot:
    """Root over A, B, C at positions 0, 1, 2."""
    return build_whitelist([alice, bob, carol])


@pytest.fixture
def make_config(owner: str, whitelist: WhitelistSnapshot) -> Callable[..., DropConfig]:
    def _make(**overrides) -> DropConfig:
        params = {
            "name": "AirdropNFT",
            "symbol": "ADN",
            "whitelist_root": whitelist.root,
            "claim_mode": ClaimMode.PER_PRINCIPAL,
            "owner": owner,
        }
        params.update(overrides)
        return DropConfig(**params)
    return _make


@pytest.fixture
def make_service(make_config: Callable[..., DropConfig]) -> Callable[..., DropService]:
    def _make(entropy: bytes = b"\x11" * 32, **overrides) -> DropService:
        return DropService(make_config(**overrides), entropy=StaticEntropy(entropy))
    return _make


@pytest.fixture
def service(make_service: Callable[..., DropService]) -> DropService:
    return make_service()
