"""Distribution configuration — construction parameters for a drop.

Loaded from a JSON file or from the environment. Environment loading reads
a .env file first (python-dotenv), then:

    DROP_NAME, DROP_SYMBOL          display name and symbol
    DROP_WHITELIST_ROOT             0x-prefixed 32-byte root
    DROP_CLAIM_MODE                 per_principal | per_position (or 0 / 1)
    DROP_MAX_SUPPLY                 integer, default 1000
    DROP_PUBLIC_MINT_FEE            integer wei, default 10**16 (0.01 ether)
    DROP_OWNER                      operator address
    PRIVATE_KEY                     used to derive the owner if DROP_OWNER is unset
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from dotenv import load_dotenv
from eth_account import Account
from hexbytes import HexBytes

from fairdrop.models.sale import ClaimMode, normalize_principal

DEFAULT_MAX_SUPPLY = 1000
DEFAULT_PUBLIC_MINT_FEE = 10 ** 16


@dataclass(frozen=True)
class DropConfig:
    """Immutable construction parameters. Validated on creation."""
    name: str
    symbol: str
    whitelist_root: str
    claim_mode: ClaimMode
    owner: str
    max_supply: int = DEFAULT_MAX_SUPPLY
    public_mint_fee: int = DEFAULT_PUBLIC_MINT_FEE

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name is required")
        if not self.symbol:
            raise ValueError("symbol is required")
        root = HexBytes(self.whitelist_root)
        if len(root) != 32:
            raise ValueError("whitelist_root must be a 32-byte hex digest")
        if self.max_supply <= 0:
            raise ValueError("max_supply must be positive")
        if self.public_mint_fee < 0:
            raise ValueError("public_mint_fee must be non-negative")
        # Frozen dataclass: normalize through object.__setattr__.
        object.__setattr__(self, "whitelist_root", "0x" + bytes(root).hex())
        object.__setattr__(self, "claim_mode", parse_claim_mode(self.claim_mode))
        object.__setattr__(self, "owner", normalize_principal(self.owner))

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> DropConfig:
        return DropConfig(
            name=data["name"],
            symbol=data["symbol"],
            whitelist_root=data["whitelist_root"],
            claim_mode=parse_claim_mode(data.get("claim_mode", ClaimMode.PER_PRINCIPAL)),
            owner=data["owner"],
            max_supply=int(data.get("max_supply", DEFAULT_MAX_SUPPLY)),
            public_mint_fee=int(data.get("public_mint_fee", DEFAULT_PUBLIC_MINT_FEE)),
        )

    @staticmethod
    def from_json(path: Path) -> DropConfig:
        return DropConfig.from_mapping(json.loads(path.read_text(encoding="utf-8")))

    @staticmethod
    def from_env(env_file: Optional[Path] = None) -> DropConfig:
        """Load from environment variables, reading env_file (or ./.env) first."""
        load_dotenv(env_file)

        owner = os.getenv("DROP_OWNER")
        if not owner:
            private_key = os.getenv("PRIVATE_KEY")
            if not private_key:
                raise ValueError("Set DROP_OWNER or PRIVATE_KEY")
            owner = Account.from_key(private_key).address

        root = os.getenv("DROP_WHITELIST_ROOT")
        if not root:
            raise ValueError("DROP_WHITELIST_ROOT is required")

        return DropConfig(
            name=os.getenv("DROP_NAME", "AirdropNFT"),
            symbol=os.getenv("DROP_SYMBOL", "ADN"),
            whitelist_root=root,
            claim_mode=parse_claim_mode(os.getenv("DROP_CLAIM_MODE", "per_principal")),
            owner=owner,
            max_supply=int(os.getenv("DROP_MAX_SUPPLY", str(DEFAULT_MAX_SUPPLY))),
            public_mint_fee=int(os.getenv("DROP_PUBLIC_MINT_FEE", str(DEFAULT_PUBLIC_MINT_FEE))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "whitelist_root": self.whitelist_root,
            "claim_mode": self.claim_mode.name.lower(),
            "owner": self.owner,
            "max_supply": self.max_supply,
            "public_mint_fee": self.public_mint_fee,
        }


def parse_claim_mode(value: Union[str, int, ClaimMode]) -> ClaimMode:
    """Accept a ClaimMode, its integer selector, or its name."""
    if isinstance(value, ClaimMode):
        return value
    if isinstance(value, int):
        return ClaimMode(value)
    text = str(value).strip()
    if text.isdigit():
        return ClaimMode(int(text))
    try:
        return ClaimMode[text.upper()]
    except KeyError:
        raise ValueError(f"Unknown claim mode: {value!r}") from None
