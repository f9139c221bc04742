"""Keccak-256 hashing with Solidity packed encoding.

These are the only encodings the engine hashes, and they must match the
offline tree builder byte for byte:

    leaf   = keccak256(abi.encodePacked(uint256 position, address principal))
    commit = keccak256(abi.encodePacked(address principal, string secret))
    node   = keccak256(min(a, b) ++ max(a, b))
"""

from __future__ import annotations

from hexbytes import HexBytes
from web3 import Web3

from fairdrop.models.sale import normalize_principal


def whitelist_leaf(position: int, principal: str) -> HexBytes:
    """Leaf digest for a (position, principal) whitelist entry."""
    if position < 0:
        raise ValueError("Position must be non-negative")
    return Web3.solidity_keccak(
        ["uint256", "address"], [position, normalize_principal(principal)]
    )


def commit_digest(principal: str, secret: str) -> HexBytes:
    """Digest stored at commit time and recomputed at reveal."""
    return Web3.solidity_keccak(
        ["address", "string"], [normalize_principal(principal), secret]
    )


def hash_sorted_pair(a: bytes, b: bytes) -> HexBytes:
    """Hash two nodes in canonical (byte-wise sorted) order."""
    if a <= b:
        return Web3.keccak(a + b)
    return Web3.keccak(b + a)


def to_hex(value: bytes) -> str:
    """0x-prefixed lowercase hex."""
    return Web3.to_hex(value)


def from_hex(value: str) -> HexBytes:
    return HexBytes(value)
