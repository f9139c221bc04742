"""Cryptographic primitives — packed keccak hashing and the whitelist Merkle tree."""

from fairdrop.crypto.merkle import MerkleTree, WhitelistSnapshot, build_whitelist
from fairdrop.crypto.hashing import commit_digest, whitelist_leaf

__all__ = [
    "MerkleTree",
    "WhitelistSnapshot",
    "build_whitelist",
    "commit_digest",
    "whitelist_leaf",
]
