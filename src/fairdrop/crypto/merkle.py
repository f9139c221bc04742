"""Whitelist Merkle tree — builds the root and per-principal inclusion proofs.

Leaves are keccak256(abi.encodePacked(uint256 index, address principal)),
in list order. Internal nodes hash the two children in sorted order, so a
proof is a plain list of sibling digests with no left/right markers. An
odd node at the end of a level is promoted unchanged to the next level.

The output matches the merkle-proof.json format consumed by the contract
tests:

    {"root": "0x...", "proofs": {"0xabc...": {"index": 0, "proof": ["0x..."]}}}

Proof-file keys are lowercase addresses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from fairdrop.crypto.hashing import from_hex, hash_sorted_pair, to_hex, whitelist_leaf
from fairdrop.models.sale import normalize_principal


@dataclass(frozen=True)
class MerkleProof:
    """An inclusion proof for a single leaf."""
    leaf_hash: bytes
    path: list[bytes]
    root: bytes


class MerkleTree:
    """A sorted-pair keccak Merkle tree.

    Usage:
        tree = MerkleTree()
        tree.add_leaf(whitelist_leaf(0, alice))
        tree.add_leaf(whitelist_leaf(1, bob))
        root = tree.compute_root()
        proof = tree.inclusion_proof(whitelist_leaf(0, alice))
    """

    def __init__(self) -> None:
        self._leaves: list[bytes] = []
        self._tree: list[list[bytes]] = []
        self._computed = False

    def add_leaf(self, leaf_hash: bytes) -> None:
        """Add a leaf hash. Must be called before compute_root."""
        if self._computed:
            raise RuntimeError("Tree already computed. Create a new tree.")
        if len(leaf_hash) != 32:
            raise ValueError("Leaf hash must be 32 bytes")
        self._leaves.append(bytes(leaf_hash))

    @property
    def leaf_count(self) -> int:
        return len(self._leaves)

    def compute_root(self) -> bytes:
        """Compute the Merkle root.

        A single-leaf tree has the leaf as its root. An empty tree
        has no root.
        """
        if not self._leaves:
            raise ValueError("Cannot compute root of an empty tree")

        self._tree = [list(self._leaves)]
        current_level = self._tree[0]
        while len(current_level) > 1:
            next_level: list[bytes] = []
            for i in range(0, len(current_level), 2):
                if i + 1 < len(current_level):
                    next_level.append(
                        bytes(hash_sorted_pair(current_level[i], current_level[i + 1]))
                    )
                else:
                    next_level.append(current_level[i])
            self._tree.append(next_level)
            current_level = next_level

        self._computed = True
        return current_level[0]

    def inclusion_proof(self, leaf_hash: bytes) -> Optional[MerkleProof]:
        """Generate an inclusion proof for a leaf.

        Returns None if the leaf is not in the tree.
        Must call compute_root first.
        """
        if not self._computed:
            raise RuntimeError("Must call compute_root before generating proofs")

        leaves = self._tree[0]
        leaf = bytes(leaf_hash)
        if leaf not in leaves:
            return None

        idx = leaves.index(leaf)
        path: list[bytes] = []
        for level in self._tree[:-1]:
            sibling_idx = idx + 1 if idx % 2 == 0 else idx - 1
            if sibling_idx < len(level):
                path.append(level[sibling_idx])
            idx //= 2

        return MerkleProof(leaf_hash=leaf, path=path, root=self._tree[-1][0])


@dataclass(frozen=True)
class WhitelistEntry:
    """A principal's slot and proof in a built whitelist."""
    principal: str
    index: int
    proof: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class WhitelistSnapshot:
    """Root plus every principal's inclusion proof."""
    root: str
    entries: dict[str, WhitelistEntry]

    def entry_for(self, principal: str) -> Optional[WhitelistEntry]:
        return self.entries.get(normalize_principal(principal).lower())

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "proofs": {
                key: {"index": entry.index, "proof": list(entry.proof)}
                for key, entry in self.entries.items()
            },
        }

    def write(self, path: Path) -> None:
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> WhitelistSnapshot:
        entries = {}
        for address, item in data["proofs"].items():
            principal = normalize_principal(address)
            entries[principal.lower()] = WhitelistEntry(
                principal=principal,
                index=int(item["index"]),
                proof=[to_hex(from_hex(p)) for p in item["proof"]],
            )
        return WhitelistSnapshot(root=to_hex(from_hex(data["root"])), entries=entries)

    @staticmethod
    def load(path: Path) -> WhitelistSnapshot:
        return WhitelistSnapshot.from_dict(json.loads(path.read_text(encoding="utf-8")))


def build_whitelist(principals: Iterable[str]) -> WhitelistSnapshot:
    """Build the whitelist tree over principals at positions 0..n-1.

    Raises ValueError on an empty list or a duplicated principal.
    """
    ordered = [normalize_principal(p) for p in principals]
    if not ordered:
        raise ValueError("Whitelist must contain at least one principal")
    if len({p.lower() for p in ordered}) != len(ordered):
        raise ValueError("Whitelist contains duplicate principals")

    tree = MerkleTree()
    leaves = [whitelist_leaf(i, p) for i, p in enumerate(ordered)]
    for leaf in leaves:
        tree.add_leaf(leaf)
    root = tree.compute_root()

    entries: dict[str, WhitelistEntry] = {}
    for i, (principal, leaf) in enumerate(zip(ordered, leaves)):
        proof = tree.inclusion_proof(leaf)
        assert proof is not None
        entries[principal.lower()] = WhitelistEntry(
            principal=principal,
            index=i,
            proof=[to_hex(node) for node in proof.path],
        )
    return WhitelistSnapshot(root=to_hex(root), entries=entries)
