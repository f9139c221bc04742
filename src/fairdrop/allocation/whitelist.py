"""Whitelist verifier — checks (position, principal) against a fixed root.

The root is set once at construction and never changes. Verification is a
pure function of its inputs: it records nothing, so the same proof can be
re-validated any number of times. Single-use is the claim tracker's job.
"""

from __future__ import annotations

from typing import Sequence, Union

from hexbytes import HexBytes

from fairdrop.crypto.hashing import hash_sorted_pair, to_hex, whitelist_leaf

_UINT256_LIMIT = 2 ** 256

ProofElement = Union[str, bytes]


class WhitelistVerifier:
    """Folds an inclusion proof against the configured whitelist root.

    Usage:
        verifier = WhitelistVerifier(snapshot.root)
        entry = snapshot.entry_for(alice)
        verifier.verify(entry.index, alice, entry.proof)  # True
    """

    def __init__(self, root: Union[str, bytes]) -> None:
        root_bytes = bytes(HexBytes(root))
        if len(root_bytes) != 32:
            raise ValueError("Whitelist root must be 32 bytes")
        self._root = root_bytes

    @property
    def root(self) -> str:
        return to_hex(self._root)

    def verify(
        self,
        position: int,
        principal: str,
        proof: Sequence[ProofElement],
    ) -> bool:
        """Return True iff the proof links the entry's leaf to the root.

        Malformed input (bad address, out-of-range position, proof
        elements that are not 32-byte digests) verifies as False.
        """
        if isinstance(position, bool) or not isinstance(position, int):
            return False
        if not 0 <= position < _UINT256_LIMIT:
            return False
        try:
            node = bytes(whitelist_leaf(position, principal))
        except (TypeError, ValueError):
            return False

        for element in proof:
            try:
                sibling = bytes(HexBytes(element))
            except (TypeError, ValueError):
                return False
            if len(sibling) != 32:
                return False
            node = bytes(hash_sorted_pair(node, sibling))

        return node == self._root
