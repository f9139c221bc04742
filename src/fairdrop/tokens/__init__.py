"""Token ownership registry and the guarded transfer multicall."""

from fairdrop.tokens.batch import (
    TRANSFER_FROM_SELECTOR,
    GuardedBatchExecutor,
    TransferCall,
    encode_call,
    encode_transfer_from,
)
from fairdrop.tokens.registry import TokenRegistry

__all__ = [
    "TRANSFER_FROM_SELECTOR",
    "GuardedBatchExecutor",
    "TokenRegistry",
    "TransferCall",
    "encode_call",
    "encode_transfer_from",
]
