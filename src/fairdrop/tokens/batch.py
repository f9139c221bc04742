"""Guarded batch executor — a multicall restricted to token transfers.

Every call in a batch must be ABI-encoded transferFrom(address,address,uint256)
calldata with a non-zero sender. The whole batch is validated before the
first call is dispatched; any other selector, or a body that does not decode,
rejects the batch. Calls are dispatched in order as the batch's caller,
against the registry's normal transfer entry point, so ownership and approval
rules still apply to each one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from fairdrop.errors import DisallowedOperation, ZeroSender
from fairdrop.models.sale import ZERO_ADDRESS, normalize_principal
from fairdrop.tokens.registry import TokenRegistry

TRANSFER_FROM_SIGNATURE = "transferFrom(address,address,uint256)"
TRANSFER_FROM_SELECTOR = function_signature_to_4byte_selector(TRANSFER_FROM_SIGNATURE)
_TRANSFER_FROM_ARGS = ["address", "address", "uint256"]


@dataclass(frozen=True)
class TransferCall:
    """A decoded transferFrom call."""
    sender: str
    recipient: str
    token_id: int


def encode_call(signature: str, arg_types: Sequence[str], args: Sequence[Any]) -> bytes:
    """Encode calldata: 4-byte selector followed by ABI-encoded arguments."""
    return function_signature_to_4byte_selector(signature) + encode(list(arg_types), list(args))


def encode_transfer_from(sender: str, recipient: str, token_id: int) -> bytes:
    return encode_call(
        TRANSFER_FROM_SIGNATURE,
        _TRANSFER_FROM_ARGS,
        [normalize_principal(sender), normalize_principal(recipient), token_id],
    )


def decode_transfer_call(data: bytes) -> TransferCall:
    """Decode one batched call, rejecting anything but a valid transfer."""
    data = bytes(data)
    if data[:4] != TRANSFER_FROM_SELECTOR:
        raise DisallowedOperation(f"selector 0x{data[:4].hex()}")
    try:
        sender, recipient, token_id = decode(_TRANSFER_FROM_ARGS, data[4:])
    except DecodingError as exc:
        raise DisallowedOperation(f"malformed transfer calldata ({exc})") from exc
    sender = normalize_principal(sender)
    if sender == ZERO_ADDRESS:
        raise ZeroSender()
    return TransferCall(
        sender=sender,
        recipient=normalize_principal(recipient),
        token_id=token_id,
    )


class GuardedBatchExecutor:
    """Validates then dispatches a batch of transfer calls."""

    def __init__(self, registry: TokenRegistry) -> None:
        self._registry = registry

    def validate(self, calls: Sequence[bytes]) -> list[TransferCall]:
        return [decode_transfer_call(call) for call in calls]

    def execute_batch(self, caller: str, calls: Sequence[bytes]) -> list[TransferCall]:
        """Run every call or none. Returns the decoded transfers.

        If a dispatch fails, transfers already applied in this batch are
        undone before the error propagates.
        """
        caller = normalize_principal(caller)
        transfers = self.validate(calls)
        before = self._registry.snapshot()
        try:
            for transfer in transfers:
                self._registry.transfer_from(
                    caller, transfer.sender, transfer.recipient, transfer.token_id
                )
        except Exception:
            self._registry.restore(before)
            raise
        return transfers
