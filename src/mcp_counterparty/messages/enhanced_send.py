"""Enhanced send (type 2).

Legacy format (37-71 bytes):
    asset_id (Q) + quantity (Q) + packed destination (21s) + memo (0-34 bytes)

Modern format: a compact array [asset_id, quantity, destination, memo?].
The modern form is only attempted when the payload opens with a 3- or
4-element array marker. A payload that is not a well-formed compact send
is decoded as legacy; a well-formed one with invalid field values is
rejected outright.
"""

import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

from mcp_counterparty.address import PACKED_ADDRESS_LENGTH, unpack_address
from mcp_counterparty.assets import asset_id_to_name
from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.compact import CompactItem, decode_compact_array, is_array_marker
from mcp_counterparty.config import Network
from mcp_counterparty.errors import CounterpartyDecodeError, DialectExhaustedError
from mcp_counterparty.messages.base import require_min_length, text_or_hex


logger = logging.getLogger(__name__)

ENHANCED_SEND_MIN_LENGTH = 8 + 8 + PACKED_ADDRESS_LENGTH
MAX_MEMO_LENGTH = 34


@dataclass(frozen=True)
class EnhancedSend:
    """Decoded enhanced send."""

    asset: str
    asset_id: int
    quantity: int
    destination: str
    memo: Optional[str] = None
    memo_is_hex: bool = False
    message_type: Literal["enhanced_send"] = field(default="enhanced_send", init=False)


def _build(asset_id: int, quantity: int, packed: bytes, memo: bytes, network: Network) -> EnhancedSend:
    if len(memo) > MAX_MEMO_LENGTH:
        raise CounterpartyDecodeError(
            f"Memo too long: {len(memo)} bytes (maximum {MAX_MEMO_LENGTH})"
        )
    text, is_hex = text_or_hex(memo)
    return EnhancedSend(
        asset=asset_id_to_name(asset_id),
        asset_id=asset_id,
        quantity=quantity,
        destination=unpack_address(packed, network),
        memo=text,
        memo_is_hex=is_hex,
    )


def _compact_fields(payload: bytes) -> tuple[int, int, bytes, bytes]:
    """Split a compact send into its fields, checking only their shape."""
    items: list[CompactItem] = decode_compact_array(payload, (3, 4))
    asset_id, quantity, packed = items[:3]
    memo = items[3] if len(items) == 4 else b""

    if not isinstance(asset_id, int) or not isinstance(quantity, int):
        raise CounterpartyDecodeError("Compact send asset id and quantity must be integers")
    if not isinstance(packed, bytes) or len(packed) != PACKED_ADDRESS_LENGTH:
        raise CounterpartyDecodeError(
            f"Compact send destination must be {PACKED_ADDRESS_LENGTH} bytes"
        )
    if not isinstance(memo, bytes):
        raise CounterpartyDecodeError("Compact send memo must be a byte string")
    return asset_id, quantity, packed, memo


def _decode_legacy(payload: bytes, network: Network) -> EnhancedSend:
    require_min_length("enhanced_send", payload, ENHANCED_SEND_MIN_LENGTH)
    reader = BinaryReader(payload)
    asset_id = reader.read_uint64()
    quantity = reader.read_uint64()
    packed = reader.read_bytes(PACKED_ADDRESS_LENGTH)
    return _build(asset_id, quantity, packed, reader.read_remaining(), network)


def decode_enhanced_send(payload: bytes, network: Network = Network.MAINNET) -> EnhancedSend:
    """Decode an enhanced send payload.

    Args:
        payload: Message bytes after the type id
        network: Network used to render SegWit destinations

    Raises:
        LengthMismatchError: If a legacy payload is shorter than 37 bytes
        DialectExhaustedError: If a payload that looked modern fails both forms
        CounterpartyDecodeError: If a well-formed compact send carries an
            invalid asset, destination or memo
    """
    if not payload or not is_array_marker(payload[0], (3, 4)):
        return _decode_legacy(payload, network)

    try:
        fields = _compact_fields(payload)
    except CounterpartyDecodeError as e:
        logger.debug("Compact enhanced send not recognized (%s), trying legacy", e)
        compact_error = e
    else:
        return _build(*fields, network)

    try:
        return _decode_legacy(payload, network)
    except CounterpartyDecodeError as e:
        raise DialectExhaustedError(
            "enhanced_send", f"compact: {compact_error}; legacy: {e}"
        ) from e
