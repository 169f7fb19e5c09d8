"""Broadcast (type 30).

Format: timestamp (I) + value (d) + fee_fraction_int (I) + text

The text is length-prefixed by one byte. Old broadcasts of up to 52 text
bytes used the same layout with padding after the text; longer old
broadcasts carry the raw text with no length byte.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.messages.base import require_min_length, text_or_hex


BROADCAST_MIN_LENGTH = 4 + 8 + 4
MAX_PADDED_TEXT_LENGTH = 52


@dataclass(frozen=True)
class Broadcast:
    """Decoded broadcast."""

    timestamp: int
    value: float
    fee_fraction_int: int
    text: Optional[str] = None
    text_is_hex: bool = False
    message_type: Literal["broadcast"] = field(default="broadcast", init=False)


def _split_text(raw: bytes) -> bytes:
    if not raw:
        return b""
    if raw[0] == len(raw) - 1 or len(raw) <= MAX_PADDED_TEXT_LENGTH:
        return raw[1:1 + raw[0]]
    return raw


def decode_broadcast(payload: bytes) -> Broadcast:
    require_min_length("broadcast", payload, BROADCAST_MIN_LENGTH)
    reader = BinaryReader(payload)
    timestamp = reader.read_uint32()
    value = reader.read_float64()
    fee_fraction_int = reader.read_uint32()
    text, text_is_hex = text_or_hex(_split_text(reader.read_remaining()))
    return Broadcast(
        timestamp=timestamp,
        value=value,
        fee_fraction_int=fee_fraction_int,
        text=text,
        text_is_hex=text_is_hex,
    )
