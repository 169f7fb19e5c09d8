"""Destroy (type 110).

Format: asset_id (Q) + quantity (Q) + optional tag
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from mcp_counterparty.assets import asset_id_to_name
from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.messages.base import require_min_length, text_or_hex


DESTROY_MIN_LENGTH = 16


@dataclass(frozen=True)
class Destroy:
    """Decoded destroy."""

    asset: str
    quantity: int
    tag: Optional[str] = None
    tag_is_hex: bool = False
    message_type: Literal["destroy"] = field(default="destroy", init=False)


def decode_destroy(payload: bytes) -> Destroy:
    require_min_length("destroy", payload, DESTROY_MIN_LENGTH)
    reader = BinaryReader(payload)
    asset_id = reader.read_uint64()
    quantity = reader.read_uint64()
    tag, tag_is_hex = text_or_hex(reader.read_remaining())
    return Destroy(
        asset=asset_id_to_name(asset_id),
        quantity=quantity,
        tag=tag,
        tag_is_hex=tag_is_hex,
    )
