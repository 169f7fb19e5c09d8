"""DEX order (type 10).

Format (42 bytes): give_id (Q) + give_quantity (Q) + get_id (Q) +
get_quantity (Q) + expiration (H) + fee_required (Q)
"""

from dataclasses import dataclass, field
from typing import Literal

from mcp_counterparty.assets import asset_id_to_name
from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.messages.base import require_length


ORDER_LENGTH = 42


@dataclass(frozen=True)
class Order:
    """Decoded order."""

    give_asset: str
    give_quantity: int
    get_asset: str
    get_quantity: int
    expiration: int  # blocks
    fee_required: int
    message_type: Literal["order"] = field(default="order", init=False)


def decode_order(payload: bytes) -> Order:
    require_length("order", payload, ORDER_LENGTH)
    reader = BinaryReader(payload)
    give_id = reader.read_uint64()
    give_quantity = reader.read_uint64()
    get_id = reader.read_uint64()
    get_quantity = reader.read_uint64()
    expiration = reader.read_uint16()
    fee_required = reader.read_uint64()

    return Order(
        give_asset=asset_id_to_name(give_id),
        give_quantity=give_quantity,
        get_asset=asset_id_to_name(get_id),
        get_quantity=get_quantity,
        expiration=expiration,
        fee_required=fee_required,
    )
