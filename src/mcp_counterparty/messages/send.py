"""Classic send (type 0).

Format (16 bytes): asset_id (Q) + quantity (Q)

The destination is not part of the payload; by protocol convention it is the
first non-OP_RETURN output of the transaction.
"""

from dataclasses import dataclass, field
from typing import Literal

from mcp_counterparty.assets import asset_id_to_name
from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.messages.base import require_length


SEND_LENGTH = 16


@dataclass(frozen=True)
class Send:
    """Decoded classic send."""

    asset: str
    asset_id: int
    quantity: int
    message_type: Literal["send"] = field(default="send", init=False)


def decode_send(payload: bytes) -> Send:
    require_length("send", payload, SEND_LENGTH)
    reader = BinaryReader(payload)
    asset_id = reader.read_uint64()
    quantity = reader.read_uint64()
    return Send(asset=asset_id_to_name(asset_id), asset_id=asset_id, quantity=quantity)
