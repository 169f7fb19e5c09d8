"""BTC payment for an order match (type 11).

Format (64 bytes): tx0_hash (32s) + tx1_hash (32s)
"""

from dataclasses import dataclass, field
from typing import Literal

from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.messages.base import require_length


BTCPAY_LENGTH = 64


@dataclass(frozen=True)
class BTCPay:
    """Decoded BTC payment."""

    tx0_hash: str
    tx1_hash: str
    order_match_id: str
    message_type: Literal["btcpay"] = field(default="btcpay", init=False)


def decode_btcpay(payload: bytes) -> BTCPay:
    require_length("btcpay", payload, BTCPAY_LENGTH)
    reader = BinaryReader(payload)
    tx0_hash = reader.read_bytes(32).hex()
    tx1_hash = reader.read_bytes(32).hex()
    return BTCPay(
        tx0_hash=tx0_hash,
        tx1_hash=tx1_hash,
        order_match_id=f"{tx0_hash}_{tx1_hash}",
    )
