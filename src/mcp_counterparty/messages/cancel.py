"""Cancel an open order or bet (type 70).

Format (32 bytes): offer_hash (32s)
"""

from dataclasses import dataclass, field
from typing import Literal

from mcp_counterparty.messages.base import require_length


CANCEL_LENGTH = 32


@dataclass(frozen=True)
class Cancel:
    """Decoded cancel."""

    offer_hash: str
    message_type: Literal["cancel"] = field(default="cancel", init=False)


def decode_cancel(payload: bytes) -> Cancel:
    require_length("cancel", payload, CANCEL_LENGTH)
    return Cancel(offer_hash=payload.hex())
