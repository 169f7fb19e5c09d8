"""UTXO balance moves: detach (type 100) and attach (type 101).

Both are UTF-8 strings of '|'-separated fields:
    detach: "source|destination|ASSET|quantity"
    attach: "ASSET|quantity|destination_vout"

An empty destination_vout leaves the choice of output to the protocol.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from mcp_counterparty.messages.base import parse_asset_name, parse_decimal, split_text_fields


@dataclass(frozen=True)
class Detach:
    """Decoded detach (balance moved from a UTXO)."""

    source: str
    destination: str
    asset: str
    quantity: int
    message_type: Literal["detach"] = field(default="detach", init=False)


@dataclass(frozen=True)
class Attach:
    """Decoded attach (balance moved onto a UTXO)."""

    asset: str
    quantity: int
    destination_vout: Optional[int] = None
    message_type: Literal["attach"] = field(default="attach", init=False)


def decode_detach(payload: bytes) -> Detach:
    source, destination, asset, quantity = split_text_fields("detach", payload, 4)
    return Detach(
        source=source,
        destination=destination,
        asset=parse_asset_name(asset),
        quantity=parse_decimal("detach", "quantity", quantity),
    )


def decode_attach(payload: bytes) -> Attach:
    asset, quantity, destination_vout = split_text_fields("attach", payload, 3)
    return Attach(
        asset=parse_asset_name(asset),
        quantity=parse_decimal("attach", "quantity", quantity),
        destination_vout=(
            parse_decimal("attach", "destination_vout", destination_vout)
            if destination_vout else None
        ),
    )
