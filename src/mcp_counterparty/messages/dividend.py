"""Dividend (type 50).

Two layouts, told apart by length alone:
- 16 bytes: quantity_per_unit (Q) + asset_id (Q), paid in XCP
- 24 bytes: quantity_per_unit (Q) + asset_id (Q) + dividend_asset_id (Q)
"""

from dataclasses import dataclass, field
from typing import Literal

from mcp_counterparty.assets import asset_id_to_name
from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.messages.base import require_length


LEGACY_DIVIDEND_LENGTH = 16
DIVIDEND_LENGTH = 24


@dataclass(frozen=True)
class Dividend:
    """Decoded dividend."""

    asset: str
    quantity_per_unit: int
    dividend_asset: str
    message_type: Literal["dividend"] = field(default="dividend", init=False)


def decode_dividend(payload: bytes) -> Dividend:
    require_length("dividend", payload, LEGACY_DIVIDEND_LENGTH, DIVIDEND_LENGTH)
    reader = BinaryReader(payload)
    quantity_per_unit = reader.read_uint64()
    asset_id = reader.read_uint64()
    dividend_asset = "XCP"
    if len(payload) == DIVIDEND_LENGTH:
        dividend_asset = asset_id_to_name(reader.read_uint64())

    return Dividend(
        asset=asset_id_to_name(asset_id),
        quantity_per_unit=quantity_per_unit,
        dividend_asset=dividend_asset,
    )
