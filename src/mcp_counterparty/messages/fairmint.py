"""Fairmint (type 91).

Modern format: compact array [asset_id, quantity]
Legacy format: UTF-8 string "ASSET|quantity"
"""

import logging
from dataclasses import dataclass, field
from typing import Literal

from mcp_counterparty.assets import asset_id_to_name
from mcp_counterparty.compact import decode_compact_array, is_array_marker
from mcp_counterparty.errors import CounterpartyDecodeError, DialectExhaustedError
from mcp_counterparty.messages.base import parse_asset_name, parse_decimal, split_text_fields


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fairmint:
    """Decoded fairmint."""

    asset: str
    quantity: int
    message_type: Literal["fairmint"] = field(default="fairmint", init=False)


def _compact_fields(payload: bytes) -> tuple[int, int]:
    asset_id, quantity = decode_compact_array(payload, (2,))
    if not isinstance(asset_id, int) or not isinstance(quantity, int):
        raise CounterpartyDecodeError("Compact fairmint fields must be integers")
    return asset_id, quantity


def _decode_legacy(payload: bytes) -> Fairmint:
    asset, quantity = split_text_fields("fairmint", payload, 2)
    return Fairmint(
        asset=parse_asset_name(asset),
        quantity=parse_decimal("fairmint", "quantity", quantity),
    )


def decode_fairmint(payload: bytes) -> Fairmint:
    """Decode a fairmint payload, compact form first.

    Raises:
        DialectExhaustedError: If neither encoding matches
        AssetError: If a well-formed compact fairmint names an invalid asset id
    """
    if payload and is_array_marker(payload[0], (2,)):
        try:
            asset_id, quantity = _compact_fields(payload)
        except CounterpartyDecodeError as e:
            logger.debug("Compact fairmint not recognized (%s), trying legacy", e)
        else:
            return Fairmint(asset=asset_id_to_name(asset_id), quantity=quantity)

    try:
        return _decode_legacy(payload)
    except CounterpartyDecodeError as e:
        raise DialectExhaustedError("fairmint", str(e)) from e
