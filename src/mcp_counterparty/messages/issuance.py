"""Issuance family (types 20, 21, 22, 23).

All variants start with (17 bytes):
    asset_id (Q) + quantity (Q) + divisible (?)

What follows depends on the type:
- 21, 23 (subasset): name length (B) + compacted long name
- 20, 22: deprecated callable block when at least 9 bytes remain,
  callable (?) + call_date (I) + call_price (f)

Remaining bytes are the description. Types 22 and 23 are the lock/reset
variants.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from mcp_counterparty.assets import asset_id_to_name, expand_subasset_longname
from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.message_types import MessageType
from mcp_counterparty.messages.base import require_min_length, text_or_hex


ISSUANCE_MIN_LENGTH = 17
CALLABLE_BLOCK_LENGTH = 9

SUBASSET_TYPES = (MessageType.SUBASSET_ISSUANCE, MessageType.LR_SUBASSET)
LOCK_RESET_TYPES = (MessageType.LR_ISSUANCE, MessageType.LR_SUBASSET)


@dataclass(frozen=True)
class Issuance:
    """Decoded issuance, subasset issuance or lock/reset issuance."""

    message_type_id: int
    asset: str
    asset_id: int
    quantity: int
    divisible: bool
    subasset_longname: Optional[str] = None
    callable: bool = False
    call_date: int = 0
    call_price: float = 0.0
    description: Optional[str] = None
    description_is_hex: bool = False
    lock_reset: bool = False
    message_type: Literal["issuance"] = field(default="issuance", init=False)


def decode_issuance(payload: bytes, message_type_id: int = MessageType.ISSUANCE) -> Issuance:
    require_min_length("issuance", payload, ISSUANCE_MIN_LENGTH)
    reader = BinaryReader(payload)

    asset_id = reader.read_uint64()
    quantity = reader.read_uint64()
    divisible = reader.read_uint8() != 0

    subasset_longname = None
    callable_ = False
    call_date = 0
    call_price = 0.0

    if message_type_id in SUBASSET_TYPES:
        name_length = reader.read_uint8()
        subasset_longname = expand_subasset_longname(reader.read_bytes(name_length))
    elif reader.remaining >= CALLABLE_BLOCK_LENGTH:
        callable_ = reader.read_uint8() != 0
        call_date = reader.read_uint32()
        call_price = reader.read_float32()

    description, description_is_hex = text_or_hex(reader.read_remaining())

    return Issuance(
        message_type_id=int(message_type_id),
        asset=asset_id_to_name(asset_id),
        asset_id=asset_id,
        quantity=quantity,
        divisible=divisible,
        subasset_longname=subasset_longname,
        callable=callable_,
        call_date=call_date,
        call_price=call_price,
        description=description,
        description_is_hex=description_is_hex,
        lock_reset=message_type_id in LOCK_RESET_TYPES,
    )
