"""Sweep (type 4).

Format: packed destination (21s) + flags (B) + optional memo
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from mcp_counterparty.address import PACKED_ADDRESS_LENGTH, unpack_address
from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.config import Network
from mcp_counterparty.messages.base import require_min_length, text_or_hex


SWEEP_MIN_LENGTH = PACKED_ADDRESS_LENGTH + 1

# Flag bits
FLAG_BALANCES = 0x01
FLAG_OWNERSHIP = 0x02
FLAG_BINARY_MEMO = 0x04


@dataclass(frozen=True)
class Sweep:
    """Decoded sweep."""

    destination: str
    flags: int
    memo: Optional[str] = None
    memo_is_hex: bool = False
    message_type: Literal["sweep"] = field(default="sweep", init=False)

    @property
    def sweeps_balances(self) -> bool:
        return bool(self.flags & FLAG_BALANCES)

    @property
    def sweeps_ownership(self) -> bool:
        return bool(self.flags & FLAG_OWNERSHIP)


def decode_sweep(payload: bytes, network: Network = Network.MAINNET) -> Sweep:
    require_min_length("sweep", payload, SWEEP_MIN_LENGTH)
    reader = BinaryReader(payload)
    destination = unpack_address(reader.read_bytes(PACKED_ADDRESS_LENGTH), network)
    flags = reader.read_uint8()
    raw_memo = reader.read_remaining()
    if raw_memo and flags & FLAG_BINARY_MEMO:
        memo, memo_is_hex = raw_memo.hex(), True
    else:
        memo, memo_is_hex = text_or_hex(raw_memo)
    return Sweep(destination=destination, flags=flags, memo=memo, memo_is_hex=memo_is_hex)
