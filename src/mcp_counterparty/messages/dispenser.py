"""Dispenser (type 12) and dispense (type 13).

Dispenser format (33 bytes, up to 75):
    asset_id (Q) + give_quantity (Q) + escrow_quantity (Q)
    + mainchainrate (Q) + status (B)
    + packed open address (21s), only with status 1
    + packed oracle address (21s), optional

A dispense carries no fields of its own; the BTC output it pays decides
what is dispensed.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from mcp_counterparty.address import PACKED_ADDRESS_LENGTH, unpack_address
from mcp_counterparty.assets import asset_id_to_name
from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.config import Network
from mcp_counterparty.errors import CounterpartyDecodeError
from mcp_counterparty.messages.base import require_min_length


DISPENSER_MIN_LENGTH = 8 * 4 + 1

STATUS_OPEN = 0
STATUS_OPEN_EMPTY_ADDRESS = 1
STATUS_CLOSED = 10
STATUS_CLOSING = 11

STATUS_NAMES = {
    STATUS_OPEN: "open",
    STATUS_OPEN_EMPTY_ADDRESS: "open_empty_address",
    STATUS_CLOSED: "closed",
    STATUS_CLOSING: "closing",
}


@dataclass(frozen=True)
class Dispenser:
    """Decoded dispenser."""

    asset: str
    asset_id: int
    give_quantity: int
    escrow_quantity: int
    mainchainrate: int
    status: int
    open_address: Optional[str] = None
    oracle_address: Optional[str] = None
    message_type: Literal["dispenser"] = field(default="dispenser", init=False)

    @property
    def status_name(self) -> str:
        return STATUS_NAMES.get(self.status, f"unknown_{self.status}")


@dataclass(frozen=True)
class Dispense:
    """Decoded dispense."""

    data: str = ""
    message_type: Literal["dispense"] = field(default="dispense", init=False)


def decode_dispenser(payload: bytes, network: Network = Network.MAINNET) -> Dispenser:
    """Decode a dispenser payload.

    Raises:
        LengthMismatchError: If the payload is shorter than 33 bytes
        BufferUnderflowError: If an address is cut short
        CounterpartyDecodeError: If bytes follow the oracle address
    """
    require_min_length("dispenser", payload, DISPENSER_MIN_LENGTH)
    reader = BinaryReader(payload)

    asset_id = reader.read_uint64()
    give_quantity = reader.read_uint64()
    escrow_quantity = reader.read_uint64()
    mainchainrate = reader.read_uint64()
    status = reader.read_uint8()

    open_address = None
    if status == STATUS_OPEN_EMPTY_ADDRESS:
        open_address = unpack_address(reader.read_bytes(PACKED_ADDRESS_LENGTH), network)

    oracle_address = None
    if not reader.at_end:
        oracle_address = unpack_address(reader.read_bytes(PACKED_ADDRESS_LENGTH), network)

    if not reader.at_end:
        raise CounterpartyDecodeError(f"{reader.remaining} trailing bytes after dispenser")

    return Dispenser(
        asset=asset_id_to_name(asset_id),
        asset_id=asset_id,
        give_quantity=give_quantity,
        escrow_quantity=escrow_quantity,
        mainchainrate=mainchainrate,
        status=status,
        open_address=open_address,
        oracle_address=oracle_address,
    )


def decode_dispense(payload: bytes) -> Dispense:
    # Usually a single zero byte
    return Dispense(data=payload.hex())
