"""Counterparty message unpacking and decoder dispatch.

A Counterparty message (after any ARC4 de-obfuscation) is:
- Prefix (8 bytes): "CNTRPRTY"
- Type id: 1 byte when non-zero, otherwise 4 bytes big-endian
- Payload (variable): type-specific data
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Union

from mcp_counterparty.binary import BinaryReader, hex_to_bytes
from mcp_counterparty.config import Network
from mcp_counterparty.errors import CounterpartyDecodeError, UnsupportedMessageTypeError
from mcp_counterparty.message_types import COUNTERPARTY_PREFIX, MessageType, message_type_name
from mcp_counterparty.messages import (
    DecodedMessage,
    decode_attach,
    decode_broadcast,
    decode_btcpay,
    decode_cancel,
    decode_destroy,
    decode_detach,
    decode_dispense,
    decode_dispenser,
    decode_dividend,
    decode_enhanced_send,
    decode_fairmint,
    decode_issuance,
    decode_order,
    decode_send,
    decode_sweep,
)


logger = logging.getLogger(__name__)

Decoder = Callable[[bytes, int, Network], DecodedMessage]

# Message type id -> decoder(payload, message_type_id, network)
DECODERS: dict[int, Decoder] = {
    MessageType.SEND: lambda payload, type_id, network: decode_send(payload),
    MessageType.ENHANCED_SEND: lambda payload, type_id, network: decode_enhanced_send(payload, network),
    MessageType.SWEEP: lambda payload, type_id, network: decode_sweep(payload, network),
    MessageType.ORDER: lambda payload, type_id, network: decode_order(payload),
    MessageType.BTC_PAY: lambda payload, type_id, network: decode_btcpay(payload),
    MessageType.DISPENSER: lambda payload, type_id, network: decode_dispenser(payload, network),
    MessageType.DISPENSE: lambda payload, type_id, network: decode_dispense(payload),
    MessageType.ISSUANCE: lambda payload, type_id, network: decode_issuance(payload, type_id),
    MessageType.SUBASSET_ISSUANCE: lambda payload, type_id, network: decode_issuance(payload, type_id),
    MessageType.LR_ISSUANCE: lambda payload, type_id, network: decode_issuance(payload, type_id),
    MessageType.LR_SUBASSET: lambda payload, type_id, network: decode_issuance(payload, type_id),
    MessageType.BROADCAST: lambda payload, type_id, network: decode_broadcast(payload),
    MessageType.DIVIDEND: lambda payload, type_id, network: decode_dividend(payload),
    MessageType.CANCEL: lambda payload, type_id, network: decode_cancel(payload),
    MessageType.FAIRMINT: lambda payload, type_id, network: decode_fairmint(payload),
    MessageType.DETACH: lambda payload, type_id, network: decode_detach(payload),
    MessageType.ATTACH: lambda payload, type_id, network: decode_attach(payload),
    MessageType.DESTROY: lambda payload, type_id, network: decode_destroy(payload),
}


@dataclass(frozen=True)
class UnpackResult:
    """A fully unpacked Counterparty message."""

    message_type_id: int
    message_type: str
    payload: bytes
    message: DecodedMessage


def _as_bytes(data: Union[str, bytes]) -> bytes:
    return hex_to_bytes(data) if isinstance(data, str) else bytes(data)


def decode_payload(
    message_type_id: int,
    payload: bytes,
    network: Network = Network.MAINNET,
) -> DecodedMessage:
    """Decode a payload already stripped of prefix and type id.

    Raises:
        UnsupportedMessageTypeError: If no decoder handles the type
        CounterpartyDecodeError: If the payload is malformed
    """
    decoder = DECODERS.get(message_type_id)
    if decoder is None:
        raise UnsupportedMessageTypeError(message_type_id, message_type_name(message_type_id))
    return decoder(bytes(payload), message_type_id, network)


def split_message(data: Union[str, bytes]) -> tuple[int, bytes]:
    """Check the prefix and split a message into (type id, payload).

    Raises:
        CounterpartyDecodeError: If the data is too short or lacks the prefix
    """
    raw = _as_bytes(data)
    if len(raw) < len(COUNTERPARTY_PREFIX) + 1:
        raise CounterpartyDecodeError("Data too short for Counterparty message")
    if not raw.startswith(COUNTERPARTY_PREFIX):
        raise CounterpartyDecodeError("Missing CNTRPRTY prefix")

    reader = BinaryReader(raw)
    reader.skip(len(COUNTERPARTY_PREFIX))

    if reader.peek(1)[0] != 0:
        message_type_id = reader.read_uint8()
    elif reader.remaining >= 4:
        message_type_id = reader.read_uint32()
    else:
        raise CounterpartyDecodeError("Could not extract message type ID")

    return message_type_id, reader.read_remaining()


def unpack_message(
    data: Union[str, bytes],
    network: Network = Network.MAINNET,
) -> UnpackResult:
    """Unpack a prefixed Counterparty message.

    Args:
        data: Message bytes or hex, starting with the CNTRPRTY prefix
        network: Network used to render SegWit destinations

    Returns:
        UnpackResult with the decoded message

    Raises:
        CounterpartyDecodeError: If any part of the message is invalid
    """
    message_type_id, payload = split_message(data)
    return UnpackResult(
        message_type_id=message_type_id,
        message_type=message_type_name(message_type_id),
        payload=payload,
        message=decode_payload(message_type_id, payload, network),
    )


def is_counterparty_data(data: Union[str, bytes]) -> bool:
    """Whether the data starts with the CNTRPRTY prefix."""
    try:
        raw = _as_bytes(data)
    except ValueError:
        return False
    return raw.startswith(COUNTERPARTY_PREFIX)


def unpack_many(
    items: Iterable[Union[str, bytes]],
    network: Network = Network.MAINNET,
) -> list[Union[UnpackResult, CounterpartyDecodeError]]:
    """Unpack a batch of messages, keeping going past malformed ones.

    Each failure is logged and returned in place of its result so that one
    bad message does not abort the rest of the batch.
    """
    results: list[Union[UnpackResult, CounterpartyDecodeError]] = []
    for index, item in enumerate(items):
        try:
            results.append(unpack_message(item, network))
        except CounterpartyDecodeError as e:
            logger.warning("Skipping message %d: %s", index, e)
            results.append(e)
    return results
