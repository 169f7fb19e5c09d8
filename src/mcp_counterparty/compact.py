"""Compact array encoding of modern messages.

Newer Counterparty messages encode their fields as a short CBOR array of
unsigned integers and byte strings. The array is decoded with ``cbor2``.
Only an encoding that ``cbor2`` would reproduce byte for byte is accepted,
which also rules out trailing bytes after the array.
"""

from typing import Union

import cbor2

from mcp_counterparty.errors import CounterpartyDecodeError


MAJOR_ARRAY = 4

CompactItem = Union[int, bytes]


def is_array_marker(byte: int, lengths: tuple[int, ...]) -> bool:
    """Whether ``byte`` starts a short array with one of the given lengths."""
    return byte >> 5 == MAJOR_ARRAY and (byte & 0x1F) in lengths


def _is_item(value: object) -> bool:
    # bool is an int subclass; CBOR true/false are not fields
    if isinstance(value, bool):
        return False
    return isinstance(value, bytes) or (isinstance(value, int) and value >= 0)


def decode_compact_array(payload: bytes, lengths: tuple[int, ...]) -> list[CompactItem]:
    """Decode ``payload`` as one compact array of integers and byte strings.

    Args:
        payload: Message bytes after the type id
        lengths: Accepted array lengths

    Raises:
        CounterpartyDecodeError: If the payload is not such an array
    """
    try:
        value = cbor2.loads(payload)
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise CounterpartyDecodeError(f"Invalid compact array: {e}") from e

    if not isinstance(value, list):
        raise CounterpartyDecodeError(f"Compact payload is a {type(value).__name__}, not an array")
    if len(value) not in lengths:
        raise CounterpartyDecodeError(f"Unexpected compact array length: {len(value)}")
    if not all(_is_item(item) for item in value):
        raise CounterpartyDecodeError(
            "Compact array items must be unsigned integers or byte strings"
        )
    if cbor2.dumps(value) != bytes(payload):
        raise CounterpartyDecodeError("Compact array is not the exact encoding of its items")
    return value
