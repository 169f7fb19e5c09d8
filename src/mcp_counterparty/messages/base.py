"""Helpers shared by the per-message decoders."""

from typing import Optional

from mcp_counterparty.assets import DECIMAL_DIGITS, asset_name_to_id, is_subasset, split_subasset
from mcp_counterparty.binary import BinaryReader
from mcp_counterparty.errors import CounterpartyDecodeError, LengthMismatchError


def require_length(message_type: str, payload: bytes, *expected: int) -> None:
    """Reject payloads whose length is not one of the fixed sizes."""
    if len(payload) not in expected:
        raise LengthMismatchError(
            message_type,
            len(payload),
            expected[0] if len(expected) == 1 else expected,
        )


def require_min_length(message_type: str, payload: bytes, minimum: int) -> None:
    """Reject payloads shorter than the documented minimum."""
    if len(payload) < minimum:
        raise LengthMismatchError(message_type, len(payload), minimum, minimum=True)


def text_or_hex(raw: bytes) -> tuple[Optional[str], bool]:
    """Render free-text bytes as UTF-8, falling back to lowercase hex.

    Returns:
        (text, is_hex); text is None when there are no bytes
    """
    if not raw:
        return None, False
    try:
        return raw.decode("utf-8"), False
    except UnicodeDecodeError:
        return raw.hex(), True


def split_text_fields(message_type: str, payload: bytes, count: int) -> list[str]:
    """Split a UTF-8 payload of ``count`` '|'-separated fields."""
    text = BinaryReader(payload).read_utf8(len(payload))
    parts = text.split("|")
    if len(parts) != count:
        raise CounterpartyDecodeError(
            f"Expected {count} '|'-separated {message_type} fields, got {len(parts)}"
        )
    return parts


def parse_asset_name(asset: str) -> str:
    """Check a textual asset name; subassets are checked through their parent."""
    asset_name_to_id(split_subasset(asset)[0] if is_subasset(asset) else asset)
    return asset


def parse_decimal(message_type: str, field_name: str, text: str) -> int:
    if not text or not all(c in DECIMAL_DIGITS for c in text):
        raise CounterpartyDecodeError(f"Invalid {message_type} {field_name}: {text!r}")
    return int(text)
