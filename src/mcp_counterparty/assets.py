"""Conversion between Counterparty asset names and numeric asset ids.

Asset ids inside messages are unsigned 64-bit integers:
- 0 and 1 are BTC and XCP
- Named assets (4-12 uppercase letters) are base-26 numbers, A=0 ... Z=25
- Numeric assets are written as "A" followed by the decimal id

Subasset long names ("PARENT.child") are carried in issuance messages in a
compacted base-68 form, see ``compact_subasset_longname``.
"""

import string

from mcp_counterparty.errors import AssetError
from mcp_counterparty.message_types import (
    MAX_ASSET_ID,
    MIN_NAMED_ASSET_ID,
    MIN_NUMERIC_ASSET_ID,
)


B26_DIGITS = string.ascii_uppercase
DECIMAL_DIGITS = frozenset(string.digits)

# Symbol value 0 is reserved as terminator, so symbols are numbered from 1
SUBASSET_DIGITS = string.ascii_lowercase + string.ascii_uppercase + string.digits + ".-_@!"
SUBASSET_BASE = len(SUBASSET_DIGITS) + 1

SPECIAL_ASSETS = {"BTC": 0, "XCP": 1}
SPECIAL_ASSET_IDS = {0: "BTC", 1: "XCP"}


def _is_numeric_name(name: str) -> bool:
    return len(name) > 1 and name[0] == "A" and all(c in DECIMAL_DIGITS for c in name[1:])


def asset_name_to_id(name: str) -> int:
    """Convert an asset name to its numeric protocol id.

    Args:
        name: Asset name, e.g. "XCP", "PEPECASH" or "A95428956661682177"

    Returns:
        Numeric asset id

    Raises:
        AssetError: If the name is empty, malformed or out of range
    """
    if not name:
        raise AssetError("Asset name is required")

    if name in SPECIAL_ASSETS:
        return SPECIAL_ASSETS[name]

    if _is_numeric_name(name):
        digits = name[1:]
        if digits[0] == "0":
            raise AssetError(f"Numeric asset {name} has leading zeros")
        asset_id = int(digits)
        if not MIN_NUMERIC_ASSET_ID <= asset_id <= MAX_ASSET_ID:
            raise AssetError(
                f"Numeric asset {name} out of range "
                f"[{MIN_NUMERIC_ASSET_ID}, {MAX_ASSET_ID}]"
            )
        return asset_id

    if not 4 <= len(name) <= 12:
        raise AssetError(f"Asset name {name!r} must be 4-12 characters, got {len(name)}")

    asset_id = 0
    for char in name:
        if char not in B26_DIGITS:
            raise AssetError(f"Invalid character {char!r} in asset name {name!r}")
        asset_id = asset_id * 26 + B26_DIGITS.index(char)

    # A leading 'A' is a zero digit and would not survive the reverse conversion
    if name[0] == "A":
        raise AssetError(f"Named asset {name!r} cannot start with 'A'")

    if asset_id < MIN_NAMED_ASSET_ID:
        raise AssetError(f"Asset name {name!r} is below the minimum named asset id")

    return asset_id


def asset_id_to_name(asset_id: int) -> str:
    """Convert a numeric protocol id back to its asset name.

    Raises:
        AssetError: If the id is outside every valid range
    """
    if asset_id in SPECIAL_ASSET_IDS:
        return SPECIAL_ASSET_IDS[asset_id]

    if asset_id < 0 or asset_id > MAX_ASSET_ID:
        raise AssetError(f"Asset id {asset_id} out of range [0, {MAX_ASSET_ID}]")

    if asset_id >= MIN_NUMERIC_ASSET_ID:
        return f"A{asset_id}"

    if asset_id < MIN_NAMED_ASSET_ID:
        raise AssetError(f"Asset id {asset_id} is below the minimum named asset id")

    letters = []
    n = asset_id
    while n > 0:
        n, digit = divmod(n, 26)
        letters.append(B26_DIGITS[digit])
    letters.reverse()
    return "".join(letters)


def is_subasset(name: str) -> bool:
    """Whether the name is a subasset long name like "PARENT.child"."""
    return "." in name


def split_subasset(name: str) -> tuple[str, str]:
    """Split a subasset long name into (parent, child) at the first dot.

    Raises:
        AssetError: If the name contains no dot
    """
    parent, dot, child = name.partition(".")
    if not dot:
        raise AssetError(f"{name!r} is not a subasset name")
    return parent, child


def compact_subasset_longname(name: str) -> bytes:
    """Pack a subasset long name into its big-endian base-68 byte form."""
    if not name:
        raise AssetError("Subasset name is required")

    value = 0
    for char in name:
        index = SUBASSET_DIGITS.find(char)
        if index < 0:
            raise AssetError(f"Invalid character {char!r} in subasset name {name!r}")
        value = value * SUBASSET_BASE + index + 1

    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def expand_subasset_longname(raw: bytes) -> str:
    """Unpack a compacted subasset long name.

    Symbols are extracted least significant first; a zero symbol ends the
    name.
    """
    value = int.from_bytes(raw, "big")
    chars = []
    while value:
        value, symbol = divmod(value, SUBASSET_BASE)
        if symbol == 0:
            break
        chars.append(SUBASSET_DIGITS[symbol - 1])
    return "".join(reversed(chars))
