"""Check a composed transaction against the parameters that were requested.

A wallet asks a remote service to compose a transaction, then decodes the
returned OP_RETURN data locally and compares it with its own request before
signing. Every parameter has a criticality:

- CRITICAL: funds at risk if wrong (asset, quantity, destination)
- DANGEROUS: harmful side effects if wrong (lock, expiration, flags)
- INFORMATIONAL: metadata only (memo, description, tag)

Critical and dangerous mismatches make the result invalid.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from mcp_counterparty.address import addresses_equal
from mcp_counterparty.config import Network
from mcp_counterparty.errors import CounterpartyDecodeError
from mcp_counterparty.messages import DecodedMessage
from mcp_counterparty.unpack import unpack_message


class Criticality(Enum):
    """How harmful a wrong value is."""
    CRITICAL = "critical"
    DANGEROUS = "dangerous"
    INFORMATIONAL = "informational"


@dataclass(frozen=True)
class ParamSpec:
    """How a compose parameter maps onto a decoded message."""

    attr: str
    criticality: Criticality
    risk: str
    kind: str = "text"  # int, float, bool, flag, asset, address, hash, text


@dataclass(frozen=True)
class MessageSchema:
    """Verifiable compose type."""

    message_types: tuple[str, ...]
    params: dict[str, ParamSpec]


CRITICAL = Criticality.CRITICAL
DANGEROUS = Criticality.DANGEROUS
INFO = Criticality.INFORMATIONAL

# Compose flags that share the single lock/reset issuance marker
LOCK_RESET_FLAGS = ("lock", "reset")

_SEND_SCHEMA = MessageSchema(
    message_types=("send", "enhanced_send"),
    params={
        "asset": ParamSpec("asset", CRITICAL, "Wrong asset = lose wrong tokens", "asset"),
        "quantity": ParamSpec("quantity", CRITICAL, "Wrong amount = lose more than intended", "int"),
        "destination": ParamSpec(
            "destination", CRITICAL, "Wrong address = funds sent to wrong recipient", "address"
        ),
        "memo": ParamSpec("memo", INFO, "Just metadata, no direct financial impact"),
    },
)

MESSAGE_SCHEMAS: dict[str, MessageSchema] = {
    "send": _SEND_SCHEMA,
    "enhanced_send": _SEND_SCHEMA,
    "order": MessageSchema(
        message_types=("order",),
        params={
            "give_asset": ParamSpec("give_asset", CRITICAL, "Wrong asset = offering wrong tokens", "asset"),
            "give_quantity": ParamSpec(
                "give_quantity", CRITICAL, "Wrong amount = offering more than intended", "int"
            ),
            "get_asset": ParamSpec("get_asset", CRITICAL, "Wrong asset = receiving wrong tokens", "asset"),
            "get_quantity": ParamSpec("get_quantity", CRITICAL, "Wrong amount = bad exchange rate", "int"),
            "expiration": ParamSpec(
                "expiration", DANGEROUS,
                "Too short = expires before fill, too long = funds locked longer", "int",
            ),
            "fee_required": ParamSpec("fee_required", DANGEROUS, "Higher fee = lose more BTC on match", "int"),
        },
    ),
    "dividend": MessageSchema(
        message_types=("dividend",),
        params={
            "asset": ParamSpec("asset", CRITICAL, "Wrong asset = paying wrong holders", "asset"),
            "quantity_per_unit": ParamSpec(
                "quantity_per_unit", CRITICAL, "Wrong amount = paying out more than intended", "int"
            ),
            "dividend_asset": ParamSpec(
                "dividend_asset", CRITICAL, "Wrong asset = paying with wrong tokens", "asset"
            ),
        },
    ),
    "issuance": MessageSchema(
        message_types=("issuance",),
        params={
            "asset": ParamSpec("asset", CRITICAL, "Wrong asset name = creating/modifying wrong asset", "asset"),
            "quantity": ParamSpec("quantity", CRITICAL, "Wrong amount = issuing wrong supply", "int"),
            "divisible": ParamSpec(
                "divisible", DANGEROUS, "PERMANENT: Cannot change divisibility after creation", "bool"
            ),
            "lock": ParamSpec("lock_reset", DANGEROUS, "PERMANENT: Locks supply forever", "flag"),
            "reset": ParamSpec(
                "lock_reset", DANGEROUS, "DESTRUCTIVE: Resets asset, existing holders lose tokens", "flag"
            ),
            "description": ParamSpec("description", INFO, "Asset description, visible but not financial"),
        },
    ),
    "btcpay": MessageSchema(
        message_types=("btcpay",),
        params={
            "order_match_id": ParamSpec(
                "order_match_id", CRITICAL, "Wrong match = paying for someone else's order", "hash"
            ),
        },
    ),
    "fairmint": MessageSchema(
        message_types=("fairmint",),
        params={
            "asset": ParamSpec("asset", CRITICAL, "Wrong asset = minting wrong tokens", "asset"),
            "quantity": ParamSpec("quantity", CRITICAL, "Wrong amount = paying for more than intended", "int"),
        },
    ),
    "cancel": MessageSchema(
        message_types=("cancel",),
        params={
            "offer_hash": ParamSpec("offer_hash", CRITICAL, "Wrong hash = cancelling wrong offer", "hash"),
        },
    ),
    "dispenser": MessageSchema(
        message_types=("dispenser",),
        params={
            "asset": ParamSpec("asset", CRITICAL, "Wrong asset = dispensing wrong tokens", "asset"),
            "give_quantity": ParamSpec(
                "give_quantity", CRITICAL, "Wrong amount = giving wrong amount per dispense", "int"
            ),
            "escrow_quantity": ParamSpec(
                "escrow_quantity", CRITICAL, "Wrong amount = locking wrong total amount", "int"
            ),
            "mainchainrate": ParamSpec("mainchainrate", CRITICAL, "Wrong rate = selling at wrong price", "int"),
            "status": ParamSpec(
                "status", DANGEROUS,
                "Wrong status = dispenser open when should be closed or vice versa", "int",
            ),
            "open_address": ParamSpec(
                "open_address", DANGEROUS, "Wrong address = someone else can refill/control dispenser",
                "address",
            ),
            "oracle_address": ParamSpec(
                "oracle_address", DANGEROUS, "Wrong oracle = price determined by untrusted source", "address"
            ),
        },
    ),
    # Verified at transaction level; the message has no fields
    "dispense": MessageSchema(message_types=("dispense",), params={}),
    "broadcast": MessageSchema(
        message_types=("broadcast",),
        params={
            "timestamp": ParamSpec("timestamp", INFO, "Broadcast timestamp", "int"),
            "value": ParamSpec("value", DANGEROUS, "Oracle value - may affect dependent contracts", "float"),
            "fee_fraction": ParamSpec(
                "fee_fraction_int", DANGEROUS, "Fee charged to users of this oracle", "int"
            ),
            "text": ParamSpec("text", INFO, "Broadcast message text"),
        },
    ),
    "detach": MessageSchema(
        message_types=("detach",),
        params={
            "asset": ParamSpec("asset", CRITICAL, "Wrong asset = detaching wrong tokens from UTXO", "asset"),
            "quantity": ParamSpec("quantity", CRITICAL, "Wrong amount = detaching wrong quantity", "int"),
        },
    ),
    "attach": MessageSchema(
        message_types=("attach",),
        params={
            "asset": ParamSpec("asset", CRITICAL, "Wrong asset = attaching wrong tokens to UTXO", "asset"),
            "quantity": ParamSpec("quantity", CRITICAL, "Wrong amount = attaching wrong quantity", "int"),
            "destination_vout": ParamSpec(
                "destination_vout", DANGEROUS, "Wrong vout = attaching to wrong output", "int"
            ),
        },
    ),
    "destroy": MessageSchema(
        message_types=("destroy",),
        params={
            "asset": ParamSpec("asset", CRITICAL, "Wrong asset = destroying wrong tokens", "asset"),
            "quantity": ParamSpec("quantity", CRITICAL, "Wrong amount = destroying more than intended", "int"),
            "tag": ParamSpec("tag", INFO, "Just a label, no financial impact"),
        },
    ),
    "sweep": MessageSchema(
        message_types=("sweep",),
        params={
            "destination": ParamSpec(
                "destination", CRITICAL, "Wrong address = all assets sent to wrong recipient", "address"
            ),
            "flags": ParamSpec(
                "flags", DANGEROUS, "Controls what gets swept (balances, ownerships, etc.)", "int"
            ),
            "memo": ParamSpec("memo", INFO, "Just metadata, no direct financial impact"),
        },
    ),
}


@dataclass
class VerificationMismatch:
    """A parameter whose decoded value differs from the request."""

    field: str
    expected: Any
    actual: Any
    criticality: Criticality
    risk: str

    def describe(self) -> str:
        label = self.field.replace("_", " ").capitalize()
        return f"{label} mismatch: expected {self.expected!r}, got {self.actual!r}"


@dataclass
class VerificationResult:
    """Outcome of verifying a composed message."""

    valid: bool = False
    message_type: Optional[str] = None
    message: Optional[DecodedMessage] = None
    expected: dict[str, Any] = field(default_factory=dict)
    critical_mismatches: list[VerificationMismatch] = field(default_factory=list)
    dangerous_mismatches: list[VerificationMismatch] = field(default_factory=list)
    info_mismatches: list[VerificationMismatch] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add(self, mismatch: VerificationMismatch) -> None:
        text = mismatch.describe()
        if mismatch.criticality is Criticality.CRITICAL:
            self.critical_mismatches.append(mismatch)
            self.errors.append(f"[CRITICAL] {text}")
        elif mismatch.criticality is Criticality.DANGEROUS:
            self.dangerous_mismatches.append(mismatch)
            self.errors.append(f"[DANGEROUS] {text}")
        else:
            self.info_mismatches.append(mismatch)
            self.warnings.append(text)


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


def values_equal(expected: Any, actual: Any, kind: str = "text") -> bool:
    """Compare a requested value with a decoded one according to its kind."""
    if expected is None or actual is None:
        return expected is None and actual is None

    if kind == "bool":
        return bool(expected) == bool(actual)
    if kind == "int":
        left, right = _to_int(expected), _to_int(actual)
        return left is not None and left == right
    if kind == "float":
        try:
            return float(expected) == float(actual)
        except (TypeError, ValueError):
            return False
    if kind == "address":
        return addresses_equal(str(expected), str(actual))
    if kind in ("asset", "hash"):
        return str(expected).lower() == str(actual).lower()
    return expected == actual


def _flag_matches(name: str, params: dict[str, Any], actual: bool) -> bool:
    """Check one lock/reset flag against the shared ``lock_reset`` marker.

    A requested flag needs the marker. A flag requested False only conflicts
    with the marker when no other requested flag accounts for it.
    """
    if params.get(name):
        return bool(actual)
    if not actual:
        return True
    return any(params.get(other) for other in LOCK_RESET_FLAGS if other != name)


def verify_message(
    data: Union[str, bytes],
    compose_type: str,
    params: dict[str, Any],
    network: Network = Network.MAINNET,
) -> VerificationResult:
    """Verify that prefixed Counterparty data matches the compose request.

    Args:
        data: Message bytes or hex, starting with the CNTRPRTY prefix
        compose_type: Requested compose type, e.g. "enhanced_send"
        params: Requested compose parameters
        network: Network used to render SegWit destinations

    Returns:
        VerificationResult; ``valid`` is False on any critical or dangerous
        mismatch, on a message type mismatch or on a decode failure
    """
    result = VerificationResult(expected=dict(params))

    try:
        unpacked = unpack_message(data, network)
    except CounterpartyDecodeError as e:
        result.errors.append(str(e))
        return result

    message = unpacked.message
    result.message = message
    result.message_type = unpacked.message_type

    schema = MESSAGE_SCHEMAS.get(compose_type)
    if schema is None:
        result.warnings.append(f"Unknown compose type: {compose_type}, skipping verification")
        result.valid = True
        return result

    if message.message_type not in schema.message_types:
        result.errors.append(
            f"Message type mismatch: expected {compose_type}, got {unpacked.message_type}"
        )
        return result

    for name, param in schema.params.items():
        if not hasattr(message, param.attr):
            continue
        expected = params.get(name)
        # Only critical fields are checked when the request leaves them out
        if expected is None and param.criticality is not Criticality.CRITICAL:
            continue
        actual = getattr(message, param.attr)
        if param.kind == "flag":
            matches = _flag_matches(name, params, actual)
        else:
            matches = values_equal(expected, actual, param.kind)
        if not matches:
            result.add(VerificationMismatch(name, expected, actual, param.criticality, param.risk))

    result.valid = not result.critical_mismatches and not result.dangerous_mismatches
    return result
