"""Counterparty protocol constants and message type registry."""

from enum import IntEnum


# Prepended to every Counterparty message before obfuscation
COUNTERPARTY_PREFIX = b"CNTRPRTY"

# Divisible assets use 8 decimal places
UNIT = 10**8
MAX_INT = 2**63 - 1

# Asset identifier ranges
MIN_NAMED_ASSET_ID = 26**3
MAX_NAMED_ASSET_ID = 26**12
MIN_NUMERIC_ASSET_ID = 26**12 + 1
MAX_ASSET_ID = 2**64 - 1


class MessageType(IntEnum):
    """Counterparty message type identifiers."""

    SEND = 0
    ENHANCED_SEND = 2
    MPMA_SEND = 3
    SWEEP = 4
    ORDER = 10
    BTC_PAY = 11
    DISPENSER = 12
    DISPENSE = 13
    ISSUANCE = 20
    SUBASSET_ISSUANCE = 21
    LR_ISSUANCE = 22
    LR_SUBASSET = 23
    BROADCAST = 30
    BET = 40
    DIVIDEND = 50
    CANCEL = 70
    FAIRMINTER = 90
    FAIRMINT = 91
    DETACH = 100
    ATTACH = 101
    DESTROY = 110


MESSAGE_TYPE_NAMES = {
    MessageType.SEND: "send",
    MessageType.ENHANCED_SEND: "enhanced_send",
    MessageType.MPMA_SEND: "mpma_send",
    MessageType.SWEEP: "sweep",
    MessageType.ORDER: "order",
    MessageType.BTC_PAY: "btcpay",
    MessageType.DISPENSER: "dispenser",
    MessageType.DISPENSE: "dispense",
    MessageType.ISSUANCE: "issuance",
    MessageType.SUBASSET_ISSUANCE: "subasset_issuance",
    MessageType.LR_ISSUANCE: "lr_issuance",
    MessageType.LR_SUBASSET: "lr_subasset",
    MessageType.BROADCAST: "broadcast",
    MessageType.BET: "bet",
    MessageType.DIVIDEND: "dividend",
    MessageType.CANCEL: "cancel",
    MessageType.FAIRMINTER: "fairminter",
    MessageType.FAIRMINT: "fairmint",
    MessageType.DETACH: "detach",
    MessageType.ATTACH: "attach",
    MessageType.DESTROY: "destroy",
}


def message_type_name(message_type_id: int) -> str:
    """Canonical name for a message type id, ``unknown_<id>`` if unlisted."""
    return MESSAGE_TYPE_NAMES.get(message_type_id, f"unknown_{message_type_id}")
