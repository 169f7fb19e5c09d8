"""Per-message-type decoders for Counterparty payloads."""

from typing import Union

from mcp_counterparty.messages.broadcast import Broadcast, decode_broadcast
from mcp_counterparty.messages.btcpay import BTCPay, decode_btcpay
from mcp_counterparty.messages.cancel import Cancel, decode_cancel
from mcp_counterparty.messages.destroy import Destroy, decode_destroy
from mcp_counterparty.messages.dispenser import Dispense, Dispenser, decode_dispense, decode_dispenser
from mcp_counterparty.messages.dividend import Dividend, decode_dividend
from mcp_counterparty.messages.enhanced_send import EnhancedSend, decode_enhanced_send
from mcp_counterparty.messages.fairmint import Fairmint, decode_fairmint
from mcp_counterparty.messages.issuance import Issuance, decode_issuance
from mcp_counterparty.messages.order import Order, decode_order
from mcp_counterparty.messages.send import Send, decode_send
from mcp_counterparty.messages.sweep import Sweep, decode_sweep
from mcp_counterparty.messages.utxo import Attach, Detach, decode_attach, decode_detach

DecodedMessage = Union[
    Send,
    EnhancedSend,
    Order,
    Dividend,
    Issuance,
    BTCPay,
    Fairmint,
    Cancel,
    Destroy,
    Sweep,
    Dispenser,
    Dispense,
    Broadcast,
    Detach,
    Attach,
]

__all__ = [
    "DecodedMessage",
    "Attach",
    "BTCPay",
    "Broadcast",
    "Cancel",
    "Destroy",
    "Detach",
    "Dispense",
    "Dispenser",
    "Dividend",
    "EnhancedSend",
    "Fairmint",
    "Issuance",
    "Order",
    "Send",
    "Sweep",
    "decode_attach",
    "decode_broadcast",
    "decode_btcpay",
    "decode_cancel",
    "decode_destroy",
    "decode_detach",
    "decode_dispense",
    "decode_dispenser",
    "decode_dividend",
    "decode_enhanced_send",
    "decode_fairmint",
    "decode_issuance",
    "decode_order",
    "decode_send",
    "decode_sweep",
]
