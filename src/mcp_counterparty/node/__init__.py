"""Bitcoin Core node communication interfaces."""

from mcp_counterparty.node.interface import (
    NodeError,
    NodeInterface,
    NodeInfo,
    RawTransaction,
    parse_raw_transaction,
    validate_txid,
)
from mcp_counterparty.node.cli import BitcoinCLI
from mcp_counterparty.node.rpc import BitcoinRPC

__all__ = [
    "NodeError",
    "NodeInterface",
    "NodeInfo",
    "RawTransaction",
    "parse_raw_transaction",
    "validate_txid",
    "BitcoinCLI",
    "BitcoinRPC",
]
