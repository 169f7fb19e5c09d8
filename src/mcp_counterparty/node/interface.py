"""Read-only access to Bitcoin Core for fetching transactions.

Transports implement ``_call``. Everything they can fail with (process or
HTTP errors, timeouts, RPC errors, unparseable replies) surfaces as
``NodeError``.
"""

import logging
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from mcp_counterparty.config import Config


logger = logging.getLogger(__name__)

TXID_LENGTH = 64


class NodeError(RuntimeError):
    """Bitcoin Core could not be reached or returned an unusable reply."""


@dataclass
class NodeInfo:
    """Bitcoin node information."""
    connected: bool
    network: str
    block_height: int
    version: int
    errors: str = ""


@dataclass
class RawTransaction:
    """The parts of a transaction needed to find Counterparty data."""
    txid: str
    first_input_txid: Optional[str]
    op_return_scripts: list[bytes] = field(default_factory=list)
    blockhash: Optional[str] = None
    confirmations: int = 0


def validate_txid(txid: str) -> str:
    """Normalize a txid to lowercase hex, raising ValueError if malformed."""
    txid = txid.strip().lower()
    if len(txid) != TXID_LENGTH or not all(c in string.hexdigits for c in txid):
        raise ValueError(f"Invalid txid: expected {TXID_LENGTH} hex characters")
    return txid


def parse_raw_transaction(result: dict[str, Any]) -> RawTransaction:
    """Build a RawTransaction from verbose ``getrawtransaction`` output."""
    vin = result.get("vin", [])
    scripts = []
    for vout in result.get("vout", []):
        script_hex = vout.get("scriptPubKey", {}).get("hex", "")
        # 6a = OP_RETURN
        if script_hex.startswith("6a"):
            scripts.append(bytes.fromhex(script_hex))

    return RawTransaction(
        txid=result["txid"],
        first_input_txid=vin[0].get("txid") if vin else None,
        op_return_scripts=scripts,
        blockhash=result.get("blockhash"),
        confirmations=result.get("confirmations", 0),
    )


class NodeInterface(ABC):
    """Abstract interface for Bitcoin Core communication."""

    def __init__(self, config: Config):
        self.config = config
        self.timeout = config.node_timeout

    @abstractmethod
    async def _call(self, method: str, *args: Any) -> Any:
        """Run one node command and return its decoded JSON result."""

    async def close(self) -> None:
        """Release transport resources."""

    async def get_info(self) -> NodeInfo:
        """Get node status, reporting failures instead of raising."""
        try:
            chain_info = await self._call("getblockchaininfo")
            network_info = await self._call("getnetworkinfo")

            return NodeInfo(
                connected=True,
                network=chain_info["chain"],
                block_height=chain_info["blocks"],
                version=network_info["version"],
                errors=chain_info.get("warnings", ""),
            )
        except (NodeError, KeyError, TypeError) as e:
            logger.warning("Node status unavailable: %s", e)
            return NodeInfo(
                connected=False,
                network="unknown",
                block_height=0,
                version=0,
                errors=str(e),
            )

    async def get_raw_transaction(self, txid: str) -> RawTransaction:
        """Fetch and parse a transaction by txid.

        Raises:
            ValueError: the txid is malformed
            NodeError: the node failed or returned an unusable transaction
        """
        txid = validate_txid(txid)
        result = await self._call("getrawtransaction", txid, True)
        if not isinstance(result, dict):
            raise NodeError(f"Unexpected getrawtransaction reply for {txid}")

        try:
            return parse_raw_transaction(result)
        except (KeyError, ValueError, AttributeError) as e:
            raise NodeError(f"Malformed transaction {txid}: {e}") from e
