"""MCP server for decoding Counterparty messages.

This server exposes the offline Counterparty codec (message unpacking, asset
id conversion, compose verification) as tools, plus Bitcoin Core lookups to
decode the Counterparty data of an on-chain transaction.
"""

import dataclasses
import logging
from typing import Any, Optional

import httpx
from mcp.server.fastmcp import FastMCP

from mcp_counterparty.assets import asset_id_to_name as _asset_id_to_name
from mcp_counterparty.assets import asset_name_to_id as _asset_name_to_id
from mcp_counterparty.binary import hex_to_bytes
from mcp_counterparty.config import Config, ConnectionMethod, find_config
from mcp_counterparty.message_types import MESSAGE_TYPE_NAMES
from mcp_counterparty.messages import DecodedMessage
from mcp_counterparty.node.cli import BitcoinCLI
from mcp_counterparty.node.interface import NodeError, NodeInterface
from mcp_counterparty.node.rpc import BitcoinRPC
from mcp_counterparty.primitives import decode_op_return_script, extract_counterparty_data
from mcp_counterparty.unpack import UnpackResult, decode_payload, unpack_message
from mcp_counterparty.verify import verify_message


logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:
    # Asset ids and quantities go up to 2**64 - 1
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_json_safe(item) for item in value]
    return value


def message_to_dict(message: DecodedMessage) -> dict[str, Any]:
    """Flatten a decoded message record into a plain dict.

    Integer fields become decimal strings, as asset ids do in the asset tools.
    """
    return _json_safe(dataclasses.asdict(message))


def unpack_result_to_dict(result: UnpackResult) -> dict[str, Any]:
    return {
        "message_type_id": result.message_type_id,
        "message_type": result.message_type,
        "payload_hex": result.payload.hex(),
        "data": message_to_dict(result.message),
    }


def create_server(config: Optional[Config] = None) -> FastMCP:
    """Create and configure the MCP server with all tools.

    Args:
        config: Optional configuration. If not provided, uses defaults.

    Returns:
        Configured FastMCP server instance.
    """
    if config is None:
        config = Config()

    mcp = FastMCP("mcp-counterparty")

    # Store config on server for access by tools
    mcp._config = config
    mcp._node: Optional[NodeInterface] = None

    def get_node() -> NodeInterface:
        """Get or create the node interface."""
        if mcp._node is None:
            if config.connection_method == ConnectionMethod.CLI:
                mcp._node = BitcoinCLI(config)
            else:
                mcp._node = BitcoinRPC(config)
        return mcp._node

    def read_hex(data_hex: str) -> bytes:
        data = hex_to_bytes(data_hex)
        if len(data) > config.max_data_size:
            raise ValueError(
                f"Data too large: {len(data)} bytes (maximum {config.max_data_size})"
            )
        return data

    # =========================================================================
    # Message Decoding (offline)
    # =========================================================================

    @mcp.tool()
    def unpack_counterparty_message(data_hex: str) -> dict:
        """Unpack Counterparty data that starts with the CNTRPRTY prefix.

        Args:
            data_hex: Prefixed (already de-obfuscated) message as hex

        Returns:
            Dictionary with message type and decoded fields, or 'error'.
        """
        try:
            result = unpack_message(read_hex(data_hex), config.network)
        except ValueError as e:
            return {"error": str(e)}
        return unpack_result_to_dict(result)

    @mcp.tool()
    def decode_counterparty_payload(message_type_id: int, payload_hex: str) -> dict:
        """Decode a message payload already stripped of prefix and type id.

        Args:
            message_type_id: Counterparty message type id (e.g. 2 for enhanced_send)
            payload_hex: Payload bytes as hex

        Returns:
            Dictionary with the decoded fields, or 'error'.
        """
        try:
            message = decode_payload(message_type_id, read_hex(payload_hex), config.network)
        except ValueError as e:
            return {"error": str(e)}
        return {"message_type_id": message_type_id, "data": message_to_dict(message)}

    @mcp.tool()
    def decode_counterparty_script(script_hex: str, first_input_txid: str = "") -> dict:
        """Decode the Counterparty message carried by an OP_RETURN script.

        Args:
            script_hex: OP_RETURN output script as hex
            first_input_txid: Txid of the transaction's first input, the
                ARC4 key for obfuscated data

        Returns:
            Dictionary with the decoded message, or 'error'.
        """
        try:
            data = decode_op_return_script(read_hex(script_hex))
            message = extract_counterparty_data(data, first_input_txid or None)
            if message is None:
                return {"error": "No Counterparty data in script"}
            result = unpack_message(message, config.network)
        except ValueError as e:
            return {"error": str(e)}
        return unpack_result_to_dict(result)

    @mcp.tool()
    def list_message_types() -> dict:
        """List known Counterparty message type ids and names."""
        return {
            "message_types": [
                {"id": int(type_id), "name": name}
                for type_id, name in MESSAGE_TYPE_NAMES.items()
            ],
        }

    # =========================================================================
    # Asset Identifiers
    # =========================================================================

    @mcp.tool()
    def asset_name_to_id(name: str) -> dict:
        """Convert an asset name to its numeric protocol id.

        Args:
            name: Asset name (e.g. 'XCP', 'PEPECASH', 'A95428956661682177')

        Returns:
            Dictionary with 'asset_id' as a decimal string (ids exceed 2^53).
        """
        try:
            asset_id = _asset_name_to_id(name)
        except ValueError as e:
            return {"error": str(e)}
        return {"asset": name, "asset_id": str(asset_id)}

    @mcp.tool()
    def asset_id_to_name(asset_id: str) -> dict:
        """Convert a numeric asset id to its asset name.

        Args:
            asset_id: Asset id as a decimal string

        Returns:
            Dictionary with 'asset', or 'error'.
        """
        try:
            name = _asset_id_to_name(int(asset_id))
        except ValueError as e:
            return {"error": str(e)}
        return {"asset_id": asset_id, "asset": name}

    # =========================================================================
    # Compose Verification
    # =========================================================================

    @mcp.tool()
    def verify_counterparty_message(data_hex: str, compose_type: str, params: dict) -> dict:
        """Check composed Counterparty data against the requested parameters.

        Args:
            data_hex: Prefixed message as hex (from the composed transaction)
            compose_type: Requested compose type ('enhanced_send', 'order', ...)
            params: Requested compose parameters

        Returns:
            Dictionary with 'valid', errors, warnings and mismatches.
        """
        try:
            data = read_hex(data_hex)
        except ValueError as e:
            return {"error": str(e)}

        result = verify_message(data, compose_type, params, config.network)

        return {
            "valid": result.valid,
            "message_type": result.message_type,
            "errors": result.errors,
            "warnings": result.warnings,
            "mismatches": [
                {
                    "field": m.field,
                    "expected": _json_safe(m.expected),
                    "actual": _json_safe(m.actual),
                    "criticality": m.criticality.value,
                    "risk": m.risk,
                }
                for m in result.critical_mismatches + result.dangerous_mismatches + result.info_mismatches
            ],
            "data": message_to_dict(result.message) if result.message else None,
        }

    # =========================================================================
    # Bitcoin Core Interface
    # =========================================================================

    @mcp.tool()
    async def get_node_info() -> dict:
        """Check connection and network status.

        Returns:
            Dictionary with node information including connection status,
            network, block height, and version.
        """
        node = get_node()
        info = await node.get_info()
        return {
            "connected": info.connected,
            "network": info.network,
            "block_height": info.block_height,
            "version": info.version,
            "errors": info.errors if info.errors else None,
        }

    @mcp.tool()
    async def decode_counterparty_transaction(txid: str) -> dict:
        """Fetch a transaction and decode its Counterparty message.

        Args:
            txid: Transaction ID (hash)

        Returns:
            Dictionary with the decoded message, or 'error'.
        """
        node = get_node()
        try:
            tx = await node.get_raw_transaction(txid)
        except (NodeError, ValueError, httpx.HTTPError, OSError) as e:
            logger.warning("Could not fetch %s: %s", txid, e)
            return {"txid": txid, "error": str(e)}

        for script in tx.op_return_scripts:
            try:
                data = extract_counterparty_data(
                    decode_op_return_script(script), tx.first_input_txid
                )
                if data is None:
                    continue
                result = unpack_message(data, config.network)
            except ValueError as e:
                logger.warning("Could not decode OP_RETURN of %s: %s", txid, e)
                return {"txid": tx.txid, "error": str(e)}

            response = unpack_result_to_dict(result)
            response["txid"] = tx.txid
            response["confirmations"] = tx.confirmations
            return response

        return {"txid": tx.txid, "error": "No Counterparty data in transaction"}

    return mcp


def main():
    """Entry point for the MCP server."""
    config = find_config()
    logging.basicConfig(level=config.log_level)

    server = create_server(config)
    server.run()


if __name__ == "__main__":
    main()
