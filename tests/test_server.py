"""Tests for MCP server."""

import struct

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from mcp_counterparty.config import Config
from mcp_counterparty.message_types import COUNTERPARTY_PREFIX
from mcp_counterparty.node.interface import NodeError, NodeInfo, RawTransaction
from mcp_counterparty.primitives import arc4_crypt
from mcp_counterparty.server import create_server


P2PKH_PACKED = bytes.fromhex("00" "62e907b15cbf27d5425399ebf6f0fb50ebb88f18")
P2PKH_ADDRESS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"
ENHANCED_PAYLOAD = struct.pack(">QQ", 1, 100000000) + P2PKH_PACKED + b"hi"
ENHANCED_MESSAGE = COUNTERPARTY_PREFIX + b"\x02" + ENHANCED_PAYLOAD
FIRST_INPUT_TXID = "aa" * 32


def op_return(data: bytes) -> bytes:
    return bytes([0x6A, len(data)]) + data


class TestServerCreation:
    """Test server initialization."""

    def test_create_server_returns_server(self):
        """create_server returns configured server."""
        server = create_server()
        assert server is not None
        assert server._config == Config()

    @pytest.mark.asyncio
    async def test_server_has_expected_tools(self):
        """Server registers all expected tools."""
        server = create_server()

        tools = await server.list_tools()
        tool_names = {tool.name for tool in tools}

        # Offline decoding
        assert "unpack_counterparty_message" in tool_names
        assert "decode_counterparty_payload" in tool_names
        assert "decode_counterparty_script" in tool_names
        assert "list_message_types" in tool_names

        # Assets
        assert "asset_name_to_id" in tool_names
        assert "asset_id_to_name" in tool_names

        # Verification
        assert "verify_counterparty_message" in tool_names

        # Bitcoin Core interface
        assert "get_node_info" in tool_names
        assert "decode_counterparty_transaction" in tool_names

        assert len(tools) == 9


class TestDecodingTools:
    """Test the offline decoding tools."""

    @pytest.fixture
    def server(self):
        """Create a fresh server for each test."""
        return create_server()

    def tool(self, server, name):
        return server._tool_manager._tools[name].fn

    def test_unpack_message(self, server):
        result = self.tool(server, "unpack_counterparty_message")(ENHANCED_MESSAGE.hex())

        assert "error" not in result
        assert result["message_type_id"] == 2
        assert result["message_type"] == "enhanced_send"
        assert result["payload_hex"] == ENHANCED_PAYLOAD.hex()
        assert result["data"]["asset"] == "XCP"
        assert result["data"]["destination"] == P2PKH_ADDRESS
        assert result["data"]["memo"] == "hi"
        assert result["data"]["quantity"] == "100000000"

    def test_unpack_invalid_hex(self, server):
        result = self.tool(server, "unpack_counterparty_message")("not_valid_hex")

        assert "error" in result
        assert "Invalid hex string" in result["error"]

    def test_unpack_missing_prefix(self, server):
        result = self.tool(server, "unpack_counterparty_message")(("00" * 20))
        assert result == {"error": "Missing CNTRPRTY prefix"}

    def test_data_size_limit(self):
        server = create_server(Config(max_data_size=16))

        result = self.tool(server, "unpack_counterparty_message")(ENHANCED_MESSAGE.hex())

        assert "Data too large" in result["error"]

    def test_decode_payload(self, server):
        payload = struct.pack(">QQ", 1, 5)

        result = self.tool(server, "decode_counterparty_payload")(0, payload.hex())

        assert result["message_type_id"] == 0
        assert result["data"] == {"asset": "XCP", "asset_id": "1", "quantity": "5", "message_type": "send"}

    def test_decode_payload_length_error(self, server):
        result = self.tool(server, "decode_counterparty_payload")(0, "00" * 15)
        assert "expected 16" in result["error"]

    def test_decode_payload_unsupported(self, server):
        result = self.tool(server, "decode_counterparty_payload")(3, "00")
        assert result["error"] == "Unsupported message type: mpma_send (ID: 3)"

    def test_decode_plain_script(self, server):
        script = op_return(ENHANCED_MESSAGE)

        result = self.tool(server, "decode_counterparty_script")(script.hex())

        assert result["message_type"] == "enhanced_send"

    def test_decode_obfuscated_script(self, server):
        obfuscated = arc4_crypt(bytes.fromhex(FIRST_INPUT_TXID), ENHANCED_MESSAGE)

        result = self.tool(server, "decode_counterparty_script")(
            op_return(obfuscated).hex(), FIRST_INPUT_TXID
        )

        assert result["data"]["quantity"] == "100000000"

    def test_decode_script_without_counterparty_data(self, server):
        result = self.tool(server, "decode_counterparty_script")(op_return(b"hello").hex())
        assert result == {"error": "No Counterparty data in script"}

    def test_decode_script_not_op_return(self, server):
        result = self.tool(server, "decode_counterparty_script")("76a914")
        assert "not an OP_RETURN" in result["error"]

    def test_list_message_types(self, server):
        result = self.tool(server, "list_message_types")()

        names = {entry["id"]: entry["name"] for entry in result["message_types"]}
        assert names[2] == "enhanced_send"
        assert names[91] == "fairmint"
        assert len(names) == 21


class TestAssetTools:
    """Test asset id conversion tools."""

    @pytest.fixture
    def server(self):
        return create_server()

    def test_name_to_id(self, server):
        fn = server._tool_manager._tools["asset_name_to_id"].fn

        assert fn("XCP") == {"asset": "XCP", "asset_id": "1"}
        assert fn("A18446744073709551615")["asset_id"] == "18446744073709551615"

    def test_name_to_id_error(self, server):
        fn = server._tool_manager._tools["asset_name_to_id"].fn
        assert "4-12 characters" in fn("AB")["error"]

    def test_id_to_name(self, server):
        fn = server._tool_manager._tools["asset_id_to_name"].fn

        result = fn("17576")

        assert result == {"asset_id": "17576", "asset": "BAAA"}

    def test_id_to_name_error(self, server):
        fn = server._tool_manager._tools["asset_id_to_name"].fn

        assert "below the minimum" in fn("42")["error"]
        assert "error" in fn("not-a-number")


class TestVerifyTool:
    """Test the compose verification tool."""

    @pytest.fixture
    def server(self):
        return create_server()

    def test_valid(self, server):
        fn = server._tool_manager._tools["verify_counterparty_message"].fn

        result = fn(ENHANCED_MESSAGE.hex(), "enhanced_send", {
            "asset": "XCP",
            "quantity": 100000000,
            "destination": P2PKH_ADDRESS,
        })

        assert result["valid"] is True
        assert result["mismatches"] == []
        assert result["data"]["memo"] == "hi"

    def test_mismatch(self, server):
        fn = server._tool_manager._tools["verify_counterparty_message"].fn

        result = fn(ENHANCED_MESSAGE.hex(), "enhanced_send", {
            "asset": "XCP",
            "quantity": 1,
            "destination": P2PKH_ADDRESS,
        })

        assert result["valid"] is False
        assert result["mismatches"][0]["field"] == "quantity"
        assert result["mismatches"][0]["criticality"] == "critical"
        assert result["mismatches"][0]["expected"] == "1"
        assert result["mismatches"][0]["actual"] == "100000000"

    def test_invalid_hex(self, server):
        fn = server._tool_manager._tools["verify_counterparty_message"].fn
        assert "Invalid hex string" in fn("xyz", "send", {})["error"]


class TestNodeTools:
    """Test tools that go through the node connection."""

    @pytest.fixture
    def server(self):
        server = create_server()
        server._node = MagicMock()
        return server

    @pytest.mark.asyncio
    async def test_get_node_info(self, server):
        server._node.get_info = AsyncMock(return_value=NodeInfo(
            connected=True, network="main", block_height=850000, version=270000,
        ))

        result = await server._tool_manager._tools["get_node_info"].fn()

        assert result["connected"] is True
        assert result["block_height"] == 850000
        assert result["errors"] is None

    @pytest.mark.asyncio
    async def test_decode_transaction(self, server):
        obfuscated = arc4_crypt(bytes.fromhex(FIRST_INPUT_TXID), ENHANCED_MESSAGE)
        server._node.get_raw_transaction = AsyncMock(return_value=RawTransaction(
            txid="cc" * 32,
            first_input_txid=FIRST_INPUT_TXID,
            op_return_scripts=[op_return(obfuscated)],
            confirmations=3,
        ))

        result = await server._tool_manager._tools["decode_counterparty_transaction"].fn("cc" * 32)

        assert result["txid"] == "cc" * 32
        assert result["confirmations"] == 3
        assert result["message_type"] == "enhanced_send"
        assert result["data"]["destination"] == P2PKH_ADDRESS

    @pytest.mark.asyncio
    async def test_decode_transaction_without_data(self, server):
        server._node.get_raw_transaction = AsyncMock(return_value=RawTransaction(
            txid="cc" * 32,
            first_input_txid=FIRST_INPUT_TXID,
            op_return_scripts=[],
        ))

        result = await server._tool_manager._tools["decode_counterparty_transaction"].fn("cc" * 32)

        assert result["error"] == "No Counterparty data in transaction"

    @pytest.mark.asyncio
    async def test_decode_transaction_node_error(self, server):
        server._node.get_raw_transaction = AsyncMock(side_effect=NodeError("RPC error -5: not found"))

        result = await server._tool_manager._tools["decode_counterparty_transaction"].fn("dd" * 32)

        assert result == {"txid": "dd" * 32, "error": "RPC error -5: not found"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        httpx.ConnectError("Connection refused"),
        OSError("No such file or directory"),
        ValueError("Invalid txid: expected 64 hex characters"),
    ])
    async def test_decode_transaction_transport_errors(self, server, error):
        """Transport and input failures become an error entry, not an exception."""
        server._node.get_raw_transaction = AsyncMock(side_effect=error)

        result = await server._tool_manager._tools["decode_counterparty_transaction"].fn("xyz")

        assert result == {"txid": "xyz", "error": str(error)}
