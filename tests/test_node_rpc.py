"""Tests for JSON-RPC interface."""

import httpx
import pytest
from unittest.mock import AsyncMock, patch, MagicMock

from mcp_counterparty.node.interface import NodeError
from mcp_counterparty.node.rpc import BitcoinRPC
from mcp_counterparty.config import Config, Network, ConnectionMethod


TXID = "ab" * 32


def rpc_response(body=None, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body
    return response


class TestBitcoinRPC:
    """Test JSON-RPC interface."""

    @pytest.fixture
    def rpc(self):
        """Create RPC instance with test config."""
        config = Config(
            connection_method=ConnectionMethod.RPC,
            network=Network.REGTEST,
            rpc_host="127.0.0.1",
            rpc_port=18443,
            rpc_user="test",
            rpc_password="test123",
            node_timeout=10,
        )
        return BitcoinRPC(config)

    def test_build_url(self, rpc):
        assert rpc.url == "http://127.0.0.1:18443"

    def test_default_port_from_network(self):
        rpc = BitcoinRPC(Config(connection_method=ConnectionMethod.RPC, network=Network.SIGNET))
        assert rpc.url == "http://127.0.0.1:38332"

    def test_basic_auth(self, rpc):
        """Requests carry basic auth for the configured user."""
        request = httpx.Request("POST", rpc.url)

        signed = next(rpc._client.auth.auth_flow(request))

        # base64("test:test123")
        assert signed.headers["Authorization"] == "Basic dGVzdDp0ZXN0MTIz"

    def test_timeout_from_config(self, rpc):
        assert rpc._client.timeout.read == 10

    @pytest.mark.asyncio
    async def test_call_formats_request(self, rpc):
        """RPC call formats JSON-RPC 2.0 request."""
        with patch.object(rpc, '_client') as mock_client:
            mock_client.post = AsyncMock(return_value=rpc_response(
                {"result": {"blocks": 100}, "error": None, "id": 1}
            ))

            result = await rpc._call("getrawtransaction", TXID, True)

            request_body = mock_client.post.call_args.kwargs["json"]
            assert request_body["jsonrpc"] == "2.0"
            assert request_body["method"] == "getrawtransaction"
            assert request_body["params"] == [TXID, True]
            assert result == {"blocks": 100}

    @pytest.mark.asyncio
    async def test_request_ids_increase(self, rpc):
        with patch.object(rpc, '_client') as mock_client:
            mock_client.post = AsyncMock(return_value=rpc_response({"result": 1, "error": None}))

            await rpc._call("getblockcount")
            await rpc._call("getblockcount")

            ids = [call.kwargs["json"]["id"] for call in mock_client.post.call_args_list]
            assert ids == [1, 2]

    @pytest.mark.asyncio
    async def test_handles_rpc_error(self, rpc):
        """RPC errors arrive with HTTP 500 on older nodes."""
        response = rpc_response({
            "result": None,
            "error": {"code": -5, "message": "No such mempool or blockchain transaction"},
            "id": 1,
        }, status_code=500)

        with patch.object(rpc, '_client') as mock_client:
            mock_client.post = AsyncMock(return_value=response)

            with pytest.raises(NodeError, match="RPC error -5: No such mempool"):
                await rpc._call("getrawtransaction", TXID, True)

    @pytest.mark.asyncio
    async def test_authentication_failure(self, rpc):
        with patch.object(rpc, '_client') as mock_client:
            mock_client.post = AsyncMock(return_value=rpc_response(status_code=401))

            with pytest.raises(NodeError, match="authentication failed"):
                await rpc._call("getblockchaininfo")

    @pytest.mark.asyncio
    async def test_non_json_response(self, rpc):
        with patch.object(rpc, '_client') as mock_client:
            mock_client.post = AsyncMock(return_value=rpc_response(status_code=502))

            with pytest.raises(NodeError, match="HTTP 502"):
                await rpc._call("getblockchaininfo")

    @pytest.mark.asyncio
    async def test_transport_error(self, rpc):
        with patch.object(rpc, '_client') as mock_client:
            mock_client.post = AsyncMock(side_effect=httpx.ConnectError("Connection refused"))

            with pytest.raises(NodeError, match="Could not reach http://127.0.0.1:18443"):
                await rpc._call("getblockchaininfo")

    @pytest.mark.asyncio
    async def test_get_info_unreachable(self, rpc):
        """Transport failures are reported as a disconnected node."""
        with patch.object(rpc, '_client') as mock_client:
            mock_client.post = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

            info = await rpc.get_info()

            assert info.connected is False
            assert "timed out" in info.errors

    @pytest.mark.asyncio
    async def test_get_raw_transaction(self, rpc):
        raw = {
            "txid": TXID,
            "vin": [{"txid": "ff" * 32, "vout": 1}],
            "vout": [{"scriptPubKey": {"hex": "6a03010203"}}],
        }

        with patch.object(rpc, '_call', new_callable=AsyncMock) as mock_call:
            mock_call.return_value = raw

            tx = await rpc.get_raw_transaction(TXID)

            mock_call.assert_called_once_with("getrawtransaction", TXID, True)
            assert tx.first_input_txid == "ff" * 32
            assert tx.op_return_scripts == [b"\x6a\x03\x01\x02\x03"]

    @pytest.mark.asyncio
    async def test_close(self, rpc):
        with patch.object(rpc._client, 'aclose', new_callable=AsyncMock) as mock_close:
            await rpc.close()
            mock_close.assert_called_once()
