"""Tests for the shared node interface and the bitcoin-cli transport."""

import asyncio
import json
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from mcp_counterparty.config import Config, Network
from mcp_counterparty.node.cli import BitcoinCLI, format_arg
from mcp_counterparty.node.interface import NodeError, parse_raw_transaction, validate_txid


TXID = "ab" * 32

RAW_TRANSACTION = {
    "txid": TXID,
    "blockhash": "def456",
    "confirmations": 6,
    "vin": [{"txid": "11" * 32, "vout": 0}],
    "vout": [
        {"value": 0.0, "n": 0, "scriptPubKey": {"hex": "6a0568656c6c6f", "type": "nulldata"}},
        {"value": 0.5, "n": 1, "scriptPubKey": {"hex": "0014" + "22" * 20, "type": "witness_v0_keyhash"}},
    ],
}


def completed_process(returncode=0, stdout=b"", stderr=b""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    return proc


class TestParseRawTransaction:
    """Test extraction of OP_RETURN outputs from verbose transactions."""

    def test_parse(self):
        tx = parse_raw_transaction(RAW_TRANSACTION)

        assert tx.txid == TXID
        assert tx.first_input_txid == "11" * 32
        assert tx.op_return_scripts == [bytes.fromhex("6a0568656c6c6f")]
        assert tx.blockhash == "def456"
        assert tx.confirmations == 6

    def test_coinbase_without_inputs(self):
        tx = parse_raw_transaction({"txid": "abc", "vin": [], "vout": []})

        assert tx.first_input_txid is None
        assert tx.op_return_scripts == []
        assert tx.confirmations == 0


class TestValidateTxid:

    def test_normalizes(self):
        assert validate_txid("  " + "AB" * 32 + "\n") == TXID

    @pytest.mark.parametrize("txid", ["", "ab" * 31, "ab" * 33, "zz" * 32])
    def test_rejects(self, txid):
        with pytest.raises(ValueError, match="Invalid txid"):
            validate_txid(txid)


class TestBitcoinCLI:
    """Test bitcoin-cli subprocess interface."""

    @pytest.fixture
    def cli(self):
        """Create CLI instance with test config."""
        return BitcoinCLI(Config(network=Network.REGTEST, node_timeout=5))

    def test_build_command_basic(self, cli):
        assert cli._build_command("getblockcount") == ["bitcoin-cli", "-regtest", "getblockcount"]

    def test_build_command_mainnet_has_no_flag(self):
        cli = BitcoinCLI(Config())
        assert cli._build_command("getblockcount") == ["bitcoin-cli", "getblockcount"]

    def test_build_command_with_datadir(self):
        cli = BitcoinCLI(Config(network=Network.TESTNET, cli_datadir="/custom/datadir"))
        cmd = cli._build_command("getrawtransaction", TXID, True)

        assert cmd == ["bitcoin-cli", "-testnet", "-datadir=/custom/datadir",
                       "getrawtransaction", TXID, "true"]

    def test_format_arg(self):
        assert format_arg("abc") == "abc"
        assert format_arg(True) == "true"
        assert format_arg(3) == "3"

    def test_timeout_from_config(self, cli):
        assert cli.timeout == 5

    @pytest.mark.asyncio
    async def test_get_info_parses_response(self, cli):
        """Parse getblockchaininfo response."""
        mock_response = {
            "chain": "regtest",
            "blocks": 100,
            "headers": 100,
            "bestblockhash": "abc",
            "warnings": "",
        }
        mock_network = {"version": 270000, "subversion": "/Satoshi:27.0.0/"}

        with patch.object(cli, '_call', new_callable=AsyncMock) as mock_call:
            mock_call.side_effect = [mock_response, mock_network]

            info = await cli.get_info()

            assert info.connected is True
            assert info.network == "regtest"
            assert info.block_height == 100
            assert info.version == 270000

    @pytest.mark.asyncio
    async def test_get_info_connection_error(self, cli):
        """get_info reports a failed connection instead of raising."""
        with patch.object(cli, '_call', new_callable=AsyncMock) as mock_call:
            mock_call.side_effect = NodeError("bitcoin-cli error: Could not connect")

            info = await cli.get_info()

            assert info.connected is False
            assert "Could not connect" in info.errors

    @pytest.mark.asyncio
    async def test_get_raw_transaction(self, cli):
        """Fetch a verbose transaction and keep its OP_RETURN scripts."""
        with patch.object(cli, '_call', new_callable=AsyncMock) as mock_call:
            mock_call.return_value = RAW_TRANSACTION

            tx = await cli.get_raw_transaction(TXID.upper())

            mock_call.assert_called_once_with("getrawtransaction", TXID, True)
            assert tx.op_return_scripts == [bytes.fromhex("6a0568656c6c6f")]

    @pytest.mark.asyncio
    async def test_get_raw_transaction_rejects_bad_txid(self, cli):
        with patch.object(cli, '_call', new_callable=AsyncMock) as mock_call:
            with pytest.raises(ValueError, match="Invalid txid"):
                await cli.get_raw_transaction("abc123")

            mock_call.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [
        "plain text",
        {"vin": [], "vout": []},
        {"txid": TXID, "vout": [{"scriptPubKey": {"hex": "6azz"}}]},
    ])
    async def test_get_raw_transaction_malformed_reply(self, cli, reply):
        with patch.object(cli, '_call', new_callable=AsyncMock) as mock_call:
            mock_call.return_value = reply

            with pytest.raises(NodeError):
                await cli.get_raw_transaction(TXID)

    @pytest.mark.asyncio
    async def test_call_parses_json(self, cli):
        with patch('asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = completed_process(stdout=json.dumps({"blocks": 5}).encode())

            result = await cli._call("getblockchaininfo")

            assert result == {"blocks": 5}

    @pytest.mark.asyncio
    async def test_call_rejects_plain_text(self, cli):
        with patch('asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = completed_process(stdout=b"plain text response")

            with pytest.raises(NodeError, match="non-JSON"):
                await cli._call("getblockchaininfo")

    @pytest.mark.asyncio
    async def test_call_error_response(self, cli):
        with patch('asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = completed_process(returncode=1, stderr=b"error: something failed")

            with pytest.raises(NodeError, match="something failed"):
                await cli._call("badcommand")

    @pytest.mark.asyncio
    async def test_call_missing_binary(self, cli):
        with patch('asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
            mock_exec.side_effect = FileNotFoundError("bitcoin-cli")

            with pytest.raises(NodeError, match="Could not run bitcoin-cli"):
                await cli._call("getblockchaininfo")

    @pytest.mark.asyncio
    async def test_call_timeout_kills_process(self, cli):
        proc = completed_process()

        with patch('asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec, \
                patch('asyncio.wait_for', new_callable=AsyncMock) as mock_wait:
            mock_exec.return_value = proc
            mock_wait.side_effect = asyncio.TimeoutError

            with pytest.raises(NodeError, match="timed out after 5"):
                await cli._call("getrawtransaction", TXID, True)

            proc.kill.assert_called_once()
