"""Bitcoin Core access through a ``bitcoin-cli`` subprocess."""

import asyncio
import json
import logging
from typing import Any

from mcp_counterparty.config import Config, Network
from mcp_counterparty.node.interface import NodeError, NodeInterface


logger = logging.getLogger(__name__)

NETWORK_FLAGS = {
    Network.MAINNET: [],
    Network.TESTNET: ["-testnet"],
    Network.SIGNET: ["-signet"],
    Network.REGTEST: ["-regtest"],
}


def format_arg(arg: Any) -> str:
    """Render an argument the way bitcoin-cli parses it (JSON for non-strings)."""
    return arg if isinstance(arg, str) else json.dumps(arg)


class BitcoinCLI(NodeInterface):
    """Bitcoin Core interface via bitcoin-cli subprocess."""

    def __init__(self, config: Config):
        super().__init__(config)
        self.cli_path = config.cli_path

    def _build_command(self, method: str, *args: Any) -> list[str]:
        cmd = [self.cli_path, *NETWORK_FLAGS[self.config.network]]
        if self.config.cli_datadir:
            cmd.append(f"-datadir={self.config.cli_datadir}")
        cmd.append(method)
        cmd.extend(format_arg(arg) for arg in args)
        return cmd

    async def _call(self, method: str, *args: Any) -> Any:
        cmd = self._build_command(method, *args)
        logger.debug("Running %s", " ".join(cmd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise NodeError(f"Could not run {self.cli_path}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            raise NodeError(f"bitcoin-cli {method} timed out after {self.timeout}s") from None

        if proc.returncode != 0:
            raise NodeError(f"bitcoin-cli error: {stderr.decode(errors='replace').strip()}")

        try:
            return json.loads(stdout)
        except ValueError as e:
            raise NodeError(f"bitcoin-cli {method} returned non-JSON output") from e
