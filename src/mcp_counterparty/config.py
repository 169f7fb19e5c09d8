"""Server configuration.

Settings come from a TOML file with ``[connection]``, ``[cli]``, ``[rpc]``
and ``[decoder]`` tables. The file is looked up in ``$MCP_COUNTERPARTY_CONFIG``
first, then in the working directory and the user config directory.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

try:
    import tomli
except ImportError:  # pragma: no cover
    import tomllib as tomli  # Python 3.11+


logger = logging.getLogger(__name__)


class ConnectionMethod(Enum):
    """How the server reaches Bitcoin Core."""
    CLI = "cli"
    RPC = "rpc"


class Network(Enum):
    """Bitcoin network, which also selects the address version bytes."""
    MAINNET = "mainnet"
    TESTNET = "testnet"
    SIGNET = "signet"
    REGTEST = "regtest"


DEFAULT_PORTS = {
    Network.MAINNET: 8332,
    Network.TESTNET: 18332,
    Network.SIGNET: 38332,
    Network.REGTEST: 18443,
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

CONFIG_ENV_VAR = "MCP_COUNTERPARTY_CONFIG"

CONFIG_PATHS = [
    Path("mcp-counterparty.toml"),
    Path.home() / ".config" / "mcp-counterparty" / "config.toml",
]

# (table, key) -> Config field
TOML_FIELDS = {
    ("connection", "method"): "connection_method",
    ("connection", "network"): "network",
    ("connection", "timeout"): "node_timeout",
    ("cli", "path"): "cli_path",
    ("cli", "datadir"): "cli_datadir",
    ("rpc", "host"): "rpc_host",
    ("rpc", "port"): "rpc_port",
    ("rpc", "user"): "rpc_user",
    ("rpc", "password"): "rpc_password",
    ("decoder", "max_data_size"): "max_data_size",
    ("decoder", "log_level"): "log_level",
}


@dataclass
class Config:
    """Server configuration.

    Enum fields also accept their string values, so a Config can be built
    straight from TOML tables.
    """

    # Node connection
    connection_method: ConnectionMethod = ConnectionMethod.CLI
    network: Network = Network.MAINNET
    node_timeout: float = 30.0

    cli_path: str = "bitcoin-cli"
    cli_datadir: str = ""

    rpc_host: str = "127.0.0.1"
    rpc_port: Optional[int] = None
    rpc_user: str = ""
    rpc_password: str = ""

    # Decoder
    max_data_size: int = 102400
    log_level: str = "WARNING"

    def __post_init__(self):
        self.connection_method = ConnectionMethod(self.connection_method)
        self.network = Network(self.network)
        self.log_level = str(self.log_level).upper()

        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")
        if self.max_data_size <= 0:
            raise ValueError(f"max_data_size must be positive, got {self.max_data_size}")
        if self.node_timeout <= 0:
            raise ValueError(f"node timeout must be positive, got {self.node_timeout}")

    @classmethod
    def from_toml(cls, data: dict[str, Any]) -> "Config":
        """Build a Config from parsed TOML, rejecting unknown tables and keys."""
        values = {}
        for table, entries in data.items():
            if not isinstance(entries, dict):
                raise ValueError(f"Config entry '{table}' must be a table")
            for key, value in entries.items():
                name = TOML_FIELDS.get((table, key))
                if name is None:
                    raise ValueError(f"Unknown config key: [{table}] {key}")
                values[name] = value
        return cls(**values)

    @property
    def default_rpc_port(self) -> int:
        """Get default RPC port for current network."""
        return DEFAULT_PORTS[self.network]

    def get_rpc_port(self) -> int:
        """Get configured or default RPC port."""
        return self.rpc_port if self.rpc_port else self.default_rpc_port


def load_config(path: Path) -> Config:
    """Load configuration from TOML file.

    Args:
        path: Path to config file

    Returns:
        Loaded configuration, merged with defaults
    """
    if not path.exists():
        return Config()

    with open(path, "rb") as f:
        data = tomli.load(f)

    logger.info("Loaded config from %s", path)
    return Config.from_toml(data)


def find_config(paths: Optional[list[Path]] = None) -> Config:
    """Load the configured or first existing config file.

    A path in ``$MCP_COUNTERPARTY_CONFIG`` must exist.
    """
    if paths is None:
        override = os.environ.get(CONFIG_ENV_VAR)
        if override:
            path = Path(override).expanduser()
            if not path.exists():
                raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")
            return load_config(path)
        paths = CONFIG_PATHS

    for path in paths:
        if path.exists():
            return load_config(path)
    return Config()
