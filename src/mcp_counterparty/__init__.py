"""MCP server for decoding Counterparty protocol messages."""

__version__ = "0.1.0"

# Server entry points
from mcp_counterparty.server import create_server, main

# Configuration
from mcp_counterparty.config import Config, Network, ConnectionMethod

# Errors
from mcp_counterparty.errors import (
    CounterpartyDecodeError,
    BufferUnderflowError,
    LengthMismatchError,
    AssetError,
    AddressError,
    DialectExhaustedError,
    UnsupportedMessageTypeError,
)

# Asset identifiers
from mcp_counterparty.assets import asset_name_to_id, asset_id_to_name

# Address packing
from mcp_counterparty.address import pack_address, unpack_address

# Message unpacking
from mcp_counterparty.message_types import MessageType, message_type_name
from mcp_counterparty.unpack import (
    UnpackResult,
    decode_payload,
    split_message,
    unpack_message,
    unpack_many,
    is_counterparty_data,
)

# OP_RETURN primitives
from mcp_counterparty.primitives import (
    decode_op_return_script,
    extract_counterparty_data,
)

# Compose verification
from mcp_counterparty.verify import Criticality, VerificationResult, verify_message

__all__ = [
    # Version
    "__version__",
    # Server
    "create_server",
    "main",
    # Config
    "Config",
    "Network",
    "ConnectionMethod",
    # Errors
    "CounterpartyDecodeError",
    "BufferUnderflowError",
    "LengthMismatchError",
    "AssetError",
    "AddressError",
    "DialectExhaustedError",
    "UnsupportedMessageTypeError",
    # Assets
    "asset_name_to_id",
    "asset_id_to_name",
    # Addresses
    "pack_address",
    "unpack_address",
    # Unpacking
    "MessageType",
    "message_type_name",
    "UnpackResult",
    "decode_payload",
    "split_message",
    "unpack_message",
    "unpack_many",
    "is_counterparty_data",
    # Primitives
    "decode_op_return_script",
    "extract_counterparty_data",
    # Verification
    "Criticality",
    "VerificationResult",
    "verify_message",
]
