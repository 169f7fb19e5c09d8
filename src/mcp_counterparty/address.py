"""Counterparty 21-byte packed address format.

Messages that name a destination carry it packed into 21 bytes:

- Legacy (P2PKH / P2SH): base58 version byte + 20-byte hash
- SegWit: 0x80 + witness version, followed by the 20-byte witness program

Taproot programs are 32 bytes, so only their first 20 bytes fit; such
addresses cannot be fully reconstructed from the packed form.
"""

import logging

from bip_utils import (
    Base58ChecksumError,
    Base58Decoder,
    Base58Encoder,
    Bech32ChecksumError,
    SegwitBech32Decoder,
    SegwitBech32Encoder,
)

from mcp_counterparty.config import Network
from mcp_counterparty.errors import AddressError


logger = logging.getLogger(__name__)

PACKED_ADDRESS_LENGTH = 21
SEGWIT_MARKER = 0x80

# Bech32 human-readable part per network
BECH32_HRP = {
    Network.MAINNET: "bc",
    Network.TESTNET: "tb",
    Network.SIGNET: "tb",
    Network.REGTEST: "bcrt",
}


def is_segwit_packed(packed: bytes) -> bool:
    """Whether a packed address holds a witness program."""
    return len(packed) > 0 and SEGWIT_MARKER <= packed[0] <= SEGWIT_MARKER + 0x0F


def pack_address(address: str) -> bytes:
    """Pack a Bitcoin address into the 21-byte Counterparty format.

    Raises:
        AddressError: If the address cannot be decoded or is unsupported
    """
    if not address:
        raise AddressError("Address is required")

    lowered = address.lower()
    if lowered.startswith(("bc1", "tb1", "bcrt1")):
        hrp = lowered[:lowered.rfind("1")]
        try:
            version, program = SegwitBech32Decoder.Decode(hrp, lowered)
        except (ValueError, Bech32ChecksumError) as e:
            raise AddressError(f"Invalid bech32 address {address!r}: {e}") from e

        if len(program) not in (20, 32):
            raise AddressError(f"Unsupported witness program length: {len(program)}")
        # 32-byte (taproot) programs are truncated
        return bytes([SEGWIT_MARKER + version]) + program[:20]

    try:
        payload = Base58Decoder.CheckDecode(address)
    except (ValueError, Base58ChecksumError) as e:
        raise AddressError(f"Invalid base58check address {address!r}: {e}") from e

    if len(payload) != PACKED_ADDRESS_LENGTH:
        raise AddressError(f"Invalid hash length: {len(payload) - 1}")
    return payload


def unpack_address(packed: bytes, network: Network = Network.MAINNET) -> str:
    """Convert a 21-byte packed address back to its address string.

    Args:
        packed: Packed address bytes
        network: Network whose bech32 prefix is used for SegWit addresses

    Raises:
        AddressError: If the packed address has the wrong length
    """
    if len(packed) != PACKED_ADDRESS_LENGTH:
        raise AddressError(
            f"Invalid packed address length: {len(packed)} (expected {PACKED_ADDRESS_LENGTH})"
        )

    if is_segwit_packed(packed):
        witness_version = packed[0] - SEGWIT_MARKER
        if witness_version == 1:
            logger.warning("Taproot address unpacked from 20 of 32 program bytes")
        return SegwitBech32Encoder.Encode(BECH32_HRP[network], witness_version, packed[1:])

    return Base58Encoder.CheckEncode(packed)


def addresses_equal(first: str, second: str) -> bool:
    """Compare two addresses by their packed form."""
    if first == second:
        return True
    try:
        return pack_address(first) == pack_address(second)
    except AddressError:
        return False
