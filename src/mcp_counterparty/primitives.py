"""OP_RETURN script decoding and Counterparty de-obfuscation.

Counterparty encrypts OP_RETURN data with ARC4, keyed by the txid of the
transaction's first input, so the CNTRPRTY prefix only shows after
decryption.
"""

from typing import Optional

from cryptography.hazmat.decrepit.ciphers.algorithms import ARC4
from cryptography.hazmat.primitives.ciphers import Cipher

from mcp_counterparty.binary import BinaryReader, hex_to_bytes
from mcp_counterparty.errors import BufferUnderflowError
from mcp_counterparty.message_types import COUNTERPARTY_PREFIX

# Bitcoin script opcodes
OP_RETURN = 0x6A
OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_PUSHDATA4 = 0x4E

# PUSHDATA opcode -> size of its little-endian length field
PUSHDATA_LENGTH_SIZES = {
    OP_PUSHDATA1: 1,
    OP_PUSHDATA2: 2,
    OP_PUSHDATA4: 4,
}
PUSHDATA_NAMES = {
    OP_PUSHDATA1: "PUSHDATA1",
    OP_PUSHDATA2: "PUSHDATA2",
    OP_PUSHDATA4: "PUSHDATA4",
}


def decode_op_return_script(script: bytes) -> bytes:
    """Decode data from an OP_RETURN script.

    Args:
        script: OP_RETURN script bytes

    Returns:
        Extracted data payload

    Raises:
        ValueError: If script is not a valid OP_RETURN
    """
    if len(script) < 2:
        raise ValueError("Script too short")

    reader = BinaryReader(script)
    opcode = reader.read_uint8()
    if opcode != OP_RETURN:
        raise ValueError(f"Script is not an OP_RETURN (opcode: {opcode:#x})")

    push = reader.read_uint8()
    if push < OP_PUSHDATA1:
        length = push
    elif push in PUSHDATA_LENGTH_SIZES:
        try:
            length = int.from_bytes(reader.read_bytes(PUSHDATA_LENGTH_SIZES[push]), "little")
        except BufferUnderflowError as e:
            raise ValueError(f"Truncated {PUSHDATA_NAMES[push]} script") from e
    else:
        raise ValueError(f"Invalid push opcode: {push:#x}")

    if length > reader.remaining:
        raise ValueError(f"Script truncated: expected {length} bytes, got {reader.remaining}")
    return reader.read_bytes(length)


def arc4_crypt(key: bytes, data: bytes) -> bytes:
    """Apply the ARC4 keystream for ``key`` to ``data`` (encrypts or decrypts).

    Raises:
        ValueError: If the key length is not one ARC4 accepts
    """
    if len(key) * 8 not in ARC4.key_sizes:
        raise ValueError(f"Invalid ARC4 key size: {len(key)} bytes")

    decryptor = Cipher(ARC4(key), mode=None).decryptor()
    return decryptor.update(data) + decryptor.finalize()


def extract_counterparty_data(data: bytes, first_input_txid: Optional[str] = None) -> Optional[bytes]:
    """Return prefixed Counterparty data from OP_RETURN bytes.

    Plain data is returned as-is; otherwise it is ARC4-decrypted with the
    first input's txid as key.

    Returns:
        Data starting with CNTRPRTY, or None if neither form carries it
    """
    if data.startswith(COUNTERPARTY_PREFIX):
        return data
    if not first_input_txid or not data:
        return None

    decrypted = arc4_crypt(hex_to_bytes(first_input_txid), data)
    if decrypted.startswith(COUNTERPARTY_PREFIX):
        return decrypted
    return None
