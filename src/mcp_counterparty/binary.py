"""Bounds-checked big-endian reader over a message payload."""

import struct

from mcp_counterparty.errors import BufferUnderflowError, CounterpartyDecodeError


def hex_to_bytes(data: str) -> bytes:
    """Convert a hex string (optionally ``0x``-prefixed) to bytes.

    Raises:
        CounterpartyDecodeError: If the string is not valid hex
    """
    text = data.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise CounterpartyDecodeError(f"Invalid hex string: {e}") from e


class BinaryReader:
    """Sequential cursor over an immutable byte buffer.

    Each read checks that enough bytes remain before consuming them, so a
    failed read leaves the cursor where it was. A reader belongs to a single
    decode call.
    """

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._pos = 0

    @property
    def offset(self) -> int:
        """Current cursor position."""
        return self._pos

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._data) - self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def _require(self, length: int) -> None:
        if length < 0:
            raise CounterpartyDecodeError(f"Invalid read length: {length}")
        if length > self.remaining:
            raise BufferUnderflowError(length, self.remaining)

    def read_bytes(self, length: int) -> bytes:
        """Read exactly ``length`` bytes."""
        self._require(length)
        chunk = self._data[self._pos:self._pos + length]
        self._pos += length
        return chunk

    def read_remaining(self) -> bytes:
        """Read every byte left in the buffer (possibly none)."""
        return self.read_bytes(self.remaining)

    def peek(self, length: int) -> bytes:
        """Return the next ``length`` bytes without advancing."""
        self._require(length)
        return self._data[self._pos:self._pos + length]

    def skip(self, length: int) -> None:
        self._require(length)
        self._pos += length

    def seek(self, position: int) -> None:
        """Move the cursor to an absolute position within the buffer."""
        if position < 0 or position > len(self._data):
            raise CounterpartyDecodeError(
                f"Seek position {position} outside buffer of {len(self._data)} bytes"
            )
        self._pos = position

    def _read_uint(self, size: int) -> int:
        return int.from_bytes(self.read_bytes(size), "big")

    def read_uint8(self) -> int:
        return self._read_uint(1)

    def read_uint16(self) -> int:
        return self._read_uint(2)

    def read_uint32(self) -> int:
        return self._read_uint(4)

    def read_uint64(self) -> int:
        return self._read_uint(8)

    def read_float32(self) -> float:
        """Read a big-endian IEEE-754 single-precision float."""
        return struct.unpack(">f", self.read_bytes(4))[0]

    def read_float64(self) -> float:
        return struct.unpack(">d", self.read_bytes(8))[0]

    def read_utf8(self, length: int) -> str:
        """Read ``length`` bytes and decode them as UTF-8.

        Raises:
            CounterpartyDecodeError: If the bytes are not valid UTF-8
        """
        raw = self.peek(length)
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CounterpartyDecodeError(f"Invalid UTF-8 text: {e}") from e
        self._pos += length
        return text
