"""Errors raised while decoding Counterparty messages.

Every error derives from ``CounterpartyDecodeError``, which is a
``ValueError`` so callers can keep catching ``ValueError`` for any
malformed-input problem.
"""

from typing import Optional, Sequence, Union


class CounterpartyDecodeError(ValueError):
    """Base class for all codec failures."""


class BufferUnderflowError(CounterpartyDecodeError):
    """A read asked for more bytes than remain in the buffer."""

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Buffer underflow: requested {requested} bytes, {available} available"
        )


class LengthMismatchError(CounterpartyDecodeError):
    """A payload does not have the fixed (or minimum) size of its message type."""

    def __init__(
        self,
        message_type: str,
        actual: int,
        expected: Union[int, Sequence[int]],
        minimum: bool = False,
    ):
        self.message_type = message_type
        self.actual = actual
        self.expected = expected
        self.minimum = minimum

        if isinstance(expected, int):
            wanted = f"at least {expected}" if minimum else str(expected)
        else:
            wanted = " or ".join(str(n) for n in expected)

        super().__init__(
            f"Invalid {message_type} payload length: got {actual} bytes, expected {wanted}"
        )


class AssetError(CounterpartyDecodeError):
    """An asset name or numeric asset id is invalid."""


class AddressError(CounterpartyDecodeError):
    """A packed or textual address could not be converted."""


class DialectExhaustedError(CounterpartyDecodeError):
    """Neither the modern nor the legacy encoding of a message matched."""

    def __init__(self, message_type: str, reason: Optional[str] = None):
        self.message_type = message_type
        detail = f": {reason}" if reason else ""
        super().__init__(f"No known {message_type} encoding matched{detail}")


class UnsupportedMessageTypeError(CounterpartyDecodeError):
    """No decoder is registered for a message type id."""

    def __init__(self, message_type_id: int, message_type: str):
        self.message_type_id = message_type_id
        self.message_type = message_type
        super().__init__(
            f"Unsupported message type: {message_type} (ID: {message_type_id})"
        )
