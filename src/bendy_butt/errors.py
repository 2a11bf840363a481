"""Exception types raised by the Bendy Butt codec."""

from typing import Optional


class BendyButtError(ValueError):
    """Base class for all codec errors."""


class EncodeError(BendyButtError):
    """A message could not be encoded."""


class DecodeError(BendyButtError):
    """A byte sequence is not a valid Bendy Butt message."""


class InvalidValue(EncodeError):
    """A field value does not have the shape its BFE kind requires."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for {field}: {reason}")


class ValueOutOfRange(EncodeError, DecodeError):
    """An integer field is outside the range the format can represent."""

    def __init__(self, field: str, value: int, low: int, high: int):
        self.field = field
        self.value = value
        super().__init__(f"{field} out of range: {value} not in [{low}, {high}]")


class MalformedFraming(DecodeError):
    """The bytes are not valid bencode."""


class SchemaMismatch(DecodeError):
    """A container has the wrong kind or element count."""

    def __init__(self, field: str, expected: int, found: Optional[int]):
        self.field = field
        self.expected = expected
        self.found = found
        if found is None:
            detail = "not a list"
        else:
            detail = f"found {found} elements"
        super().__init__(f"{field}: expected a list of {expected} elements, {detail}")


class BfeTagMismatch(DecodeError):
    """A field carries a BFE tag of the wrong kind."""

    def __init__(self, field: str, expected_kind: str, actual_tag: bytes):
        self.field = field
        self.expected_kind = expected_kind
        self.actual_tag = actual_tag
        super().__init__(
            f"{field}: expected {expected_kind}, got tag {actual_tag.hex() or '<empty>'}"
        )


class NotAnInteger(DecodeError):
    """An integer slot holds something other than a bencode integer."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field}: expected an integer")


class UnknownContentShape(DecodeError):
    """The content slot is neither private nor feed content."""


class MalformedValue(DecodeError):
    """A field has the right tag but an invalid payload."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")
