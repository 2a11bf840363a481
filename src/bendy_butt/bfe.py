"""Binary Field Encoding (BFE) tagging and untagging.

A BFE value is a two byte tag followed by the payload:
- Type (1 byte): what kind of value this is (feed, message, signature, ...)
- Format (1 byte): which variant of that type (classic, gabby grove, bendy butt, ...)
- Payload (variable): raw key / hash / signature bytes, or UTF-8 text

Sigil-based identifiers such as ``@<base64>.bbfeed-v1`` are stored as their
decoded key bytes; the sigil and suffix are implied by the tag. Identifier
text that is not a known key form keeps its type byte and is stored as UTF-8
under the TEXT_FORMAT format byte.
"""

import base64
import binascii
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union


class BfeType(IntEnum):
    """BFE type bytes."""

    FEED = 0x00
    MESSAGE = 0x01
    SIGNATURE = 0x04
    BOX = 0x05
    GENERIC = 0x06


class Kind(Enum):
    """Semantic kind of a tagged value."""

    FEED = "feed"
    MESSAGE = "message"
    SIGNATURE = "signature"
    BOX = "box"
    STRING = "string"
    NIL = "nil"
    BYTES = "bytes"


# Format byte for identifiers carried as plain UTF-8 text.
TEXT_FORMAT = 0xFF


@dataclass(frozen=True)
class Format:
    """One row of the BFE table."""

    kind: Kind
    type: BfeType
    format: int
    sigil: str = ""
    suffix: str = ""
    length: Optional[int] = None

    @property
    def tag(self) -> bytes:
        return bytes([self.type, self.format])

    @property
    def is_text(self) -> bool:
        """Whether the payload is UTF-8 text rather than raw bytes."""
        return self.kind == Kind.STRING or self.format == TEXT_FORMAT


FORMATS = (
    Format(Kind.FEED, BfeType.FEED, 0x00, "@", ".ed25519", 32),
    Format(Kind.FEED, BfeType.FEED, 0x01, "@", ".ggfeed-v1", 32),
    Format(Kind.FEED, BfeType.FEED, 0x02, "@", ".bbfeed-v1", 32),
    Format(Kind.FEED, BfeType.FEED, TEXT_FORMAT),
    Format(Kind.MESSAGE, BfeType.MESSAGE, 0x00, "%", ".sha256", 32),
    Format(Kind.MESSAGE, BfeType.MESSAGE, 0x01, "%", ".ggmsg-v1", 32),
    Format(Kind.MESSAGE, BfeType.MESSAGE, 0x02, "%", ".bbmsg-v1", 32),
    Format(Kind.MESSAGE, BfeType.MESSAGE, TEXT_FORMAT),
    Format(Kind.SIGNATURE, BfeType.SIGNATURE, 0x00, "", ".sig.ed25519", 64),
    Format(Kind.SIGNATURE, BfeType.SIGNATURE, TEXT_FORMAT),
    Format(Kind.BOX, BfeType.BOX, 0x00, "", ".box"),
    Format(Kind.BOX, BfeType.BOX, 0x01, "", ".box2"),
    Format(Kind.STRING, BfeType.GENERIC, 0x00),
    Format(Kind.NIL, BfeType.GENERIC, 0x02, length=0),
    Format(Kind.BYTES, BfeType.GENERIC, 0x03),
)

_BY_TAG = {f.tag: f for f in FORMATS}

Value = Union[str, bytes, None]


class BfeError(ValueError):
    """A value cannot be tagged, or tagged bytes carry an invalid payload."""


class TagMismatch(BfeError):
    """Tagged bytes carry an unknown tag, or a tag of an unexpected kind."""

    def __init__(self, expected: tuple[Kind, ...], actual_tag: bytes):
        self.expected = expected
        self.actual_tag = actual_tag
        names = " or ".join(k.value for k in expected)
        super().__init__(f"Expected {names}, got tag {actual_tag.hex() or '<empty>'}")


@dataclass(frozen=True)
class Untagged:
    """Result of untagging: the kind, the raw tag and the restored value."""

    kind: Kind
    tag: bytes
    value: Value


def find_format(kind: Kind, suffix: str = "") -> Format:
    """Look up the table row for a kind and identifier suffix.

    An empty suffix selects the kind's text or generic row.
    """
    for fmt in FORMATS:
        if fmt.kind == kind and fmt.suffix == suffix:
            return fmt
    raise KeyError(f"No {kind.value} format with suffix {suffix!r}")


NIL = find_format(Kind.NIL).tag
STRING_TAG = find_format(Kind.STRING).tag
BYTES_TAG = find_format(Kind.BYTES).tag


def _key_formats(kind: Kind) -> list[Format]:
    return [f for f in FORMATS if f.kind == kind and f.suffix]


def _b64_to_bytes(text: str) -> Optional[bytes]:
    """Decode canonical base64, or return None."""
    try:
        raw = base64.b64decode(text.encode("ascii"), validate=True)
    except (UnicodeEncodeError, binascii.Error):
        return None
    # Only canonical text survives the decode/encode round trip unchanged.
    if base64.b64encode(raw).decode("ascii") != text:
        return None
    return raw


def parse_identifier(kind: Kind, value: str) -> bytes:
    """Tag a sigil identifier in its key form, with no text fallback.

    Raises:
        BfeError: If the value is not a canonical identifier of the kind
    """
    if not isinstance(value, str):
        raise BfeError(f"Expected a {kind.value} string, got {type(value).__name__}")

    for fmt in _key_formats(kind):
        if value.startswith(fmt.sigil) and value.endswith(fmt.suffix):
            body = value[len(fmt.sigil):len(value) - len(fmt.suffix)]
            raw = _b64_to_bytes(body)
            if raw is None:
                raise BfeError(f"Invalid base64 in {kind.value}: {value!r}")
            if fmt.length is not None and len(raw) != fmt.length:
                raise BfeError(
                    f"Invalid {kind.value} length: expected {fmt.length} bytes, got {len(raw)}"
                )
            return fmt.tag + raw

    raise BfeError(f"Not a {kind.value} identifier: {value!r}")


def _tag_identifier(kind: Kind, value: str) -> bytes:
    if not isinstance(value, str):
        raise BfeError(f"Expected a {kind.value} string, got {type(value).__name__}")

    try:
        return parse_identifier(kind, value)
    except BfeError:
        pass

    # A canonical identifier of another kind is never relabelled.
    for other in (Kind.FEED, Kind.MESSAGE, Kind.SIGNATURE, Kind.BOX):
        if other == kind:
            continue
        try:
            parse_identifier(other, value)
        except BfeError:
            continue
        raise BfeError(f"Expected a {kind.value}, got a {other.value} identifier: {value!r}")

    return find_format(kind).tag + value.encode("utf-8")


def tag_feed(value: str) -> bytes:
    """Tag a feed identifier such as ``@<base64>.bbfeed-v1``."""
    return _tag_identifier(Kind.FEED, value)


def tag_message(value: str) -> bytes:
    """Tag a message identifier such as ``%<base64>.bbmsg-v1``."""
    return _tag_identifier(Kind.MESSAGE, value)


def tag_signature(value: str) -> bytes:
    """Tag a ``<base64>.sig.ed25519`` signature."""
    return _tag_identifier(Kind.SIGNATURE, value)


def tag_box(value: str) -> bytes:
    """Tag a ``.box`` or ``.box2`` ciphertext."""
    return parse_identifier(Kind.BOX, value)


def tag_string(value: str) -> bytes:
    """Tag UTF-8 text."""
    if not isinstance(value, str):
        raise BfeError(f"Expected a string, got {type(value).__name__}")
    return STRING_TAG + value.encode("utf-8")


def tag_bytes(value: bytes) -> bytes:
    """Tag arbitrary bytes."""
    return BYTES_TAG + bytes(value)


def tag_private(value: str) -> bytes:
    """Tag an encrypted payload.

    Box ciphertexts get the box tag; any other text is kept as a string.
    """
    try:
        return tag_box(value)
    except BfeError:
        return tag_string(value)


def tag_generic(value: str) -> bytes:
    """Tag a generic value: canonical base64 as bytes, anything else as a string."""
    if not isinstance(value, str):
        raise BfeError(f"Expected a string, got {type(value).__name__}")
    raw = _b64_to_bytes(value)
    if raw is not None and value:
        return tag_bytes(raw)
    return tag_string(value)


_TAGGERS = {
    Kind.FEED: tag_feed,
    Kind.MESSAGE: tag_message,
    Kind.SIGNATURE: tag_signature,
    Kind.BOX: tag_box,
    Kind.STRING: tag_string,
    Kind.BYTES: tag_bytes,
}


def tag(kind: Kind, value: Value) -> bytes:
    """Tag a value as the given kind."""
    if kind == Kind.NIL:
        if value is not None:
            raise BfeError(f"Nil takes no value, got {value!r}")
        return NIL
    return _TAGGERS[kind](value)


def untag(data: bytes) -> Untagged:
    """Split tagged bytes into kind and value.

    Raises:
        TagMismatch: If the tag is not in the BFE table
        BfeError: If the payload is invalid for its tag
    """
    fmt = _BY_TAG.get(bytes(data[:2]))
    if fmt is None:
        raise TagMismatch(tuple(Kind), bytes(data[:2]))

    payload = bytes(data[2:])
    if fmt.length is not None and len(payload) != fmt.length:
        raise BfeError(
            f"Invalid {fmt.kind.value} length: expected {fmt.length} bytes, got {len(payload)}"
        )

    if fmt.kind == Kind.NIL:
        value: Value = None
    elif fmt.kind == Kind.BYTES:
        value = payload
    elif fmt.is_text:
        try:
            value = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BfeError(f"Invalid UTF-8 in {fmt.kind.value}: {e}") from e
    else:
        value = fmt.sigil + base64.b64encode(payload).decode("ascii") + fmt.suffix

    return Untagged(kind=fmt.kind, tag=fmt.tag, value=value)


def expect(data: bytes, *kinds: Kind) -> Untagged:
    """Untag bytes and check that they hold one of the given kinds.

    Raises:
        TagMismatch: If the tag is unknown or of another kind
        BfeError: If the payload is invalid for its tag
    """
    fmt = _BY_TAG.get(bytes(data[:2]))
    if fmt is None or fmt.kind not in kinds:
        raise TagMismatch(kinds, bytes(data[:2]))
    return untag(data)
