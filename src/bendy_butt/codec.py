"""Bendy Butt message encoding and decoding.

The wire format is a bencoded list:

    [ [previous, author, sequence, timestamp, content], signature ]

- previous: BFE message id, or BFE nil for the first message
- author: BFE feed id
- sequence, timestamp: bencode integers (never BFE tagged)
- content: BFE box / string (private), or
  [[feedType, subfeed, metafeed, nonce], contentSignature] (feed)
- signature: BFE signature over the bencoded payload
"""

import base64
import hashlib
from typing import Callable, Optional

from bendy_butt import bfe
from bendy_butt.bfe import Kind
from bendy_butt.config import DEFAULT_CONFIG, CodecConfig
from bendy_butt.errors import (
    BfeTagMismatch,
    InvalidValue,
    MalformedFraming,
    MalformedValue,
    NotAnInteger,
    SchemaMismatch,
    UnknownContentShape,
    ValueOutOfRange,
)
from bendy_butt.framing import Node, decode_value, encode_value
from bendy_butt.models import Content, Feed, FeedData, Msg, Private

SEQUENCE_RANGE = (-(2**31), 2**31 - 1)
TIMESTAMP_RANGE = (-(2**63), 2**63 - 1)

PAYLOAD_FIELDS = ("previous", "author", "sequence", "timestamp", "content")
FEED_DATA_FIELDS = ("feed_type", "subfeed", "metafeed", "nonce")

_BB_MESSAGE_TAG = bfe.find_format(Kind.MESSAGE, ".bbmsg-v1").tag


# =============================================================================
# Encoding
# =============================================================================


def _tag(field: str, tagger: Callable[[str], bytes], value: str) -> bytes:
    try:
        return tagger(value)
    except bfe.BfeError as e:
        raise InvalidValue(field, str(e)) from e


def _check_int(field: str, value: int, bounds: tuple[int, int]) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidValue(field, f"expected an integer, got {type(value).__name__}")
    low, high = bounds
    if not low <= value <= high:
        raise ValueOutOfRange(field, value, low, high)
    return value


def _encode_content(content: Content) -> Node:
    if isinstance(content, Private):
        return _tag("content", bfe.tag_private, content.ciphertext)

    if isinstance(content, Feed):
        data = content.data
        return [
            [
                _tag("content.feed_type", bfe.tag_string, data.feed_type),
                _tag("content.subfeed", bfe.tag_feed, data.subfeed),
                _tag("content.metafeed", bfe.tag_feed, data.metafeed),
                _tag("content.nonce", bfe.tag_generic, data.nonce),
            ],
            _tag("content.signature", bfe.tag_signature, content.signature),
        ]

    raise InvalidValue("content", f"unsupported content type {type(content).__name__}")


def _payload(msg: Msg) -> list:
    if msg.previous is None:
        previous = bfe.NIL
    else:
        previous = _tag("previous", bfe.tag_message, msg.previous)

    return [
        previous,
        _tag("author", bfe.tag_feed, msg.author),
        _check_int("sequence", msg.sequence, SEQUENCE_RANGE),
        _check_int("timestamp", msg.timestamp, TIMESTAMP_RANGE),
        _encode_content(msg.content),
    ]


def encode_payload(msg: Msg) -> bytes:
    """Encode the payload of a message, i.e. the bytes its signature covers.

    Args:
        msg: Message to encode

    Returns:
        Bencoded payload list

    Raises:
        InvalidValue: If a field does not match its BFE kind
        ValueOutOfRange: If sequence or timestamp is not representable
    """
    return encode_value(_payload(msg))


def encode(msg: Msg) -> bytes:
    """Encode a message into its canonical Bendy Butt bytes.

    Args:
        msg: Message to encode

    Returns:
        Bencoded message

    Raises:
        InvalidValue: If a field does not match its BFE kind
        ValueOutOfRange: If sequence or timestamp is not representable
    """
    signature = _tag("signature", bfe.tag_signature, msg.signature)
    return encode_value([_payload(msg), signature])


def message_id(data: bytes) -> str:
    """Compute the message id (``%<sha256>.bbmsg-v1``) of encoded message bytes."""
    digest = hashlib.sha256(data).digest()
    return bfe.untag(_BB_MESSAGE_TAG + digest).value


# =============================================================================
# Decoding
# =============================================================================


def _describe(node: Node) -> str:
    if isinstance(node, bytes):
        return "byte string"
    if isinstance(node, int):
        return "integer"
    if isinstance(node, list):
        return "list"
    return "dictionary"


def _expect_list(field: str, node: Node, count: int) -> list:
    if not isinstance(node, list):
        raise SchemaMismatch(field, count, None)
    if len(node) != count:
        raise SchemaMismatch(field, count, len(node))
    return node


def _expect_int(field: str, node: Node, bounds: tuple[int, int]) -> int:
    if isinstance(node, bool) or not isinstance(node, int):
        raise NotAnInteger(field)
    low, high = bounds
    if not low <= node <= high:
        raise ValueOutOfRange(field, node, low, high)
    return node


def _untag(field: str, node: Node, *kinds: Kind) -> bfe.Untagged:
    if not isinstance(node, bytes):
        raise MalformedValue(field, f"expected a tagged byte string, got {_describe(node)}")
    try:
        return bfe.expect(node, *kinds)
    except bfe.TagMismatch as e:
        expected = " or ".join(k.value for k in kinds)
        raise BfeTagMismatch(field, expected, e.actual_tag) from e
    except bfe.BfeError as e:
        raise MalformedValue(field, str(e)) from e


def _decode_nonce(node: Node) -> str:
    untagged = _untag("content.nonce", node, Kind.BYTES, Kind.STRING)
    if untagged.kind == Kind.BYTES:
        return base64.b64encode(untagged.value).decode("ascii")
    return untagged.value


def _decode_content(node: Node) -> Content:
    if isinstance(node, bytes):
        return Private(ciphertext=_untag("content", node, Kind.BOX, Kind.STRING).value)

    if isinstance(node, list) and len(node) == 2:
        data, signature = node
        feed_type, subfeed, metafeed, nonce = _expect_list(
            "content.data", data, len(FEED_DATA_FIELDS)
        )
        return Feed(
            data=FeedData(
                feed_type=_untag("content.feed_type", feed_type, Kind.STRING).value,
                subfeed=_untag("content.subfeed", subfeed, Kind.FEED).value,
                metafeed=_untag("content.metafeed", metafeed, Kind.FEED).value,
                nonce=_decode_nonce(nonce),
            ),
            signature=_untag("content.signature", signature, Kind.SIGNATURE).value,
        )

    detail = _describe(node)
    if isinstance(node, list):
        detail = f"list of {len(node)} elements"
    raise UnknownContentShape(f"content: expected a tagged byte string or a list of 2, got {detail}")


def decode(data: bytes, config: Optional[CodecConfig] = None) -> Msg:
    """Decode Bendy Butt bytes into a message.

    Args:
        data: Bencoded message
        config: Decoder limits. Defaults to DEFAULT_CONFIG.

    Returns:
        Decoded Msg

    Raises:
        DecodeError: If the bytes are not a valid message. The concrete
            subclass tells which check failed.
    """
    if config is None:
        config = DEFAULT_CONFIG

    if len(data) > config.max_message_size:
        raise MalformedFraming(
            f"Message too large: {len(data)} bytes (maximum {config.max_message_size})"
        )

    tree = decode_value(data, config.max_depth)
    payload, signature = _expect_list("message", tree, 2)
    previous, author, sequence, timestamp, content = _expect_list(
        "payload", payload, len(PAYLOAD_FIELDS)
    )

    return Msg(
        previous=_untag("previous", previous, Kind.MESSAGE, Kind.NIL).value,
        author=_untag("author", author, Kind.FEED).value,
        sequence=_expect_int("sequence", sequence, SEQUENCE_RANGE),
        timestamp=_expect_int("timestamp", timestamp, TIMESTAMP_RANGE),
        signature=_untag("signature", signature, Kind.SIGNATURE).value,
        content=_decode_content(content),
    )
