"""Bencode framing for Bendy Butt value trees.

A thin adapter over the ``bencode.py`` library. Only the subset the message
shape needs is exposed: byte strings, integers and lists. Decoded byte strings
stay ``bytes``; no text decoding is attempted.
"""

from functools import lru_cache
from typing import Union

import bencodepy
from bencodepy.exceptions import BencodeDecodeError

from bendy_butt.errors import EncodeError, MalformedFraming

Node = Union[bytes, int, list]

# Legitimate messages nest four lists deep (message, payload, content, feed data).
DEFAULT_MAX_DEPTH = 8


@lru_cache(maxsize=None)
def _bencode(max_depth: int) -> bencodepy.Bencode:
    return bencodepy.Bencode(encoding=None, max_depth=max_depth)


def encode_value(value: Node) -> bytes:
    """Serialize a tree of bytes, ints and lists.

    Args:
        value: Root of the tree

    Returns:
        Canonical bencoded bytes
    """
    try:
        return _bencode(DEFAULT_MAX_DEPTH).encode(value)
    except (KeyError, TypeError) as e:
        raise EncodeError(f"Cannot bencode value: {e}") from e


def decode_value(data: bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> Node:
    """Parse bencoded bytes into a tree of bytes, ints and lists.

    Dictionaries are returned as decoded by the library; callers treat them
    as a schema error.

    Args:
        data: Bencoded bytes
        max_depth: Deepest container nesting accepted

    Returns:
        Root of the decoded tree

    Raises:
        MalformedFraming: If the bytes are not a single valid bencoded value,
            or nest deeper than max_depth
    """
    if not data:
        raise MalformedFraming("Empty input")

    try:
        return _bencode(max_depth).decode(bytes(data))
    except BencodeDecodeError as e:
        raise MalformedFraming(f"Invalid bencode: {e}") from e
