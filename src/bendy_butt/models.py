"""Bendy Butt message data model."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class FeedData:
    """Metafeed management data carried by feed content."""

    feed_type: str
    subfeed: str
    metafeed: str
    nonce: str


@dataclass(frozen=True)
class Private:
    """Encrypted content (box / box2 ciphertext)."""

    ciphertext: str


@dataclass(frozen=True)
class Feed:
    """Feed management content and the signature over it."""

    data: FeedData
    signature: str


Content = Union[Private, Feed]


@dataclass(frozen=True)
class Msg:
    """A decoded Bendy Butt message."""

    previous: Optional[str]  # None for the first message of a feed
    author: str
    sequence: int
    timestamp: int
    signature: str
    content: Content

    @property
    def is_first(self) -> bool:
        """Whether this message starts its feed."""
        return self.previous is None
