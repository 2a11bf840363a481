"""Bendy Butt metafeed message encoding and decoding."""

__version__ = "0.1.0"

# Encoding/decoding
from bendy_butt.codec import decode, encode, encode_payload, message_id

# Data model
from bendy_butt.models import Content, Feed, FeedData, Msg, Private

# Configuration
from bendy_butt.config import CodecConfig, load_config

# Errors
from bendy_butt.errors import (
    BendyButtError,
    BfeTagMismatch,
    DecodeError,
    EncodeError,
    InvalidValue,
    MalformedFraming,
    MalformedValue,
    NotAnInteger,
    SchemaMismatch,
    UnknownContentShape,
    ValueOutOfRange,
)

__all__ = [
    # Version
    "__version__",
    # Codec
    "encode",
    "decode",
    "encode_payload",
    "message_id",
    # Model
    "Msg",
    "Content",
    "Private",
    "Feed",
    "FeedData",
    # Config
    "CodecConfig",
    "load_config",
    # Errors
    "BendyButtError",
    "EncodeError",
    "DecodeError",
    "InvalidValue",
    "ValueOutOfRange",
    "MalformedFraming",
    "SchemaMismatch",
    "BfeTagMismatch",
    "NotAnInteger",
    "UnknownContentShape",
    "MalformedValue",
]
