"""Codec configuration loading and management."""

import logging
from dataclasses import dataclass
from pathlib import Path

try:
    import tomli
except ImportError:  # pragma: no cover
    import tomllib as tomli  # Python 3.11+

from bendy_butt.framing import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

# Bendy Butt messages are capped at 8 KiB on the wire.
DEFAULT_MAX_MESSAGE_SIZE = 8192


@dataclass
class CodecConfig:
    """Decoder limits."""

    max_depth: int = DEFAULT_MAX_DEPTH
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE

    def __post_init__(self):
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.max_message_size < 1:
            raise ValueError(f"max_message_size must be positive, got {self.max_message_size}")


DEFAULT_CONFIG = CodecConfig()


def load_config(path: Path) -> CodecConfig:
    """Load configuration from TOML file.

    Args:
        path: Path to config file

    Returns:
        Loaded configuration, merged with defaults
    """
    if not path.exists():
        return CodecConfig()

    with open(path, "rb") as f:
        data = tomli.load(f)

    limits = data.get("limits", {})

    config = CodecConfig(
        max_depth=limits.get("max_depth", DEFAULT_MAX_DEPTH),
        max_message_size=limits.get("max_message_size", DEFAULT_MAX_MESSAGE_SIZE),
    )
    logger.debug("Loaded codec config from %s: %s", path, config)
    return config
