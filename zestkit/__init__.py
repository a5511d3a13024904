"""Small stateless helpers: identicon patterns and string utilities."""
import logging

from .config import Settings, configure_logging, get_settings
from .identicon import (
    IdenticonGenerator,
    IdenticonOptions,
    IdenticonResult,
    convert_color,
    generate,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "IdenticonGenerator",
    "IdenticonOptions",
    "IdenticonResult",
    "Settings",
    "configure_logging",
    "convert_color",
    "generate",
    "get_settings",
]
