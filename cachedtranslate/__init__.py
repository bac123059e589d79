"""Top-level package for cachedtranslate.

This package provides a cache-first machine translation layer: content-hash
and resource-field cache keys, manual overrides, per-key coalescing of
concurrent provider calls, and detached cache writes. The main entry point is
`TranslationOrchestrator`, usually built through `create_translator`.
"""

from loguru import logger as _loguru_logger

from .config import ConfigLoader, TranslateConfig
from .errors import (
    CacheWriteFailure,
    ConfigError,
    InvalidParamsError,
    ProviderFailure,
    TranslateCacheError,
)
from .orchestrator import TranslationOrchestrator, create_translator

_loguru_logger.disable("cachedtranslate")

__all__ = [
    "CacheWriteFailure",
    "ConfigError",
    "ConfigLoader",
    "InvalidParamsError",
    "ProviderFailure",
    "TranslateCacheError",
    "TranslateConfig",
    "TranslationOrchestrator",
    "__version__",
    "create_translator",
]

__version__ = "0.1.0"
