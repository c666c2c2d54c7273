"""Config module exports."""

from hintscope.config.loader import load_config
from hintscope.config.models import (
    HintScopeConfig,
    HintsConfig,
    LoggingConfig,
    LogOutputConfig,
    ParserConfig,
    WorkerConfig,
)

__all__ = [
    "load_config",
    "HintScopeConfig",
    "HintsConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ParserConfig",
    "WorkerConfig",
]
