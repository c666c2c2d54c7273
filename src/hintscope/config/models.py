"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (HINTSCOPE__SECTION__KEY)
3. Project YAML (.hintscope/config.yaml)
4. Global YAML (~/.config/hintscope/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    HINTSCOPE__<SECTION>__<KEY>=<VALUE>

Examples:
    HINTSCOPE__LOGGING__LEVEL=DEBUG
    HINTSCOPE__PARSER__MAX_RETRIES=5
    HINTSCOPE__HINTS__MAX_RESULTS=50
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        HINTSCOPE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every dispatch and cache decision.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ParserConfig(BaseModel):
    """Parse pipeline configuration.

    Env vars:
        HINTSCOPE__PARSER__MAX_RETRIES: Line-blanking retries for forced parses
    """

    max_retries: int = Field(
        default=10,
        description="Retry ceiling for forced parses (first load of a file). Each retry "
        "blanks the line of the first syntax error. Routine reparses never retry.",
    )
    extensions: list[str] = Field(
        default_factory=lambda: [".js", ".jsx", ".mjs", ".cjs"],
        description="File extensions treated as JavaScript when refreshing a directory.",
    )

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"max_retries must be >= 0, got {v}")
        return v


class HintsConfig(BaseModel):
    """Hint list configuration.

    Env vars:
        HINTSCOPE__HINTS__MAX_RESULTS: Hint list truncation
    """

    max_results: int = Field(
        default=100,
        description="Maximum hints returned after filtering. Bounds presentation cost.",
    )
    include_keywords: bool = Field(
        default=True,
        description="Append language keywords to identifier hint lists.",
    )

    @field_validator("max_results")
    @classmethod
    def validate_max_results(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_results must be >= 1, got {v}")
        return v


class WorkerConfig(BaseModel):
    """Parse worker configuration.

    Env vars:
        HINTSCOPE__WORKER__MAX_WORKERS: Parse worker threads
    """

    max_workers: int = Field(
        default=1,
        description="Parse worker threads. At most one parse per file is in flight "
        "regardless of this value.",
    )
    thread_name_prefix: str = Field(default="hintscope-parser")


class HintScopeConfig(BaseModel):
    """Root configuration for hintscope.

    All settings can be configured via:
    1. Environment variables: HINTSCOPE__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    parser: ParserConfig = Field(default_factory=ParserConfig)
    hints: HintsConfig = Field(default_factory=HintsConfig)
    worker: WorkerConfig = Field(default_factory=WorkerConfig)
