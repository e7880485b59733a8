# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.
"""Central ALPS diagram tooling configuration.

All values have sensible defaults and can be overridden via environment variables
using the ``ALPS_EDITOR_`` prefix:

  ALPS_EDITOR_GENERATOR            Diagram generator, ``dot`` or ``svg``
                                    (default: dot)
  ALPS_EDITOR_LABEL_MODE           State labels, ``title`` or ``id`` (default: title)
  ALPS_EDITOR_RENDER_ENGINE        Graphviz layout engine used by ``svg``
                                    (default: dot)
  ALPS_EDITOR_HOST                 Server bind address (default: 127.0.0.1)
  ALPS_EDITOR_PORT                 Server port (default: 8080)
  ALPS_EDITOR_SAVE_DIR             Directory saved profiles are written to
                                    (default: current directory)
  ALPS_EDITOR_MAX_QUERY_BYTES      Largest profile accepted in a query string
                                    (default: 10240)
  ALPS_EDITOR_LOG_LEVEL            Log level (default: INFO)
  ALPS_EDITOR_LOG_FILE             Log file path (optional)
  ALPS_EDITOR_JSON_LOGS            Emit one JSON object per log line (default: false)
  ALPS_EDITOR_MAX_LOG_FILE_BYTES   Max bytes per log file (optional)
  ALPS_EDITOR_LOG_BACKUP_COUNT     Log rotation backup count (optional)
"""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from alps_common.constants import MAX_QUERY_PROFILE_BYTES
from alps_common.profile.dot import LABEL_MODES
from alps_common.profile.generators import GENERATORS, GeneratorOptions

_VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"})
_VALID_ENGINES = frozenset({"dot", "neato", "fdp", "sfdp", "circo", "twopi", "osage", "patchwork"})


class AlpsEditorConfig(BaseSettings):
    """Central configuration.

    Instantiate with ``AlpsEditorConfig()`` to read defaults and any
    ``ALPS_EDITOR_*`` environment variable overrides automatically.
    """

    model_config = SettingsConfigDict(env_prefix="ALPS_EDITOR_")

    # ── Diagram configuration ──────────────────────────────────────────────
    generator: str = "dot"
    label_mode: str = "title"
    render_engine: str = "dot"

    # ── Server configuration ───────────────────────────────────────────────
    host: str = "127.0.0.1"
    port: int = 8080
    save_dir: str = "."
    max_query_bytes: int = MAX_QUERY_PROFILE_BYTES

    # ── Logging configuration ──────────────────────────────────────────────
    log_level: str = "INFO"
    log_file: Optional[str] = None
    json_logs: bool = False
    max_log_file_bytes: Optional[int] = None
    log_backup_count: Optional[int] = None

    # ── Validators ─────────────────────────────────────────────────────────

    @field_validator("generator")
    @classmethod
    def _valid_generator(cls, v: str) -> str:
        if v not in GENERATORS:
            raise ValueError(
                f"generator={v!r} is not a known diagram generator. "
                f"Valid values: {', '.join(sorted(GENERATORS))}"
            )
        return v

    @field_validator("label_mode")
    @classmethod
    def _valid_label_mode(cls, v: str) -> str:
        if v not in LABEL_MODES:
            raise ValueError(f"label_mode={v!r} must be one of: {', '.join(LABEL_MODES)}")
        return v

    @field_validator("render_engine")
    @classmethod
    def _valid_render_engine(cls, v: str) -> str:
        if v not in _VALID_ENGINES:
            raise ValueError(
                f"render_engine={v!r} is not a Graphviz layout engine. "
                f"Valid values: {', '.join(sorted(_VALID_ENGINES))}"
            )
        return v

    @field_validator("port")
    @classmethod
    def _valid_port(cls, v: int, info: ValidationInfo) -> int:
        if not (1 <= v <= 65535):
            raise ValueError(f"{info.field_name}={v} is outside the valid port range (1-65535)")
        return v

    @field_validator("max_query_bytes")
    @classmethod
    def _valid_max_query_bytes(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_query_bytes={v} must be >= 1")
        return v

    @field_validator("log_level")
    @classmethod
    def _valid_log_level(cls, v: str) -> str:
        if v.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level={v!r} is not a valid log level. "
                f"Valid values: {', '.join(sorted(_VALID_LOG_LEVELS))}"
            )
        return v.upper()

    @field_validator("max_log_file_bytes", "log_backup_count")
    @classmethod
    def _non_negative(cls, v: Optional[int], info: ValidationInfo) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError(f"{info.field_name}={v} must be >= 0")
        return v

    def generator_options(self) -> GeneratorOptions:
        return GeneratorOptions(label_mode=self.label_mode, engine=self.render_engine)


# ── Module-level singleton ─────────────────────────────────────────────────────

_config: Optional[AlpsEditorConfig] = None


def get_config() -> AlpsEditorConfig:
    """Return the process-wide config singleton.

    Creates a fresh ``AlpsEditorConfig`` on first call (reading env vars).
    Subsequent calls return the cached instance.
    """
    global _config
    if _config is None:
        _config = AlpsEditorConfig()
    return _config


def load_and_validate_config() -> AlpsEditorConfig:
    """Build, validate, cache and return the config.

    Raises ``pydantic.ValidationError`` if any value is invalid. Call this
    once at startup to surface config errors before serving requests.
    """
    global _config
    cfg = AlpsEditorConfig()
    _config = cfg
    return cfg
