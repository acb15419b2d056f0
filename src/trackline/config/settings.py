"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``TRACKLINE_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``trackline.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Any validation failure surfaces as
:class:`~trackline.domain.errors.ConfigValidationError` before a draw
cycle starts.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from trackline.config.discovery import find_config
from trackline.config.models import (
    ColumnsConfig,
    LayoutConfig,
    SourceConfig,
    TracksConfig,
    ViewportConfig,
)
from trackline.domain.errors import ConfigValidationError


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``trackline.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise ConfigValidationError(msg, path=str(toml_path)) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class TracklineSettings(BaseSettings):
    """Unified settings for the trackline CLI.

    Stored on the Click context by the root group; every draw cycle reads
    its options from here.

    Attributes:
        config_path: The TOML file in effect, or None when running on
            defaults.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TRACKLINE_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    tracks: TracksConfig = Field(default_factory=TracksConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> TracklineSettings:
        """Construct settings from a CLI invocation.

        Discovers ``trackline.toml`` via walk-up from *start* (or uses the
        explicit *config_path*) and merges CLI flags as highest-priority
        overrides.

        Raises:
            ConfigValidationError: if the TOML is malformed or any value
                is outside its documented range.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        except ValidationError as exc:
            raise ConfigValidationError(
                _summarize(exc),
                path=str(toml_path) if toml_path else None,
                errors=[
                    {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                    for err in exc.errors()
                ],
            ) from exc
        finally:
            _tls.toml_path = None


def _summarize(exc: ValidationError) -> str:
    """One-line summary naming every offending field."""
    fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
    return f"Invalid configuration: {', '.join(fields)}"
