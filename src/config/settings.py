# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for renderer endpoint, caching, include limits
and logging. Scheme policy (HTTP vs HTTPS) is enforced here, before any
client is built, rather than inside the Kroki client.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === KROKI ===
    kroki_base_url: str = "https://kroki.io"
    default_format: Literal["svg", "png"] = "svg"
    timeout_ms: int = 15000
    enabled_diagram_types: str = "plantuml,mermaid,graphviz"
    allow_http: bool = False
    user_agent: str = "adockroki"

    # === Cache ===
    cache_backend: Literal["json", "memory"] = "json"
    cache_path: Path = Path("~/.adockroki/diagram-cache.json")
    cache_max_items: int = 300

    # === Includes ===
    include_max_depth: int = 30
    diagram_include_max_depth: int = 20
    include_markers: bool = True
    default_document_extension: str = ".adoc"

    # === Re-render scheduling ===
    render_debounce_ms: int = 120

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator(
        "timeout_ms",
        "cache_max_items",
        "include_max_depth",
        "diagram_include_max_depth",
        "render_debounce_ms",
    )
    @classmethod
    def validate_non_negative(cls, v: int, info) -> int:  # noqa: N805
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @field_validator("default_document_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:  # noqa: N805
        v = v.strip()
        if not v:
            raise ValueError("default_document_extension must not be empty")
        return v if v.startswith(".") else f".{v}"

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        url = self.kroki_base_url.strip().lower()
        if not url.startswith(("http://", "https://")):
            errors.append("KROKI_BASE_URL must start with http:// or https://")
        elif url.startswith("http://") and not self.allow_http:
            errors.append("KROKI_BASE_URL uses http:// but ALLOW_HTTP is false")

        if not self.enabled_diagram_types_list:
            errors.append("ENABLED_DIAGRAM_TYPES must list at least one diagram type")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def enabled_diagram_types_list(self) -> list[str]:
        """Parse comma-separated diagram kinds."""
        return [
            t.strip() for t in self.enabled_diagram_types.split(",") if t.strip()
        ]

    @property
    def timeout_seconds(self) -> float | None:
        """Request timeout for httpx; None disables it."""
        return self.timeout_ms / 1000.0 if self.timeout_ms > 0 else None


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-vault config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
