"""Application configuration management.

Handles loading and validating configuration from multiple sources:
    - TOML/JSON config files
    - Environment variables (PSCOUT_* prefix)
    - Default values

Key components:
    - AppConfig: Main configuration model
    - load_config(): Safe config loading with fallback
    - ConfigLoadResult: Metadata about config source
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal
from unittest.mock import patch

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_ENV_VAR = "PSCOUT_CONFIG"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded or validated."""


# -----------------------------------------------------------------------------
# Sub-configuration Models
# -----------------------------------------------------------------------------


class SearchConfig(BaseModel):
    """Search pipeline toggles and thresholds."""

    max_results: int = Field(default=5, ge=1, description="Default number of recommendations.")
    min_confidence: float = Field(
        default=0.05, ge=0.0, le=1.0, description="Floor applied to primary strategy matches."
    )
    broad_search_threshold: float = Field(
        default=0.01, ge=0.0, le=1.0, description="Floor applied during the broad fallback pass."
    )
    use_semantic_search: bool = Field(default=True, description="Run the embedding strategy.")
    use_keyword_search: bool = Field(default=True, description="Run the keyword strategy.")
    use_hybrid_search: bool = Field(
        default=True, description="Fuse strategy matches with query-adaptive weights."
    )
    use_fuzzy_refinement: bool = Field(
        default=True, description="Refine confidences with the fuzzy-logic ranker."
    )
    result_cache_ttl: float = Field(
        default=1800.0, gt=0, description="Seconds a finished result list stays cached."
    )


class EmbeddingConfig(BaseModel):
    """Embedding provider selection."""

    provider: Literal["auto", "hash", "sentence-transformers", "remote"] = Field(
        default="auto",
        description="Embedding backend; 'auto' tries remote, then local model, then hashing.",
    )
    model_name: str = Field(
        default="all-MiniLM-L6-v2", description="Sentence-transformers model name."
    )
    server_url: str | None = Field(
        default=None, description="Embedding HTTP endpoint used before loading local weights."
    )
    dimension: int = Field(default=384, ge=8, description="Pseudo-embedding dimension.")
    cache_ttl: float = Field(
        default=3600.0, gt=0, description="Seconds a query embedding stays cached."
    )


class RecommendationConfig(BaseModel):
    """Recommendation expansion limits."""

    max_alternatives: int = Field(default=3, ge=0)
    max_examples: int = Field(default=3, ge=0)
    placeholder_similarity: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Similarity assigned to alternatives absent from the current matches.",
    )


class CacheConfig(BaseModel):
    """In-process cache sizing."""

    max_entries: int = Field(default=1000, ge=1)
    default_ttl: float = Field(default=3600.0, gt=0)


class InfraConfig(BaseModel):
    """Backends and tracing configuration."""

    vector_backend: Literal["memory", "lance"] = Field(
        default="memory", description="Vector index backend for the semantic strategy."
    )
    lance_path: Path = Field(
        default_factory=lambda: Path.home() / ".pscout" / "vectors.lance",
        description="LanceDB directory when vector_backend is 'lance'.",
    )
    otel_endpoint: str | None = Field(
        default=None, description="OTLP endpoint for exporting traces."
    )
    otel_service_name: str = Field(
        default="patternscout", description="Service name used for OpenTelemetry spans."
    )
    otel_export_enabled: bool = Field(
        default=False, description="Enable OTLP tracing export when true."
    )


@dataclass
class ConfigLoadResult:
    path: Path
    file_loaded: bool
    env_overrides: set[str]
    error: str | None = None


class AppConfig(BaseSettings):
    """Application-wide configuration with nested sub-configs."""

    model_config = SettingsConfigDict(
        env_prefix="PSCOUT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Log level for pscout output.")
    search: SearchConfig = Field(default_factory=SearchConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    recommendation: RecommendationConfig = Field(default_factory=RecommendationConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    infra: InfraConfig = Field(default_factory=InfraConfig)

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        # Ensure environment variables override config file entries.
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


_NESTED_MODELS: dict[str, type[BaseModel]] = {
    "search": SearchConfig,
    "embedding": EmbeddingConfig,
    "recommendation": RecommendationConfig,
    "cache": CacheConfig,
    "infra": InfraConfig,
}


def _resolve_config_path(config_path: Path | None, env_vars: Mapping[str, str]) -> Path:
    candidate = config_path or env_vars.get(CONFIG_ENV_VAR) or (Path.home() / ".pscout.toml")
    return Path(candidate).expanduser()


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    raw = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    parser = json.loads if suffix == ".json" else tomllib.loads

    try:
        data = parser(raw)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Syntax error in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config root in {path} must be a mapping.")

    return data


def _detect_env_overrides(env_vars: Mapping[str, str]) -> set[str]:
    """Detect which fields are overridden by environment variables.

    For nested models, detects vars like PSCOUT_SEARCH__MAX_RESULTS.
    """
    prefix = AppConfig.model_config.get("env_prefix", "")
    delimiter = AppConfig.model_config.get("env_nested_delimiter", "__")
    overrides: set[str] = set()

    if f"{prefix}LOG_LEVEL" in env_vars:
        overrides.add("log_level")

    for group_name, model_cls in _NESTED_MODELS.items():
        for field in model_cls.model_fields:
            env_key = f"{prefix}{group_name}{delimiter}{field}".upper()
            if env_key in env_vars:
                overrides.add(f"{group_name}.{field}")

    return overrides


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[AppConfig, ConfigLoadResult]:
    """
    Load configuration with Safe Mode fallback.
    If the file is invalid, returns default config + error message.
    """
    env_vars: Mapping[str, str] = os.environ if env is None else {**os.environ, **env}
    resolved_path = _resolve_config_path(config_path, env_vars)
    env_overrides = _detect_env_overrides(env_vars)

    error: str | None = None
    file_loaded = False
    file_data: dict[str, Any] = {}

    try:
        file_data = _read_config_file(resolved_path)
        file_loaded = resolved_path.exists()
    except ConfigError as exc:
        error = str(exc)

    context_manager = (
        patch.dict(os.environ, env_vars, clear=False) if env is not None else nullcontext()
    )

    try:
        with context_manager:
            config = AppConfig(**file_data)
    except ValidationError as exc:
        error = str(exc)
        config = AppConfig()

    load_result = ConfigLoadResult(
        path=resolved_path,
        file_loaded=file_loaded,
        env_overrides=env_overrides,
        error=error,
    )

    return config, load_result


__all__ = [
    "CONFIG_ENV_VAR",
    "AppConfig",
    "CacheConfig",
    "ConfigError",
    "ConfigLoadResult",
    "EmbeddingConfig",
    "InfraConfig",
    "RecommendationConfig",
    "SearchConfig",
    "load_config",
]
