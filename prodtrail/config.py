"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from prodtrail.models.config import (
    APIConfig,
    IdentityConfig,
    LogConfig,
    ProdTrailConfig,
    RepositoryConfig,
    StorageConfig,
)

_STORAGE_BACKENDS = frozenset({"memory", "file"})


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"PRODTRAIL_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_storage_backend(value: str) -> str:
    if value.lower() not in _STORAGE_BACKENDS:
        raise ValueError(f"Invalid storage backend: {value}. Must be one of {set(_STORAGE_BACKENDS)}")
    return value.lower()


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in ("json", "console"):
        raise ValueError(f"Invalid log format: {value}. Must be 'json' or 'console'")
    return value.lower()


def load_config() -> ProdTrailConfig:
    """Load configuration from PRODTRAIL_* environment variables."""
    return ProdTrailConfig(
        storage=StorageConfig(
            backend=_validate_storage_backend(_env("STORAGE_BACKEND", "file")),
            path=_env("STORAGE_PATH", ".prodtrail"),
        ),
        repository=RepositoryConfig(
            mutation_delay_ms=_env_int("MUTATION_DELAY_MS", 0, min_val=0, max_val=5000),
            seed_on_empty=_env_bool("SEED_ON_EMPTY", True),
        ),
        identity=IdentityConfig(
            default_actor=_env("DEFAULT_ACTOR", "Unknown User"),
        ),
        api=APIConfig(
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
