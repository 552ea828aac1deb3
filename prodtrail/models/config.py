"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class StorageConfig:
    """Persistence adapter configuration."""

    backend: str = "file"
    path: str = ".prodtrail"


@dataclass
class RepositoryConfig:
    """Product repository configuration."""

    mutation_delay_ms: int = 0
    seed_on_empty: bool = True


@dataclass
class IdentityConfig:
    """Attribution fallback used when a caller supplies no actor."""

    default_actor: str = "Unknown User"


@dataclass
class APIConfig:
    """REST API configuration."""

    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class ProdTrailConfig:
    """Top-level ProdTrail configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
