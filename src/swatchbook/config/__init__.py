"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .gcs import GcsConfig, get_gcs_config
from .gemini import GeminiConfig, get_gemini_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .matching import MatchingConfig, get_matching_config
from .recovery import RecoveryConfig, get_recovery_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "GcsConfig",
    "GeminiConfig",
    "MatchingConfig",
    "MissingConfigurationError",
    "RateLimit",
    "RecoveryConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_database_config",
    "get_gcs_config",
    "get_gemini_config",
    "get_matching_config",
    "get_recovery_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
