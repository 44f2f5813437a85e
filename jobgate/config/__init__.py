"""Configuration for jobgate."""

from .provider import (
    ConfigProvider,
    Defaults,
    EnvConfigProvider,
    SecurityConfig,
    SparkConfig,
    SqoopConfig,
    get_defaults,
)

__all__ = [
    "ConfigProvider",
    "Defaults",
    "EnvConfigProvider",
    "SecurityConfig",
    "SparkConfig",
    "SqoopConfig",
    "get_defaults",
]
