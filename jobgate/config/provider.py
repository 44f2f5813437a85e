"""Configuration provider following Black Box Design principles."""
import logging
import os
from dataclasses import dataclass, field, fields, replace
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Protocol

import yaml

logger = logging.getLogger("jobgate.config")


@dataclass(frozen=True)
class Defaults:
    """Process-wide constants shared by the builders and the executor."""
    default_map_tasks: int = 4
    mask_string: str = "*****"
    unable_to_decrypt: str = "UNABLE_TO_DECRYPT_ENCRYPTED_PASSWORD"
    stream_queue_size: int = 1000
    compression_codecs: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({
            "GZIP": "org.apache.hadoop.io.compress.GzipCodec",
            "SNAPPY": "org.apache.hadoop.io.compress.SnappyCodec",
            "BZIP2": "org.apache.hadoop.io.compress.BZip2Codec",
            "LZO": "com.hadoop.compression.lzo.LzoCodec",
        })
    )


@dataclass
class SparkConfig:
    """Spark launcher configuration."""
    spark_home: str
    master: str
    submit_script: str


@dataclass
class SqoopConfig:
    """Sqoop CLI configuration."""
    binary: str


@dataclass
class SecurityConfig:
    """Kerberos configuration."""
    kinit_binary: str
    kinit_timeout: int


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_spark_config(self) -> SparkConfig:
        """Get Spark configuration."""
        ...

    def get_sqoop_config(self) -> SqoopConfig:
        """Get Sqoop configuration."""
        ...

    def get_security_config(self) -> SecurityConfig:
        """Get security configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_spark_config(self) -> SparkConfig:
        """Get Spark configuration from environment variables."""
        return SparkConfig(
            spark_home=os.getenv("JOBGATE_SPARK_HOME", "/usr/hdp/current/spark-client/"),
            master=os.getenv("JOBGATE_SPARK_MASTER", "local"),
            submit_script=os.getenv("JOBGATE_SPARK_SUBMIT", "bin/spark-submit"),
        )

    def get_sqoop_config(self) -> SqoopConfig:
        """Get Sqoop configuration from environment variables."""
        return SqoopConfig(binary=os.getenv("JOBGATE_SQOOP_BINARY", "sqoop"))

    def get_security_config(self) -> SecurityConfig:
        """Get security configuration from environment variables."""
        return SecurityConfig(
            kinit_binary=os.getenv("JOBGATE_KINIT_BINARY", "kinit"),
            kinit_timeout=int(os.getenv("JOBGATE_KINIT_TIMEOUT", "60")),
        )


def _load_overrides(path: str) -> Dict[str, Any]:
    """Read a YAML override file for the defaults table."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Defaults file {path} must contain a mapping")

    known = {f.name for f in fields(Defaults)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown defaults keys: {sorted(unknown)}")

    overrides = {key: value for key, value in data.items() if key in known}
    if "compression_codecs" in overrides:
        codecs = {k.upper(): v for k, v in overrides["compression_codecs"].items()}
        overrides["compression_codecs"] = MappingProxyType(codecs)
    return overrides


@lru_cache(maxsize=1)
def get_defaults(path: Optional[str] = None) -> Defaults:
    """
    Load the defaults table once per process.

    Args:
        path: Optional YAML file overriding individual defaults. Falls back
            to the JOBGATE_DEFAULTS_FILE environment variable.

    Returns:
        Immutable Defaults instance
    """
    path = path or os.getenv("JOBGATE_DEFAULTS_FILE")
    defaults = Defaults()
    if not path:
        return defaults

    overrides = _load_overrides(path)
    logger.info(f"Loaded defaults overrides from {path}: {sorted(overrides)}")
    return replace(defaults, **overrides)
