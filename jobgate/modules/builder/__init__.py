"""
Builder Module - Black Box Interface

Purpose: Compile typed job options into an external invocation
Interface: SqoopBuilder -> RenderedCommand, SparkLauncherBuilder -> LaunchSpec
Hidden: flag grammar, quoting, option precedence

Builders perform no I/O; the executor module runs what they produce.
"""

from .options import (
    CompressionAlgorithm,
    ExtractDataFormat,
    HiveDelimStrategy,
    HiveNullEncodingStrategy,
    PasswordMode,
    SqoopLoadStrategy,
)
from .spark_launcher import LaunchSpec, SparkLauncherBuilder
from .sqoop_command import RenderedCommand, SqoopBuilder

__all__ = [
    "CompressionAlgorithm",
    "ExtractDataFormat",
    "HiveDelimStrategy",
    "HiveNullEncodingStrategy",
    "LaunchSpec",
    "PasswordMode",
    "RenderedCommand",
    "SparkLauncherBuilder",
    "SqoopBuilder",
    "SqoopLoadStrategy",
]
