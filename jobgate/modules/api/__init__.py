"""
API Module - Black Box Interface

Purpose: Typed job definitions exchanged with the pipeline framework
Interface: SparkJobDefinition, SqoopJobDefinition, load_job_definition
Hidden: expression resolution, YAML parsing
"""

from .models import (
    PropertyResolver,
    SparkJobDefinition,
    SqoopJobDefinition,
    load_job_definition,
)

__all__ = [
    "PropertyResolver",
    "SparkJobDefinition",
    "SqoopJobDefinition",
    "load_job_definition",
]
