"""
Jobgate job definition models.

These models are the typed configuration handed over by the pipeline:
property values are resolved (including ${...} expressions) and validated
once, before any builder runs.
"""

import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator

from jobgate.modules.builder.options import (
    CompressionAlgorithm,
    ExtractDataFormat,
    HiveDelimStrategy,
    HiveNullEncodingStrategy,
    PasswordMode,
    SqoopLoadStrategy,
)

EXPRESSION_PATTERN = re.compile(r"\$\{\s*([A-Za-z0-9_.\-]+)\s*\}")

ModelT = TypeVar("ModelT", bound=BaseModel)


class PropertyResolver:
    """Resolves ${name} expressions against unit-of-work attributes."""

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None):
        self.attributes = dict(attributes or {})

    def resolve(self, value: Any) -> Any:
        """Substitute expressions in strings; unknown names resolve to ''."""
        if isinstance(value, str):
            return EXPRESSION_PATTERN.sub(
                lambda m: str(self.attributes.get(m.group(1), "")), value
            )
        if isinstance(value, dict):
            return {k: self.resolve(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self.resolve(v) for v in value]
        return value


# Job definitions


class SparkJobDefinition(BaseModel):
    """Definition of a Spark application launch."""

    app_jar: str = Field(..., description="Path to the JAR file containing the Spark job application", min_length=1)
    main_class: str = Field(..., description="Qualified classname of the Spark job application class", min_length=1)
    main_args: str = Field(default="", description="Comma separated arguments to be passed into the main as args")
    spark_home: str = Field(default="/usr/hdp/current/spark-client/", description="Spark installation directory")
    spark_master: str = Field(default="local", description="The Spark master")
    driver_memory: str = Field(default="512m", description="How much RAM to allocate to the driver")
    executor_memory: str = Field(default="512m", description="How much RAM to allocate to the executor")
    number_executors: str = Field(default="1", description="The number of executors to be used")
    executor_cores: str = Field(default="1", description="The number of executor cores to be used")
    app_name: str = Field(..., description="The name of the spark application", min_length=1)
    network_timeout: str = Field(default="120s", description="Default timeout for all network interactions")
    hadoop_configuration_resources: Optional[str] = Field(
        None, description="Comma separated list of Hadoop configuration files"
    )
    kerberos_principal: Optional[str] = Field(None, description="Kerberos principal to authenticate as")
    kerberos_keytab: Optional[str] = Field(None, description="Kerberos keytab associated with the principal")

    @field_validator("app_jar", "main_class", "main_args", "spark_master")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return v.strip()


class SqoopJobDefinition(BaseModel):
    """Definition of a Sqoop table import."""

    source_driver: Optional[str] = Field(None, description="JDBC driver class for the source system")
    source_connection_string: str = Field(..., description="JDBC connection string", min_length=1)
    source_user_name: str = Field(..., description="User name for the source system", min_length=1)
    password_mode: PasswordMode = Field(default=PasswordMode.CLEAR_TEXT_ENTRY)
    source_password_hdfs_file: Optional[str] = Field(None, description="Encrypted password file on HDFS")
    source_password_passphrase: Optional[SecretStr] = Field(None, description="Passphrase for encrypted passwords")
    source_entered_password: Optional[SecretStr] = Field(None, description="Clear text or encrypted (Base64) password")
    source_table_name: str = Field(..., min_length=1)
    source_table_fields: str = Field(default="*", description="Comma separated fields, or * for all")
    source_table_where_clause: Optional[str] = None
    source_load_strategy: SqoopLoadStrategy = Field(default=SqoopLoadStrategy.FULL_LOAD)
    source_check_column_name: Optional[str] = None
    source_check_column_last_value: Optional[str] = None
    source_split_by_field: Optional[str] = None
    source_boundary_query: Optional[str] = None
    cluster_map_tasks: int = Field(default=4, description="Number of mappers; values <= 0 keep the default")
    cluster_ui_job_name: Optional[str] = None
    target_hdfs_directory: str = Field(..., min_length=1)
    target_extract_data_format: ExtractDataFormat = Field(default=ExtractDataFormat.TEXT)
    target_hdfs_file_delimiter: str = Field(default=",")
    target_hive_delim_strategy: HiveDelimStrategy = Field(default=HiveDelimStrategy.KEEP)
    target_hive_replace_delim: Optional[str] = None
    target_hive_null_encoding_strategy: HiveNullEncodingStrategy = Field(
        default=HiveNullEncodingStrategy.ENCODE_STRING_AND_NONSTRING
    )
    target_compression_algorithm: CompressionAlgorithm = Field(default=CompressionAlgorithm.NONE)

    @field_validator(
        "source_driver",
        "source_table_where_clause",
        "source_check_column_name",
        "source_check_column_last_value",
        "source_split_by_field",
        "source_boundary_query",
        "cluster_ui_job_name",
        "target_hive_replace_delim",
        mode="before",
    )
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        # Unset pipeline properties resolve to empty strings
        if isinstance(v, str) and not v.strip():
            return None
        return v


def load_job_definition(
    path: str,
    model: Type[ModelT],
    attributes: Optional[Mapping[str, Any]] = None,
    fallbacks: Optional[Mapping[str, Any]] = None,
) -> ModelT:
    """
    Load a job definition from a YAML file.

    Args:
        path: YAML file with one mapping of property names to values
        model: Job definition model to validate against
        attributes: Unit-of-work attributes for ${...} expressions
        fallbacks: Property values used when the file does not set them

    Raises:
        ValueError: If the file does not contain a mapping
        pydantic.ValidationError: If the properties are invalid
    """
    data = yaml.safe_load(Path(path).read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Job file {path} must contain a mapping of properties")

    merged = {**(fallbacks or {}), **data}
    resolved: Dict[str, Any] = PropertyResolver(attributes).resolve(merged)
    return model.model_validate(resolved)
