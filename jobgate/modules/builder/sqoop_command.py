#!/usr/bin/env python3
"""
Sqoop import command builder.

Turns typed import options into a single shell-safe `sqoop import` command
string. Flags are rendered in a fixed order matching Sqoop's own grammar,
and every free-text value is wrapped as ` "value" `.
"""

import logging
import shlex
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from jobgate.config.provider import Defaults, get_defaults
from jobgate.logging_config import register_secret
from jobgate.modules.credentials import PasswordDecryptionError, decrypt_password

from .options import (
    ClearTextPassword,
    CompressionAlgorithm,
    DropDelims,
    EncryptedHdfsPasswordFile,
    EncryptedTextPassword,
    ExtractDataFormat,
    HiveDelimStrategy,
    HiveNullEncodingStrategy,
    IncrementalLoad,
    PasswordMode,
    ReplaceDelims,
    SqoopLoadStrategy,
    hive_delim_handling,
    load_strategy,
    password_source,
)

logger = logging.getLogger("jobgate.builder.sqoop")

SPACE = " "
START_SPACE_QUOTE = ' "'
END_QUOTE_SPACE = '" '
QUOTE = '"'
STAR = "*"

OPERATION_NAME = "sqoop"
OPERATION_TYPE = "import"

PASSWORD_LOADER_CLASS_LABEL = "-Dorg.apache.sqoop.credentials.loader.class"
PASSWORD_LOADER_CLASS_VALUE = "org.apache.sqoop.util.password.CryptoFileLoader"
PASSWORD_PASSPHRASE_LABEL = "-Dorg.apache.sqoop.credentials.loader.crypto.passphrase"

NULL_STRING_LABEL = "--null-string '\\\\N'"
NULL_NON_STRING_LABEL = "--null-non-string '\\\\N'"

FORMAT_LABELS = {
    ExtractDataFormat.TEXT: "--as-textfile",
    ExtractDataFormat.AVRO: "--as-avrodatafile",
    ExtractDataFormat.SEQUENCE_FILE: "--as-sequencefile",
    ExtractDataFormat.PARQUET: "--as-parquetfile",
}

# Sqoop picks the Oracle driver itself and rejects an explicit --driver
DRIVER_OMITTED_VENDORS = ("jdbc:oracle:",)


def is_driver_omitted(connection_string: Optional[str]) -> bool:
    """Check whether the connection string targets a vendor that must not get --driver."""
    if not connection_string:
        return False
    lowered = connection_string.lower()
    return any(vendor in lowered for vendor in DRIVER_OMITTED_VENDORS)


def normalize_fields(fields: str) -> str:
    """Trim a comma separated column list, keeping the all-columns marker as is."""
    if fields.strip() == STAR:
        return STAR
    return ",".join(f.strip() for f in fields.split(","))


@dataclass(frozen=True)
class RenderedCommand:
    """An immutable, fully rendered Sqoop command."""

    command: str
    masked: str
    diagnostics: Tuple[str, ...] = ()

    def tokens(self) -> List[str]:
        """Split the command the way a POSIX shell would."""
        return shlex.split(self.command)

    def __str__(self) -> str:
        return self.masked


class _CommandBuffer:
    """Accumulates the real and masked renderings side by side."""

    def __init__(self, mask_string: str):
        self._real: List[str] = []
        self._masked: List[str] = []
        self._mask_string = mask_string

    def append(self, *parts: Any) -> "_CommandBuffer":
        for part in parts:
            text = "" if part is None else str(part)
            self._real.append(text)
            self._masked.append(text)
        return self

    def append_secret(self, value: Optional[str]) -> "_CommandBuffer":
        self._real.append("" if value is None else value)
        self._masked.append(self._mask_string)
        return self

    def quoted(self, label: str, value: Any) -> "_CommandBuffer":
        return self.append(label, START_SPACE_QUOTE, value, END_QUOTE_SPACE)

    def quoted_secret(self, label: str, value: Optional[str]) -> "_CommandBuffer":
        self.append(label, START_SPACE_QUOTE)
        self.append_secret(value)
        return self.append(END_QUOTE_SPACE)

    def render(self) -> Tuple[str, str]:
        return "".join(self._real), "".join(self._masked)


class SqoopBuilder:
    """
    Fluent builder for a `sqoop import` command.

    Setters only store values. Options that belong to an inactive mode are
    ignored when the command is built and reported through
    RenderedCommand.diagnostics rather than raised.
    """

    def __init__(self, defaults: Optional[Defaults] = None):
        self._defaults = defaults or get_defaults()
        self._rejected_map_tasks: Any = None

        self.source_driver: Optional[str] = None
        self.source_connection_string: Optional[str] = None
        self.source_user_name: Optional[str] = None
        self.password_mode: Optional[PasswordMode] = None
        self.source_password_hdfs_file: Optional[str] = None
        self.source_password_passphrase: Optional[str] = None
        self.source_entered_password: Optional[str] = None
        self.source_table_name: Optional[str] = None
        self.source_table_fields: str = STAR
        self.source_table_where_clause: Optional[str] = None
        self.source_load_strategy: Optional[SqoopLoadStrategy] = None
        self.source_check_column_name: Optional[str] = None
        self.source_check_column_last_value: Optional[str] = None
        self.source_split_by_field: Optional[str] = None
        self.source_boundary_query: Optional[str] = None
        self.cluster_map_tasks: int = self._defaults.default_map_tasks
        self.cluster_ui_job_name: Optional[str] = None
        self.target_hdfs_directory: Optional[str] = None
        self.target_extract_data_format: ExtractDataFormat = ExtractDataFormat.TEXT
        self.target_hdfs_file_delimiter: Optional[str] = None
        self.target_hive_delim_strategy: Optional[HiveDelimStrategy] = None
        self.target_hive_replace_delim: Optional[str] = None
        self.target_hive_null_encoding_strategy = HiveNullEncodingStrategy.ENCODE_STRING_AND_NONSTRING
        self.target_compression_codec: Optional[str] = None

    def _log(self, prop: str, value: Any) -> None:
        logger.info(f"{prop} set to: {value}")

    # Source connection

    def set_source_driver(self, source_driver: str) -> "SqoopBuilder":
        self.source_driver = source_driver
        self._log("Source Driver", source_driver)
        return self

    def set_source_connection_string(self, connection_string: str) -> "SqoopBuilder":
        self.source_connection_string = connection_string
        self._log("Source Connection String", connection_string)
        return self

    def set_source_user_name(self, user_name: str) -> "SqoopBuilder":
        self.source_user_name = user_name
        self._log("Source User Name", user_name)
        return self

    def set_password_mode(self, password_mode: PasswordMode) -> "SqoopBuilder":
        self.password_mode = PasswordMode(password_mode)
        self._log("Source Password Mode", self.password_mode.value)
        return self

    def set_source_password_hdfs_file(self, hdfs_file: str) -> "SqoopBuilder":
        self.source_password_hdfs_file = hdfs_file
        self._log("Source Password File (HDFS)", self._defaults.mask_string)
        return self

    def set_source_password_passphrase(self, passphrase: str) -> "SqoopBuilder":
        register_secret(passphrase)
        self.source_password_passphrase = passphrase
        self._log("Source Password Passphrase", self._defaults.mask_string)
        return self

    def set_source_entered_password(self, password: str) -> "SqoopBuilder":
        register_secret(password)
        self.source_entered_password = password
        self._log("Source Entered Password", self._defaults.mask_string)
        return self

    # Source table

    def set_source_table_name(self, table_name: str) -> "SqoopBuilder":
        self.source_table_name = table_name
        self._log("Source Table Name", table_name)
        return self

    def set_source_table_fields(self, fields: str) -> "SqoopBuilder":
        """Set fields to extract (comma separated). Use * for all fields."""
        self.source_table_fields = normalize_fields(fields)
        self._log("Source Table Fields", self.source_table_fields)
        return self

    def set_source_table_where_clause(self, where_clause: str) -> "SqoopBuilder":
        self.source_table_where_clause = where_clause
        self._log("Source Table Where Clause", where_clause)
        return self

    def set_source_load_strategy(self, strategy: SqoopLoadStrategy) -> "SqoopBuilder":
        self.source_load_strategy = SqoopLoadStrategy(strategy)
        self._log("Source Load Strategy", self.source_load_strategy.value)
        return self

    def set_source_check_column_name(self, column_name: str) -> "SqoopBuilder":
        """Column holding the id / last modified time. Not needed for full load."""
        self.source_check_column_name = column_name
        self._log("Source Check Column Name", column_name)
        return self

    def set_source_check_column_last_value(self, last_value: str) -> "SqoopBuilder":
        """Last value extracted by the previous incremental run."""
        self.source_check_column_last_value = last_value
        self._log("Source Check Column Last Value", last_value)
        return self

    def set_source_split_by_field(self, split_by_field: str) -> "SqoopBuilder":
        self.source_split_by_field = split_by_field
        self._log("Source Split By Field", split_by_field)
        return self

    def set_source_boundary_query(self, boundary_query: str) -> "SqoopBuilder":
        self.source_boundary_query = boundary_query
        self._log("Source Boundary Query", boundary_query)
        return self

    # Cluster

    def set_cluster_map_tasks(self, map_tasks: int) -> "SqoopBuilder":
        """Set the number of mappers. Values <= 0 are ignored."""
        if map_tasks is not None and int(map_tasks) > 0:
            self.cluster_map_tasks = int(map_tasks)
            self._rejected_map_tasks = None
            self._log("Number of Cluster Map Tasks", self.cluster_map_tasks)
        else:
            self._rejected_map_tasks = map_tasks
        return self

    def set_cluster_ui_job_name(self, job_name: str) -> "SqoopBuilder":
        self.cluster_ui_job_name = job_name
        self._log("Cluster UI Job Name", job_name)
        return self

    # Target

    def set_target_hdfs_directory(self, directory: str) -> "SqoopBuilder":
        self.target_hdfs_directory = directory
        self._log("Target HDFS Directory", directory)
        return self

    def set_target_extract_data_format(self, data_format: ExtractDataFormat) -> "SqoopBuilder":
        self.target_extract_data_format = ExtractDataFormat(data_format)
        self._log("Extract Data Format", self.target_extract_data_format.value)
        return self

    def set_target_hdfs_file_delimiter(self, delimiter: str) -> "SqoopBuilder":
        self.target_hdfs_file_delimiter = delimiter
        self._log("Target HDFS File Delimiter", delimiter)
        return self

    def set_target_hive_delim_strategy(self, strategy: HiveDelimStrategy) -> "SqoopBuilder":
        self.target_hive_delim_strategy = HiveDelimStrategy(strategy)
        self._log("Target Hive Delimiter Strategy", self.target_hive_delim_strategy.value)
        return self

    def set_target_hive_replace_delim(self, replacement: str) -> "SqoopBuilder":
        self.target_hive_replace_delim = replacement
        self._log("Target Hive Replace Delim", replacement)
        return self

    def set_target_hive_null_encoding_strategy(
        self, strategy: HiveNullEncodingStrategy
    ) -> "SqoopBuilder":
        self.target_hive_null_encoding_strategy = HiveNullEncodingStrategy(strategy)
        self._log("Target Hive Null Encoding Strategy", self.target_hive_null_encoding_strategy.value)
        return self

    def set_target_compression_algorithm(self, algorithm: CompressionAlgorithm) -> "SqoopBuilder":
        algorithm = CompressionAlgorithm(algorithm)
        self.target_compression_codec = self._defaults.compression_codecs.get(algorithm.value)
        self._log("Target Compression Algorithm", algorithm.value)
        self._log("Compression Codec", self.target_compression_codec)
        return self

    # Build

    def _diagnostics(self) -> List[str]:
        diagnostics = []
        mode = self.password_mode

        if self._rejected_map_tasks is not None:
            diagnostics.append(
                f"Ignored cluster map tasks {self._rejected_map_tasks!r}, keeping {self.cluster_map_tasks}"
            )

        if self.source_password_hdfs_file and mode != PasswordMode.ENCRYPTED_ON_HDFS_FILE:
            diagnostics.append("Ignored password file: password mode is not ENCRYPTED_ON_HDFS_FILE")
        if self.source_entered_password and mode not in (
            PasswordMode.CLEAR_TEXT_ENTRY,
            PasswordMode.ENCRYPTED_TEXT_ENTRY,
        ):
            diagnostics.append("Ignored entered password: password mode is not a text entry mode")
        if self.source_password_passphrase and mode == PasswordMode.CLEAR_TEXT_ENTRY:
            diagnostics.append("Ignored password passphrase: password mode is CLEAR_TEXT_ENTRY")

        full_load = self.source_load_strategy in (None, SqoopLoadStrategy.FULL_LOAD)
        if full_load and (self.source_check_column_name or self.source_check_column_last_value):
            diagnostics.append("Ignored check column settings: load strategy is FULL_LOAD")

        if self.target_hive_replace_delim and self.target_hive_delim_strategy != HiveDelimStrategy.REPLACE:
            diagnostics.append("Ignored hive replacement delimiter: delimiter strategy is not REPLACE")

        return diagnostics

    def _resolve_entered_password(self, source: EncryptedTextPassword) -> str:
        try:
            password = decrypt_password(source.encrypted, source.passphrase)
        except PasswordDecryptionError as e:
            logger.warning(f"Unable to decrypt entered password (encrypted, Base 64). [{e}]")
            return self._defaults.unable_to_decrypt

        register_secret(password)
        logger.info("Entered encrypted password was decrypted successfully.")
        return password

    def build(self) -> RenderedCommand:
        """
        Build the sqoop command.

        Returns:
            RenderedCommand with the real command and a masked copy for logging
        """
        buf = _CommandBuffer(self._defaults.mask_string)
        password = password_source(
            self.password_mode,
            self.source_password_hdfs_file,
            self.source_entered_password,
            self.source_password_passphrase,
        )

        buf.append(OPERATION_NAME, SPACE, OPERATION_TYPE, SPACE)

        # Encrypted password file needs the crypto loader before any other flag
        if isinstance(password, EncryptedHdfsPasswordFile):
            buf.append(PASSWORD_LOADER_CLASS_LABEL, "=", QUOTE, PASSWORD_LOADER_CLASS_VALUE, END_QUOTE_SPACE)
            buf.append(PASSWORD_PASSPHRASE_LABEL, "=", QUOTE)
            buf.append_secret(password.passphrase)
            buf.append(END_QUOTE_SPACE)

        if not is_driver_omitted(self.source_connection_string):
            buf.quoted("--driver", self.source_driver)
        else:
            logger.info("Skipping provided --driver parameter for Oracle database.")

        buf.quoted("--connect", (self.source_connection_string or "").strip())
        buf.quoted("--username", (self.source_user_name or "").strip())

        if isinstance(password, EncryptedHdfsPasswordFile):
            buf.quoted_secret("--password-file", password.path)
        elif isinstance(password, ClearTextPassword):
            buf.quoted_secret("--password", password.password)
        elif isinstance(password, EncryptedTextPassword):
            buf.quoted_secret("--password", self._resolve_entered_password(password))

        buf.quoted("--table", self.source_table_name)
        if self.source_table_fields.strip() != STAR:
            buf.quoted("--columns", self.source_table_fields)
        if self.source_table_where_clause is not None:
            buf.quoted("--where", self.source_table_where_clause)

        if self.source_split_by_field is not None:
            buf.quoted("--split-by", self.source_split_by_field)
        else:
            buf.append("--autoreset-to-one-mapper", SPACE)

        buf.quoted("--target-dir", self.target_hdfs_directory)
        buf.append(FORMAT_LABELS[self.target_extract_data_format], SPACE)
        buf.quoted("--fields-terminated-by", self.target_hdfs_file_delimiter)

        strategy = load_strategy(
            self.source_load_strategy,
            self.source_check_column_name,
            self.source_check_column_last_value,
        )
        if isinstance(strategy, IncrementalLoad):
            buf.append("--incremental", SPACE, strategy.mode, SPACE)
            buf.quoted("--check-column", strategy.check_column)
            buf.quoted("--last-value", strategy.last_value)

        delims = hive_delim_handling(self.target_hive_delim_strategy, self.target_hive_replace_delim)
        if isinstance(delims, DropDelims):
            buf.append("--hive-drop-import-delims", SPACE)
        elif isinstance(delims, ReplaceDelims):
            buf.quoted("--hive-delims-replacement", delims.replacement)

        null_encoding = self.target_hive_null_encoding_strategy
        if null_encoding == HiveNullEncodingStrategy.ENCODE_STRING_AND_NONSTRING:
            buf.append(NULL_STRING_LABEL, SPACE, NULL_NON_STRING_LABEL, SPACE)
        elif null_encoding == HiveNullEncodingStrategy.ENCODE_ONLY_STRING:
            buf.append(NULL_STRING_LABEL, SPACE)
        elif null_encoding == HiveNullEncodingStrategy.ENCODE_ONLY_NONSTRING:
            buf.append(NULL_NON_STRING_LABEL, SPACE)

        if self.source_boundary_query is not None:
            buf.quoted("--boundary-query", self.source_boundary_query)

        buf.quoted("--num-mappers", self.cluster_map_tasks)

        if self.target_compression_codec:
            buf.append("--compress", SPACE)
            buf.quoted("--compression-codec", self.target_compression_codec)

        if self.cluster_ui_job_name is not None:
            buf.append("--mapreduce-job-name", START_SPACE_QUOTE, self.cluster_ui_job_name, QUOTE)

        command, masked = buf.render()
        diagnostics = self._diagnostics()
        for message in diagnostics:
            logger.warning(message)

        return RenderedCommand(command=command, masked=masked, diagnostics=tuple(diagnostics))
