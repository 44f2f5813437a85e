"""
Typed option groups for the Sqoop import command.

Each mode group is a small tagged union: exactly one variant is active per
command, so a password file and a clear-text password can never both be
rendered.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class PasswordMode(str, Enum):
    """How the source database password is supplied."""

    CLEAR_TEXT_ENTRY = "CLEAR_TEXT_ENTRY"
    ENCRYPTED_TEXT_ENTRY = "ENCRYPTED_TEXT_ENTRY"
    ENCRYPTED_ON_HDFS_FILE = "ENCRYPTED_ON_HDFS_FILE"


class SqoopLoadStrategy(str, Enum):
    """Full extract or incremental extract."""

    FULL_LOAD = "FULL_LOAD"
    INCREMENTAL_APPEND = "INCREMENTAL_APPEND"
    INCREMENTAL_LASTMODIFIED = "INCREMENTAL_LASTMODIFIED"


class ExtractDataFormat(str, Enum):
    """File format for the landed data."""

    TEXT = "TEXT"
    AVRO = "AVRO"
    SEQUENCE_FILE = "SEQUENCE_FILE"
    PARQUET = "PARQUET"


class HiveDelimStrategy(str, Enum):
    """Handling of Hive-specific delimiters (\\n, \\r, \\01) in string fields."""

    DROP = "DROP"
    KEEP = "KEEP"
    REPLACE = "REPLACE"


class HiveNullEncodingStrategy(str, Enum):
    """Which column types get Hive's \\N null encoding."""

    ENCODE_STRING_AND_NONSTRING = "ENCODE_STRING_AND_NONSTRING"
    DO_NOT_ENCODE = "DO_NOT_ENCODE"
    ENCODE_ONLY_STRING = "ENCODE_ONLY_STRING"
    ENCODE_ONLY_NONSTRING = "ENCODE_ONLY_NONSTRING"


class CompressionAlgorithm(str, Enum):
    """Compression applied to the landed data."""

    NONE = "NONE"
    GZIP = "GZIP"
    SNAPPY = "SNAPPY"
    BZIP2 = "BZIP2"
    LZO = "LZO"


# Password sources


@dataclass(frozen=True)
class EncryptedHdfsPasswordFile:
    path: str
    passphrase: str


@dataclass(frozen=True)
class ClearTextPassword:
    password: str


@dataclass(frozen=True)
class EncryptedTextPassword:
    encrypted: str
    passphrase: str


PasswordSource = Union[EncryptedHdfsPasswordFile, ClearTextPassword, EncryptedTextPassword]


# Load strategies


@dataclass(frozen=True)
class FullLoad:
    pass


@dataclass(frozen=True)
class IncrementalLoad:
    mode: str  # "append" or "lastmodified"
    check_column: Optional[str]
    last_value: Optional[str]


LoadStrategy = Union[FullLoad, IncrementalLoad]


# Hive delimiter handling


@dataclass(frozen=True)
class DropDelims:
    pass


@dataclass(frozen=True)
class KeepDelims:
    pass


@dataclass(frozen=True)
class ReplaceDelims:
    replacement: Optional[str]


HiveDelimHandling = Union[DropDelims, KeepDelims, ReplaceDelims]


def password_source(
    mode: Optional[PasswordMode],
    hdfs_file: Optional[str],
    entered_password: Optional[str],
    passphrase: Optional[str],
) -> Optional[PasswordSource]:
    """Pick the single password variant matching the selected mode."""
    if mode == PasswordMode.ENCRYPTED_ON_HDFS_FILE:
        return EncryptedHdfsPasswordFile(path=hdfs_file, passphrase=passphrase)
    if mode == PasswordMode.CLEAR_TEXT_ENTRY:
        return ClearTextPassword(password=entered_password)
    if mode == PasswordMode.ENCRYPTED_TEXT_ENTRY:
        return EncryptedTextPassword(encrypted=entered_password, passphrase=passphrase)
    return None


def load_strategy(
    strategy: Optional[SqoopLoadStrategy],
    check_column: Optional[str],
    last_value: Optional[str],
) -> LoadStrategy:
    """Pick the load strategy variant; unset means full load."""
    if strategy is None or strategy == SqoopLoadStrategy.FULL_LOAD:
        return FullLoad()
    mode = "lastmodified" if strategy == SqoopLoadStrategy.INCREMENTAL_LASTMODIFIED else "append"
    return IncrementalLoad(mode=mode, check_column=check_column, last_value=last_value)


def hive_delim_handling(
    strategy: Optional[HiveDelimStrategy], replacement: Optional[str]
) -> HiveDelimHandling:
    """Pick the Hive delimiter variant; unset means keep."""
    if strategy == HiveDelimStrategy.DROP:
        return DropDelims()
    if strategy == HiveDelimStrategy.REPLACE:
        return ReplaceDelims(replacement=replacement)
    return KeepDelims()
