"""Shared date and file helpers."""

from .date import (
    InvalidTimestamp,
    current_timestamp_string,
    current_timestamp_string_file_safe,
    format_date_only,
    format_timestamp,
    generate_date_range_strings,
    parse_date,
    parse_date_only,
    parse_timestamp,
    remove_time,
)
from .files import StringFileError, list_files_recursive, read_strings, write_strings
from .log import setup_logging

__all__ = [
    "InvalidTimestamp",
    "StringFileError",
    "current_timestamp_string",
    "current_timestamp_string_file_safe",
    "format_date_only",
    "format_timestamp",
    "generate_date_range_strings",
    "list_files_recursive",
    "parse_date",
    "parse_date_only",
    "parse_timestamp",
    "read_strings",
    "remove_time",
    "setup_logging",
    "write_strings",
]
