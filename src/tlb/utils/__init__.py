"""Shared utilities for the TLB client runtime."""

from ._logging import LogFormatType, create_logger
from ._paths import (
    SERVER_ARTIFACT_GLOB,
    find_server_jar,
    relative_file_path,
    relative_file_paths,
)

__all__ = [
    "SERVER_ARTIFACT_GLOB",
    "LogFormatType",
    "create_logger",
    "find_server_jar",
    "relative_file_path",
    "relative_file_paths",
]
