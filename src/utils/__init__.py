"""Shared utilities for the HDFS Resource MCP server."""

from utils.params import (
    RESOLVE_HDFS_RESOURCE_USAGE,
    parse_resolve_params,
    salvage_params_from_string,
)

__all__ = [
    "RESOLVE_HDFS_RESOURCE_USAGE",
    "parse_resolve_params",
    "salvage_params_from_string",
]
