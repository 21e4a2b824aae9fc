"""
MCP server and tool registration for the HDFS Resource MCP server.

Single responsibility: FastMCP instance and tool handlers
(resolve_hdfs_resource, list_sites).
"""

import asyncio

from mcp.server.fastmcp import FastMCP

import config as config_module
from errors import BadRequestFormat, ConfigLookupFailure, ResolveFailure
from resolver import PathResolver, validate_request
from site_config import JsonFileConfigProvider
from utils import RESOLVE_HDFS_RESOURCE_USAGE, parse_resolve_params

mcp = FastMCP("hdfs_resource_mcp")


def _config_provider() -> JsonFileConfigProvider:
    return JsonFileConfigProvider(config_module.settings.site_config_file)


def _build_resolver() -> PathResolver:
    cfg = config_module.settings
    return PathResolver(
        _config_provider(),
        cfg.app_type,
        name_chars=cfg.name_fragment_chars,
    )


@mcp.tool(
    name="resolve_hdfs_resource",
    annotations={
        "title": "Resolve HDFS Path",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def resolve_hdfs_resource(params: object) -> str:
    """Resolve a full or partial HDFS path on a site to the matching concrete paths.

    A query ending in "/" lists that directory. A query ending in a partial name
    lists the children of its parent directory whose path starts with the query;
    when none do, all children are listed.

    Args:
        params: Resolve parameters as a dict or JSON string with keys: site (required,
            site id with HDFS configuration) and query (required, absolute path,
            e.g. '/data/logs/' or '/data/logs/app').

    Returns:
        Matching paths one per line, or an error message if resolution failed.
    """
    try:
        request = parse_resolve_params(params)
        validate_request(request)
    except BadRequestFormat as e:
        return (
            f"Error: Invalid arguments for resolve_hdfs_resource: {e}"
            f"{RESOLVE_HDFS_RESOURCE_USAGE}"
        )

    try:
        paths = await asyncio.to_thread(
            _build_resolver().resolve, request.site, request.query
        )
    except BadRequestFormat as e:
        return f"Error: Bad query {request.query!r}: {e}{RESOLVE_HDFS_RESOURCE_USAGE}"
    except ResolveFailure as e:
        return (
            f"Error resolving HDFS resource on site {request.site!r}: "
            f"{type(e.cause).__name__}: {e.cause}"
        )

    if not paths:
        return f"No entries found under: {request.query}"

    result = f"Matching HDFS paths (total: {len(paths)}):\n\n"
    for path in paths:
        result += f"  - {path}\n"
    return result


@mcp.tool(
    name="list_sites",
    annotations={
        "title": "List HDFS Sites",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def list_sites() -> str:
    """List the site ids that have an HDFS application configured.

    Returns:
        Site ids one per line, or an error message.
    """
    app_type = config_module.settings.app_type
    try:
        sites = _config_provider().list_sites(app_type)
    except ConfigLookupFailure as e:
        return f"Error listing sites: {e}"

    if not sites:
        return f"No sites configured with {app_type}"

    result = f"Sites with {app_type} (total: {len(sites)}):\n\n"
    for site in sites:
        result += f"  - {site}\n"
    return result


if __name__ == "__main__":
    mcp.run()
