"""Resolve tool parameter parsing and salvage from malformed client input."""

import json
import re
from typing import Any

from pydantic import ValidationError

from errors import RESOLVE_FORMAT_HINT, BadRequestFormat
from resolver import ResolveRequest

# Instructional error text so the calling agent can fix the next tool call.
RESOLVE_HDFS_RESOURCE_USAGE = f"""
How to call resolve_hdfs_resource correctly on your next try:
- Pass a single JSON object (not a string) with these keys:
  - site (required): site id whose HDFS configuration should be used, e.g. "sandbox".
  - query (required): absolute HDFS path starting with "/".
    End it with "/" to list a directory, e.g. "/data/logs/".
    Leave a partial name after the last "/" to filter its children, e.g. "/data/logs/app".
Format: {RESOLVE_FORMAT_HINT}
Example: {{"site": "sandbox", "query": "/data/logs/"}}
"""

# Patterns to salvage site and query from malformed strings.
_SITE_PATTERN = re.compile(r'''["']?site["']?\s*[:=]\s*["']?([^\s,}'"]+)''', re.IGNORECASE)
_QUERY_PATTERN = re.compile(r'''["']?query["']?\s*[:=]\s*["']?(/[^,}'"]*)''', re.IGNORECASE)


def salvage_params_from_string(s: str) -> dict[str, Any] | None:
    """Try to extract site and query from a malformed string.

    Handles client mistakes like site: sandbox, query: /data/logs/ or
    {"site"="sandbox", "query"="/tmp/"} (the form shown in old format hints).
    """
    s = s.strip()
    if not s:
        return None
    site_match = _SITE_PATTERN.search(s)
    query_match = _QUERY_PATTERN.search(s)
    if not site_match or not query_match:
        return None
    return {"site": site_match.group(1), "query": query_match.group(1).strip()}


def parse_resolve_params(raw: Any) -> ResolveRequest:
    """Parse tool arguments that may be passed as a string or dict by the client.

    Raises BadRequestFormat when the arguments cannot be turned into a
    ResolveRequest at all.
    """
    if isinstance(raw, ResolveRequest):
        return raw
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            salvaged = salvage_params_from_string(raw)
            if salvaged is not None:
                return ResolveRequest.model_validate(salvaged)
            raise BadRequestFormat(f"Invalid params (expected JSON). {RESOLVE_FORMAT_HINT}") from e
    if isinstance(raw, dict):
        try:
            return ResolveRequest.model_validate(raw)
        except ValidationError as e:
            raise BadRequestFormat(f"{RESOLVE_FORMAT_HINT}: {e}") from e
    raise BadRequestFormat(
        f"params must be a JSON object or string, got {type(raw).__name__}"
    )
