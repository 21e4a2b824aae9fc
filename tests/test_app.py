"""Tests for MCP app tool handlers and param parsing."""

import asyncio
import dataclasses
import json
from pathlib import Path

import pytest

import config as config_module
from app import list_sites, resolve_hdfs_resource
from errors import RESOLVE_FORMAT_HINT, BadRequestFormat
from resolver import ResolveRequest
from utils import parse_resolve_params, salvage_params_from_string

APP_TYPE = "HdfsAuditLogApplication"


@pytest.fixture
def local_site(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A 'sandbox' site whose default filesystem is a local directory tree."""
    root = tmp_path / "fs"
    (root / "data" / "logs" / "app1").mkdir(parents=True)
    (root / "data" / "logs" / "app2").mkdir()
    (root / "data" / "logs" / "other").mkdir()
    sites = tmp_path / "sites.json"
    sites.write_text(
        json.dumps(
            {
                "sandbox": {APP_TYPE: {"fs.defaultFS": f"file://{root}"}},
                "broken": {APP_TYPE: {"fs.defaultFS": "s3a://bucket"}},
                "audit-only": {"OtherApplication": {}},
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setattr(
        config_module,
        "settings",
        dataclasses.replace(
            config_module.settings, site_config_file=sites, app_type=APP_TYPE
        ),
    )
    return root


def test_parse_resolve_params_accepts_dict() -> None:
    """Params passed as dict are returned as ResolveRequest."""
    result = parse_resolve_params({"site": "sandbox", "query": "/data/"})
    assert isinstance(result, ResolveRequest)
    assert result.site == "sandbox"
    assert result.query == "/data/"


def test_parse_resolve_params_accepts_json_string() -> None:
    """Params passed as a JSON string are parsed."""
    result = parse_resolve_params('{"site": "sandbox", "query": "/data/logs/app"}')
    assert result == ResolveRequest(site="sandbox", query="/data/logs/app")


def test_parse_resolve_params_returns_existing_request() -> None:
    """A ResolveRequest instance is returned as-is."""
    existing = ResolveRequest(site="sandbox", query="/")
    assert parse_resolve_params(existing) is existing


def test_parse_resolve_params_rejects_unknown_keys() -> None:
    """Extra keys are a bad request carrying the format hint."""
    with pytest.raises(BadRequestFormat, match="HDFS Resource resolve must be"):
        parse_resolve_params({"site": "sandbox", "query": "/", "path": "/x"})


def test_parse_resolve_params_invalid_string_raises() -> None:
    """Unsalvageable strings raise BadRequestFormat."""
    with pytest.raises(BadRequestFormat, match="Invalid params"):
        parse_resolve_params("not valid json {{")


def test_parse_resolve_params_non_dict_or_string_raises() -> None:
    """Other types raise BadRequestFormat."""
    with pytest.raises(BadRequestFormat, match="params must be a JSON object or string"):
        parse_resolve_params(123)


def test_salvage_extracts_site_and_query() -> None:
    """Malformed strings with recognisable site and query are salvaged."""
    assert salvage_params_from_string('{"site"="sandbox", "query"="/tmp/"}') == {
        "site": "sandbox",
        "query": "/tmp/",
    }
    assert salvage_params_from_string("site: sandbox, query: /data/logs/app") == {
        "site": "sandbox",
        "query": "/data/logs/app",
    }
    assert salvage_params_from_string("query: /data/") is None
    assert salvage_params_from_string("   ") is None


def test_resolve_tool_lists_directory(local_site: Path) -> None:
    """A trailing '/' lists every child."""
    result = asyncio.run(resolve_hdfs_resource(params={"site": "sandbox", "query": "/data/logs/"}))
    assert "total: 3" in result
    assert "  - /data/logs/app1\n" in result
    assert "  - /data/logs/app2\n" in result
    assert "  - /data/logs/other\n" in result


def test_resolve_tool_filters_by_prefix(local_site: Path) -> None:
    """A partial name keeps the matching children only."""
    result = asyncio.run(
        resolve_hdfs_resource(params='{"site": "sandbox", "query": "/data/logs/app"}')
    )
    assert "total: 2" in result
    assert "/data/logs/other" not in result


def test_resolve_tool_falls_back_when_nothing_matches(local_site: Path) -> None:
    """A fragment matching nothing lists every child."""
    result = asyncio.run(resolve_hdfs_resource(params={"site": "sandbox", "query": "/data/logs/zzz"}))
    assert "total: 3" in result


def test_resolve_tool_empty_directory(local_site: Path) -> None:
    """An empty directory yields an explicit no-entries message."""
    (local_site / "empty").mkdir()
    result = asyncio.run(resolve_hdfs_resource(params={"site": "sandbox", "query": "/empty/"}))
    assert result == "No entries found under: /empty/"


def test_resolve_tool_relative_query_returns_usage(local_site: Path) -> None:
    """Relative queries are rejected with the usage instructions."""
    result = asyncio.run(resolve_hdfs_resource(params={"site": "sandbox", "query": "data/logs"}))
    assert "Invalid arguments for resolve_hdfs_resource" in result
    assert RESOLVE_FORMAT_HINT in result
    assert "How to call resolve_hdfs_resource correctly" in result


def test_resolve_tool_missing_site_returns_usage(local_site: Path) -> None:
    """A missing site is rejected with the usage instructions."""
    result = asyncio.run(resolve_hdfs_resource(params={"query": "/data/"}))
    assert "Invalid arguments for resolve_hdfs_resource" in result


def test_resolve_tool_bad_fragment_returns_usage(local_site: Path) -> None:
    """A disallowed character in the trailing fragment is a bad query."""
    result = asyncio.run(resolve_hdfs_resource(params={"site": "sandbox", "query": "/weird#name"}))
    assert "Error: Bad query '/weird#name'" in result
    assert "How to call resolve_hdfs_resource correctly" in result


def test_resolve_tool_reports_remote_errors(local_site: Path) -> None:
    """Browse failures are reported with their cause."""
    result = asyncio.run(resolve_hdfs_resource(params={"site": "sandbox", "query": "/missing/"}))
    assert result.startswith("Error resolving HDFS resource on site 'sandbox': RemoteAccessError")
    assert "does not exist" in result


def test_resolve_tool_reports_config_errors(local_site: Path) -> None:
    """Unknown sites and unusable configuration are reported with their cause."""
    unknown = asyncio.run(resolve_hdfs_resource(params={"site": "nowhere", "query": "/"}))
    assert "ConfigLookupFailure" in unknown
    broken = asyncio.run(resolve_hdfs_resource(params={"site": "broken", "query": "/"}))
    assert "Unsupported filesystem scheme" in broken


def test_list_sites_tool(local_site: Path) -> None:
    """Only sites configured with the HDFS application are listed."""
    result = asyncio.run(list_sites())
    assert "total: 2" in result
    assert "  - sandbox\n" in result
    assert "  - broken\n" in result
    assert "audit-only" not in result


def test_list_sites_tool_missing_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing site config file is reported as an error."""
    monkeypatch.setattr(
        config_module,
        "settings",
        dataclasses.replace(config_module.settings, site_config_file=tmp_path / "nope.json"),
    )
    assert asyncio.run(list_sites()).startswith("Error listing sites:")
