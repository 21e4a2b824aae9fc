"""
Directory browsers for HDFS resource resolution.

Single responsibility: list the immediate children of one directory, either via
the WebHDFS REST API or (for file:// default filesystems) the local disk, and
build the right browser from a flattened site configuration.
"""

import logging
import posixpath
from pathlib import Path
from typing import List, Mapping, Optional, Protocol
from urllib.parse import quote, urlsplit

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from errors import ConfigLookupFailure, RemoteAccessError

logger = logging.getLogger(__name__)

# Hadoop 3 namenode HTTP port, used when no explicit address is configured.
DEFAULT_WEBHDFS_PORT = 9870

DEFAULT_FS_KEY = "fs.defaultFS"
WEBHDFS_URL_KEY = "dfs.webhdfs.url"
NAMENODE_HTTP_ADDRESS_KEY = "dfs.namenode.http-address"
WEBHDFS_TIMEOUT_KEY = "dfs.webhdfs.timeout"
USER_NAME_KEY = "hadoop.user.name"


class DirectoryEntry(BaseModel):
    """One child of a browsed directory."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(
        ...,
        description="Root-relative filesystem path, e.g. /data/logs/app1",
        min_length=1,
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("Entry path must be root-relative (start with '/')")
        return v


class DirectoryBrowser(Protocol):
    """Capability: list a directory."""

    def browse(self, path: str) -> List[DirectoryEntry]: ...


def _child_path(parent: str, suffix: str) -> str:
    """Join a listing suffix onto the browsed path; an empty suffix is the path itself."""
    if not suffix:
        return parent
    return posixpath.join(parent, suffix)


class WebHdfsBrowser:
    """Lists HDFS directories through the WebHDFS LISTSTATUS operation."""

    def __init__(
        self,
        base_url: str,
        user: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user = user
        self.timeout = timeout
        self.transport = transport

    def browse(self, path: str) -> List[DirectoryEntry]:
        url = f"{self.base_url}/webhdfs/v1{quote(path, safe='/')}"
        params = {"op": "LISTSTATUS"}
        if self.user:
            params["user.name"] = self.user
        logger.debug("WebHDFS LISTSTATUS: url=%s", url)
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(url, params=params)
        except httpx.HTTPError as e:
            raise RemoteAccessError(f"WebHDFS request failed for {path}: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteAccessError(
                f"WebHDFS returned a non-JSON response for {path} "
                f"(HTTP {response.status_code})"
            ) from e

        if isinstance(body, dict) and "RemoteException" in body:
            remote = body["RemoteException"]
            if not isinstance(remote, dict):
                remote = {}
            raise RemoteAccessError(
                f"{remote.get('exception', 'RemoteException')}: "
                f"{remote.get('message', 'unknown error')}"
            )
        if response.status_code != 200:
            raise RemoteAccessError(
                f"WebHDFS error for {path}: HTTP {response.status_code}"
            )
        try:
            statuses = body["FileStatuses"]["FileStatus"]
        except (KeyError, TypeError) as e:
            raise RemoteAccessError(
                f"Unexpected WebHDFS LISTSTATUS response for {path}"
            ) from e
        if not isinstance(statuses, list) or not all(
            isinstance(status, dict) and isinstance(status.get("pathSuffix", ""), str)
            for status in statuses
        ):
            raise RemoteAccessError(
                f"Unexpected WebHDFS LISTSTATUS response for {path}"
            )
        return [
            DirectoryEntry(path=_child_path(path, status.get("pathSuffix", "")))
            for status in statuses
        ]


class LocalDirectoryBrowser:
    """Lists directories of a file:// default filesystem rooted at root_dir."""

    def __init__(self, root_dir: Path) -> None:
        self.root_dir = Path(root_dir)

    def browse(self, path: str) -> List[DirectoryEntry]:
        root = self.root_dir.resolve()
        target = (root / path.lstrip("/")).resolve()
        if not target.is_relative_to(root):
            raise RemoteAccessError(f"Path escapes filesystem root: {path}")
        if target.is_file():
            return [DirectoryEntry(path=path)]
        try:
            children = sorted(target.iterdir(), key=lambda p: p.name)
        except FileNotFoundError as e:
            raise RemoteAccessError(f"File {path} does not exist.") from e
        except NotADirectoryError as e:
            raise RemoteAccessError(f"Not a directory: {path}") from e
        except PermissionError as e:
            raise RemoteAccessError(f"Permission denied: {path}") from e
        return [
            DirectoryEntry(path="/" + child.relative_to(root).as_posix())
            for child in children
        ]


def _webhdfs_base_url(config: Mapping[str, str], default_fs_host: Optional[str]) -> str:
    if config.get(WEBHDFS_URL_KEY):
        return config[WEBHDFS_URL_KEY]
    if config.get(NAMENODE_HTTP_ADDRESS_KEY):
        return f"http://{config[NAMENODE_HTTP_ADDRESS_KEY]}"
    if not default_fs_host:
        raise ConfigLookupFailure(
            f"{DEFAULT_FS_KEY} has no host and neither {WEBHDFS_URL_KEY} "
            f"nor {NAMENODE_HTTP_ADDRESS_KEY} is set"
        )
    return f"http://{default_fs_host}:{DEFAULT_WEBHDFS_PORT}"


def _timeout(config: Mapping[str, str]) -> Optional[float]:
    raw = config.get(WEBHDFS_TIMEOUT_KEY)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigLookupFailure(
            f"{WEBHDFS_TIMEOUT_KEY} must be a number of seconds, got {raw!r}"
        ) from e


def new_browser(
    config: Mapping[str, str],
    transport: Optional[httpx.BaseTransport] = None,
) -> DirectoryBrowser:
    """Build a DirectoryBrowser bound to a flattened site configuration."""
    default_fs = config.get(DEFAULT_FS_KEY)
    if not default_fs:
        raise ConfigLookupFailure(f"Missing required configuration key {DEFAULT_FS_KEY}")
    parts = urlsplit(default_fs)
    scheme = parts.scheme.lower()

    if scheme == "file":
        return LocalDirectoryBrowser(Path(parts.path or "/"))
    if scheme in ("http", "https"):
        base_url = f"{scheme}://{parts.netloc}"
    elif scheme == "webhdfs":
        # webhdfs:// authorities already name the namenode HTTP address.
        base_url = config.get(WEBHDFS_URL_KEY) or f"http://{parts.netloc}"
    elif scheme == "hdfs":
        base_url = _webhdfs_base_url(config, parts.hostname)
    else:
        raise ConfigLookupFailure(
            f"Unsupported filesystem scheme in {DEFAULT_FS_KEY}: {default_fs!r}"
        )
    return WebHdfsBrowser(
        base_url,
        user=config.get(USER_NAME_KEY) or None,
        timeout=_timeout(config),
        transport=transport,
    )
