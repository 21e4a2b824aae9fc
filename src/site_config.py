"""
Site configuration lookup.

Single responsibility: fetch the per-site application configuration and coerce
it into the flat string map the filesystem browsers are built from.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Protocol

from errors import ConfigLookupFailure

logger = logging.getLogger(__name__)


class ConfigProvider(Protocol):
    """Capability: fetch the configuration of one application deployed on a site."""

    def get_config(self, site: str, app_type: str) -> Mapping[str, Any]: ...


class JsonFileConfigProvider:
    """ConfigProvider backed by a JSON document of the form
    {"<site>": {"<app type>": {"<key>": <value>, ...}}}.

    The file is read on every call so edits are picked up without a restart.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigLookupFailure(f"Site config file not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise ConfigLookupFailure(
                f"Site config file is not valid JSON: {self.path}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise ConfigLookupFailure(
                f"Site config file must contain a JSON object: {self.path}"
            )
        return data

    def get_config(self, site: str, app_type: str) -> Mapping[str, Any]:
        apps = self._load().get(site)
        if not isinstance(apps, dict) or app_type not in apps:
            raise ConfigLookupFailure(
                f"No {app_type} configuration found for site {site!r}"
            )
        app_config = apps[app_type]
        if not isinstance(app_config, dict):
            raise ConfigLookupFailure(
                f"Configuration of {app_type} on site {site!r} must be an object"
            )
        logger.debug("Loaded %s config for site=%s keys=%s", app_type, site, len(app_config))
        return app_config

    def list_sites(self, app_type: str) -> List[str]:
        """Return the site ids that have a configuration for app_type, in file order."""
        return [
            site
            for site, apps in self._load().items()
            if isinstance(apps, dict) and app_type in apps
        ]


def _to_config_value(key: str, value: Any) -> str:
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigLookupFailure(
        f"Configuration value for {key!r} must be a scalar, got {type(value).__name__}"
    )


def convert_config(raw: Mapping[str, Any]) -> dict[str, str]:
    """Flatten an application configuration into string keys and string values."""
    return {str(key): _to_config_value(str(key), value) for key, value in raw.items()}
