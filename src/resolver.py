"""
HDFS resource resolution.

Single responsibility: validate resolve requests, classify a query as a
directory listing or a partial-name match, browse, and filter the listing.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from browser import DirectoryBrowser, DirectoryEntry, new_browser
from config import DEFAULT_NAME_FRAGMENT_CHARS, check_name_fragment_chars
from errors import BadRequestFormat, InvalidRequest, ResolveFailure
from site_config import ConfigProvider, convert_config

logger = logging.getLogger(__name__)

BrowserFactory = Callable[[Mapping[str, str]], DirectoryBrowser]


class ResolveRequest(BaseModel):
    """Input model for one resolve call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Optional so that validate_request reports missing values with the format hint.
    site: Optional[str] = None
    query: Optional[str] = None


@dataclass(frozen=True)
class QueryPlan:
    """What to browse and, for partial-name queries, the prefix to keep."""

    browse_path: str
    prefix: Optional[str] = None


def validate(site: Optional[str], query: Optional[str]) -> None:
    """Check that the request names a site and an absolute query path."""
    logger.debug("Validating HDFS resource resolve request: site=%s query=%s", site, query)
    if not site:
        raise InvalidRequest()
    if query is None or not query.startswith("/"):
        raise InvalidRequest()
    logger.debug("HDFS resource resolve request validated")


def validate_request(request: ResolveRequest) -> None:
    validate(request.site, request.query)


def compile_split_pattern(name_chars: str = DEFAULT_NAME_FRAGMENT_CHARS) -> re.Pattern:
    """Pattern splitting a query into (parent dir incl. last '/', trailing name fragment)."""
    check_name_fragment_chars(name_chars)
    return re.compile(rf"(.*/)([{name_chars}]+)")


def classify_query(query: str, split_pattern: Optional[re.Pattern] = None) -> QueryPlan:
    """Decide whether the query lists a directory or prefix-matches its children.

    The query must be absolute. A trailing '/' lists that directory. Otherwise
    the query must be a parent directory followed by a fragment made only of
    allowed name characters; the full query then becomes the prefix to match.
    """
    if query is None:
        raise BadRequestFormat()
    query = query.strip()
    if not query.startswith("/"):
        raise BadRequestFormat()
    if query.endswith("/"):
        return QueryPlan(browse_path=query)
    pattern = split_pattern or compile_split_pattern()
    m = pattern.fullmatch(query)
    if not m:
        raise BadRequestFormat()
    return QueryPlan(browse_path=m.group(1), prefix=query)


def match_entries(entries: Sequence[DirectoryEntry], prefix: str) -> List[DirectoryEntry]:
    """Keep entries whose path starts with prefix; if none do, keep them all."""
    matched = [entry for entry in entries if entry.path.startswith(prefix)]
    if not matched:
        return list(entries)
    return matched


class PathResolver:
    """Resolves partial HDFS path queries for one application type.

    A fresh configuration snapshot and browser are built on every call, so one
    instance can serve concurrent callers.
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        app_type: str,
        browser_factory: BrowserFactory = new_browser,
        name_chars: str = DEFAULT_NAME_FRAGMENT_CHARS,
    ) -> None:
        self.config_provider = config_provider
        self.app_type = app_type
        self.browser_factory = browser_factory
        self.split_pattern = compile_split_pattern(name_chars)

    def build_browser(self, site: str) -> DirectoryBrowser:
        """Fetch the site's configuration and build a browser bound to it."""
        raw = self.config_provider.get_config(site, self.app_type)
        return self.browser_factory(convert_config(raw))

    def resolve(self, site: str, query: str) -> List[str]:
        """Return the root-relative paths matching query on site's filesystem."""
        plan = classify_query(query, self.split_pattern)
        try:
            browser = self.build_browser(site)
            entries = browser.browse(plan.browse_path)
            if plan.prefix is not None:
                entries = match_entries(entries, plan.prefix)
        except Exception as e:
            logger.exception(
                "Exception in HDFS resource resolver: site=%s query=%s", site, query
            )
            raise ResolveFailure(e) from e
        result = [entry.path for entry in entries]
        logger.info(
            "Successfully browsed files in HDFS: site=%s query=%s matches=%s",
            site,
            query,
            len(result),
        )
        return result

    def resolve_request(self, request: ResolveRequest) -> List[str]:
        validate_request(request)
        return self.resolve(request.site, request.query)
