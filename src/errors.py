"""Exceptions raised while validating and resolving HDFS resource queries."""

from typing import Optional

# Fixed hint returned whenever a request does not have the expected shape.
RESOLVE_FORMAT_HINT = (
    'HDFS Resource resolve must be {"site":"${site}", "query":"/dir/path"}'
)


class PathResolveError(Exception):
    """Base class for all resolver errors."""


class BadRequestFormat(PathResolveError):
    """The query fails the absolute-path or parent/name split precondition."""

    def __init__(self, message: str = RESOLVE_FORMAT_HINT) -> None:
        super().__init__(message)


class InvalidRequest(BadRequestFormat):
    """Site or query missing, or query not absolute."""


class ConfigLookupFailure(PathResolveError):
    """No configuration for the site/application, or a value is not a scalar."""


class RemoteAccessError(PathResolveError):
    """The directory browser could not list the requested path."""


class ResolveFailure(PathResolveError):
    """Wraps any failure raised while fetching config, building the browser, or browsing."""

    def __init__(self, cause: BaseException, message: Optional[str] = None) -> None:
        self.cause = cause
        super().__init__(
            message or f"Failed to resolve HDFS resource: {type(cause).__name__}: {cause}"
        )
