"""
Defines project-specific exception classes.
"""
from typing import Optional


class DiscoveryBaseError(Exception):
    """Base class for all custom exceptions in MCP Discovery."""
    pass


class ConfigurationError(DiscoveryBaseError):
    """Raised when loading or validating the configuration file fails."""
    pass


class InvalidInputError(DiscoveryBaseError, ValueError):
    """
    Raised for caller mistakes: empty names, empty runtime sets,
    empty registry URLs, duplicate provider IDs or unknown sources.
    """
    pass


class FetchError(DiscoveryBaseError):
    """
    Raised when a registry manifest cannot be retrieved over HTTP.
    """

    def __init__(self,
                 message: str,
                 url: Optional[str] = None,
                 registry: Optional[str] = None,
                 orig_exc: Optional[Exception] = None):
        self.url = url
        self.registry = registry
        self.orig_exc = orig_exc

        full_msg = "Registry fetch error"
        if registry:
            full_msg += f" (registry: {registry})"
        full_msg += f": {message}"
        if url:
            full_msg += f" [{url}]"
        if orig_exc:
            full_msg += f" (original error: {type(orig_exc).__name__})"
        super().__init__(full_msg)


class StatusError(FetchError):
    """
    Raised when a registry endpoint answers with a non-200 status.
    """

    def __init__(self,
                 status_code: int,
                 url: Optional[str] = None,
                 registry: Optional[str] = None):
        self.status_code = status_code
        super().__init__(
            f"received non-OK HTTP status {status_code}",
            url=url,
            registry=registry,
        )


class DecodeError(DiscoveryBaseError):
    """
    Raised when a registry manifest is not valid JSON or does not fit
    the registry's expected schema.
    """

    def __init__(self,
                 message: str,
                 registry: Optional[str] = None,
                 source: Optional[str] = None):
        self.registry = registry
        self.source = source

        full_msg = "Registry decode error"
        if registry:
            full_msg += f" (registry: {registry})"
        full_msg += f": {message}"
        if source:
            full_msg += f" [{source}]"
        super().__init__(full_msg)


class NotFoundError(DiscoveryBaseError, LookupError):
    """
    Raised by ``resolve`` when no package with the requested name exists.
    """

    def __init__(self, message: str, name: str = "", registry: Optional[str] = None):
        self.name = name
        self.registry = registry
        super().__init__(message)


class FilterMismatchError(NotFoundError):
    """
    Raised by ``resolve`` when the package exists but the requested
    filters (runtime, version, ...) reject it.
    """
    pass


class CacheIOError(DiscoveryBaseError):
    """
    Raised when the manifest cache cannot read or write its files.
    """

    def __init__(self,
                 message: str,
                 path: Optional[str] = None,
                 orig_exc: Optional[Exception] = None):
        self.path = path
        self.orig_exc = orig_exc

        full_msg = f"Manifest cache error: {message}"
        if path:
            full_msg += f" ({path})"
        if orig_exc:
            full_msg += f" (original error: {type(orig_exc).__name__}: {orig_exc})"
        super().__init__(full_msg)
