from typing import Optional


class CatalogError(Exception):
    """Base class for errors raised inside the catalog data layer."""


class RemoteError(CatalogError):
    """The remote catalog API answered with a non-success status."""

    def __init__(self, status: int, url: Optional[str] = None):
        self.status = status
        self.url = url
        message = f"HTTP error! status: {status}"
        if url:
            message = f"{message} ({url})"
        super().__init__(message)


class ChannelError(CatalogError):
    """A command sent to the local cache service failed."""

    def __init__(self, command: str, detail: str):
        self.command = command
        self.detail = detail
        super().__init__(f"Cache command '{command}' failed: {detail}")


class CacheNotReadyError(ChannelError):
    def __init__(self, command: str):
        super().__init__(command, "cache is not ready")
