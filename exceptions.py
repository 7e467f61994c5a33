"""
Catalog Errors - exception types raised by catalog adapters

Only structural failures raise. Missing optional fields, unknown status
labels and unparseable dates degrade silently inside the adapters.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for every error raised by the adapter layer"""


class UpstreamError(CatalogError):
    """Transport failure or a response that cannot be parsed at the top level"""

    def __init__(self, message: str, url: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is not None:
            return f"{base} (HTTP {self.status}, {self.url})"
        if self.url:
            return f"{base} ({self.url})"
        return base


class AuthTokenNotFound(CatalogError):
    """The anti-forgery token pattern did not match the authenticated page"""

    def __init__(self, url: str):
        super().__init__(f"Session token not found on {url}")
        self.url = url


class MalformedPagePayload(CatalogError):
    """A chapter page lacks, or carries a corrupt, embedded page list"""


class OperationCancelled(CatalogError):
    """The caller's cancel signal was set while a request was in flight"""
