from __future__ import annotations

from typing import Any


class RestdanticError(Exception):
    """Base exception for restdantic errors."""


class HTTPError(RestdanticError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(self, response: Any) -> None:
        self.response = response
        super().__init__(f"HTTP {self.status_code}: {self.body!r}")

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def body(self) -> str:
        return self.response.text


class MissingAssociationError(RestdanticError):
    """Raised when a resource is built without a required parent."""


class MissingAttributeError(RestdanticError):
    """Raised when a payload lacks a field the endpoint requires."""


class DetachedProxyError(RestdanticError):
    """Raised when a relationship proxy outlives its parent resource."""


class UnknownFormatError(RestdanticError):
    """Raised when a requested file format is not supported."""
