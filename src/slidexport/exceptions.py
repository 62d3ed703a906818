"""Custom exceptions for slidexport.

Every failure in the export pipeline is fatal. Components raise one of the
exceptions below and the CLI reports it once, naming the step that failed.
"""

from __future__ import annotations


class ExportError(Exception):
    """Base exception for all slidexport errors."""

    step = "export"


class ConfigError(ExportError):
    """Raised when the client descriptor or settings cannot be loaded."""

    step = "configuration"


class AuthError(ExportError):
    """Raised when authorization, code exchange or token refresh fails."""

    step = "authorization"


class RemoteError(ExportError):
    """Base exception for Slides API errors."""

    step = "Slides API request"


class AuthenticationError(RemoteError):
    """Raised when the API rejects the access token (401)."""


class PermissionDeniedError(RemoteError):
    """Raised when the caller may not read the presentation (403)."""


class NotFoundError(RemoteError):
    """Raised when a presentation or page is not found (404)."""


class NetworkError(RemoteError):
    """Raised when the API cannot be reached."""


class APIError(RemoteError):
    """Raised for other API errors."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class DownloadError(ExportError):
    """Raised when thumbnail bytes cannot be downloaded or written."""

    step = "thumbnail download"


class EmptyDownloadError(DownloadError):
    """Raised when a download transfers zero bytes."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Unexpected empty file from url {url}")


class OutputError(ExportError):
    """Raised when a local output file cannot be created or written."""

    step = "writing output"
