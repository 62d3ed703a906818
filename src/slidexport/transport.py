"""Transport layer for fetching presentation data.

Defines the Transport protocol and implementations:
- GoogleSlidesTransport: Production transport using Google Slides API
- LocalFileTransport: Test transport reading from local golden files
"""

from __future__ import annotations

import json
import ssl
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import certifi
import httpx
from loguru import logger

from slidexport.exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RemoteError,
)

# API constants
API_BASE = "https://slides.googleapis.com/v1/presentations"
DEFAULT_TIMEOUT = 60


class SlidesTransport(ABC):
    """Abstract base class for Slides API transport.

    Implementations must provide methods to fetch a presentation and the
    thumbnail metadata of one of its pages.
    """

    @abstractmethod
    def get_presentation(self, presentation_id: str) -> dict[str, Any]:
        """Fetch complete presentation data.

        Args:
            presentation_id: The presentation identifier

        Returns:
            The presentation resource as returned by presentations.get
        """
        ...

    @abstractmethod
    def get_thumbnail(
        self, presentation_id: str, page_object_id: str, size: str | None = None
    ) -> dict[str, Any]:
        """Fetch thumbnail metadata for a page.

        Args:
            presentation_id: The presentation identifier
            page_object_id: Object ID of the slide
            size: Optional thumbnail size (LARGE, MEDIUM or SMALL)

        Returns:
            Thumbnail resource with contentUrl, width and height
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close any open connections."""
        ...


class GoogleSlidesTransport(SlidesTransport):
    """Production transport that fetches data from Google Slides API.

    All requests go through the given auth, which attaches and refreshes
    the OAuth token.
    """

    def __init__(
        self,
        auth: httpx.Auth,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            auth: Authorized session for the presentations scope
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        self._client = httpx.Client(
            auth=auth,
            timeout=timeout,
            verify=ssl_context,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def get_presentation(self, presentation_id: str) -> dict[str, Any]:
        """Fetch presentation data from Google Slides API."""
        return self._request(f"{API_BASE}/{presentation_id}", what="Presentation")

    def get_thumbnail(
        self, presentation_id: str, page_object_id: str, size: str | None = None
    ) -> dict[str, Any]:
        """Fetch thumbnail metadata from Google Slides API."""
        url = f"{API_BASE}/{presentation_id}/pages/{page_object_id}/thumbnail"
        params = {"thumbnailProperties.thumbnailSize": size} if size else None
        return self._request(url, params=params, what="Page")

    def _request(
        self, url: str, *, params: dict[str, str] | None = None, what: str
    ) -> dict[str, Any]:
        """Make an authenticated GET request."""
        logger.debug("GET request", url=url)
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
            result: dict[str, Any] = response.json()
            return result
        except httpx.HTTPStatusError as e:
            raise self._handle_http_error(e, what) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}") from e
        except json.JSONDecodeError as e:
            raise RemoteError(f"Invalid JSON in API response: {e}") from e

    def _handle_http_error(self, e: httpx.HTTPStatusError, what: str) -> RemoteError:
        """Convert HTTP errors to appropriate remote exceptions."""
        status = e.response.status_code
        if status == 401:
            return AuthenticationError("Invalid or expired access token")
        if status == 403:
            return PermissionDeniedError("Access denied. Check your scopes and permissions.")
        if status == 404:
            return NotFoundError(f"{what} not found. Check the ID and sharing permissions.")
        body = e.response.text
        return APIError(f"API error ({status}): {body}", status_code=status)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()


class LocalFileTransport(SlidesTransport):
    """Test transport that reads from local golden files.

    Expected directory structure:
        golden_dir/
            <presentation_id>/
                presentation.json
                thumbnails.json   (page object ID -> thumbnail response)
    """

    def __init__(self, golden_dir: Path) -> None:
        """Initialize the transport.

        Args:
            golden_dir: Directory containing golden test files
        """
        self._golden_dir = golden_dir
        self._thumbnail_requests: list[dict[str, Any]] = []

    def get_presentation(self, presentation_id: str) -> dict[str, Any]:
        """Read presentation from local file."""
        path = self._golden_dir / presentation_id / "presentation.json"
        if not path.exists():
            raise NotFoundError(f"Golden file not found: {path}")

        result: dict[str, Any] = json.loads(path.read_text())
        return result

    def get_thumbnail(
        self, presentation_id: str, page_object_id: str, size: str | None = None
    ) -> dict[str, Any]:
        """Read thumbnail metadata from local file and record the request."""
        self._thumbnail_requests.append(
            {"presentation_id": presentation_id, "page_object_id": page_object_id, "size": size}
        )
        path = self._golden_dir / presentation_id / "thumbnails.json"
        if not path.exists():
            raise NotFoundError(f"Golden file not found: {path}")

        thumbnails: dict[str, dict[str, Any]] = json.loads(path.read_text())
        if page_object_id not in thumbnails:
            raise NotFoundError(f"No golden thumbnail for page {page_object_id}")
        return thumbnails[page_object_id]

    def close(self) -> None:
        """No-op for local file transport."""
        pass

    @property
    def thumbnail_requests(self) -> list[dict[str, Any]]:
        """Get recorded thumbnail requests (for test assertions)."""
        return self._thumbnail_requests
