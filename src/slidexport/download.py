"""Thumbnail image download.

Thumbnail content URLs redirect to an image host whose ``Location`` targets
are already percent-escaped. Following them with a normalizing redirect
policy decodes escapes such as ``%2F`` into path separators and yields a
broken URL, so redirects are followed by hand and the target's path and
query are sent exactly as received.

The downloader uses its own plain client: no OAuth header is sent to the
image host.
"""

from __future__ import annotations

import ssl
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote, urlsplit

import certifi
import httpx
from loguru import logger

from slidexport.deck import ThumbnailRef
from slidexport.exceptions import DownloadError, EmptyDownloadError
from slidexport.transport import DEFAULT_TIMEOUT

MAX_REDIRECTS = 10

# Characters left untouched when sanitizing a redirect target; "%" keeps
# existing escapes intact
_RAW_PATH_SAFE = "%/?[]@!$&'()*+,;=:~-._"


def opaque_redirect_url(response: httpx.Response) -> httpx.URL:
    """Build the next request URL from a redirect response.

    Scheme and host are resolved against the current URL; the path and query
    are taken verbatim from the Location header and used as the raw path.
    """
    location = response.headers["Location"]
    target = urlsplit(location)
    current = response.url

    if target.scheme and target.netloc:
        base = httpx.URL(f"{target.scheme}://{target.netloc}")
        path = target.path
    else:
        base = httpx.URL(f"{current.scheme}://{current.netloc.decode('ascii')}")
        if target.path.startswith("/"):
            path = target.path
        else:
            current_path = current.raw_path.decode("ascii").split("?", 1)[0]
            path = f"{current_path.rsplit('/', 1)[0]}/{target.path}"

    raw_path = path or "/"
    if target.query:
        raw_path = f"{raw_path}?{target.query}"
    raw_path = quote(raw_path, safe=_RAW_PATH_SAFE)
    return base.copy_with(raw_path=raw_path.encode("ascii"))


class ImageDownloader:
    """Downloads thumbnail images to local files.

    Example:
        >>> with ImageDownloader() as downloader:
        ...     downloader.download(ref, Path("image1.jpg"))
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the downloader.

        Args:
            timeout: Request timeout in seconds
            max_redirects: Redirects followed before giving up
            transport: Optional httpx transport, used by tests
        """
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        self._max_redirects = max_redirects
        self._client = httpx.Client(
            timeout=timeout,
            verify=ssl_context,
            follow_redirects=False,
            transport=transport,
        )

    def download(self, ref: ThumbnailRef, dest: Path) -> int:
        """Stream the thumbnail at ``ref`` into ``dest``.

        Returns:
            Number of bytes written.

        Raises:
            EmptyDownloadError: If the response body is empty.
            DownloadError: On HTTP, network or file errors.
        """
        try:
            with dest.open("wb") as fh:
                written = self._fetch_into(ref.content_url, fh)
        except httpx.HTTPError as e:
            raise DownloadError(f"Couldn't get image from {ref.content_url}: {e}") from e
        except OSError as e:
            raise DownloadError(f"Couldn't write image to {dest}: {e}") from e

        if written == 0:
            raise EmptyDownloadError(ref.content_url)

        logger.debug("Downloaded thumbnail", slide=ref.slide_index, path=str(dest), size=written)
        return written

    def _fetch_into(self, url: str, fh: BinaryIO) -> int:
        request = self._client.build_request("GET", url)
        for _ in range(self._max_redirects + 1):
            response = self._client.send(request, stream=True)
            try:
                if response.is_redirect:
                    request = self._client.build_request("GET", opaque_redirect_url(response))
                    logger.debug("Following redirect", url=str(request.url))
                    continue

                response.raise_for_status()
                written = 0
                for chunk in response.iter_bytes():
                    fh.write(chunk)
                    written += len(chunk)
                return written
            finally:
                response.close()

        raise DownloadError(f"Too many redirects fetching {url}")

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> ImageDownloader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
