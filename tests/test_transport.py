"""Tests for the transport layer."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from slidexport import (
    APIError,
    AuthenticationError,
    GoogleSlidesTransport,
    LocalFileTransport,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RemoteError,
)


class _StaticAuth(httpx.Auth):
    def auth_flow(self, request: httpx.Request):
        request.headers["Authorization"] = "Bearer test-token"
        yield request


def _transport(handler) -> GoogleSlidesTransport:
    return GoogleSlidesTransport(_StaticAuth(), transport=httpx.MockTransport(handler))


class TestLocalFileTransport:
    """Tests for LocalFileTransport."""

    @pytest.fixture
    def transport(self, golden_dir: Path) -> LocalFileTransport:
        """Create a LocalFileTransport for testing."""
        return LocalFileTransport(golden_dir)

    def test_get_presentation_returns_data(self, transport: LocalFileTransport) -> None:
        result = transport.get_presentation("three_slides")

        assert result["presentationId"] == "three_slides"
        assert len(result["slides"]) == 3

    def test_get_presentation_not_found(self, transport: LocalFileTransport) -> None:
        """get_presentation raises NotFoundError for missing file."""
        with pytest.raises(NotFoundError, match="Golden file not found"):
            transport.get_presentation("nonexistent_presentation")

    def test_get_thumbnail_records_requests(self, transport: LocalFileTransport) -> None:
        result = transport.get_thumbnail("three_slides", "p2", "SMALL")

        assert result["contentUrl"] == "https://lh3.example.test/thumb/p2"
        assert transport.thumbnail_requests == [
            {"presentation_id": "three_slides", "page_object_id": "p2", "size": "SMALL"}
        ]

    def test_get_thumbnail_unknown_page(self, transport: LocalFileTransport) -> None:
        with pytest.raises(NotFoundError, match="No golden thumbnail"):
            transport.get_thumbnail("three_slides", "missing")

    def test_close_is_noop(self, transport: LocalFileTransport) -> None:
        transport.close()


class TestGoogleSlidesTransport:
    """Tests for GoogleSlidesTransport against a mocked HTTP layer."""

    def test_get_presentation(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"presentationId": "abc", "slides": []})

        transport = _transport(handler)
        result = transport.get_presentation("abc")
        transport.close()

        assert result == {"presentationId": "abc", "slides": []}
        assert str(seen[0].url) == "https://slides.googleapis.com/v1/presentations/abc"
        assert seen[0].headers["Authorization"] == "Bearer test-token"
        assert seen[0].method == "GET"

    def test_get_thumbnail_with_size(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"contentUrl": "https://lh3.example.test/x"})

        transport = _transport(handler)
        result = transport.get_thumbnail("abc", "p1", "LARGE")

        assert result["contentUrl"] == "https://lh3.example.test/x"
        assert seen[0].url.path == "/v1/presentations/abc/pages/p1/thumbnail"
        assert seen[0].url.params["thumbnailProperties.thumbnailSize"] == "LARGE"

    def test_get_thumbnail_default_size_sends_no_params(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"contentUrl": "https://lh3.example.test/x"})

        _transport(handler).get_thumbnail("abc", "p1")

        assert seen[0].url.query == b""

    @pytest.mark.parametrize(
        ("status", "error_type"),
        [
            (401, AuthenticationError),
            (403, PermissionDeniedError),
            (404, NotFoundError),
            (500, APIError),
        ],
    )
    def test_http_errors_are_mapped(self, status: int, error_type: type[RemoteError]) -> None:
        transport = _transport(lambda request: httpx.Response(status, text="nope"))

        with pytest.raises(error_type) as exc_info:
            transport.get_presentation("abc")

        assert isinstance(exc_info.value, RemoteError)

    def test_api_error_keeps_status_code(self) -> None:
        transport = _transport(lambda request: httpx.Response(429, text="slow down"))

        with pytest.raises(APIError) as exc_info:
            transport.get_presentation("abc")

        assert exc_info.value.status_code == 429
        assert "slow down" in str(exc_info.value)

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError, match="Network error"):
            _transport(handler).get_presentation("abc")

    def test_invalid_json(self) -> None:
        transport = _transport(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(RemoteError, match="Invalid JSON"):
            transport.get_presentation("abc")


class TestGoldenFile:
    """Tests that verify golden file structure."""

    def test_golden_files_are_valid_json(self, golden_dir: Path) -> None:
        for name in ("presentation.json", "thumbnails.json"):
            data = json.loads((golden_dir / "three_slides" / name).read_text())
            assert data

    def test_every_slide_has_a_thumbnail(self, golden_dir: Path) -> None:
        presentation = json.loads((golden_dir / "three_slides" / "presentation.json").read_text())
        thumbnails = json.loads((golden_dir / "three_slides" / "thumbnails.json").read_text())

        assert [s["objectId"] for s in presentation["slides"]] == list(thumbnails)
