"""Shared test fixtures for slidexport."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import httpx
import pytest

from slidexport.config import PRESENTATIONS_READONLY_SCOPE
from slidexport.credentials import ClientDescriptor, Token

GOLDEN_DIR = Path(__file__).parent / "golden"

IMAGE_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"


def load_golden(presentation_id: str, name: str) -> Any:
    return json.loads((GOLDEN_DIR / presentation_id / name).read_text())


def make_api_handler(
    presentation_id: str = "three_slides",
    requests: list[httpx.Request] | None = None,
) -> Any:
    """Create an httpx.MockTransport handler serving golden files.

    Slides API paths are answered from ``tests/golden/<presentation_id>``;
    anything on the image host returns IMAGE_BYTES.
    """
    presentation = load_golden(presentation_id, "presentation.json")
    thumbnails = load_golden(presentation_id, "thumbnails.json")

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if request.url.host == "slides.googleapis.com":
            path = request.url.path
            if path == f"/v1/presentations/{presentation_id}":
                return httpx.Response(200, json=presentation)
            prefix = f"/v1/presentations/{presentation_id}/pages/"
            if path.startswith(prefix) and path.endswith("/thumbnail"):
                page_id = path[len(prefix) : -len("/thumbnail")]
                if page_id in thumbnails:
                    return httpx.Response(200, json=thumbnails[page_id])
            return httpx.Response(404, json={"error": {"message": "not found"}})
        return httpx.Response(200, content=IMAGE_BYTES)

    return handler


@pytest.fixture
def golden_dir() -> Path:
    return GOLDEN_DIR


@pytest.fixture
def client_secrets(tmp_path: Path) -> Path:
    """Write an installed-app client secrets file."""
    path = tmp_path / "credentials.json"
    path.write_text(
        json.dumps(
            {
                "installed": {
                    "client_id": "client-id.apps.googleusercontent.com",
                    "project_id": "slidexport-test",
                    "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                    "token_uri": "https://oauth2.googleapis.com/token",
                    "client_secret": "client-secret",
                    "redirect_uris": ["http://localhost"],
                }
            }
        )
    )
    return path


@pytest.fixture
def descriptor(client_secrets: Path) -> ClientDescriptor:
    return ClientDescriptor.from_file(client_secrets)


@pytest.fixture
def valid_token() -> Token:
    """Token that expires an hour from now."""
    return Token(
        access_token="cached-access-token",
        refresh_token="cached-refresh-token",
        expiry=datetime.now(UTC).replace(tzinfo=None, microsecond=0) + timedelta(hours=1),
        scopes=(PRESENTATIONS_READONLY_SCOPE,),
    )


@pytest.fixture
def api_handler_factory() -> Any:
    return make_api_handler


@pytest.fixture
def image_bytes() -> bytes:
    return IMAGE_BYTES
