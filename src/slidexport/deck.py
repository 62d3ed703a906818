"""Deck structure and thumbnail lookups on top of a SlidesTransport."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from slidexport.exceptions import RemoteError
from slidexport.transport import SlidesTransport


@dataclass(frozen=True)
class Slide:
    """A slide of a deck.

    Attributes:
        index: 1-based position in presentation order
        object_id: The slide's page object ID
        notes_elements: Page elements of the slide's notes page (raw API tree)
    """

    index: int
    object_id: str
    notes_elements: tuple[dict[str, Any], ...] = ()

    @classmethod
    def from_page(cls, index: int, page: dict[str, Any]) -> Slide:
        notes_page = (page.get("slideProperties") or {}).get("notesPage") or {}
        return cls(
            index=index,
            object_id=page.get("objectId", ""),
            notes_elements=tuple(notes_page.get("pageElements") or ()),
        )


@dataclass(frozen=True)
class Deck:
    """A presentation's ordered slides."""

    presentation_id: str
    title: str
    slides: tuple[Slide, ...]

    @classmethod
    def from_api(cls, data: dict[str, Any], presentation_id: str) -> Deck:
        pages = data.get("slides") or []
        return cls(
            presentation_id=data.get("presentationId", presentation_id),
            title=data.get("title", ""),
            slides=tuple(Slide.from_page(i, page) for i, page in enumerate(pages, start=1)),
        )


@dataclass(frozen=True)
class ThumbnailRef:
    """A short-lived thumbnail URL for one slide. Consume it immediately."""

    content_url: str
    slide_index: int
    width: int | None = None
    height: int | None = None


def fetch_deck(transport: SlidesTransport, presentation_id: str) -> Deck:
    """Fetch a presentation and return its slides in display order.

    Raises:
        RemoteError: If the presentation cannot be fetched.
    """
    data = transport.get_presentation(presentation_id)
    deck = Deck.from_api(data, presentation_id)
    logger.info(
        "Fetched presentation",
        presentation_id=deck.presentation_id,
        slides=len(deck.slides),
    )
    return deck


def fetch_thumbnail(
    transport: SlidesTransport,
    presentation_id: str,
    slide: Slide,
    size: str | None = None,
) -> ThumbnailRef:
    """Ask the API for a rendered thumbnail of the slide.

    Raises:
        RemoteError: If the request fails or the response has no content URL.
    """
    data = transport.get_thumbnail(presentation_id, slide.object_id, size)
    content_url = data.get("contentUrl")
    if not content_url:
        raise RemoteError(f"Couldn't create thumbnail for slide {slide.index}: no contentUrl")
    return ThumbnailRef(
        content_url=content_url,
        slide_index=slide.index,
        width=data.get("width"),
        height=data.get("height"),
    )
