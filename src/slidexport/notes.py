"""Speaker notes extraction from notes-page element trees."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from slidexport.deck import Slide


def extract_notes(slide: Slide) -> str:
    """Flatten the text of a slide's notes page.

    Every shape with a text body contributes the concatenation of its text
    runs, in document order, terminated by a single newline. Groups are
    descended into. Elements without text contribute nothing, so a slide
    without notes yields an empty string.
    """
    lines = []
    for element in _iter_elements(slide.notes_elements):
        text = element_text(element)
        if text:
            lines.append(text if text.endswith("\n") else text + "\n")
    return "".join(lines)


def element_text(element: dict[str, Any]) -> str:
    """Concatenate the text runs of a single page element's shape."""
    shape = element.get("shape") or {}
    text = shape.get("text") or {}
    parts = []
    for text_element in text.get("textElements") or ():
        run = (text_element or {}).get("textRun")
        if run:
            parts.append(run.get("content") or "")
    return "".join(parts)


def _iter_elements(elements: Iterable[dict[str, Any] | None]) -> Iterator[dict[str, Any]]:
    for element in elements:
        if not element:
            continue
        yield element
        group = element.get("elementGroup") or {}
        yield from _iter_elements(group.get("children") or ())
