"""Tests for speaker notes extraction."""

from __future__ import annotations

from typing import Any

from slidexport.deck import Slide
from slidexport.notes import element_text, extract_notes


def _shape(*runs: str) -> dict[str, Any]:
    return {
        "shape": {
            "text": {
                "textElements": [{"paragraphMarker": {}}]
                + [{"textRun": {"content": run}} for run in runs]
            }
        }
    }


def _slide(*elements: dict[str, Any] | None) -> Slide:
    return Slide(index=1, object_id="s1", notes_elements=tuple(elements))


class TestExtractNotes:
    """Tests for extract_notes."""

    def test_runs_are_concatenated(self) -> None:
        assert extract_notes(_slide(_shape("Hello, ", "world"))) == "Hello, world\n"

    def test_no_text_bearing_elements(self) -> None:
        assert extract_notes(_slide({"shape": {"shapeType": "TEXT_BOX"}})) == ""

    def test_no_elements(self) -> None:
        assert extract_notes(_slide()) == ""

    def test_trailing_newline_is_not_doubled(self) -> None:
        assert extract_notes(_slide(_shape("Note A\n"))) == "Note A\n"

    def test_one_line_per_element(self) -> None:
        notes = extract_notes(_slide(_shape("first"), {"image": {}}, _shape("second\n")))

        assert notes == "first\nsecond\n"

    def test_multi_paragraph_text_is_kept(self) -> None:
        assert extract_notes(_slide(_shape("one\n", "two\n"))) == "one\ntwo\n"

    def test_groups_are_descended(self) -> None:
        group = {
            "elementGroup": {
                "children": [
                    _shape("outer"),
                    {"elementGroup": {"children": [_shape("inner")]}},
                ]
            }
        }

        assert extract_notes(_slide(_shape("top"), group)) == "top\nouter\ninner\n"

    def test_null_substructures_contribute_nothing(self) -> None:
        notes = extract_notes(
            _slide(
                None,
                {"shape": None},
                {"shape": {"text": None}},
                {"shape": {"text": {"textElements": None}}},
                {"shape": {"text": {"textElements": [None, {"textRun": None}]}}},
                {"shape": {"text": {"textElements": [{"textRun": {"content": None}}]}}},
                {"elementGroup": None},
            )
        )

        assert notes == ""

    def test_auto_text_is_ignored(self) -> None:
        text_elements = [{"autoText": {"content": "3"}}, {"textRun": {"content": "x"}}]
        element = {"shape": {"text": {"textElements": text_elements}}}

        assert extract_notes(_slide(element)) == "x\n"


class TestElementText:
    """Tests for element_text."""

    def test_does_not_add_separators(self) -> None:
        assert element_text(_shape("a", "b", "c")) == "abc"

    def test_element_without_shape(self) -> None:
        assert element_text({"table": {}}) == ""
