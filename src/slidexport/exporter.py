"""Exporter - writes slide thumbnails and speaker notes to a folder.

Output layout:
    output_dir/
        image1.jpg ... image<N>.jpg
        notes.txt

``notes.txt`` holds one block per slide, in deck order:
    Slide <N>:
    <note text, one line per notes element with content>
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import httpx
from loguru import logger

from slidexport.config import Settings, ThumbnailSize
from slidexport.credentials import (
    Authenticator,
    ClientDescriptor,
    CodeSupplier,
    TokenStore,
    console_code_supplier,
)
from slidexport.deck import Slide, fetch_deck, fetch_thumbnail
from slidexport.download import ImageDownloader
from slidexport.exceptions import OutputError
from slidexport.notes import extract_notes
from slidexport.transport import GoogleSlidesTransport, SlidesTransport

NOTES_FILE = "notes.txt"


def image_filename(index: int) -> str:
    return f"image{index}.jpg"


def slide_header(index: int) -> str:
    return f"Slide {index}:\n"


@dataclass(frozen=True)
class ExportResult:
    """Summary of a completed export."""

    presentation_id: str
    title: str
    slide_count: int
    image_paths: tuple[Path, ...]
    notes_path: Path


class Exporter:
    """Exports every slide of a presentation, one slide at a time.

    Example:
        >>> exporter = Exporter(transport, downloader, Path("./out"))
        >>> result = exporter.export("1abc...")
        >>> print(f"Wrote {result.slide_count} slides")
    """

    def __init__(
        self,
        transport: SlidesTransport,
        downloader: ImageDownloader,
        output_dir: str | Path,
        *,
        thumbnail_size: ThumbnailSize | None = None,
    ) -> None:
        self._transport = transport
        self._downloader = downloader
        self._output_dir = Path(output_dir)
        self._thumbnail_size = thumbnail_size

    def export(self, presentation_id: str) -> ExportResult:
        """Export thumbnails and notes of a presentation.

        Files written before a failure are left in place.

        Raises:
            RemoteError: If the deck or a thumbnail cannot be fetched.
            DownloadError: If a thumbnail cannot be downloaded.
            OutputError: If an output file cannot be written.
        """
        deck = fetch_deck(self._transport, presentation_id)
        notes_path = self._output_dir / NOTES_FILE
        image_paths: list[Path] = []

        print(f"The presentation contains {len(deck.slides)} slides:")
        with self._open_notes(notes_path) as notes:
            for slide in deck.slides:
                print(f"Slide {slide.index}:")
                with logger.contextualize(slide=slide.index):
                    self._write(notes, notes_path, slide_header(slide.index))
                    image_paths.append(self._export_image(deck.presentation_id, slide))
                    self._write(notes, notes_path, extract_notes(slide))

        logger.info("Export complete", slides=len(deck.slides), output=str(self._output_dir))
        return ExportResult(
            presentation_id=deck.presentation_id,
            title=deck.title,
            slide_count=len(deck.slides),
            image_paths=tuple(image_paths),
            notes_path=notes_path,
        )

    def _export_image(self, presentation_id: str, slide: Slide) -> Path:
        ref = fetch_thumbnail(self._transport, presentation_id, slide, self._thumbnail_size)
        path = self._output_dir / image_filename(slide.index)
        self._downloader.download(ref, path)
        return path

    @contextmanager
    def _open_notes(self, path: Path) -> Iterator[TextIO]:
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            fh = path.open("w", encoding="utf-8")
        except OSError as e:
            raise OutputError(f"Couldn't create notes file at {path}: {e}") from e
        with fh:
            yield fh

    @staticmethod
    def _write(fh: TextIO, path: Path, text: str) -> None:
        if not text:
            return
        try:
            fh.write(text)
        except OSError as e:
            raise OutputError(f"Couldn't write to notes file at {path}: {e}") from e


def run(
    settings: Settings,
    code_supplier: CodeSupplier = console_code_supplier,
    http_transport: httpx.BaseTransport | None = None,
) -> ExportResult:
    """Authorize and export the presentation named by ``settings``.

    Args:
        settings: Run configuration
        code_supplier: Supplies the authorization code when consent is needed
        http_transport: Optional httpx transport shared by the API and image
            clients, used by tests

    Raises:
        ExportError: Any failure; nothing is retried.
    """
    descriptor = ClientDescriptor.from_file(settings.credentials_file)
    session = Authenticator(
        descriptor,
        TokenStore(settings.token_file),
        scopes=settings.scopes,
        code_supplier=code_supplier,
    ).authorize()

    transport = GoogleSlidesTransport(session, timeout=settings.timeout, transport=http_transport)
    try:
        with ImageDownloader(timeout=settings.timeout, transport=http_transport) as downloader:
            exporter = Exporter(
                transport,
                downloader,
                settings.output_dir,
                thumbnail_size=settings.thumbnail_size,
            )
            return exporter.export(settings.presentation_id)
    finally:
        transport.close()
