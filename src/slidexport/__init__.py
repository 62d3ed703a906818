"""slidexport - Export Google Slides thumbnails and speaker notes."""

from slidexport.config import Settings, load_settings, parse_presentation_id
from slidexport.credentials import (
    Authenticator,
    AuthorizedSession,
    ClientDescriptor,
    Token,
    TokenStore,
    console_code_supplier,
)
from slidexport.deck import Deck, Slide, ThumbnailRef, fetch_deck, fetch_thumbnail
from slidexport.download import ImageDownloader
from slidexport.exceptions import (
    APIError,
    AuthenticationError,
    AuthError,
    ConfigError,
    DownloadError,
    EmptyDownloadError,
    ExportError,
    NetworkError,
    NotFoundError,
    OutputError,
    PermissionDeniedError,
    RemoteError,
)
from slidexport.exporter import Exporter, ExportResult, run
from slidexport.notes import extract_notes
from slidexport.transport import GoogleSlidesTransport, LocalFileTransport, SlidesTransport

__all__ = [
    "APIError",
    "AuthError",
    "AuthenticationError",
    "Authenticator",
    "AuthorizedSession",
    "ClientDescriptor",
    "ConfigError",
    "Deck",
    "DownloadError",
    "EmptyDownloadError",
    "ExportError",
    "ExportResult",
    "Exporter",
    "GoogleSlidesTransport",
    "ImageDownloader",
    "LocalFileTransport",
    "NetworkError",
    "NotFoundError",
    "OutputError",
    "PermissionDeniedError",
    "RemoteError",
    "Settings",
    "Slide",
    "SlidesTransport",
    "ThumbnailRef",
    "Token",
    "TokenStore",
    "console_code_supplier",
    "extract_notes",
    "fetch_deck",
    "fetch_thumbnail",
    "load_settings",
    "parse_presentation_id",
    "run",
]

__version__ = "0.1.0"
