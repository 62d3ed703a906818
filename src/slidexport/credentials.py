"""Credentials management for Slides API access.

The OAuth client descriptor (``credentials.json``) is turned into an
authorized session in three steps:
1. A cached token is loaded from ``token.json`` when one exists.
2. Without a usable token, an installed-app consent flow runs: the operator
   opens the authorization URL and pastes back the code.
3. The token is bound to an ``httpx.Auth`` that refreshes it on expiry and
   writes the refreshed token back to the cache.
"""

from __future__ import annotations

import contextlib
import json
import os
import stat
import sys
from collections.abc import Callable, Generator, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from loguru import logger

from slidexport.config import PRESENTATIONS_READONLY_SCOPE
from slidexport.exceptions import AuthError, ConfigError, OutputError

# Fixed anti-forgery state sent with the authorization URL
STATE_TOKEN = "state-token"
DEFAULT_REDIRECT_URI = "http://localhost"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"

CodeSupplier = Callable[[str], str]


def _to_utc_naive(value: datetime) -> datetime:
    """google-auth compares expiry against naive UTC datetimes."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


@dataclass
class Token:
    """OAuth token persisted between runs.

    Attributes:
        access_token: The OAuth2 access token for API calls.
        refresh_token: Token used to obtain new access tokens, if granted.
        expiry: Naive UTC datetime when the access token expires.
        token_type: Authorization scheme, normally "Bearer".
        scopes: Scopes the token was granted for.
    """

    access_token: str
    refresh_token: str | None = None
    expiry: datetime | None = None
    token_type: str = "Bearer"
    scopes: tuple[str, ...] = field(default_factory=tuple)

    def covers(self, scopes: Sequence[str]) -> bool:
        """Check whether the token was granted every requested scope.

        A token with no recorded scopes covers nothing.
        """
        return bool(self.scopes) and set(scopes).issubset(self.scopes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "refresh_token": self.refresh_token,
            "expiry": self.expiry.isoformat() + "Z" if self.expiry else None,
            "scopes": list(self.scopes),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Token:
        """Create Token from dictionary.

        Raises:
            KeyError: If access_token is missing.
            ValueError: If expiry is not an ISO 8601 timestamp.
        """
        expiry = data.get("expiry")
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or None,
            expiry=_to_utc_naive(datetime.fromisoformat(expiry.replace("Z", "+00:00")))
            if expiry
            else None,
            token_type=data.get("token_type") or "Bearer",
            scopes=tuple(data.get("scopes") or ()),
        )

    @classmethod
    def from_credentials(cls, credentials: Credentials, scopes: Sequence[str]) -> Token:
        """Create Token from google-auth credentials."""
        return cls(
            access_token=credentials.token,
            refresh_token=credentials.refresh_token,
            expiry=credentials.expiry,
            scopes=tuple(credentials.scopes or scopes),
        )


class TokenStore:
    """Persists the single cached token as JSON on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Token | None:
        """Load the cached token, or None if it is absent or corrupt."""
        if not self._path.exists():
            return None

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return Token.from_dict(data)
        except (OSError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Ignoring unreadable cached token", path=str(self._path), error=str(e))
            return None

    def save(self, token: Token) -> None:
        """Save token to cache file with owner-only permissions.

        Raises:
            OutputError: If the token file cannot be written.
        """
        print(f"Saving credential file to: {self._path}")
        temp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)

            # Temp file is created 0600, then replaces the target atomically
            temp_path.unlink(missing_ok=True)
            fd = os.open(
                temp_path,
                os.O_WRONLY | os.O_CREAT | os.O_EXCL,
                stat.S_IRUSR | stat.S_IWUSR,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(json.dumps(token.to_dict(), indent=2))
            os.replace(temp_path, self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
            raise OutputError(f"Unable to cache oauth token at {self._path}: {e}") from e
        logger.info("Token saved", path=str(self._path))


@dataclass(frozen=True)
class ClientDescriptor:
    """OAuth client configuration loaded from a client secrets file."""

    client_type: str
    client_id: str
    client_secret: str
    auth_uri: str
    token_uri: str
    redirect_uris: tuple[str, ...]
    config: dict[str, Any]

    @property
    def redirect_uri(self) -> str:
        return self.redirect_uris[0] if self.redirect_uris else DEFAULT_REDIRECT_URI

    @classmethod
    def from_file(cls, path: str | Path) -> ClientDescriptor:
        """Load a client secrets file as downloaded from the Cloud console.

        Raises:
            ConfigError: If the file is unreadable or not a client secrets file.
        """
        path = Path(path)
        try:
            config = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Unable to read client secret file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Unable to parse client secret file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Unable to parse client secret file {path}: not an object")

        client_type = next((key for key in ("installed", "web") if key in config), None)
        if client_type is None:
            raise ConfigError(
                f"Unable to parse client secret file {path}: "
                "expected an 'installed' or 'web' client"
            )

        section = config[client_type]
        if not isinstance(section, dict):
            raise ConfigError(f"Unable to parse client secret file {path}: bad '{client_type}'")
        required = ("client_id", "client_secret", "auth_uri")
        missing = [key for key in required if not section.get(key)]
        if missing:
            raise ConfigError(
                f"Unable to parse client secret file {path}: missing {', '.join(missing)}"
            )

        return cls(
            client_type=client_type,
            client_id=section["client_id"],
            client_secret=section["client_secret"],
            auth_uri=section["auth_uri"],
            token_uri=section.get("token_uri") or DEFAULT_TOKEN_URI,
            redirect_uris=tuple(section.get("redirect_uris") or ()),
            config=config,
        )


def console_code_supplier(auth_url: str) -> str:
    """Print the authorization URL and read the code from stdin."""
    print(
        "Go to the following link in your browser then type the authorization code: \n"
        f"{auth_url}"
    )
    parts = sys.stdin.readline().split()
    if not parts:
        raise AuthError("Unable to read authorization code: no input")
    return parts[0]


class AuthorizedSession(httpx.Auth):
    """httpx auth that attaches the bearer token and refreshes it on expiry.

    Refreshed tokens replace the cached token in the store.
    """

    def __init__(self, credentials: Credentials, store: TokenStore, scopes: Sequence[str]) -> None:
        self._credentials = credentials
        self._store = store
        self._scopes = tuple(scopes)

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def token(self) -> Token:
        return Token.from_credentials(self._credentials, self._scopes)

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if not self._credentials.valid:
            self._refresh()
        request.headers["Authorization"] = f"Bearer {self._credentials.token}"
        yield request

    def _refresh(self) -> None:
        if not self._credentials.refresh_token:
            raise AuthError("Access token expired and no refresh token is available")

        logger.info("Refreshing access token")
        try:
            self._credentials.refresh(Request())
        except GoogleAuthError as e:
            raise AuthError(f"Unable to refresh access token: {e}") from e
        self._store.save(self.token)


class Authenticator:
    """Turns a client descriptor and the token cache into an authorized session.

    Args:
        descriptor: OAuth client configuration.
        store: Token cache.
        scopes: Scopes to request; read-only presentations access by default.
        code_supplier: Called with the authorization URL, returns the code the
            operator obtained. Defaults to reading it from the console.

    Example:
        descriptor = ClientDescriptor.from_file("credentials.json")
        session = Authenticator(descriptor, TokenStore("token.json")).authorize()
        client = httpx.Client(auth=session)
    """

    def __init__(
        self,
        descriptor: ClientDescriptor,
        store: TokenStore,
        scopes: Sequence[str] = (PRESENTATIONS_READONLY_SCOPE,),
        code_supplier: CodeSupplier = console_code_supplier,
    ) -> None:
        self._descriptor = descriptor
        self._store = store
        self._scopes = tuple(scopes)
        self._code_supplier = code_supplier

    def authorize(self) -> AuthorizedSession:
        """Return an authorized session, running the consent flow if needed.

        Raises:
            AuthError: If the consent flow or code exchange fails.
            OutputError: If the new token cannot be cached.
        """
        token = self._store.load()
        if token is None:
            logger.info("No cached token", path=str(self._store.path))
            token = self._authorize_interactively()
        elif not token.covers(self._scopes):
            logger.warning(
                "Cached token does not cover requested scopes, re-authorizing",
                cached=list(token.scopes),
                requested=list(self._scopes),
            )
            token = self._authorize_interactively()
        elif not token.refresh_token and self._credentials_for(token).expired:
            # Same skewed expiry the session checks before each request
            logger.info("Cached token expired and cannot be refreshed, re-authorizing")
            token = self._authorize_interactively()
        else:
            logger.info("Using cached token", expiry=str(token.expiry))

        return AuthorizedSession(self._credentials_for(token), self._store, self._scopes)

    def _authorize_interactively(self) -> Token:
        flow = self._create_flow()
        # Google only issues a refresh token on re-consent when prompted for it
        auth_url, _ = flow.authorization_url(
            access_type="offline", prompt="consent", state=STATE_TOKEN
        )

        code = self._code_supplier(auth_url)
        if not code or not code.strip():
            raise AuthError("Unable to read authorization code: empty code")

        logger.info("Exchanging authorization code for token")
        try:
            flow.fetch_token(code=code.strip())
        except Exception as e:
            raise AuthError(f"Unable to retrieve token from web: {e}") from e

        token = Token.from_credentials(flow.credentials, self._scopes)
        self._store.save(token)
        return token

    def _create_flow(self) -> Flow:
        return Flow.from_client_config(
            self._descriptor.config,
            scopes=list(self._scopes),
            redirect_uri=self._descriptor.redirect_uri,
        )

    def _credentials_for(self, token: Token) -> Credentials:
        return Credentials(
            token=token.access_token,
            refresh_token=token.refresh_token,
            token_uri=self._descriptor.token_uri,
            client_id=self._descriptor.client_id,
            client_secret=self._descriptor.client_secret,
            scopes=list(token.scopes or self._scopes),
            expiry=token.expiry,
        )
