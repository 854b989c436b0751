"""
Script source resolution: turn a configured script entry into script text.

An entry that parses as a URL with a fetchable scheme (http, https, file, ftp)
is fetched and decoded; anything else, including a bare local path, is the
script body itself.
"""

import io
import locale
import logging
import urllib.request
from dataclasses import dataclass
from typing import Any, BinaryIO
from urllib.parse import urlsplit

import httpx

_log = logging.getLogger(__name__)

HTTP_SCHEMES = frozenset({"http", "https"})
FETCHABLE_SCHEMES = HTTP_SCHEMES | {"file", "ftp"}


class ScriptFetchError(OSError):
    """Raised when a script URL cannot be opened, read or decoded."""

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(message)
        self.url = url


@dataclass(frozen=True)
class ScriptSource:
    """Resolved script text; url is None for inline script bodies."""

    text: str
    url: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.text


def as_url(entry: str) -> str | None:
    """Return *entry* if it is a fetchable URL, else None (the entry is a script body)."""
    candidate = entry.strip()
    if not candidate or "\n" in candidate:
        return None
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return None
    if parts.scheme.lower() not in FETCHABLE_SCHEMES:
        return None
    if parts.scheme.lower() in HTTP_SCHEMES and not parts.netloc:
        return None
    return candidate


def _close_quietly(resource: Any) -> None:
    if resource is None:
        return
    try:
        resource.close()
    except Exception as e:
        _log.warning("Unable to close script stream: %s", e)


def read_lines(stream: BinaryIO, encoding: str | None) -> str:
    """Decode *stream* and join its lines, each followed by exactly one newline. Undecodable bytes become U+FFFD."""
    reader = io.TextIOWrapper(
        stream,
        encoding=encoding or locale.getpreferredencoding(False),
        newline=None,
        errors="replace",
    )
    try:
        parts: list[str] = []
        for line in reader:
            parts.append(line[:-1] if line.endswith("\n") else line)
            parts.append("\n")
        return "".join(parts)
    finally:
        reader.detach()


class ScriptSourceResolver:
    """
    Resolve script entries to text.

    encoding: declared source encoding; None uses the platform default.
    timeout: seconds for remote fetches; None never times out.
    client: httpx.Client to reuse (not closed here); one is created per fetch otherwise.
    """

    def __init__(
        self,
        *,
        encoding: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.encoding = encoding
        self.timeout = timeout
        self._client = client

    def resolve(self, entry: str) -> ScriptSource:
        url = as_url(entry)
        if url is None:
            return ScriptSource(text=entry)
        _log.info("Fetching script from %s.", url)
        return ScriptSource(text=self.fetch(url), url=url)

    def fetch(self, url: str) -> str:
        stream = None
        try:
            stream = self._open(url)
            return read_lines(stream, self.encoding)
        except ScriptFetchError:
            raise
        except (httpx.HTTPError, OSError, UnicodeError, LookupError) as e:
            raise ScriptFetchError(f"Unable to read script from {url}: {e}", url=url) from e
        finally:
            _close_quietly(stream)

    def _open(self, url: str) -> BinaryIO:
        if urlsplit(url).scheme.lower() in HTTP_SCHEMES:
            return self._open_http(url)
        response = None
        try:
            response = urllib.request.urlopen(url, timeout=self.timeout)
            body = response.read()
        finally:
            _close_quietly(response)
        return io.BytesIO(body)

    def _open_http(self, url: str) -> BinaryIO:
        client = self._client or httpx.Client(timeout=self.timeout, follow_redirects=True)
        response = None
        try:
            response = client.send(client.build_request("GET", url), stream=True)
            response.raise_for_status()
            body = b"".join(response.iter_bytes())
        finally:
            _close_quietly(response)
            if client is not self._client:
                _close_quietly(client)
        return io.BytesIO(body)
