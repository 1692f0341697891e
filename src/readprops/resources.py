"""
Property resources.

A resource is something that may or may not be openable and yields a byte
stream of properties text. There are exactly two kinds: FileResource (a path
on disk) and UrlResource (an http/https/file URL, or a ``classpath:`` name
looked up under a list of search roots). Both expose ``can_be_opened()`` and
``open_stream()``.
"""

from __future__ import annotations

import asyncio
import io
import sys
import zipfile
from collections.abc import Coroutine, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, BinaryIO
from urllib.parse import urlsplit
from urllib.request import url2pathname

import aiohttp

from readprops.exceptions import ConfigurationError
from readprops.utils.logging import get_logger

logger = get_logger("readprops.resources")

CLASSPATH_PREFIX = "classpath:"
SUPPORTED_SCHEMES = ("http", "https", "file")
DEFAULT_TIMEOUT = 30.0


async def _fetch(url: str, timeout: float) -> bytes:
    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
        async with session.get(url) as response:
            response.raise_for_status()
            return await response.read()


def _run(coro: Coroutine[Any, Any, bytes]) -> bytes:
    """Run a coroutine to completion from sync code, inside or outside an event loop."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    # A loop already runs in this thread; give the fetch its own loop on a worker
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


def fetch_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """
    Fetch the body of an http(s) URL.

    Args:
        url: URL to fetch
        timeout: Total transport timeout in seconds

    Returns:
        Response body

    Raises:
        OSError: If the request fails or returns a non-2xx status
    """
    try:
        return _run(_fetch(url, timeout))
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise OSError(f"Cannot open {url}: {e}") from e


@dataclass(frozen=True)
class ArchiveEntry:
    """A classpath resource stored inside a zip archive on the search path."""

    archive: Path
    name: str

    def open(self) -> BinaryIO:
        with zipfile.ZipFile(self.archive) as archive:
            return io.BytesIO(archive.read(self.name))

    def as_uri(self) -> str:
        return f"jar:{self.archive.as_uri()}!/{self.name}"


def _check_classpath_name(name: str) -> None:
    parts = PurePosixPath(name.replace("\\", "/")).parts
    if not parts or parts[0] == "/" or ".." in parts or ":" in parts[0]:
        raise ConfigurationError(
            f"Classpath name must be a relative path without '..' segments: {name!r}",
            details={"name": name},
        )


def find_on_classpath(name: str, classpath: Sequence[str | Path] | None = None) -> Path | ArchiveEntry | None:
    """
    Look a relative resource name up under each classpath root in order.

    Directory roots are searched on disk; roots that are zip archives (as
    allowed on ``sys.path``) are searched by entry name.

    Args:
        name: Relative resource name, e.g. ``config/app.properties``
        classpath: Search roots (default: ``sys.path``)

    Returns:
        The first matching file or archive entry, or None if no root holds it

    Raises:
        ConfigurationError: If name is absolute or has a '..' segment
    """
    _check_classpath_name(name)
    entry_name = PurePosixPath(name.replace("\\", "/")).as_posix()
    roots = sys.path if classpath is None else classpath
    for root in roots:
        root_path = Path(root or ".")
        if root_path.is_dir():
            candidate = root_path / name
            if candidate.is_file():
                return candidate.resolve()
        elif root_path.is_file() and zipfile.is_zipfile(root_path):
            with zipfile.ZipFile(root_path) as archive:
                if entry_name in archive.namelist():
                    return ArchiveEntry(root_path.resolve(), entry_name)
    return None


@dataclass
class FileResource:
    """Properties stored in a file on disk."""

    path: Path

    def can_be_opened(self) -> bool:
        return Path(self.path).exists()

    def open_stream(self) -> BinaryIO:
        return open(self.path, "rb")

    def __str__(self) -> str:
        return f"File: {self.path}"


class UrlResource:
    """
    Properties behind a URL or a ``classpath:`` name.

    ``can_be_opened()`` really opens the stream, and the opened stream is
    handed out by the next ``open_stream()`` call instead of being reopened.
    A ``classpath:`` name that no root holds is permanently unopenable.
    """

    def __init__(self, url: str, classpath: Sequence[str | Path] | None = None):
        self.original = url
        self.url: str | None
        self._stream: BinaryIO | None = None
        self._entry: ArchiveEntry | None = None

        if url.startswith(CLASSPATH_PREFIX):
            name = url[len(CLASSPATH_PREFIX) :]
            if name.startswith("/"):
                name = name[1:]
            found = find_on_classpath(name, classpath)
            if isinstance(found, ArchiveEntry):
                self._entry = found
            self.url = found.as_uri() if found is not None else None
        else:
            scheme = urlsplit(url).scheme.lower()
            if scheme not in SUPPORTED_SCHEMES:
                raise ConfigurationError(
                    f"Badly formed URL {url} - expected one of {', '.join(SUPPORTED_SCHEMES)} "
                    f"or a '{CLASSPATH_PREFIX}' name",
                    details={"url": url},
                )
            self.url = url

    @property
    def is_missing_classpath_resource(self) -> bool:
        return self.url is None

    def _open(self) -> BinaryIO:
        assert self.url is not None
        if self._entry is not None:
            return self._entry.open()
        parts = urlsplit(self.url)
        if parts.scheme.lower() == "file":
            return open(url2pathname(parts.path), "rb")
        return io.BytesIO(fetch_url(self.url))

    def can_be_opened(self) -> bool:
        if self.url is None:
            return False
        if self._stream is not None:
            return True
        try:
            self._stream = self._open()
        except OSError as e:
            logger.debug(f"Cannot open {self}: {e}")
            return False
        return True

    def open_stream(self) -> BinaryIO:
        if self.url is None:
            raise FileNotFoundError(f"Classpath resource not found: {self.original}")
        stream, self._stream = self._stream, None
        if stream is None:
            stream = self._open()
        return stream

    def __str__(self) -> str:
        if self.url is None:
            return self.original
        return f"URL {self.url}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(url='{self.original}')"


Resource = FileResource | UrlResource
