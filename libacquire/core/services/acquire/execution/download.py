"""
L4 Execution — Asset download and extraction.

Streams the resolved asset into a private temporary directory with a
bounded retry budget, then unpacks it so the installer can search it.
"""

from __future__ import annotations

import http.client
import logging
import posixpath
import shutil
import tarfile
import urllib.error
import urllib.parse
import urllib.request
import zipfile
from pathlib import Path

from libacquire.core.reliability.retry import (
    Deadline,
    RetryExhaustedError,
    RetryPolicy,
    retry_call,
)
from libacquire.core.services.acquire.data.constants import (
    ACCEPT_ASSET_BINARY,
    DOWNLOAD_CHUNK_SIZE,
    RETRYABLE_HTTP_CODES,
    USER_AGENT,
)
from libacquire.core.services.acquire.domain.errors import DownloadFailedError

logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, urllib.error.HTTPError):
        return exc.code in RETRYABLE_HTTP_CODES
    return True


def download_filename(url: str, variant: str) -> str:
    """``{variant}-{basename}`` for the asset URL."""
    basename = posixpath.basename(urllib.parse.urlparse(url).path) or "asset"
    return f"{variant}-{basename}"


def download_asset(
    url: str,
    dest_dir: Path,
    *,
    variant: str,
    retry: RetryPolicy | None = None,
    timeout: float = 30.0,
    deadline: Deadline | None = None,
) -> Path:
    """Stream ``url`` to ``dest_dir/{variant}-{basename}``.

    A partial file from a failed attempt is removed before the next.

    Raises:
        DownloadFailedError: Transfer incomplete after retries.
    """
    dest = dest_dir / download_filename(url, variant)
    part = dest.with_name(dest.name + ".part")

    try:
        req = urllib.request.Request(
            url, headers={"Accept": ACCEPT_ASSET_BINARY, "User-Agent": USER_AGENT},
        )
    except ValueError as e:
        raise DownloadFailedError(f"Invalid download URL {url!r}: {e}") from e

    def attempt() -> int:
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp, open(part, "wb") as out:
                shutil.copyfileobj(resp, out, DOWNLOAD_CHUNK_SIZE)
                expected = resp.headers.get("Content-Length")
            size = part.stat().st_size
            if expected is not None and expected.isdigit() and int(expected) != size:
                raise http.client.IncompleteRead(b"", int(expected) - size)
            return size
        except BaseException:
            part.unlink(missing_ok=True)
            raise

    logger.info("Downloading %s", url)
    try:
        size = retry_call(
            attempt,
            policy=retry or RetryPolicy(),
            label=f"download {url}",
            retry_on=(OSError, http.client.HTTPException),
            is_retryable=_is_retryable,
            deadline=deadline,
        )
    except RetryExhaustedError as e:
        raise DownloadFailedError(str(e)) from e

    part.replace(dest)
    logger.info("Downloaded %s (%d bytes)", dest.name, size)
    return dest


def extract_archive(archive: Path, dest: Path) -> Path:
    """Unpack a tar or zip archive into ``dest``.

    A file that is neither is placed into ``dest`` as-is, so a bare
    artifact can still be found by the installer.

    Raises:
        DownloadFailedError: The archive is corrupt.
    """
    dest.mkdir(parents=True, exist_ok=True)
    try:
        if tarfile.is_tarfile(archive):
            with tarfile.open(archive) as tar:
                tar.extractall(dest, filter="data")
        elif zipfile.is_zipfile(archive):
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(dest)
        else:
            logger.debug("%s is not an archive, installing it as-is", archive.name)
            shutil.copy2(archive, dest / archive.name)
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        raise DownloadFailedError(f"Cannot extract {archive.name}: {e}") from e
    return dest
