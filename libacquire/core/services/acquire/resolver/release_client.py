"""
L2 Resolver — Release API client.

Thin urllib wrapper over the GitHub-compatible release endpoints:
tag lookup (JSON) and asset redirect resolution (HEAD).  Each call
carries its own retry budget; the bearer token is never forwarded
across redirects.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from libacquire.core.reliability.retry import (
    Deadline,
    RetryExhaustedError,
    RetryPolicy,
    retry_call,
)
from libacquire.core.services.acquire.data.constants import (
    ACCEPT_ASSET_BINARY,
    ACCEPT_RELEASE_JSON,
    RETRYABLE_HTTP_CODES,
    USER_AGENT,
)
from libacquire.core.services.acquire.domain.errors import ReleaseNotFoundError

logger = logging.getLogger(__name__)

_NETWORK_ERRORS: tuple[type[BaseException], ...] = (
    OSError,  # URLError, HTTPError, socket timeouts
    http.client.HTTPException,
)


def _is_retryable(exc: BaseException) -> bool:
    """Transient transport failures and 408/429/5xx are retried; 404 is not."""
    if isinstance(exc, urllib.error.HTTPError):
        return exc.code in RETRYABLE_HTTP_CODES
    return True


class _RedirectRecorder(urllib.request.HTTPRedirectHandler):
    """Follows redirects while remembering every Location visited."""

    def __init__(self) -> None:
        self.locations: list[str] = []

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # type: ignore[override]
        self.locations.append(newurl)
        return super().redirect_request(req, fp, code, msg, headers, newurl)


class ReleaseClient:
    """Client for ``/repos/{repo}/releases/tags/{tag}`` and asset URLs."""

    def __init__(
        self,
        api_url: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
        retry: RetryPolicy | None = None,
        deadline: Deadline | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self._token = token
        self.timeout = timeout
        self.retry = retry or RetryPolicy()
        self.deadline = deadline

    def _request(self, url: str, *, accept: str, method: str = "GET") -> urllib.request.Request:
        """Build a request; a malformed URL is a missing release, not a crash."""
        try:
            req = urllib.request.Request(
                url,
                method=method,
                headers={"Accept": accept, "User-Agent": USER_AGENT},
            )
        except ValueError as e:
            raise ReleaseNotFoundError(f"Invalid release URL {url!r}: {e}") from e
        if self._token:
            req.add_unredirected_header("Authorization", f"Bearer {self._token}")
        return req

    def _retry(self, fn, label: str):
        return retry_call(
            fn,
            policy=self.retry,
            label=label,
            retry_on=_NETWORK_ERRORS,
            is_retryable=_is_retryable,
            deadline=self.deadline,
        )

    def get_release(self, repository: str, tag: str) -> dict[str, Any]:
        """Release metadata for ``tag``.

        Raises:
            ReleaseNotFoundError: HTTP error after retries, or a body
                that is not a JSON object.
        """
        url = f"{self.api_url}/repos/{repository}/releases/tags/{urllib.parse.quote(tag)}"
        logger.info("Looking up release %s", url)

        def attempt() -> bytes:
            req = self._request(url, accept=ACCEPT_RELEASE_JSON)
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return resp.read()

        try:
            body = self._retry(attempt, f"release lookup {repository}@{tag}")
        except RetryExhaustedError as e:
            raise ReleaseNotFoundError(f"No release {tag} for {repository}: {e}") from e

        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ReleaseNotFoundError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(data, dict):
            raise ReleaseNotFoundError(
                f"Expected a JSON object from {url}, got {type(data).__name__}"
            )
        return data

    def resolve_download_url(self, asset_url: str) -> str:
        """Follow the asset URL's redirects with a HEAD request.

        Returns:
            Final URL after all redirects.  If the final hop refuses
            HEAD, the last redirect Location is used.

        Raises:
            ReleaseNotFoundError: Resolution failed after retries.
        """

        def attempt() -> str:
            recorder = _RedirectRecorder()
            opener = urllib.request.build_opener(recorder)
            req = self._request(asset_url, accept=ACCEPT_ASSET_BINARY, method="HEAD")
            try:
                with opener.open(req, timeout=self.timeout) as resp:
                    return resp.geturl()
            except urllib.error.HTTPError:
                if recorder.locations:
                    return recorder.locations[-1]
                raise

        try:
            final = self._retry(attempt, f"asset redirect {asset_url}")
        except RetryExhaustedError as e:
            raise ReleaseNotFoundError(f"Cannot resolve asset URL {asset_url}: {e}") from e

        logger.debug("Asset %s resolves to %s", asset_url, final)
        return final
