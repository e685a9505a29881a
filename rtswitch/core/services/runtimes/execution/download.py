"""
L4 Execution — HTTP fetch and file download.

Both helpers follow redirects (urllib's redirect handler, which also
detects loops) and apply one timeout to every request.  Failures are
raised as ``NetworkError``; a body that is not JSON is a
``CatalogParseError``.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any

from rtswitch import __version__
from rtswitch.core.errors import CatalogParseError, NetworkError
from rtswitch.core.services.runtimes.data.constants import DEFAULT_TIMEOUT, DOWNLOAD_CHUNK_SIZE

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"rtswitch/{__version__}"


def _open(url: str, *, timeout: float, user_agent: str, accept: str | None = None):
    headers = {"User-Agent": user_agent}
    if accept:
        headers["Accept"] = accept
    req = urllib.request.Request(url, headers=headers)
    try:
        return urllib.request.urlopen(req, timeout=timeout)
    except urllib.error.HTTPError as exc:
        exc.close()
        raise NetworkError(
            f"HTTP {exc.code} fetching {url}", url=url, status=exc.code,
        ) from exc
    except (urllib.error.URLError, TimeoutError, OSError) as exc:
        reason = getattr(exc, "reason", exc)
        raise NetworkError(f"Request to {url} failed: {reason}", url=url) from exc


def fetch_json(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Any:
    """GET ``url`` and decode its JSON body.

    Raises:
        NetworkError: Transport failure, timeout, non-2xx, redirect loop.
        CatalogParseError: Body is not valid JSON.
    """
    logger.debug("GET %s", url)
    with _open(url, timeout=timeout, user_agent=user_agent, accept="application/json") as resp:
        try:
            body = resp.read()
        except (http.client.HTTPException, OSError) as exc:
            raise NetworkError(f"Reading {url} failed: {exc}", url=url) from exc

    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise CatalogParseError(f"Invalid JSON from {url}: {exc}", url=url) from exc


def download_file(
    url: str,
    dest: Path,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Path:
    """Stream ``url`` into ``dest`` (created or truncated).

    A short body (fewer bytes than the announced Content-Length) is a
    ``NetworkError``; the partial file is left for the caller to clean.

    Returns:
        ``dest``.
    """
    logger.debug("Downloading %s → %s", url, dest)
    written = 0
    with _open(url, timeout=timeout, user_agent=user_agent) as resp:
        expected = resp.headers.get("Content-Length")
        try:
            with open(dest, "wb") as f:
                while True:
                    chunk = resp.read(DOWNLOAD_CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                    written += len(chunk)
        except (http.client.HTTPException, urllib.error.URLError, TimeoutError) as exc:
            raise NetworkError(f"Download of {url} interrupted: {exc}", url=url) from exc
        except OSError as exc:
            raise NetworkError(f"Download of {url} failed: {exc}", url=url) from exc

    if expected and expected.isdigit() and written < int(expected):
        raise NetworkError(
            f"Download of {url} truncated: {written} of {expected} bytes",
            url=url,
        )
    logger.debug("Downloaded %d bytes", written)
    return dest
