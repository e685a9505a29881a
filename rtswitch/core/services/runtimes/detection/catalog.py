"""
L3 Detection — Catalog Resolver.

Queries every sub-index of a kind's upstream, keeps stable releases
built for this platform, collapses build-metadata duplicates and
returns them newest first.  One failing sub-index is skipped; only a
total failure is an error.
"""

from __future__ import annotations

import logging

from rtswitch.adapters.base import JsonFetcher, RuntimeAdapter
from rtswitch.core.errors import (
    CatalogParseError,
    CatalogUnavailableError,
    NetworkError,
    ReleaseNotFoundError,
    RuntimeSwitchError,
)
from rtswitch.core.models.runtime import PlatformDescriptor, Release
from rtswitch.core.services.runtimes.domain.versions import (
    dedupe_releases,
    is_prerelease,
    sort_releases,
    split_build,
)

logger = logging.getLogger(__name__)


def resolve_catalog(
    adapter: RuntimeAdapter,
    platform: PlatformDescriptor,
    fetch_json: JsonFetcher,
) -> list[Release]:
    """Installable releases of ``adapter``'s kind, descending by version.

    Raises:
        CatalogUnavailableError: Every sub-index failed (or the index
            list itself could not be discovered).
    """
    try:
        urls = adapter.index_urls(platform, fetch_json)
    except RuntimeSwitchError as exc:
        raise CatalogUnavailableError(
            f"{adapter.display_name} catalog unavailable: {exc}",
            kind=adapter.kind.value,
        ) from exc

    candidates: list[Release] = []
    failures: list[str] = []
    for url in urls:
        try:
            payload = fetch_json(url)
            try:
                candidates.extend(adapter.parse_catalog(payload, platform))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                # Entries of an unexpected shape (pydantic errors are ValueErrors)
                raise CatalogParseError(
                    f"Unexpected index format: {exc}", kind=adapter.kind.value, url=url,
                ) from exc
        except (NetworkError, CatalogParseError) as exc:
            logger.warning("Skipping %s index %s: %s", adapter.display_name, url, exc)
            failures.append(f"{url}: {exc}")

    if urls and len(failures) == len(urls):
        raise CatalogUnavailableError(
            f"{adapter.display_name} catalog unavailable: all {len(urls)} "
            f"index request(s) failed ({failures[-1]})",
            kind=adapter.kind.value,
            failures=failures,
        )

    usable = [
        r for r in candidates
        if not is_prerelease(r.version) and adapter.matches_platform(r, platform)
    ]
    releases = sort_releases(dedupe_releases(usable))
    logger.info(
        "%s catalog: %d releases (%d candidates, %d index failures)",
        adapter.display_name, len(releases), len(candidates), len(failures),
    )
    return releases


def find_release(adapter: RuntimeAdapter, releases: list[Release], version: str) -> Release:
    """Pick the release matching a user-supplied version string.

    Build metadata is optional in the query: ``21.0.2`` matches
    ``21.0.2+13``.

    Raises:
        ReleaseNotFoundError: No release carries that version.
    """
    wanted = adapter.normalize_version(version)
    for release in releases:
        if release.version == wanted:
            return release
    wanted_core = split_build(wanted)[0]
    for release in releases:
        if split_build(release.version)[0] == wanted_core:
            return release
    raise ReleaseNotFoundError(
        f"{adapter.display_name} {version} is not available for this platform",
        kind=adapter.kind.value,
        version=version,
    )
