"""
Chart freshness check
Compares a requested chart version against the latest release published
in the chart repository index and reports drift through the Pulumi log.
"""

from enum import Enum
from typing import Iterable, Optional

import httpx
import pulumi

from .exceptions import IndexFetchError, IndexParseError, InvalidConstraint
from .index import IndexEntry, fetch_index
from .versions import is_prerelease, latest_version, satisfies


class VersionComparison(Enum):
    SATISFIED = "satisfied"
    STALE = "stale"
    UNKNOWN = "unknown"


def select_candidate(
    entries: Iterable[IndexEntry], requested: str, order: str = "published"
) -> Optional[str]:
    """Pick the version to compare the requested one against.

    A pre-release request is compared against any release, otherwise
    pre-releases are skipped. With order "published" the first matching
    entry wins, as repositories list newest first. With order "semver"
    the highest version wins whatever the listing order.
    """
    versions = [e.version for e in entries]
    include_prereleases = is_prerelease(requested)
    if order == "semver":
        # unparseable versions are skipped here
        return latest_version(versions, prerelease=include_prereleases)
    if include_prereleases:
        return versions[0] if versions else None
    return next((v for v in versions if not is_prerelease(v)), None)


def compare(requested: str, candidate: Optional[str]) -> VersionComparison:
    if candidate is None:
        return VersionComparison.UNKNOWN
    try:
        if satisfies(candidate, requested):
            return VersionComparison.SATISFIED
    except InvalidConstraint as err:
        pulumi.log.debug(f"Cannot compare '{candidate}' against '{requested}': {err}")
        return VersionComparison.UNKNOWN
    return VersionComparison.STALE


async def check_chart_freshness(
    chart: str,
    repo: str,
    version: str,
    client: Optional[httpx.AsyncClient] = None,
    order: str = "published",
) -> VersionComparison:
    """Warn when a newer chart release than the requested version is published.

    Fetch, parse and comparison failures are reported as a single error
    line and never raised.
    """
    candidate = None
    try:
        index = await fetch_index(repo, client)
        candidate = select_candidate(index.releases(chart), version, order)
    except (IndexFetchError, IndexParseError) as err:
        pulumi.log.debug(str(err))

    result = compare(version, candidate)
    if result is VersionComparison.UNKNOWN:
        pulumi.log.error(f"Could not fetch latest version of '{chart}' !")
    elif result is VersionComparison.STALE:
        pulumi.log.warn(
            f"New chart version available: {chart} '{version}' => '{candidate}'."
        )
    return result
