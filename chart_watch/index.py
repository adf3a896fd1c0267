"""
Chart repository index download and parsing

A repository publishes an index.yaml at its root listing every chart
and every released version, newest first by convention.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx
import yaml

from .exceptions import IndexFetchError, IndexParseError

# Prefer the C-accelerated YAML loader when available, index files get big.
_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)

INDEX_FILE = "index.yaml"


@dataclass(frozen=True)
class IndexEntry:
    version: str
    app_version: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class RepositoryIndex:
    """Read-only view of a repository index: chart name -> entries in published order"""

    entries: Mapping[str, Tuple[IndexEntry, ...]]

    def releases(self, chart: str) -> Tuple[IndexEntry, ...]:
        return self.entries.get(chart, ())

    def versions(self, chart: str) -> Tuple[str, ...]:
        return tuple(entry.version for entry in self.releases(chart))

    def __contains__(self, chart: object) -> bool:
        return chart in self.entries


def index_url(repo: str) -> str:
    return f"{repo.rstrip('/')}/{INDEX_FILE}"


def parse_index(text: str) -> RepositoryIndex:
    """Parse an index.yaml document.

    Raises:
        IndexParseError: document is not YAML or has no 'entries' mapping
    """
    try:
        data = yaml.load(text, Loader=_YamlLoader)
    except yaml.YAMLError as err:
        raise IndexParseError(f"Index is not valid YAML: {err}") from err

    if not isinstance(data, dict) or not isinstance(data.get("entries"), dict):
        raise IndexParseError("Index has no 'entries' mapping")

    entries: Dict[str, Tuple[IndexEntry, ...]] = {}
    for chart_name, chart_entries in data["entries"].items():
        if not isinstance(chart_entries, list):
            continue
        entries[str(chart_name)] = tuple(
            IndexEntry(
                version=_as_version(e["version"]),
                app_version=str(e.get("appVersion") or ""),
                metadata=e,
            )
            for e in chart_entries
            if isinstance(e, dict) and _as_version(e.get("version"))
        )
    return RepositoryIndex(entries=entries)


async def fetch_index(
    repo: str, client: Optional[httpx.AsyncClient] = None
) -> RepositoryIndex:
    """Download and parse <repo>/index.yaml.

    No retries and no timeout beyond the client's default.

    Raises:
        IndexFetchError: transport error or non-success response
        IndexParseError: response body is not a chart index
    """
    if client is None:
        async with httpx.AsyncClient(follow_redirects=True) as owned_client:
            return await _fetch(owned_client, index_url(repo))
    return await _fetch(client, index_url(repo))


async def _fetch(client: httpx.AsyncClient, url: str) -> RepositoryIndex:
    try:
        response = await client.get(url)
    except httpx.HTTPError as err:
        raise IndexFetchError(f"Failed to fetch {url}: {err}") from err
    if not response.is_success:
        raise IndexFetchError(f"Failed to fetch {url}: HTTP {response.status_code}")
    # large indexes take seconds to parse, keep the event loop free
    return await asyncio.to_thread(parse_index, response.text)


def _as_version(value: Any) -> str:
    # unquoted versions like 1.2 come back from YAML as numbers
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    return ""
