"""Path templates, query strings and Link header handling."""

import re
from collections.abc import Mapping
from enum import Enum

import httpx

from .errors import UrlError
from .models import ApiVersion

API_VERSION_PARAM = "api-version"

_LINK_RE = re.compile(r'<([^>]+)>\s*;\s*rel="?([^";,]+)"?')


def build_path(template: str, **segments) -> str:
    """Fill a path template such as ``/{org}/{project}/_apis/git/repositories``.

    Segment values are interpolated as given; no escaping is applied.
    """
    return template.format(**{k: str(v) for k, v in segments.items()})


def serialize_params(params: Mapping[str, object]) -> dict[str, str]:
    """Drop unset options and render the rest as query string values."""
    serialized = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            serialized[key] = "true" if value else "false"
        elif isinstance(value, Enum):
            serialized[key] = str(value.value)
        else:
            serialized[key] = str(value)
    return serialized


def with_query(path: str, params: Mapping[str, str] | None) -> str:
    """Append serialized query params to a path, if there are any."""
    if not params:
        return path
    sep = "&" if "?" in path else "?"
    return f"{path}{sep}{httpx.QueryParams(params)}"


def build_url(uri: str, api_version: ApiVersion) -> httpx.URL:
    """Append the api-version marker to ``uri`` and parse it.

    A uri that already names an api-version (next-page links do) is left as is.
    """
    try:
        url = httpx.URL(uri)
    except (httpx.InvalidURL, TypeError) as e:
        raise UrlError(f"Invalid URL {uri!r}: {e}") from e
    if not url.scheme or not url.host:
        raise UrlError(f"Invalid URL {uri!r}: not an absolute http(s) URL")
    if API_VERSION_PARAM in url.params:
        return url
    sep = "&" if url.query else "?"
    try:
        return httpx.URL(f"{uri}{sep}{API_VERSION_PARAM}={api_version.value}")
    except httpx.InvalidURL as e:
        raise UrlError(f"Invalid URL {uri!r}: {e}") from e


def next_link(links: Mapping[str, Mapping[str, str]]) -> str | None:
    """Absolute ``rel="next"`` target from httpx's parsed ``Response.links``.

    A target that is not an absolute URL is dropped, so a malformed header
    means there is no next page.
    """
    target = links.get("next", {}).get("url")
    if not target:
        return None
    try:
        url = httpx.URL(target)
    except httpx.InvalidURL:
        return None
    if not url.scheme or not url.host:
        return None
    return target


def parse_next_link(header: str | None) -> str | None:
    """Return the ``rel="next"`` target of a Link header.

    Best effort: unparsable entries are skipped, so a malformed header means
    there is no next page.
    """
    if not header:
        return None

    for match in _LINK_RE.finditer(header):
        target, rels = match.groups()
        if "next" in rels.split():
            return target
    return None


def format_next_link(target: str) -> str:
    """Render a Link header value pointing at the next page."""
    return f'<{target}>; rel="next"'
