"""Lifecycle event ordering and bundle location parsing for local deployments."""

from __future__ import annotations

import secrets
import string
from collections.abc import Iterable
from dataclasses import dataclass

DEFAULT_ORDERED_EVENTS: tuple[str, ...] = (
    "BeforeBlockTraffic",
    "AfterBlockTraffic",
    "ApplicationStop",
    "DownloadBundle",
    "BeforeInstall",
    "Install",
    "AfterInstall",
    "ApplicationStart",
    "ValidateService",
    "BeforeAllowTraffic",
    "AfterAllowTraffic",
)

# Events that must always run first, in this order, when the user picks events.
INFRASTRUCTURE_EVENTS: tuple[str, ...] = ("DownloadBundle", "Install")

_ALPHANUMERIC = string.ascii_uppercase + string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class S3Location:
    """A bundle stored in S3, optionally pinned to a version and an ETag."""

    bucket: str
    key: str
    version_id: str = ""
    etag: str = ""


def merge_custom_events(defaults: Iterable[str], user_events: Iterable[str] | None) -> list[str]:
    """Append user events that are not already among the defaults, keeping order."""
    result = list(defaults)
    seen = set(result)
    for event in user_events or ():
        if event not in seen:
            result.append(event)
            seen.add(event)
    return result


def resolve_events(user_events: Iterable[str] | None) -> list[str]:
    """Return the events to execute.

    With no user events, the full default lifecycle is returned. Otherwise
    DownloadBundle and Install come first, followed by the user's events
    with those two removed.
    """
    chosen = list(user_events or ())
    if not chosen:
        return list(DEFAULT_ORDERED_EVENTS)
    return [*INFRASTRUCTURE_EVENTS, *(e for e in chosen if e not in INFRASTRUCTURE_EVENTS)]


def parse_s3_url(raw: str) -> S3Location:
    """Parse ``s3://bucket/key[?versionId=..&etag=..]`` into an :class:`S3Location`.

    Raises ValueError when the URL is not an S3 URL or lacks a bucket or key.
    """
    prefix = "s3://"
    if not raw.startswith(prefix):
        raise ValueError(f"not an S3 URL: {raw!r}")

    path, _, query = raw[len(prefix):].partition("?")

    bucket, slash, key = path.partition("/")
    if not slash or not bucket:
        raise ValueError(f"S3 URL missing bucket or key: {raw!r}")
    if not key:
        raise ValueError(f"S3 URL has empty key: {raw!r}")

    params: dict[str, str] = {}
    if query:
        for param in query.split("&"):
            name, eq, value = param.partition("=")
            if eq:
                params[name] = value

    return S3Location(
        bucket=bucket,
        key=key,
        version_id=params.get("versionId", ""),
        etag=params.get("etag", ""),
    )


def is_remote_location(location: str) -> bool:
    """Return True when the bundle lives in S3, behind HTTPS, or on GitHub."""
    return (
        location.startswith("s3://")
        or location.startswith("https://")
        or ("/" in location and "github.com" in location)
    )


def random_alphanumeric(n: int) -> str:
    """Return ``n`` cryptographically random ASCII letters and digits."""
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(n))