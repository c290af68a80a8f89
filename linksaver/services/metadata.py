from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx

from linksaver.services.classify import classify
from linksaver.services.themes import ThemeStyles, resolve_theme


logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "LinkSaverBot/1.0",
    "Accept": "application/json",
}

UNKNOWN_DOMAIN = "unknown"


@dataclass
class RemoteLookupResult:
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    logo_url: str | None = None
    publisher: str | None = None


@dataclass
class LookupFailure:
    reason: str


@dataclass
class PreviewData:
    title: str
    domain: str
    tags: list[str]
    theme: ThemeStyles
    description: str | None = None
    image: str | None = None
    icon: str | None = None

    def as_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "icon": self.icon,
            "domain": self.domain,
            "tags": list(self.tags),
            "theme": self.theme.as_dict(),
        }

    @classmethod
    def from_dict(cls, payload: dict, url: str) -> "PreviewData":
        domain = str(payload.get("domain") or UNKNOWN_DOMAIN)
        tags = payload.get("tags")
        if not isinstance(tags, list) or not tags:
            tags = classify(url)
        return cls(
            title=str(payload.get("title") or domain),
            domain=domain,
            tags=[str(tag) for tag in tags],
            theme=resolve_theme(domain),
            description=_text(payload.get("description")),
            image=_text(payload.get("image")),
            icon=_text(payload.get("icon")),
        )


def _normalize_error(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return exc.__class__.__name__


def _text(value) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _nested_url(value) -> str | None:
    if isinstance(value, dict):
        return _text(value.get("url"))
    return None


def extract_host(url: str) -> str:
    """Return the lower-cased host of an absolute URL.

    Raises ValueError when the input has no scheme or no host, the same
    inputs a browser URL parser would reject.
    """
    parsed = urlparse((url or "").strip())
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"not an absolute URL: {url!r}")
    host = parsed.hostname
    if not host:
        raise ValueError(f"URL has no host: {url!r}")
    return host


def _strip_www(host: str) -> str:
    if host.startswith("www."):
        return host[len("www.") :]
    return host


def lookup(
    url: str,
    api_url: str,
    timeout: float,
    transport: httpx.BaseTransport | None = None,
) -> RemoteLookupResult | LookupFailure:
    try:
        with httpx.Client(
            timeout=timeout,
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
            transport=transport,
        ) as client:
            response = client.get(api_url, params={"url": url})
            body = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Metadata lookup failed for %s: %s", url, _normalize_error(exc))
        return LookupFailure(reason=_normalize_error(exc))

    if not isinstance(body, dict) or body.get("status") != "success":
        status = body.get("status") if isinstance(body, dict) else None
        logger.warning("Metadata lookup for %s returned status %r", url, status)
        return LookupFailure(reason=f"lookup status {status!r}")

    data = body.get("data")
    if not isinstance(data, dict):
        logger.warning("Metadata lookup for %s returned no data", url)
        return LookupFailure(reason="lookup returned no data")

    return RemoteLookupResult(
        title=_text(data.get("title")),
        description=_text(data.get("description")),
        image_url=_nested_url(data.get("image")),
        logo_url=_nested_url(data.get("logo")),
        publisher=_text(data.get("publisher")),
    )


def _degraded_preview(url: str) -> PreviewData:
    try:
        domain = extract_host(url)
    except ValueError:
        domain = UNKNOWN_DOMAIN
    return PreviewData(
        title=domain,
        domain=domain,
        tags=classify(url),
        theme=resolve_theme(domain),
    )


def normalize(
    url: str, result: RemoteLookupResult | LookupFailure | None
) -> PreviewData:
    if not isinstance(result, RemoteLookupResult):
        return _degraded_preview(url)

    if result.publisher:
        domain = result.publisher
    else:
        try:
            domain = _strip_www(extract_host(url))
        except ValueError:
            return _degraded_preview(url)

    return PreviewData(
        title=result.title or domain,
        domain=domain,
        tags=classify(url),
        theme=resolve_theme(domain),
        description=result.description,
        image=result.image_url,
        icon=result.logo_url,
    )


def fetch_preview(
    url: str,
    api_url: str,
    timeout: float,
    transport: httpx.BaseTransport | None = None,
) -> PreviewData:
    return normalize(url, lookup(url, api_url, timeout, transport=transport))
