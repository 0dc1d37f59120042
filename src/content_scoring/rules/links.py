"""Link classification, source citations and link-based authority signals."""

import logging
import re
from dataclasses import dataclass, field
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from ..models.parser_output import SourceSnippet, SNIPPET_MAX_CHARS
from .text import Candidate, dedup_by_key, element_text, truncate

logger = logging.getLogger(__name__)

IGNORED_SCHEMES = ("javascript:", "mailto:", "tel:", "data:", "sms:", "ftp:")
MIN_CITATION_TEXT = 5
MAX_CITATION_TEXT = 200


@dataclass
class LinkStats:
    internal: int = 0
    external: int = 0
    sources: list[SourceSnippet] = field(default_factory=list)


def normalize_host(host: str | None) -> str:
    host = (host or "").lower().rstrip(".")
    return host[4:] if host.startswith("www.") else host


def resolve_href(href: str, base_url: str) -> str | None:
    """Absolute http(s) URL for an href, or None when it cannot be resolved."""
    href = (href or "").strip()
    if not href or href.startswith("#") or href.lower().startswith(IGNORED_SCHEMES):
        return None
    absolute = urljoin(base_url, href)
    parsed = urlparse(absolute)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    return absolute


def classify_links(soup: BeautifulSoup, page_url: str) -> LinkStats:
    stats = LinkStats()
    try:
        page_host = normalize_host(urlparse(page_url).hostname)
    except ValueError:
        page_host = ""
    citations: list[Candidate] = []
    for a in soup.find_all("a", href=True):
        try:
            absolute = resolve_href(a.get("href"), page_url)
            if absolute is None:
                continue
            host = normalize_host(urlparse(absolute).hostname)
        except ValueError as e:
            logger.debug("Ignoring unresolvable href %r: %s", a.get("href"), e)
            continue
        if page_host and host == page_host:
            stats.internal += 1
            continue
        stats.external += 1
        text = element_text(a)
        if MIN_CITATION_TEXT < len(text) < MAX_CITATION_TEXT:
            citations.append(
                Candidate(
                    dedup_key=absolute.split("#", 1)[0],
                    item=SourceSnippet(text=truncate(text, SNIPPET_MAX_CHARS), url=absolute),
                )
            )
    stats.sources = [c.item for c in dedup_by_key(citations)]
    return stats


# Hosts and paths that usually point at institutions or primary research
AUTHORITY_HOST = re.compile(r"\.(?:gov|edu|org)(?:\.[a-z]{2})?$")
AUTHORITY_PATH = re.compile(r"research|institute|university", re.I)
FACT_HOST = re.compile(r"\.(?:gov|edu)(?:\.[a-z]{2})?$")
FACT_PATH = re.compile(r"research|study|journal", re.I)
RESOURCE_PATH = re.compile(r"tool|resource|download", re.I)


@dataclass
class LinkSignals:
    authority_links: int = 0
    fact_sources: int = 0
    tools_resources: int = 0


def link_signals(soup: BeautifulSoup, page_url: str) -> LinkSignals:
    """Distinct link targets per signal; fragments are ignored."""
    authority: set[str] = set()
    facts: set[str] = set()
    resources: set[str] = set()
    for a in soup.find_all("a", href=True):
        try:
            absolute = resolve_href(a.get("href"), page_url)
            if absolute is None:
                continue
            target = absolute.split("#", 1)[0]
            parsed = urlparse(target)
            host = normalize_host(parsed.hostname)
        except ValueError as e:
            logger.debug("Ignoring unresolvable href %r: %s", a.get("href"), e)
            continue
        path = f"{parsed.path}?{parsed.query}"
        if AUTHORITY_HOST.search(host) or AUTHORITY_PATH.search(target):
            authority.add(target)
        if FACT_HOST.search(host) or FACT_PATH.search(path):
            facts.add(target)
        if RESOURCE_PATH.search(path):
            resources.add(target)
    return LinkSignals(
        authority_links=len(authority),
        fact_sources=len(facts),
        tools_resources=len(resources),
    )
