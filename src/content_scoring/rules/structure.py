"""Technical structure, page metadata and text-level authority and freshness signals."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from bs4 import BeautifulSoup

from .text import element_text, normalize_whitespace, word_count

LONG_PARAGRAPH_WORDS = 150
MIN_AUTHOR_BIO_CHARS = 50
COMPARISON_LANGUAGE = re.compile(r"\b(?:vs|versus|compare|comparison)\b", re.I)
DEVICE_WIDTH = "width=device-width"
TOC_MARKER = re.compile(r"\btoc\b|table[-_ ]of[-_ ]contents", re.I)
AUTHOR_MARKER = re.compile(r"author", re.I)
EXAMPLE_PHRASE = re.compile(
    r"(?:for example|for instance|such as|e\.g\.|here's an example)[^.]{10,200}", re.I
)
CTA_PHRASE = re.compile(
    r"click here|download|get started|sign up|try now|learn more|contact us|buy now", re.I
)
CTA_CLASS = re.compile(r"\bcta\b|\bbutton\b|\bbtn\b", re.I)
STEP_MARKER = re.compile(r"\bstep\s*\d|^\d+\.|\b(?:first|second|third|finally)\b", re.I)
TESTIMONIAL_CLASS = re.compile(r"testimonial|(?<![a-z])review", re.I)
DATA_CITATION = re.compile(r"\(([^()]{0,150}?(?:20\d{2}|study|research|source)[^()]{0,50})\)", re.I)
CREDENTIAL = re.compile(
    r"\b(?:certified|ph\.?d|mba|master'?s?|bachelor'?s?|degree|expert|specialist|consultant)\b",
    re.I,
)
RECENT_YEARS = 3

PUBLISHED_SELECTORS = (
    "meta[property='article:published_time']",
    "time[datetime]",
    "meta[name='date']",
    "[itemprop='datePublished']",
    ".published",
)
MODIFIED_SELECTORS = (
    "meta[property='article:modified_time']",
    "[itemprop='dateModified']",
    ".updated",
    ".modified",
)


@dataclass
class HeadingStats:
    counts: dict[int, int] = field(default_factory=dict)
    h1_text: str = ""

    @property
    def proper_hierarchy(self) -> bool:
        """Exactly one h1 and at least one h2."""
        return self.counts.get(1, 0) == 1 and self.counts.get(2, 0) >= 1


@dataclass
class ParagraphStats:
    count: int = 0
    avg_length: float = 0.0
    long_count: int = 0


@dataclass
class TableStats:
    tables: int = 0
    comparison_tables: int = 0


@dataclass
class MetaInfo:
    title: str = ""
    description: str = ""
    canonical: str | None = None
    mobile_responsive: bool = False


def heading_stats(soup: BeautifulSoup) -> HeadingStats:
    stats = HeadingStats(counts={lvl: len(soup.find_all(f"h{lvl}")) for lvl in range(1, 7)})
    stats.h1_text = element_text(soup.find("h1"))
    return stats


def paragraph_stats(soup: BeautifulSoup) -> ParagraphStats:
    lengths = [word_count(element_text(p)) for p in soup.find_all("p")]
    lengths = [n for n in lengths if n > 0]
    if not lengths:
        return ParagraphStats()
    return ParagraphStats(
        count=len(lengths),
        avg_length=round(sum(lengths) / len(lengths), 2),
        long_count=sum(1 for n in lengths if n > LONG_PARAGRAPH_WORDS),
    )


def list_count(soup: BeautifulSoup) -> int:
    return len(soup.find_all(["ul", "ol"]))


def table_stats(soup: BeautifulSoup) -> TableStats:
    tables = soup.find_all("table")
    comparison = sum(1 for t in tables if COMPARISON_LANGUAGE.search(element_text(t)))
    return TableStats(tables=len(tables), comparison_tables=comparison)


def meta_info(soup: BeautifulSoup) -> MetaInfo:
    info = MetaInfo()
    if soup.title is not None:
        info.title = normalize_whitespace(soup.title.get_text())
    desc = soup.find("meta", attrs={"name": re.compile(r"^description$", re.I)})
    if desc and desc.get("content"):
        info.description = normalize_whitespace(desc["content"])
    canon = soup.find("link", rel="canonical")
    if canon and canon.get("href"):
        info.canonical = canon["href"].strip()
    viewport = soup.find("meta", attrs={"name": re.compile(r"^viewport$", re.I)})
    content = (viewport.get("content") or "") if viewport else ""
    info.mobile_responsive = DEVICE_WIDTH in content.replace(" ", "").lower()
    return info


def has_table_of_contents(soup: BeautifulSoup) -> bool:
    for el in soup.find_all(True):
        marker = " ".join([el.get("id") or ""] + list(el.get("class") or []))
        if marker.strip() and TOC_MARKER.search(marker):
            return True
    return False


def has_author_bio(soup: BeautifulSoup) -> bool:
    candidates = soup.find_all(class_=AUTHOR_MARKER) + soup.find_all(rel="author")
    return any(len(element_text(el)) > MIN_AUTHOR_BIO_CHARS for el in candidates)


def _first_date(soup: BeautifulSoup, selectors: tuple[str, ...]) -> str | None:
    for selector in selectors:
        el = soup.select_one(selector)
        if el is None:
            continue
        value = el.get("datetime") or el.get("content") or element_text(el)
        if value and value.strip():
            return value.strip()
    return None


def publication_date(soup: BeautifulSoup) -> str | None:
    return _first_date(soup, PUBLISHED_SELECTORS)


def last_modified(soup: BeautifulSoup) -> str | None:
    return _first_date(soup, MODIFIED_SELECTORS)


def example_count(text: str) -> int:
    return len(EXAMPLE_PHRASE.findall(text))


def cta_count(soup: BeautifulSoup, text: str) -> int:
    """Distinct call-to-action labels from buttons/CTA elements and CTA phrases."""
    labels: set[str] = set()
    for el in soup.find_all("button") + soup.find_all(["a", "div", "span"], class_=CTA_CLASS):
        label = element_text(el).lower()
        if label:
            labels.add(label)
    for match in CTA_PHRASE.finditer(text):
        labels.add(match.group(0).lower())
    return len(labels)


def step_count(soup: BeautifulSoup) -> int:
    """Ordered-list items and h2/h3 headings phrased as steps."""
    return sum(
        1 for el in soup.find_all(["li", "h2", "h3"])
        if (el.name != "li" or el.parent is not None and el.parent.name == "ol")
        and STEP_MARKER.search(element_text(el))
    )


def testimonial_count(soup: BeautifulSoup) -> int:
    """Testimonial or review blocks; a wrapper around several counts once per item."""
    blocks = soup.find_all(class_=TESTIMONIAL_CLASS)
    return sum(1 for el in blocks if el.find(class_=TESTIMONIAL_CLASS) is None)


def data_citation_count(text: str) -> int:
    return len(DATA_CITATION.findall(text))


def _recent_years(current_year: int | None) -> str:
    year = current_year or datetime.now(timezone.utc).year
    return "|".join(str(y) for y in range(year - RECENT_YEARS + 1, year + 1))


def year_mention_count(text: str, current_year: int | None = None) -> int:
    """Mentions of the current year or the one or two before it."""
    return len(re.findall(r"\b(?:%s)\b" % _recent_years(current_year), text))


def data_recency_count(text: str, current_year: int | None = None) -> int:
    """A recent year followed in the same sentence by data, study, research or report."""
    pattern = r"\b(?:%s)\b[^.]{0,100}?\b(?:data|study|research|report)" % _recent_years(current_year)
    return len(re.findall(pattern, text, re.I))


def credential_count(text: str) -> int:
    """Distinct credential terms, case-insensitive."""
    return len({m.group(0).lower() for m in CREDENTIAL.finditer(text)})
