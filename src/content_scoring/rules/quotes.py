"""Expert quote extraction - four independent rules, deduplicated by text prefix."""

import logging
import re

from bs4 import BeautifulSoup, Tag

from ..models.parser_output import QuoteSnippet, SNIPPET_MAX_CHARS
from .text import Candidate, QUOTE_CHARS, dedup_by_key, element_text, prefix_key, truncate

logger = logging.getLogger(__name__)

MIN_QUOTE_CHARS = 30
MAX_ATTRIBUTION_CHARS = 120

NAME = r"[A-Z][a-z'’.-]+(?:\s+[A-Z][a-z'’.-]+)+"

# "Quote text" ... - First Last
INLINE_QUOTE = re.compile(
    r"[\"“]([^\"“”]{%d,600})[\"”][\s\S]{0,150}?[-–—]\s*(%s)" % (MIN_QUOTE_CHARS, NAME)
)
# Trailing "- First Last, Title" inside the quoting element itself
TRAILING_ATTRIBUTION = re.compile(r"(?<=[\s\"”'’])[-–—]\s*(%s.*)$" % NAME)
QUOTED_SPAN = re.compile(r"[\"“]([^\"“”]{%d,})[\"”]" % MIN_QUOTE_CHARS)
ATTRIBUTION_LINE = re.compile(r"^(?:[-–—~]\s*%s|%s\s*,)" % (NAME, NAME))
ATTRIBUTION_CLASS = re.compile(r"author|attribution|byline|cite|name|source", re.I)
QUOTE_STYLE = re.compile(r"testimonial|pull-?quote|quote", re.I)
ATTRIBUTION_TAGS = {"p", "cite", "span", "div", "footer", "figcaption", "small", "em", "strong"}


def _clean_quote(text: str) -> str:
    return text.strip().strip(QUOTE_CHARS).strip()


def _candidate(text: str, attribution: str) -> Candidate | None:
    text = _clean_quote(text)
    if len(text) < MIN_QUOTE_CHARS:
        return None
    attribution = attribution.strip().lstrip("-–—~ ").strip()
    snippet = QuoteSnippet(
        text=truncate(text, SNIPPET_MAX_CHARS),
        attribution=truncate(attribution, SNIPPET_MAX_CHARS),
    )
    return Candidate(dedup_key=prefix_key(text), item=snippet)


def _split_trailing_attribution(text: str) -> tuple[str, str]:
    match = TRAILING_ATTRIBUTION.search(text)
    if not match:
        return text, ""
    return text[: match.start()].rstrip(" ,"), match.group(1)


def blockquote_quotes(soup: BeautifulSoup) -> list[Candidate]:
    """<blockquote> elements that carry citation text."""
    found: list[Candidate] = []
    for bq in soup.find_all("blockquote"):
        try:
            text = element_text(bq)
            cite_el = bq.find(["cite", "footer"])
            attribution = element_text(cite_el)
            if attribution:
                text = text.replace(attribution, "").strip()
            else:
                figure = bq.find_parent("figure")
                caption = figure.find("figcaption") if figure else None
                attribution = element_text(caption)
            if not attribution:
                text, attribution = _split_trailing_attribution(text)
            if not attribution:
                continue
            cand = _candidate(text, attribution)
            if cand:
                found.append(cand)
        except Exception as e:
            logger.debug("Skipping blockquote: %s", e)
    return found


def inline_quotes(text: str) -> list[Candidate]:
    """"Quoted text" followed by a dash and a capitalized multi-word name."""
    found: list[Candidate] = []
    for match in INLINE_QUOTE.finditer(text):
        cand = _candidate(match.group(1), match.group(2))
        if cand:
            found.append(cand)
    return found


def _looks_like_attribution(el: Tag) -> bool:
    if el.name not in ATTRIBUTION_TAGS:
        return False
    text = element_text(el)
    if not text or len(text) > MAX_ATTRIBUTION_CHARS:
        return False
    if el.name == "cite" or ATTRIBUTION_CLASS.search(" ".join(el.get("class") or [])):
        return bool(re.match(NAME, text.lstrip("-–—~ ")))
    return bool(ATTRIBUTION_LINE.match(text))


def sibling_attributed_quotes(soup: BeautifulSoup) -> list[Candidate]:
    """Paragraph with a quoted span whose next sibling is a short attribution."""
    found: list[Candidate] = []
    for p in soup.find_all("p"):
        try:
            match = QUOTED_SPAN.search(element_text(p))
            if not match:
                continue
            sibling = p.find_next_sibling()
            if sibling is None or not _looks_like_attribution(sibling):
                continue
            cand = _candidate(match.group(1), element_text(sibling))
            if cand:
                found.append(cand)
        except Exception as e:
            logger.debug("Skipping paragraph quote: %s", e)
    return found


def _wraps_other_quotes(el: Tag) -> bool:
    """True when a blockquote or another quote-styled block sits inside el."""
    if el.find("blockquote") is not None:
        return True
    inner = el.find_all(class_=QUOTE_STYLE) + el.find_all(attrs={"role": QUOTE_STYLE})
    return any(
        not ATTRIBUTION_CLASS.search(" ".join(d.get("class") or []))
        and len(element_text(d)) >= MIN_QUOTE_CHARS
        for d in inner
    )


def styled_quotes(soup: BeautifulSoup) -> list[Candidate]:
    """Elements whose class or role marks them as testimonials or quotes."""
    found: list[Candidate] = []
    styled = soup.find_all(class_=QUOTE_STYLE) + soup.find_all(attrs={"role": QUOTE_STYLE})
    for el in styled:
        try:
            # Wrappers such as .testimonials hold the real quotes as descendants
            if el.name == "blockquote" or _wraps_other_quotes(el):
                continue
            text = element_text(el)
            author_el = el.find(["cite", "footer"]) or el.find(class_=ATTRIBUTION_CLASS)
            attribution = element_text(author_el)
            if attribution:
                text = text.replace(attribution, "").strip()
            else:
                text, attribution = _split_trailing_attribution(text)
            cand = _candidate(text, attribution)
            if cand:
                found.append(cand)
        except Exception as e:
            logger.debug("Skipping styled quote: %s", e)
    return found


def extract_expert_quotes(soup: BeautifulSoup, text: str) -> list[QuoteSnippet]:
    """Union of all quote rules, first occurrence per 50-char prefix wins."""
    candidates = (
        blockquote_quotes(soup)
        + inline_quotes(text)
        + sibling_attributed_quotes(soup)
        + styled_quotes(soup)
    )
    return [c.item for c in dedup_by_key(candidates)]
