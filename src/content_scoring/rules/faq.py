"""FAQ extraction: explicit FAQ blocks first, question-shaped headings otherwise."""

import logging
import re

from bs4 import BeautifulSoup, Tag

from ..models.parser_output import FAQSnippet, SNIPPET_MAX_CHARS
from .text import Candidate, dedup_by_key, element_text, truncate, word_count

logger = logging.getLogger(__name__)

MIN_ANSWER_WORDS = 20

INTERROGATIVE = re.compile(
    r"^(?:what|how|why|when|where|who|whom|whose|which|can|could|does|do|did|is|are|"
    r"was|were|should|will|would|may|must|has|have)\b",
    re.I,
)
FAQ_MARKER = re.compile(r"faq|frequently[-_ ]asked", re.I)
QUESTION_CLASS = re.compile(r"question", re.I)
HEADING_TAGS = ["h2", "h3", "h4", "h5", "h6"]
BLOCK_TAGS = {"p", "div", "section", "ul", "ol", "dd", "span", "article", "blockquote", "table"}


def is_question(text: str) -> bool:
    text = text.strip()
    return bool(text) and ("?" in text or bool(INTERROGATIVE.match(text)))


def _is_faq_marked(el: Tag) -> bool:
    marker = " ".join(
        [el.get("id") or ""] + list(el.get("class") or []) + [el.get("itemtype") or ""]
    )
    if "FAQPage" in marker:
        return True
    return el.name not in ("html", "body", "script", "style") and bool(FAQ_MARKER.search(marker))


def find_faq_containers(soup: BeautifulSoup) -> list[Tag]:
    """
    Outermost elements explicitly marked as FAQ blocks, in document order.
    Per-item wrappers such as .faq-item nested in a marked section are skipped;
    sibling wrappers with no marked ancestor are each returned.
    """
    containers: list[Tag] = []
    seen: set[int] = set()
    for el in soup.find_all(_is_faq_marked):
        if any(id(parent) in seen for parent in el.parents):
            continue
        containers.append(el)
        seen.add(id(el))
    return containers


def _answer_for(question: Tag) -> str:
    if question.name == "dt":
        dd = question.find_next_sibling("dd")
        return element_text(dd)
    if question.name == "summary":
        details = question.find_parent("details")
        if details is None:
            return ""
        return element_text(details).replace(element_text(question), "", 1).strip()
    sibling = question.find_next_sibling()
    if sibling is None or sibling.name in HEADING_TAGS or sibling.name not in BLOCK_TAGS:
        return ""
    return element_text(sibling)


def _question_elements(scope: Tag, in_container: bool) -> list[Tag]:
    names = HEADING_TAGS + ["dt"]
    if in_container:
        names = names + ["summary"]
        extra = [el for el in scope.find_all(class_=QUESTION_CLASS) if el.name not in names]
        return scope.find_all(names) + extra
    return scope.find_all(names)


def _collect(scope: Tag, in_container: bool) -> list[Candidate]:
    found: list[Candidate] = []
    for q in _question_elements(scope, in_container):
        try:
            question = element_text(q)
            if not is_question(question):
                continue
            answer = _answer_for(q)
            words = word_count(answer)
            if words < MIN_ANSWER_WORDS:
                continue
            found.append(
                Candidate(
                    dedup_key=question.lower(),
                    item=FAQSnippet(
                        text=truncate(question, SNIPPET_MAX_CHARS),
                        answer=truncate(answer, SNIPPET_MAX_CHARS),
                        answer_words=words,
                    ),
                )
            )
        except Exception as e:
            logger.debug("Skipping FAQ candidate: %s", e)
    return found


def extract_faq(soup: BeautifulSoup) -> list[FAQSnippet]:
    """Counted items only: question-shaped with an answer of at least 20 words."""
    found: list[Candidate] = []
    for container in find_faq_containers(soup):
        found.extend(_collect(container, in_container=True))
    found = dedup_by_key(found)
    if not found:
        found = dedup_by_key(_collect(soup, in_container=False))
    return [c.item for c in found]


def average_answer_words(items: list[FAQSnippet]) -> float:
    if not items:
        return 0.0
    return sum(i.answer_words for i in items) / len(items)
