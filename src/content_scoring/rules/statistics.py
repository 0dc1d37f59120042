"""Statistic extraction: percentages, large numbers and explicit citations."""

import re

from ..models.parser_output import StatisticSnippet, SNIPPET_MAX_CHARS
from .text import Candidate, SentenceIndex, context_window, dedup_by_key, prefix_key, truncate

CONTEXT_RADIUS = 100

PERCENTAGE = re.compile(r"\d+(?:[.,]\d+)?\s?%")
LARGE_NUMBER = re.compile(
    r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?\s*(?:million|billion|thousand)\b",
    re.I,
)
CITATION = re.compile(r"according to|source:|\bstud(?:y|ies)\b|\bresearch\b|\bsurvey\b", re.I)

STATISTIC_PATTERNS = (PERCENTAGE, LARGE_NUMBER, CITATION)


def extract_statistics(text: str) -> list[StatisticSnippet]:
    """
    One candidate per pattern hit, with up to 100 chars of context per side.
    Dedup key is the prefix of the surrounding sentence, so a sentence that
    holds both a figure and its citation yields a single statistic.
    """
    index = SentenceIndex(text)
    hits = []
    for pattern in STATISTIC_PATTERNS:
        for match in pattern.finditer(text):
            hits.append((match.start(), match.end(), match.group(0)))
    # Document order across families keeps output independent of pattern order
    hits.sort(key=lambda h: (h[0], h[1]))

    candidates: list[Candidate] = []
    for start, end, value in hits:
        context = context_window(text, start, end, CONTEXT_RADIUS)
        snippet = StatisticSnippet(
            text=truncate(context, SNIPPET_MAX_CHARS),
            value=value.strip(),
            has_source=bool(CITATION.search(context)),
        )
        candidates.append(
            Candidate(dedup_key=prefix_key(index.sentence_at(start, end)), item=snippet)
        )
    return [c.item for c in dedup_by_key(candidates)]
