"""Case study extraction: anchored phrases and quantified results language."""

import re

from ..models.parser_output import CaseStudySnippet, SNIPPET_MAX_CHARS
from .text import Candidate, SentenceIndex, dedup_by_key, prefix_key, truncate

MIN_CASE_STUDY_CHARS = 50

CASE_STUDY_PHRASE = re.compile(
    r"\b(?:case stud(?:y|ies)|client success|customer stor(?:y|ies)|success stor(?:y|ies))\b",
    re.I,
)
RESULTS_WITH_METRIC = re.compile(
    r"\b(?:increased|increase|grew|reduced|improved|boosted|saw|achieved|resulted in|generated|cut)\b"
    r"[^.!?]{0,150}?(?:\d+(?:\.\d+)?\s?%|\b\d+(?:\.\d+)?x\b)",
    re.I,
)


def extract_case_studies(text: str) -> list[CaseStudySnippet]:
    """Each hit runs to the end of its sentence and must reach a minimum length."""
    index = SentenceIndex(text)
    hits = [m for p in (CASE_STUDY_PHRASE, RESULTS_WITH_METRIC) for m in p.finditer(text)]
    hits.sort(key=lambda m: (m.start(), m.end()))

    candidates: list[Candidate] = []
    for match in hits:
        end = max(index.sentence_end(match.end() - 1), match.end())
        snippet_text = text[match.start(): end].strip()
        if len(snippet_text) < MIN_CASE_STUDY_CHARS:
            continue
        candidates.append(
            Candidate(
                dedup_key=prefix_key(index.sentence_at(match.start(), match.end())),
                item=CaseStudySnippet(text=truncate(snippet_text, SNIPPET_MAX_CHARS)),
            )
        )
    return [c.item for c in dedup_by_key(candidates)]
