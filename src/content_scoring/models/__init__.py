"""Data models for content scoring system."""

from .parser_output import (
    ParserOutput,
    ParserCounts,
    PageMetadata,
    Snippets,
    QuoteSnippet,
    StatisticSnippet,
    SourceSnippet,
    CaseStudySnippet,
    FAQSnippet,
    SNIPPET_CAPS,
    SNIPPET_MAX_CHARS,
)
from .validated_counts import (
    ValidatedCounts,
    ValidationResponse,
    CategoryVerdict,
    Rejection,
    VALIDATED_CATEGORIES,
)
from .score_breakdown import (
    ScoreBreakdown,
    GraafScore,
    CraftScore,
    TechnicalScore,
    CRITERION_MAXIMA,
    GROUP_MAXIMA,
    quality_label,
)
from .scan_result import ScanRecord, ScanState, StoredScan, TERMINAL_STATES

__all__ = [
    "ParserOutput",
    "ParserCounts",
    "PageMetadata",
    "Snippets",
    "QuoteSnippet",
    "StatisticSnippet",
    "SourceSnippet",
    "CaseStudySnippet",
    "FAQSnippet",
    "SNIPPET_CAPS",
    "SNIPPET_MAX_CHARS",
    "ValidatedCounts",
    "ValidationResponse",
    "CategoryVerdict",
    "Rejection",
    "VALIDATED_CATEGORIES",
    "ScoreBreakdown",
    "GraafScore",
    "CraftScore",
    "TechnicalScore",
    "CRITERION_MAXIMA",
    "GROUP_MAXIMA",
    "quality_label",
    "ScanRecord",
    "ScanState",
    "StoredScan",
    "TERMINAL_STATES",
]
