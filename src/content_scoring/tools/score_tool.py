"""Score tool - deterministic scoring from validated and parser counts.

Every criterion is a set of tier tables. A table is evaluated from the highest
threshold down and only the first matching tier applies; the criterion
subtotal is then capped at its maximum. Same input, same output.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from ..models.parser_output import ParserCounts
from ..models.score_breakdown import (
    CRITERION_MAXIMA,
    CraftScore,
    GraafScore,
    ScoreBreakdown,
    TechnicalScore,
    quality_label,
)
from ..models.validated_counts import ValidatedCounts, VALIDATED_CATEGORIES

logger = logging.getLogger(__name__)

# Floor tiers: (minimum, points), highest first
Tiers = tuple[tuple[float, int], ...]
# Band tiers: (low, high or None, points), best band first
Bands = tuple[tuple[float, Optional[float], int], ...]

# GRAAF
CREDIBILITY_QUOTES: Tiers = ((3, 4), (2, 3), (1, 2))
CREDIBILITY_STATISTICS: Tiers = ((10, 3), (5, 2), (1, 1))
CREDIBILITY_SOURCES: Tiers = ((5, 3), (3, 2), (1, 1))

TITLE_BANDS: Bands = ((50, 60, 3), (40, 70, 2), (30, None, 1))
DESCRIPTION_BANDS: Bands = ((140, 160, 3), (120, 180, 2), (100, None, 1))
RELEVANCE_WORDS: Bands = ((1500, 3000, 3), (800, None, 2), (500, None, 1))
RELEVANCE_H2_BONUS: Tiers = ((5, 1),)

ACTIONABILITY_LISTS: Tiers = ((5, 3), (3, 2), (1, 1))
ACTIONABILITY_PARAGRAPHS: Tiers = ((20, 3), (10, 2), (5, 1))
ACTIONABILITY_TABLES: Tiers = ((3, 3), (1, 2))
COMPARISON_TABLE_BONUS: Tiers = ((1, 1),)

ACCURACY_STATISTICS: Tiers = ((5, 3), (3, 2), (1, 1))
ACCURACY_CASE_STUDIES: Tiers = ((2, 3), (1, 2))
ACCURACY_SOURCES: Tiers = ((3, 2), (1, 1))
ACCURACY_EXTERNAL_LINKS: Tiers = ((5, 2), (2, 1))

FRESHNESS_WORDS: Tiers = ((2500, 3), (1500, 2), (800, 1))
FRESHNESS_IMAGES: Tiers = ((8, 3), (5, 2), (2, 1))
FRESHNESS_ALT_COVERAGE: Tiers = ((0.9, 3), (0.7, 2), (0.5, 1))

# CRAFT
DENSITY_WORDS: Bands = ((1500, 3500, 3), (800, 5000, 2), (500, None, 1))
DENSITY_PARAGRAPH_LENGTH: Bands = ((40, 100, 2), (30, 150, 1))
DENSITY_PARAGRAPHS: Tiers = ((15, 2), (8, 1))

H2_FLOOR_BONUS: Tiers = ((5, 1),)

VISUAL_IMAGES: Tiers = ((8, 2), (4, 1))
VISUAL_ALT_COVERAGE: Tiers = ((0.8, 2), (0.5, 1))
VISUAL_TABLES: Tiers = ((1, 1),)

FAQ_VALIDATED: Tiers = ((8, 3), (5, 2), (3, 1))
FAQ_ANSWER_WORDS: Tiers = ((80, 1),)

TRUST_QUOTES: Tiers = ((8, 2), (4, 1))
TRUST_CASE_STUDIES: Tiers = ((1, 1),)
TRUST_EXTERNAL_LINKS: Tiers = ((3, 1),)

# Technical
META_TITLE_BANDS: Bands = ((50, 60, 2), (40, 70, 1))
META_DESCRIPTION_BANDS: Bands = ((140, 160, 2), (120, 180, 1))
SCHEMA_TYPES: Tiers = ((3, 4), (2, 3), (1, 2))
INTERNAL_LINKS: Tiers = ((30, 4), (20, 3), (10, 2), (5, 1))
HEADING_H2: Tiers = ((5, 2), (3, 1))
MOBILE_ALT_COVERAGE: Tiers = ((0.7, 2),)
MOBILE_MAX_PARAGRAPH_LENGTH = 120
MOBILE_PARAGRAPH_POINTS = 2


def tier(value: float, tiers: Tiers) -> int:
    """Points of the highest threshold that value reaches, else 0."""
    for minimum, points in tiers:
        if value >= minimum:
            return points
    return 0


def band(value: float, bands: Bands) -> int:
    """Points of the first band (low <= value <= high) that contains value, else 0."""
    for low, high, points in bands:
        if value >= low and (high is None or value <= high):
            return points
    return 0


def _capped(score: int, group: str, criterion: str) -> int:
    return max(0, min(score, CRITERION_MAXIMA[group][criterion]))


def _as_counts(counts: Any) -> ParserCounts:
    if isinstance(counts, ParserCounts):
        return counts
    if counts is None:
        return ParserCounts()
    if isinstance(counts, Mapping):
        return ParserCounts.model_validate(dict(counts))
    return ParserCounts.model_validate(counts, from_attributes=True)


def _as_validated(validated: Any) -> ValidatedCounts:
    if isinstance(validated, ValidatedCounts):
        return validated
    if validated is None:
        return ValidatedCounts()
    if isinstance(validated, Mapping):
        return ValidatedCounts.model_validate(
            {k: v for k, v in validated.items() if k in VALIDATED_CATEGORIES + ("fallback",)}
        )
    return ValidatedCounts.model_validate(validated, from_attributes=True)


# =============================================================================
# GRAAF (50 points)
# =============================================================================


def credibility(v: ValidatedCounts) -> int:
    score = (
        tier(v.expert_quotes, CREDIBILITY_QUOTES)
        + tier(v.statistics, CREDIBILITY_STATISTICS)
        + tier(v.sources, CREDIBILITY_SOURCES)
    )
    return _capped(score, "graaf", "credibility")


def relevance(c: ParserCounts) -> int:
    score = (
        band(c.meta_title_length, TITLE_BANDS)
        + band(c.meta_desc_length, DESCRIPTION_BANDS)
        + band(c.word_count, RELEVANCE_WORDS)
        + tier(c.h2_count, RELEVANCE_H2_BONUS)
    )
    return _capped(score, "graaf", "relevance")


def actionability(c: ParserCounts) -> int:
    score = (
        tier(c.lists, ACTIONABILITY_LISTS)
        + tier(c.paragraph_count, ACTIONABILITY_PARAGRAPHS)
        + tier(c.tables, ACTIONABILITY_TABLES)
        + tier(c.comparison_tables, COMPARISON_TABLE_BONUS)
    )
    return _capped(score, "graaf", "actionability")


def accuracy(v: ValidatedCounts, c: ParserCounts) -> int:
    score = (
        tier(v.statistics, ACCURACY_STATISTICS)
        + tier(v.case_studies, ACCURACY_CASE_STUDIES)
        + tier(v.sources, ACCURACY_SOURCES)
        + tier(c.external_links, ACCURACY_EXTERNAL_LINKS)
    )
    return _capped(score, "graaf", "accuracy")


def freshness(c: ParserCounts) -> int:
    score = (
        tier(c.word_count, FRESHNESS_WORDS)
        + tier(c.images, FRESHNESS_IMAGES)
        + (tier(c.alt_coverage, FRESHNESS_ALT_COVERAGE) if c.images > 0 else 0)
        + (1 if c.has_schema else 0)
    )
    return _capped(score, "graaf", "freshness")


# =============================================================================
# CRAFT (30 points)
# =============================================================================


def content_density(c: ParserCounts) -> int:
    score = (
        band(c.word_count, DENSITY_WORDS)
        + band(c.avg_paragraph_length, DENSITY_PARAGRAPH_LENGTH)
        + tier(c.paragraph_count, DENSITY_PARAGRAPHS)
    )
    return _capped(score, "craft", "content_density")


def on_page_optimization(c: ParserCounts) -> int:
    score = (
        band(c.meta_title_length, TITLE_BANDS)
        + band(c.meta_desc_length, DESCRIPTION_BANDS)
        + (1 if c.h1_count == 1 else 0)
        + tier(c.h2_count, H2_FLOOR_BONUS)
    )
    return _capped(score, "craft", "on_page_optimization")


def visual_richness(c: ParserCounts) -> int:
    score = (
        tier(c.images, VISUAL_IMAGES)
        + (tier(c.alt_coverage, VISUAL_ALT_COVERAGE) if c.images > 0 else 0)
        + tier(c.tables, VISUAL_TABLES)
        + tier(c.comparison_tables, COMPARISON_TABLE_BONUS)
    )
    return _capped(score, "craft", "visual_richness")


def faq_integration(v: ValidatedCounts, c: ParserCounts) -> int:
    score = (
        tier(v.faq, FAQ_VALIDATED)
        + tier(c.faq_avg_words, FAQ_ANSWER_WORDS)
        + (1 if c.faq_schema else 0)
    )
    return _capped(score, "craft", "faq_integration")


def trust_signals(v: ValidatedCounts, c: ParserCounts) -> int:
    score = (
        tier(v.expert_quotes, TRUST_QUOTES)
        + tier(v.case_studies, TRUST_CASE_STUDIES)
        + tier(c.external_links, TRUST_EXTERNAL_LINKS)
    )
    return _capped(score, "craft", "trust_signals")


# =============================================================================
# TECHNICAL (20 points)
# =============================================================================


def meta_optimization(c: ParserCounts) -> int:
    score = band(c.meta_title_length, META_TITLE_BANDS) + band(
        c.meta_desc_length, META_DESCRIPTION_BANDS
    )
    return _capped(score, "technical", "meta_optimization")


def structured_data(c: ParserCounts) -> int:
    if not c.has_schema:
        return 0
    return _capped(tier(c.schema_types, SCHEMA_TYPES), "technical", "structured_data")


def internal_linking(c: ParserCounts) -> int:
    return _capped(tier(c.internal_links, INTERNAL_LINKS), "technical", "internal_linking")


def heading_hierarchy(c: ParserCounts) -> int:
    if c.h1_count == 1:
        h1_points = 2
    elif c.h1_count > 0:
        h1_points = 1
    else:
        h1_points = 0
    return _capped(h1_points + tier(c.h2_count, HEADING_H2), "technical", "heading_hierarchy")


def mobile_readability(c: ParserCounts) -> int:
    score = tier(c.alt_coverage, MOBILE_ALT_COVERAGE) if c.images > 0 else 0
    # No paragraphs means no measured length, which earns nothing
    if c.paragraph_count > 0 and c.avg_paragraph_length <= MOBILE_MAX_PARAGRAPH_LENGTH:
        score += MOBILE_PARAGRAPH_POINTS
    return _capped(score, "technical", "mobile_readability")


def score_tool(validated: Any, counts: Any) -> ScoreBreakdown:
    """
    Calculate the final score from validated counts and raw parser counts.
    Accepts models or plain mappings; missing metrics count as zero.
    """
    v = _as_validated(validated)
    c = _as_counts(counts)

    graaf = GraafScore(
        credibility=credibility(v),
        relevance=relevance(c),
        actionability=actionability(c),
        accuracy=accuracy(v, c),
        freshness=freshness(c),
    )
    graaf = graaf.model_copy(
        update={"total": sum(getattr(graaf, k) for k in CRITERION_MAXIMA["graaf"])}
    )

    craft = CraftScore(
        content_density=content_density(c),
        on_page_optimization=on_page_optimization(c),
        visual_richness=visual_richness(c),
        faq_integration=faq_integration(v, c),
        trust_signals=trust_signals(v, c),
    )
    craft = craft.model_copy(
        update={"total": sum(getattr(craft, k) for k in CRITERION_MAXIMA["craft"])}
    )

    technical = TechnicalScore(
        meta_optimization=meta_optimization(c),
        structured_data=structured_data(c),
        internal_linking=internal_linking(c),
        heading_hierarchy=heading_hierarchy(c),
        mobile_readability=mobile_readability(c),
    )
    technical = technical.model_copy(
        update={"total": sum(getattr(technical, k) for k in CRITERION_MAXIMA["technical"])}
    )

    total = max(0, min(100, round(graaf.total + craft.total + technical.total)))
    logger.debug(
        "Score %d/100 (GRAAF: %d, CRAFT: %d, Technical: %d, fallback=%s)",
        total, graaf.total, craft.total, technical.total, v.fallback,
    )
    return ScoreBreakdown(
        total=total,
        quality=quality_label(total),
        graaf=graaf,
        craft=craft,
        technical=technical,
    )
