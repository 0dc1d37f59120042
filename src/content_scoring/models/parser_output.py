"""Parser output - counts, bounded snippet samples and page metadata."""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


SNIPPET_MAX_CHARS = 300

# Maximum snippets retained per category; counts may exceed these
SNIPPET_CAPS = {
    "expert_quotes": 10,
    "statistics": 25,
    "sources": 20,
    "case_studies": 10,
    "faq": 15,
}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ParserCounts(BaseModel):
    """Typed counts extracted from one page. Missing or None values read as zero."""

    model_config = ConfigDict(frozen=True)

    # Text
    word_count: int = Field(0, ge=0)
    paragraph_count: int = Field(0, ge=0)
    avg_paragraph_length: float = Field(0.0, ge=0)
    long_paragraphs: int = Field(0, ge=0)
    avg_sentence_length: float = Field(0.0, ge=0)
    readability: float = Field(0.0, ge=0, le=100)

    # Headings
    h1_count: int = Field(0, ge=0)
    h2_count: int = Field(0, ge=0)
    h3_count: int = Field(0, ge=0)
    h4_count: int = Field(0, ge=0)
    h5_count: int = Field(0, ge=0)
    h6_count: int = Field(0, ge=0)
    heading_hierarchy: int = Field(0, ge=0, le=1)

    # Structure and media
    lists: int = Field(0, ge=0)
    tables: int = Field(0, ge=0)
    comparison_tables: int = Field(0, ge=0)
    images: int = Field(0, ge=0)
    images_with_alt: int = Field(0, ge=0)
    videos: int = Field(0, ge=0)
    internal_links: int = Field(0, ge=0)
    external_links: int = Field(0, ge=0)

    # Validated categories
    expert_quotes: int = Field(0, ge=0)
    statistics: int = Field(0, ge=0)
    sources: int = Field(0, ge=0)
    case_studies: int = Field(0, ge=0)
    faq_count: int = Field(0, ge=0)
    faq_avg_words: float = Field(0.0, ge=0)

    # Markup
    schema_types: int = Field(0, ge=0)
    has_schema: int = Field(0, ge=0, le=1)
    faq_schema: int = Field(0, ge=0, le=1)
    meta_title_length: int = Field(0, ge=0)
    meta_desc_length: int = Field(0, ge=0)
    mobile_responsive: int = Field(0, ge=0, le=1)
    table_of_contents: int = Field(0, ge=0, le=1)
    author_bio: int = Field(0, ge=0, le=1)
    publication_date: int = Field(0, ge=0, le=1)
    last_modified: int = Field(0, ge=0, le=1)
    examples: int = Field(0, ge=0)
    ctas: int = Field(0, ge=0)

    # Authority and freshness (reported, not scored)
    step_by_step: int = Field(0, ge=0)
    tools_resources: int = Field(0, ge=0)
    data_citations: int = Field(0, ge=0)
    fact_sources: int = Field(0, ge=0)
    authority_links: int = Field(0, ge=0)
    year_mentions: int = Field(0, ge=0)
    data_recency: int = Field(0, ge=0)
    credentials: int = Field(0, ge=0)
    testimonials: int = Field(0, ge=0)

    @field_validator("*", mode="before")
    @classmethod
    def _none_is_zero(cls, value: Any) -> Any:
        if value is None:
            return 0
        if isinstance(value, bool):
            return int(value)
        return value

    @property
    def alt_coverage(self) -> float:
        """Share of images with meaningful alt text; 0.0 for a page without images."""
        if self.images <= 0:
            return 0.0
        return min(self.images_with_alt / self.images, 1.0)

    def detected(self, category: str) -> int:
        """Detected count for one of the validated categories."""
        if category == "faq":
            return self.faq_count
        return int(getattr(self, category))


class QuoteSnippet(BaseModel):
    text: str = Field(..., max_length=SNIPPET_MAX_CHARS)
    attribution: str = Field(default="", max_length=SNIPPET_MAX_CHARS)


class StatisticSnippet(BaseModel):
    text: str = Field(..., max_length=SNIPPET_MAX_CHARS)
    value: str = ""
    has_source: bool = False


class SourceSnippet(BaseModel):
    text: str = Field(..., max_length=SNIPPET_MAX_CHARS)
    url: str


class CaseStudySnippet(BaseModel):
    text: str = Field(..., max_length=SNIPPET_MAX_CHARS)


class FAQSnippet(BaseModel):
    text: str = Field(..., max_length=SNIPPET_MAX_CHARS, description="The question")
    answer: str = Field(default="", max_length=SNIPPET_MAX_CHARS)
    answer_words: int = Field(0, ge=0)


class Snippets(BaseModel):
    """Bounded, ordered samples per category. Lists are never None."""

    model_config = ConfigDict(frozen=True)

    expert_quotes: list[QuoteSnippet] = Field(
        default_factory=list, max_length=SNIPPET_CAPS["expert_quotes"]
    )
    statistics: list[StatisticSnippet] = Field(
        default_factory=list, max_length=SNIPPET_CAPS["statistics"]
    )
    sources: list[SourceSnippet] = Field(
        default_factory=list, max_length=SNIPPET_CAPS["sources"]
    )
    case_studies: list[CaseStudySnippet] = Field(
        default_factory=list, max_length=SNIPPET_CAPS["case_studies"]
    )
    faq: list[FAQSnippet] = Field(default_factory=list, max_length=SNIPPET_CAPS["faq"])


class PageMetadata(BaseModel):
    """Meta information extracted from page."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""
    h1_text: str = ""
    canonical: Optional[str] = None
    has_canonical: bool = False
    proper_hierarchy: bool = False
    mobile_responsive: bool = False
    faq_schema: bool = False
    schema_type_names: list[str] = Field(default_factory=list)
    parsed_at: str = Field(default_factory=_utc_now_iso)


class ParserOutput(BaseModel):
    """
    Result of one parse. Created fresh per scan and never mutated.
    A failed parse still carries zeroed counts and empty snippet lists.
    """

    model_config = ConfigDict(frozen=True)

    url: str = ""
    success: bool = True
    error: Optional[str] = None
    counts: ParserCounts = Field(default_factory=ParserCounts)
    snippets: Snippets = Field(default_factory=Snippets)
    metadata: PageMetadata = Field(default_factory=PageMetadata)

    @classmethod
    def failed(cls, url: str, reason: str) -> "ParserOutput":
        """Zero-value result for a document that could not be parsed."""
        return cls(url=url if isinstance(url, str) else "", success=False, error=reason)
