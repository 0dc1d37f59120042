"""Parse tool - turn rendered HTML into counts, snippets and metadata."""

import hashlib
import logging
from typing import Any, Callable

from bs4 import BeautifulSoup

from ..models.parser_output import (
    ParserOutput,
    ParserCounts,
    PageMetadata,
    Snippets,
    SNIPPET_CAPS,
)
from ..rules import (
    extract_expert_quotes,
    extract_statistics,
    extract_case_studies,
    extract_faq,
    average_answer_words,
    extract_structured_data,
    StructuredData,
    classify_links,
    LinkStats,
    link_signals,
    LinkSignals,
    count_images,
    ImageStats,
    flesch_reading_ease,
    average_sentence_length,
)
from ..rules import structure
from ..rules.text import body_text, strip_non_content, word_count

logger = logging.getLogger(__name__)


def content_hash(html: str) -> str:
    return hashlib.sha256(html.encode("utf-8", errors="replace")).hexdigest()[:32]


def _run_rule(name: str, fn: Callable[..., Any], default: Any, *args: Any) -> Any:
    """Run one extraction rule; a failing rule contributes its empty default."""
    try:
        return fn(*args)
    except Exception as e:
        logger.warning("Extraction rule %s failed, skipping: %s", name, e)
        return default


def parse_tool(html: str, url: str) -> ParserOutput:
    """
    Parse rendered HTML.
    Never raises: empty or unparsable input yields ParserOutput.failed().
    """
    url = url if isinstance(url, str) else ""
    if not isinstance(html, str) or not html.strip():
        return ParserOutput.failed(url, "Empty or invalid HTML document")
    try:
        return _parse(html, url)
    except Exception as e:
        logger.error("Failed to parse %s: %s", url, e, exc_info=True)
        return ParserOutput.failed(url, f"Unparsable document: {e}")


def _parse(html: str, url: str) -> ParserOutput:
    soup = BeautifulSoup(html, "lxml")

    # JSON-LD lives in <script>, so read it before scripts are stripped
    schema = _run_rule("structured_data", extract_structured_data, StructuredData(), soup)
    strip_non_content(soup)

    text = body_text(soup)
    words = word_count(text)

    quotes = _run_rule("expert_quotes", extract_expert_quotes, [], soup, text)
    stats = _run_rule("statistics", extract_statistics, [], text)
    cases = _run_rule("case_studies", extract_case_studies, [], text)
    faqs = _run_rule("faq", extract_faq, [], soup)
    links = _run_rule("links", classify_links, LinkStats(), soup, url)
    images = _run_rule("images", count_images, ImageStats(), soup)
    authority = _run_rule("link_signals", link_signals, LinkSignals(), soup, url)

    headings = _run_rule("headings", structure.heading_stats, structure.HeadingStats(), soup)
    paragraphs = _run_rule(
        "paragraphs", structure.paragraph_stats, structure.ParagraphStats(), soup
    )
    tables = _run_rule("tables", structure.table_stats, structure.TableStats(), soup)
    meta = _run_rule("meta", structure.meta_info, structure.MetaInfo(), soup)

    counts = ParserCounts(
        word_count=words,
        paragraph_count=paragraphs.count,
        avg_paragraph_length=paragraphs.avg_length,
        long_paragraphs=paragraphs.long_count,
        avg_sentence_length=round(
            _run_rule("sentences", average_sentence_length, 0.0, text), 2
        ),
        readability=_run_rule("readability", flesch_reading_ease, 0.0, text),
        h1_count=headings.counts.get(1, 0),
        h2_count=headings.counts.get(2, 0),
        h3_count=headings.counts.get(3, 0),
        h4_count=headings.counts.get(4, 0),
        h5_count=headings.counts.get(5, 0),
        h6_count=headings.counts.get(6, 0),
        heading_hierarchy=int(headings.proper_hierarchy),
        lists=_run_rule("lists", structure.list_count, 0, soup),
        tables=tables.tables,
        comparison_tables=tables.comparison_tables,
        images=images.images,
        images_with_alt=images.images_with_alt,
        videos=images.videos,
        internal_links=links.internal,
        external_links=links.external,
        expert_quotes=len(quotes),
        statistics=len(stats),
        sources=len(links.sources),
        case_studies=len(cases),
        faq_count=len(faqs),
        faq_avg_words=round(average_answer_words(faqs), 2),
        schema_types=len(schema.types),
        has_schema=int(schema.has_schema),
        faq_schema=int(schema.faq_schema),
        meta_title_length=len(meta.title),
        meta_desc_length=len(meta.description),
        mobile_responsive=int(meta.mobile_responsive),
        table_of_contents=int(
            _run_rule("table_of_contents", structure.has_table_of_contents, False, soup)
        ),
        author_bio=int(_run_rule("author_bio", structure.has_author_bio, False, soup)),
        publication_date=int(
            bool(_run_rule("publication_date", structure.publication_date, None, soup))
        ),
        last_modified=int(bool(_run_rule("last_modified", structure.last_modified, None, soup))),
        examples=_run_rule("examples", structure.example_count, 0, text),
        ctas=_run_rule("ctas", structure.cta_count, 0, soup, text),
        step_by_step=_run_rule("step_by_step", structure.step_count, 0, soup),
        tools_resources=authority.tools_resources,
        data_citations=_run_rule("data_citations", structure.data_citation_count, 0, text),
        fact_sources=authority.fact_sources,
        authority_links=authority.authority_links,
        year_mentions=_run_rule("year_mentions", structure.year_mention_count, 0, text),
        data_recency=_run_rule("data_recency", structure.data_recency_count, 0, text),
        credentials=_run_rule("credentials", structure.credential_count, 0, text),
        testimonials=_run_rule("testimonials", structure.testimonial_count, 0, soup),
    )

    snippets = Snippets(
        expert_quotes=quotes[: SNIPPET_CAPS["expert_quotes"]],
        statistics=stats[: SNIPPET_CAPS["statistics"]],
        sources=links.sources[: SNIPPET_CAPS["sources"]],
        case_studies=cases[: SNIPPET_CAPS["case_studies"]],
        faq=faqs[: SNIPPET_CAPS["faq"]],
    )

    metadata = PageMetadata(
        title=meta.title,
        description=meta.description,
        h1_text=headings.h1_text,
        canonical=meta.canonical,
        has_canonical=meta.canonical is not None,
        proper_hierarchy=headings.proper_hierarchy,
        mobile_responsive=meta.mobile_responsive,
        faq_schema=schema.faq_schema,
        schema_type_names=list(schema.types),
    )

    logger.debug(
        "Parsed %s: %d words, %d quotes, %d statistics, %d case studies, %d FAQs",
        url, words, len(quotes), len(stats), len(cases), len(faqs),
    )
    return ParserOutput(
        url=url,
        success=True,
        counts=counts,
        snippets=snippets,
        metadata=metadata,
    )
