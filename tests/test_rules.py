from bs4 import BeautifulSoup

from content_scoring.rules import (
    classify_links,
    count_images,
    count_syllables,
    extract_case_studies,
    extract_expert_quotes,
    extract_faq,
    extract_statistics,
    extract_structured_data,
    flesch_reading_ease,
    link_signals,
)
from content_scoring.rules import structure
from content_scoring.rules.quotes import (
    inline_quotes,
    sibling_attributed_quotes,
    styled_quotes,
)
from content_scoring.rules.text import (
    Candidate,
    SentenceIndex,
    body_text,
    dedup_by_key,
    prefix_key,
    truncate,
)


def soup_of(html):
    return BeautifulSoup(html, "lxml")


def long_answer(topic):
    return (
        f"Most teams handle {topic} in a weekly review where editors look at the calendar, "
        "check which drafts are blocked, agree on owners and move anything late into the next slot."
    )


# text helpers


def test_dedup_keeps_first_occurrence_in_order():
    cands = [Candidate("a", 1), Candidate("b", 2), Candidate("a", 3), Candidate("", 4)]
    assert [c.item for c in dedup_by_key(cands)] == [1, 2]
    assert [c.item for c in dedup_by_key(cands, cap=1)] == [1]


def test_prefix_key_ignores_case_quotes_and_spacing():
    assert prefix_key('"Hello   World"') == prefix_key("hello world")
    assert len(prefix_key("x" * 200)) == 50


def test_truncate_marks_cut_text():
    assert truncate("short", 300) == "short"
    cut = truncate("word " * 100, 50)
    assert len(cut) <= 50
    assert cut.endswith("…")


def test_sentence_index_finds_surrounding_sentence():
    text = "First one here. Revenue is 3.5 million today. Last one."
    index = SentenceIndex(text)
    start = text.index("3.5")
    assert index.sentence_at(start, start + 3) == "Revenue is 3.5 million today."
    assert text[: index.sentence_end(start)].endswith("today.")


# quotes


def test_inline_quote_with_dash_attribution():
    text = (
        'Planning pays off. "Teams that plan a quarter ahead publish far more often '
        'than teams that do not," - Maria Lopez, editor.'
    )
    (cand,) = inline_quotes(text)
    assert cand.item.attribution.startswith("Maria Lopez")
    assert cand.item.text.startswith("Teams that plan a quarter ahead")


def test_quote_followed_by_attribution_sibling():
    soup = soup_of(
        '<p>"Good documentation is a product feature, not an afterthought for later."</p>'
        '<p class="author">Tom Becker</p>'
    )
    (cand,) = sibling_attributed_quotes(soup)
    assert cand.item.attribution == "Tom Becker"


def test_testimonial_block_with_author_element():
    soup = soup_of(
        '<div class="testimonial">Switching our editorial workflow saved every writer hours '
        'each week. <span class="author-name">Priya Shah</span></div>'
    )
    (cand,) = styled_quotes(soup)
    assert cand.item.attribution == "Priya Shah"
    assert "Priya Shah" not in cand.item.text


def test_testimonials_wrapper_is_not_a_quote_itself():
    soup = soup_of(
        '<section class="testimonials"><h2>What our customers say</h2>'
        '<div class="testimonial">Switching our editorial workflow saved every writer hours '
        'each week. <span class="author-name">Priya Shah</span></div>'
        '<div class="testimonial">The shared calendar finally ended our missed deadlines '
        'for good. <span class="author-name">Marco Rossi</span></div>'
        "</section>"
    )
    quotes = extract_expert_quotes(soup, body_text(soup))
    assert [q.attribution for q in quotes] == ["Priya Shah", "Marco Rossi"]


def test_same_quote_from_two_rules_counts_once():
    soup = soup_of(
        "<body><blockquote>Planning is the quiet engine behind every great publication."
        "<cite>Ana Ruiz</cite></blockquote>"
        '<div class="pull-quote">Planning is the quiet engine behind every great publication. '
        "- Ana Ruiz</div></body>"
    )
    quotes = extract_expert_quotes(soup, body_text(soup))
    assert len(quotes) == 1
    assert quotes[0].attribution == "Ana Ruiz"


def test_blockquote_without_attribution_is_ignored():
    soup = soup_of("<blockquote>Just a highlighted sentence with nobody behind it at all.</blockquote>")
    assert extract_expert_quotes(soup, body_text(soup)) == []


# statistics and case studies


def test_one_sentence_yields_one_statistic():
    text = "According to the 2024 survey, 72% of editors use a calendar. Nothing else here."
    (stat,) = extract_statistics(text)
    assert stat.has_source is True
    assert "72%" in stat.text


def test_statistics_families():
    text = (
        "Sales reached 1,200,000 units last year. "
        "Traffic hit 3.5 million visits. "
        "Roughly 40% of visits came from search."
    )
    stats = extract_statistics(text)
    assert len(stats) == 3
    assert [s.has_source for s in stats] == [False, False, False]


def test_case_study_phrase_and_results_language():
    text = (
        "Our case study with Northwind covers the first year of their new editorial program. "
        "After the migration the team grew organic traffic from search engines by 140% "
        "within the first six months. "
        "It was cut 3x."
    )
    cases = extract_case_studies(text)
    assert len(cases) == 2
    assert cases[0].text.startswith("case study with Northwind")
    assert cases[1].text.startswith("grew organic traffic from search engines by 140%")


# FAQ


def test_faq_container_counts_answered_questions_once():
    soup = soup_of(
        '<section class="faq">'
        "<h3>How often should we publish new articles?</h3>"
        f"<p>{long_answer('publishing cadence')}</p>"
        "<h3>What tools help?</h3><p>Short answer only.</p>"
        "<h3>How often should we publish new articles?</h3>"
        f"<p>{long_answer('repeat questions')}</p>"
        "</section>"
    )
    (item,) = extract_faq(soup)
    assert item.text == "How often should we publish new articles?"
    assert item.answer_words >= 20


def test_faq_definition_list_without_container():
    soup = soup_of(
        "<h2>Planning basics</h2><p>Intro.</p>"
        f"<dl><dt>Can we reuse old posts?</dt><dd>{long_answer('reuse')}</dd></dl>"
    )
    (item,) = extract_faq(soup)
    assert item.text == "Can we reuse old posts?"


def test_faq_details_summary_in_container():
    soup = soup_of(
        '<div id="faq"><details><summary>Why keep a backlog?</summary>'
        f"<p>{long_answer('backlogs')}</p></details></div>"
    )
    (item,) = extract_faq(soup)
    assert item.text == "Why keep a backlog?"
    assert "Why keep a backlog?" not in item.answer


def test_faq_item_wrappers_are_all_counted():
    items = "".join(
        f'<div class="faq-item"><h3>What is question {n}?</h3><p>{long_answer(f"topic {n}")}</p></div>'
        for n in range(1, 4)
    )
    soup = soup_of(f"<h2>Intro</h2><p>Text.</p>{items}")
    assert [i.text for i in extract_faq(soup)] == [
        "What is question 1?",
        "What is question 2?",
        "What is question 3?",
    ]


def test_faq_items_nested_in_marked_section():
    items = "".join(
        f'<div class="faq-item"><h3>How does step {n} work?</h3><p>{long_answer(f"step {n}")}</p></div>'
        for n in range(1, 3)
    )
    soup = soup_of(f'<section id="faq">{items}</section>')
    assert len(extract_faq(soup)) == 2


# structured data


def test_structured_data_blocks_are_independent():
    soup = soup_of(
        '<script type="application/ld+json">'
        '{"@context": "https://schema.org", "@graph": [{"@type": "Organization"}, {"@type": "WebPage"}]}'
        "</script>"
        '<script type="application/ld+json">{not json</script>'
        '<script type="application/ld+json">'
        '[{"@type": ["Article", "FAQPage"]}, {"@type": "Organization"}]'
        "</script>"
    )
    data = extract_structured_data(soup)
    assert data.types == ["Organization", "WebPage", "Article", "FAQPage"]
    assert data.blocks == 3
    assert data.invalid_blocks == 1
    assert data.has_schema and data.faq_schema


def test_no_structured_data():
    data = extract_structured_data(soup_of("<p>plain</p>"))
    assert data.types == []
    assert not data.has_schema and not data.faq_schema


# links


def test_link_classification(page_url):
    soup = soup_of(
        '<a href="/about">About</a>'
        '<a href="https://www.example.com/pricing">Pricing</a>'
        '<a href="#top">Top</a>'
        '<a href="mailto:hello@example.com">Mail</a>'
        '<a href="javascript:void(0)">Noop</a>'
        '<a href="https://research.org/report#summary">Annual content marketing report</a>'
        '<a href="https://research.org/report">The same report again</a>'
        '<a href="https://twitter.com/acme">X</a>'
    )
    stats = classify_links(soup, page_url)
    assert stats.internal == 2
    assert stats.external == 3
    assert [s.url for s in stats.sources] == ["https://research.org/report#summary"]


def test_link_signals(page_url):
    soup = soup_of(
        '<a href="https://www.nih.gov/study">NIH</a>'
        '<a href="https://research.org/report">Report</a>'
        '<a href="https://research.org/report#method">Report method</a>'
        '<a href="https://example.com/tools/planner">Planner</a>'
        '<a href="https://journals.example.net/journal/42">Journal</a>'
        '<a href="https://twitter.com/acme">X</a>'
        '<a href="mailto:team@nih.gov">Mail</a>'
    )
    signals = link_signals(soup, page_url)
    assert signals.authority_links == 2
    assert signals.fact_sources == 2
    assert signals.tools_resources == 1


# images


def test_image_counting_rules():
    soup = soup_of(
        '<img src="/a.png" alt="Editorial calendar overview">'
        '<img data-src="/b.png" src="data:image/gif;base64,R0lGOD" alt="">'
        '<img src="/spacer.gif" alt="spacer image here">'
        '<img src="data:image/png;base64,iVBOR">'
        '<img alt="no source at all">'
        '<img src="/c.png" alt=" chart ">'
        '<video src="/clip.mp4"></video>'
        '<iframe src="https://www.youtube.com/embed/abc"></iframe>'
        '<iframe src="https://maps.example.com/embed"></iframe>'
    )
    stats = count_images(soup)
    assert stats.images == 3
    assert stats.images_with_alt == 1
    assert stats.videos == 2


# readability


def test_syllables():
    assert count_syllables("the") == 1
    assert count_syllables("planning") == 2
    assert count_syllables("") == 1


def test_reading_ease_bounds():
    assert flesch_reading_ease("") == 0.0
    easy = flesch_reading_ease("The cat sat. The dog ran. We had fun.")
    assert 0 <= easy <= 100
    hard = flesch_reading_ease(
        "Interdisciplinary organizational communication methodologies necessitate "
        "comprehensive institutionalization considerations"
    )
    assert hard < easy


# structure


def test_heading_hierarchy():
    good = structure.heading_stats(soup_of("<h1>A</h1><h2>B</h2><h3>C</h3>"))
    assert good.proper_hierarchy
    two_h1 = structure.heading_stats(soup_of("<h1>A</h1><h1>B</h1><h2>C</h2>"))
    assert not two_h1.proper_hierarchy
    assert two_h1.counts[1] == 2


def test_paragraph_stats_skip_empty_paragraphs():
    long_p = "word " * 160
    stats = structure.paragraph_stats(soup_of(f"<p>one two three</p><p>   </p><p>{long_p}</p>"))
    assert stats.count == 2
    assert stats.long_count == 1
    assert stats.avg_length == (3 + 160) / 2


def test_comparison_tables():
    soup = soup_of(
        "<table><tr><td>Plan A vs Plan B</td></tr></table>"
        "<table><tr><td>Prices</td></tr></table>"
    )
    stats = structure.table_stats(soup)
    assert stats.tables == 2
    assert stats.comparison_tables == 1


def test_meta_info():
    soup = soup_of(
        "<html><head><title> My  Title </title>"
        '<meta name="description" content="Short description">'
        '<meta name="viewport" content="width = device-width, initial-scale=1">'
        '<link rel="canonical" href="https://example.com/guide">'
        "</head><body></body></html>"
    )
    info = structure.meta_info(soup)
    assert info.title == "My Title"
    assert info.description == "Short description"
    assert info.canonical == "https://example.com/guide"
    assert info.mobile_responsive is True


def test_page_signals():
    soup = soup_of(
        '<nav id="toc"><a href="#a">A</a></nav>'
        '<div class="author-bio">Jane writes about editorial planning and has led content teams for years.</div>'
        '<time datetime="2024-05-01">May 1</time>'
        '<button>Get started</button><a class="btn" href="/signup">Sign up</a>'
    )
    assert structure.has_table_of_contents(soup)
    assert structure.has_author_bio(soup)
    assert structure.publication_date(soup) == "2024-05-01"
    assert structure.last_modified(soup) is None
    assert structure.cta_count(soup, body_text(soup)) == 2
    assert structure.example_count("Use tools such as a shared calendar and a brief template.") == 1


def test_freshness_and_authority_text_signals():
    text = (
        "In 2024 the Pew data showed growth (Pew Research, 2024). "
        "A 2025 industry report confirms it. Back in 2019 nobody knew. "
        "She is a certified coach with an MBA and a Certified trainer."
    )
    assert structure.year_mention_count(text, current_year=2025) == 3
    assert structure.data_recency_count(text, current_year=2025) == 2
    assert structure.data_citation_count(text) == 1
    assert structure.credential_count(text) == 2


def test_step_and_testimonial_counts():
    steps = soup_of(
        "<ol><li>Step 1: plan</li><li>Write the draft</li></ol>"
        "<ul><li>First bullet</li></ul>"
        "<h2>First, pick a topic</h2><h3>Finally, publish</h3>"
    )
    assert structure.step_count(steps) == 3
    reviews = soup_of(
        '<section class="reviews"><div class="review">Great</div><div class="review">Fine</div></section>'
        '<div class="testimonial">Loved it</div><div class="preview">Not a review</div>'
    )
    assert structure.testimonial_count(reviews) == 3
