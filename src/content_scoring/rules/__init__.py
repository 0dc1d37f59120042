"""Named extraction rules used by parse_tool."""

from .quotes import extract_expert_quotes
from .statistics import extract_statistics
from .case_studies import extract_case_studies
from .faq import extract_faq, average_answer_words
from .structured_data import extract_structured_data, StructuredData
from .links import classify_links, link_signals, LinkSignals, LinkStats
from .images import count_images, ImageStats
from .readability import flesch_reading_ease, average_sentence_length, count_syllables

__all__ = [
    "extract_expert_quotes",
    "extract_statistics",
    "extract_case_studies",
    "extract_faq",
    "average_answer_words",
    "extract_structured_data",
    "StructuredData",
    "classify_links",
    "LinkStats",
    "link_signals",
    "LinkSignals",
    "count_images",
    "ImageStats",
    "flesch_reading_ease",
    "average_sentence_length",
    "count_syllables",
]
