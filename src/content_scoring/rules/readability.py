"""Flesch reading ease with a vowel-group syllable estimator."""

import re

from .text import sentences, tokenize

SUFFIX = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
LEADING_Y = re.compile(r"^y")
VOWEL_GROUP = re.compile(r"[aeiouy]{1,2}")
NON_LETTER = re.compile(r"[^a-z]")


def count_syllables(word: str) -> int:
    word = NON_LETTER.sub("", word.lower())
    if len(word) <= 3:
        return 1
    word = SUFFIX.sub("", word)
    word = LEADING_Y.sub("", word)
    groups = VOWEL_GROUP.findall(word)
    return len(groups) if groups else 1


def average_sentence_length(text: str) -> float:
    words = tokenize(text)
    if not words:
        return 0.0
    return len(words) / max(len(sentences(text)), 1)


def flesch_reading_ease(text: str) -> float:
    """206.835 - 1.015 * words/sentence - 84.6 * syllables/word, clamped to [0, 100]."""
    words = tokenize(text)
    if not words:
        return 0.0
    syllables = sum(count_syllables(w) for w in words)
    avg_sentence = len(words) / max(len(sentences(text)), 1)
    avg_syllables = syllables / len(words)
    score = 206.835 - 1.015 * avg_sentence - 84.6 * avg_syllables
    return round(max(0.0, min(100.0, score)), 2)
