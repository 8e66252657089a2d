"""Text metrics and item-count sizing for study pack generation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

KEY_TERMS = (
    'concept', 'definition', 'principle', 'theory', 'method', 'process', 'system', 'approach',
    'technique', 'strategy', 'rule', 'law', 'formula', 'equation', 'model', 'framework',
    'structure', 'pattern', 'relationship', 'function', 'mechanism', 'procedure', 'step', 'phase',
    'stage', 'example', 'application', 'cause', 'effect', 'result', 'importance', 'significance',
)
KEY_TERM_PATTERNS = tuple(re.compile(rf'\b{term}\b', re.IGNORECASE) for term in KEY_TERMS)
SENTENCE_SPLIT_RE = re.compile(r'[.!?]+')

MAX_DENSITY_ITEMS = 30
DEFAULT_SIZING_POLICY = 'content_density'


@dataclass(frozen=True)
class ContentAnalysis:
    word_count: int
    sentence_count: int
    line_count: int
    keyword_hits: int
    target_flashcard_count: int
    target_quiz_count: int
    content_type: str
    complexity: str
    sizing_policy: str = DEFAULT_SIZING_POLICY


def count_words(text):
    return len((text or '').split())


def count_sentences(text):
    # The segment after the final terminator counts, even when empty.
    return len(SENTENCE_SPLIT_RE.split(text or ''))


def count_lines(text):
    return sum(1 for line in (text or '').split('\n') if line.strip())


def count_keyword_hits(text):
    source = text or ''
    return sum(len(pattern.findall(source)) for pattern in KEY_TERM_PATTERNS)


def _clamp(value, minimum, maximum):
    return min(max(value, minimum), maximum)


def content_density_sizing(text, word_count, sentence_count, line_count, keyword_hits):
    count = word_count // 25 + keyword_hits // 2
    if count == 0 and text.strip():
        count = 1
    if sentence_count > 20:
        count += 2
    if line_count > 15:
        count += 2
    if keyword_hits > 10:
        count += 3
    count = min(count, MAX_DENSITY_ITEMS)
    return count, count


def word_volume_sizing(text, word_count, sentence_count, line_count, keyword_hits):
    flashcards = _clamp(word_count // 40, 5, 20)
    questions = _clamp(word_count // 80, 3, 12)
    return flashcards, questions


SizingPolicy = Callable[[str, int, int, int, int], Tuple[int, int]]

SIZING_POLICIES: Dict[str, SizingPolicy] = {
    'content_density': content_density_sizing,
    'word_volume': word_volume_sizing,
}


def get_sizing_policy(name: str) -> SizingPolicy:
    safe_name = str(name or '').strip().lower()
    if safe_name not in SIZING_POLICIES:
        raise KeyError(f"Unknown sizing policy: {safe_name}")
    return SIZING_POLICIES[safe_name]


def classify_content_type(word_count, keyword_hits):
    if keyword_hits > 5:
        return 'academic'
    if word_count > 200:
        return 'detailed'
    return 'basic'


def classify_complexity(word_count):
    if word_count > 500:
        return 'advanced'
    if word_count > 200:
        return 'intermediate'
    return 'beginner'


def analyze(text: str, sizing_policy: str = DEFAULT_SIZING_POLICY) -> ContentAnalysis:
    source = text or ''
    policy = get_sizing_policy(sizing_policy)
    word_count = count_words(source)
    sentence_count = count_sentences(source)
    line_count = count_lines(source)
    keyword_hits = count_keyword_hits(source)
    flashcards, questions = policy(source, word_count, sentence_count, line_count, keyword_hits)
    return ContentAnalysis(
        word_count=word_count,
        sentence_count=sentence_count,
        line_count=line_count,
        keyword_hits=keyword_hits,
        target_flashcard_count=flashcards,
        target_quiz_count=questions,
        content_type=classify_content_type(word_count, keyword_hits),
        complexity=classify_complexity(word_count),
        sizing_policy=str(sizing_policy).strip().lower(),
    )
