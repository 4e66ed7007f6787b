"""
Similarity measures between a source myth and a candidate.

Base signal:
    cosine(a, b) over TF-IDF weight vectors, in [0, 1]

Auxiliary signals (over raw normalized tokens, unweighted):
    bigram_jaccard       exact short-phrase reuse ("miracul birth")
    unigram_jaccard      plain vocabulary overlap
    shared_title_count   title tokens in common (detects cheap title matches)
    shared_theme_count   curated themes in common (case-insensitive)
    shared_keyword_count motif keywords present on both sides

Every measure is symmetric and returns 0 for empty input.
"""

import math
from typing import AbstractSet, Iterable, List, Mapping

from ..text.document import bigrams
from ..text.stemmer import stem

# Motif keywords (stemmed once at import) that signal meaningful domain overlap
MOTIF_KEYWORDS: List[str] = list(dict.fromkeys(stem(word) for word in [
    'birth', 'born', 'nativity', 'miracl', 'miraculous', 'conception', 'found',
    'founder', 'origin', 'resurrect', 'resurrecti', 'divin', 'prophet', 'savior',
    'sacrifice',
]))


def cosine(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """
    Cosine similarity of two term-weight vectors.
    
    Returns 0.0 when either vector has zero magnitude.
    
    Examples:
        >>> cosine({"flood": 1.0}, {"flood": 2.0})
        1.0
        >>> cosine({"flood": 1.0}, {})
        0.0
    """
    if not a or not b:
        return 0.0
    
    dot = 0.0
    norm_a = 0.0
    for term, weight in a.items():
        norm_a += weight * weight
        other = b.get(term)
        if other:
            dot += weight * other
    norm_b = sum(weight * weight for weight in b.values())
    
    if norm_a == 0 or norm_b == 0:
        return 0.0
    
    score = dot / math.sqrt(norm_a * norm_b)
    return max(0.0, min(1.0, score))


def intersection_size(a: AbstractSet[str], b: AbstractSet[str]) -> int:
    if not a or not b:
        return 0
    return len(a & b)


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """Intersection over union; 0.0 when both sets are empty"""
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union


def bigram_jaccard(a_tokens: List[str], b_tokens: List[str]) -> float:
    """Jaccard index of the adjacent-pair sets of two token sequences"""
    return jaccard(set(bigrams(a_tokens)), set(bigrams(b_tokens)))


def unigram_jaccard(a_tokens: Iterable[str], b_tokens: Iterable[str]) -> float:
    """Jaccard index of the token sets of two token sequences"""
    return jaccard(set(a_tokens), set(b_tokens))


def shared_title_count(a_title_tokens: AbstractSet[str], b_title_tokens: AbstractSet[str]) -> int:
    return intersection_size(a_title_tokens, b_title_tokens)


def shared_theme_count(a_themes: Iterable[str], b_themes: Iterable[str]) -> int:
    """Number of theme names in common, ignoring case"""
    return intersection_size(
        {t.lower() for t in a_themes},
        {t.lower() for t in b_themes},
    )


def shared_keyword_count(
    a_token_set: AbstractSet[str],
    b_token_set: AbstractSet[str],
    keywords: Iterable[str] = MOTIF_KEYWORDS,
) -> int:
    """Number of motif keywords present in both token sets"""
    return sum(1 for kw in keywords if kw in a_token_set and kw in b_token_set)
