"""
Text normalizer for myth documents.

Normalization pipeline:
1. Lowercase conversion
2. Split into word tokens on non-word characters
3. Strip every character outside [a-z0-9] from each token
4. Drop short tokens (length <= 2)
5. Filter stopwords (conjunctions, articles, pronouns)
6. Filter entity stopwords (named figures shared across traditions)
7. Apply stemming (reduce to root form: "floods" → "flood")
8. Re-apply the length, stopword and entity filters to the stem

Filtering the stem as well keeps "thors" (→ "thor") and "being" (→ "be") out,
so normalizing already-normalized text is a no-op.

Entity stopwords stop two myths from matching only because they name the
same figure. Token order is preserved (bigram extraction depends on it) and
duplicates are kept (term frequency depends on them).
"""

import re
from typing import List, Optional

from .stemmer import stem

MIN_TOKEN_LENGTH = 3

STOPWORDS = frozenset([
    'the', 'and', 'for', 'a', 'an', 'of', 'in', 'on', 'to', 'is', 'are',
    'that', 'this', 'with', 'as', 'by', 'from', 'it', 'its', 'be', 'was',
    'were', 'which', 'or', 'but'
])

ENTITY_STOPWORDS = frozenset([
    'jesus', 'christ', 'moses', 'krishna', 'buddha', 'zeus', 'apollo',
    'muhammad', 'allah', 'odin', 'thor', 'ra', 'ishvara'
])

_WORD_SPLIT = re.compile(r'[^a-z0-9_]+')
_NON_ALNUM = re.compile(r'[^a-z0-9]')


def _is_filtered(token: str) -> bool:
    return len(token) < MIN_TOKEN_LENGTH or token in STOPWORDS or token in ENTITY_STOPWORDS


def normalize(text: Optional[str]) -> List[str]:
    """
    Turn free text into an ordered list of stemmed content tokens.
    
    Args:
        text: Raw text (None and empty strings are accepted)
        
    Returns:
        Stemmed tokens in original order, duplicates kept
        
    Examples:
        >>> normalize("The Floods covered the Earth")
        ['flood', 'cover', 'earth']
        
        >>> normalize("Zeus and Odin")
        []
        
        >>> normalize(None)
        []
    """
    if not text:
        return []
    
    raw = str(text).lower()
    
    tokens = []
    for word in _WORD_SPLIT.split(raw):
        word = _NON_ALNUM.sub('', word)
        if _is_filtered(word):
            continue
        stemmed = stem(word)
        if _is_filtered(stemmed):
            continue
        tokens.append(stemmed)
    
    return tokens


def normalize_to_string(text: Optional[str]) -> str:
    """Normalize text and join the tokens with single spaces."""
    return ' '.join(normalize(text))
