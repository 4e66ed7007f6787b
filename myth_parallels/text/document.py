"""
Document builder: one normalized text blob per myth record.

Document layout:
    <title tokens> × title_boost  <summary tokens>  <content tokens>  <tag tokens>

Repeating the title biases the term weights toward title vocabulary without a
separate per-field weighting scheme. Summary and content are capped before
tokenization to bound per-document cost on long free text.
"""

from typing import List

from ..models import LexicalFeatures, MythRecord
from .fields import normalize_tags
from .normalizer import normalize, normalize_to_string

MAX_FIELD_CHARS = 2000


def _cap(text: str, max_chars: int = MAX_FIELD_CHARS) -> str:
    if not text:
        return ''
    return text[:max_chars]


def build_document(record: MythRecord, title_boost: int = 1) -> str:
    """
    Build the synthetic document string for a record.
    
    Args:
        record: Myth record
        title_boost: How many times the normalized title is repeated (>= 1)
        
    Returns:
        Space-joined normalized tokens, trimmed
        
    Example:
        >>> record = MythRecord(id=1, title="The Great Flood", summary="Waters rose")
        >>> build_document(record, title_boost=2)
        'great flood great flood water rose'
    """
    title = normalize_to_string(record.title)
    title_part = ' '.join([title] * max(1, int(title_boost)))
    
    parts = [
        title_part,
        normalize_to_string(_cap(record.summary)),
        normalize_to_string(_cap(record.content)),
        normalize_to_string(normalize_tags(record.tags)),
    ]
    # Collapse gaps left by empty fields
    return ' '.join(' '.join(parts).split())


def full_text_tokens(record: MythRecord) -> List[str]:
    """Normalized tokens of title + summary + content (uncapped)"""
    text = f"{record.title or ''} {record.summary or ''} {record.content or ''}"
    return normalize(text)


def bigrams(tokens: List[str]) -> List[str]:
    """Adjacent token pairs joined with a space"""
    return [f"{tokens[i]} {tokens[i + 1]}" for i in range(len(tokens) - 1)]


def extract_features(record: MythRecord) -> LexicalFeatures:
    """Precompute the token views the auxiliary similarity measures need"""
    tokens = full_text_tokens(record)
    return LexicalFeatures(
        tokens=tokens,
        token_set=frozenset(tokens),
        bigram_set=frozenset(bigrams(tokens)),
        title_token_set=frozenset(normalize(record.title)),
        theme_set=record.theme_keys(),
    )
