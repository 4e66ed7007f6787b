"""
Text processing for myth similarity.

Components:
- normalizer: Lowercasing, stopword/entity filtering and stemming
- stemmer: Porter stemming via NLTK
- fields: Tag/theme field parsing into canonical string lists
- document: Per-record document strings and lexical features
"""

from .normalizer import normalize, normalize_to_string
from .stemmer import stem
from .fields import FieldShape, classify_field, normalize_tags, parse_string_list, parse_string_set
from .document import build_document, extract_features, full_text_tokens, bigrams

__all__ = [
    "normalize",
    "normalize_to_string",
    "stem",
    "FieldShape",
    "classify_field",
    "normalize_tags",
    "parse_string_list",
    "parse_string_set",
    "build_document",
    "extract_features",
    "full_text_tokens",
    "bigrams",
]
