"""
Similarity scoring and ranking for myth parallels.

Components:
- weights: Per-request TF-IDF term weights (scikit-learn)
- similarity: Cosine plus lexical/thematic overlap measures
- ranking: Composite scoring, qualification and top-k selection
"""

from .weights import TermWeightModel, TermWeightVector
from .similarity import (
    MOTIF_KEYWORDS,
    cosine,
    jaccard,
    bigram_jaccard,
    unigram_jaccard,
    shared_title_count,
    shared_theme_count,
    shared_keyword_count,
)
from .ranking import RankingPolicy

__all__ = [
    "TermWeightModel",
    "TermWeightVector",
    "MOTIF_KEYWORDS",
    "cosine",
    "jaccard",
    "bigram_jaccard",
    "unigram_jaccard",
    "shared_title_count",
    "shared_theme_count",
    "shared_keyword_count",
    "RankingPolicy",
]
