"""
TF-IDF term weights over a per-request batch of documents.

The batch is always "source document first, then every candidate under
consideration", so IDF statistics are local to one request. A fitted model
is never reused for another batch.

Weights come from scikit-learn's TfidfVectorizer with its default IDF
smoothing:

    idf(t) = ln((1 + n) / (1 + df(t))) + 1
    weight(t, d) = tf(t, d) × idf(t)

Vectors are left un-normalized; cosine similarity normalizes them.
"""

import logging
from typing import Dict, List, Sequence

from sklearn.feature_extraction.text import TfidfVectorizer

logger = logging.getLogger(__name__)

TermWeightVector = Dict[str, float]


class TermWeightModel:
    """TF-IDF weights for one batch of already-normalized documents"""
    
    def __init__(self):
        self.vocabulary: List[str] = []
        self.vectors: List[TermWeightVector] = []
    
    def fit(self, documents: Sequence[str]) -> List[TermWeightVector]:
        """
        Compute one weight vector per document, in input order.
        
        Args:
            documents: Normalized document strings (whitespace-delimited terms)
        
        Returns:
            List of {term: weight} maps, same length and order as documents.
            Documents without terms map to an empty dict.
        """
        docs = [doc or '' for doc in documents]
        if not docs:
            self.vocabulary, self.vectors = [], []
            return []
        
        vectorizer = TfidfVectorizer(
            tokenizer=str.split,
            token_pattern=None,
            lowercase=False,
            norm=None,
        )
        try:
            matrix = vectorizer.fit_transform(docs).tocsr()
        except ValueError:
            # Empty vocabulary: no document has a single term
            logger.debug(f"No terms in batch of {len(docs)} documents")
            self.vocabulary = []
            self.vectors = [{} for _ in docs]
            return self.vectors
        
        self.vocabulary = list(vectorizer.get_feature_names_out())
        self.vectors = []
        for row in range(matrix.shape[0]):
            start, end = matrix.indptr[row], matrix.indptr[row + 1]
            self.vectors.append({
                self.vocabulary[col]: float(weight)
                for col, weight in zip(matrix.indices[start:end], matrix.data[start:end])
            })
        
        return self.vectors
