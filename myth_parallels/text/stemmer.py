"""
Porter stemmer for English (via NLTK).

Merges morphological variants of a word into one root so that
"floods", "flooded" and "flooding" all count as the same term:
- "floods" → "flood"
- "births" → "birth"
- "resurrection" → "resurrect"
- "running" → "run"
"""

from nltk.stem.porter import PorterStemmer

# Initialize stemmer once (stateless, reusable)
_stemmer = PorterStemmer()

# Porter is not idempotent ("agreed" -> "agre" -> "agr"); bound the re-stemming
MAX_STEM_PASSES = 5


def stem(word: str) -> str:
    """
    Stem a single word using the Porter algorithm.
    
    The stem is re-stemmed until it stops changing, so stem(stem(w)) == stem(w).
    
    Args:
        word: Lowercase word to stem
        
    Returns:
        Stemmed word
        
    Examples:
        >>> stem("floods")
        'flood'
        >>> stem("running")
        'run'
        >>> stem("agreed")
        'agr'
    """
    current = _stemmer.stem(word)
    for _ in range(MAX_STEM_PASSES):
        stemmed = _stemmer.stem(current)
        if stemmed == current:
            break
        current = stemmed
    return current
