"""
Data model for the parallels engine.

Records are point-in-time copies of store rows; nothing here is persisted by
the engine itself.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional


@dataclass(frozen=True)
class MythRecord:
    """One catalog entry, as read from the store"""
    id: int
    title: str = ""
    summary: str = ""
    content: str = ""
    tags: FrozenSet[str] = frozenset()
    tradition: Optional[str] = None
    themes: FrozenSet[str] = frozenset()
    image_url: Optional[str] = None
    
    def theme_keys(self) -> FrozenSet[str]:
        """Theme names lowercased, for case-insensitive comparison"""
        return frozenset(t.lower() for t in self.themes)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "tradition": self.tradition or None,
            "summary": self.summary or None,
            "tags": sorted(self.tags),
            "imageUrl": self.image_url or None,
            "themes": sorted(self.themes),
        }


@dataclass(frozen=True)
class AcceptedParallel:
    """A confirmed link between two myths, owned by the store"""
    id: int
    myth_a: int
    myth_b: int
    score: Optional[float] = None
    rationale: Optional[str] = None
    detected_by: str = "human"
    created_at: Optional[datetime] = None


@dataclass
class ScoreBreakdown:
    """Raw component measures behind one final score (kept for auditing)"""
    id: int
    title: str
    base_score: float
    shared_theme_count: int
    bigram_jaccard: float
    unigram_jaccard: float
    shared_keyword_count: int
    shared_title_count: int
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseScore": self.base_score,
            "sharedThemeCount": self.shared_theme_count,
            "bigramJacc": self.bigram_jaccard,
            "unigramJacc": self.unigram_jaccard,
            "sharedKeywordCount": self.shared_keyword_count,
            "sharedTitleCount": self.shared_title_count,
            "title": self.title,
            "id": self.id,
        }


@dataclass
class SuggestionResult:
    """Single ranked candidate returned by a suggestion request"""
    myth: MythRecord
    score: float
    rationale: Optional[ScoreBreakdown] = None
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "rationale": self.rationale.to_dict() if self.rationale else None,
            "myth": self.myth.to_dict(),
        }


@dataclass
class LexicalFeatures:
    """Token-level views of a record used by the auxiliary measures"""
    tokens: List[str] = field(default_factory=list)
    token_set: FrozenSet[str] = frozenset()
    bigram_set: FrozenSet[str] = frozenset()
    title_token_set: FrozenSet[str] = frozenset()
    theme_set: FrozenSet[str] = frozenset()


@dataclass
class SnapshotEntry:
    """A record paired with the document and features built from it"""
    record: MythRecord
    document: str
    features: LexicalFeatures
