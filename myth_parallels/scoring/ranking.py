"""
Ranking policy: from a candidate pool to a short ordered suggestion list.

Per candidate (nothing persisted, computed fresh per request):
1. Eligibility: drop the source itself and already-accepted parallels
2. Pool narrowing: prefer candidates sharing a theme with the source,
   falling back to the full pool when none do
3. Base score: TF-IDF cosine between source and candidate documents
4. Composite score:
       final = base × (1 + theme + bigram + unigram + keyword) × title_penalty
5. Qualification: enough shared themes, or final score above threshold
6. Ordering: descending final score (stable, ties keep pool order)
7. Truncation: top_k
"""

import logging
from typing import AbstractSet, List, Optional, Sequence

from ..config import RankingConfig
from ..models import ScoreBreakdown, SnapshotEntry, SuggestionResult
from .similarity import (
    cosine,
    jaccard,
    shared_keyword_count,
    shared_theme_count,
    shared_title_count,
)
from .weights import TermWeightModel

logger = logging.getLogger(__name__)


class RankingPolicy:
    """Combines similarity signals into ranked, qualified suggestions"""
    
    def __init__(self, config: Optional[RankingConfig] = None):
        self.config = config or RankingConfig()
    
    def eligible(
        self,
        source_id: int,
        entries: Sequence[SnapshotEntry],
        linked_ids: AbstractSet[int] = frozenset(),
    ) -> List[SnapshotEntry]:
        """Candidates other than the source and not already linked from it"""
        return [
            e for e in entries
            if e.record.id != source_id and e.record.id not in linked_ids
        ]
    
    def narrow_pool(
        self,
        source: SnapshotEntry,
        candidates: List[SnapshotEntry],
    ) -> List[SnapshotEntry]:
        """
        Restrict to theme-sharing candidates when the source has themes.
        
        Never narrows a non-empty pool down to nothing: if no candidate
        shares a theme, the unrestricted pool is returned.
        """
        source_themes = source.features.theme_set
        if not source_themes:
            return candidates
        
        sharing = [c for c in candidates if source_themes & c.features.theme_set]
        if not sharing:
            logger.debug(f"No candidate shares a theme with myth {source.record.id}; using full pool")
            return candidates
        return sharing
    
    def measure(
        self,
        source: SnapshotEntry,
        candidate: SnapshotEntry,
        base_score: float,
    ) -> ScoreBreakdown:
        """Collect the auxiliary measures for one candidate"""
        src, cand = source.features, candidate.features
        return ScoreBreakdown(
            id=candidate.record.id,
            title=candidate.record.title,
            base_score=base_score,
            shared_theme_count=shared_theme_count(src.theme_set, cand.theme_set),
            bigram_jaccard=jaccard(src.bigram_set, cand.bigram_set),
            unigram_jaccard=jaccard(src.token_set, cand.token_set),
            shared_keyword_count=shared_keyword_count(src.token_set, cand.token_set),
            shared_title_count=shared_title_count(src.title_token_set, cand.title_token_set),
        )
    
    def composite_score(self, m: ScoreBreakdown) -> float:
        """
        Scale the base cosine by evidence multipliers.
        
        Theme evidence weighs most, phrase overlap next; keywords confirm.
        Matches that share title words but little else are penalized.
        """
        cfg = self.config
        theme_boost = min(m.shared_theme_count, cfg.theme_cap) * cfg.theme_weight
        bigram_boost = m.bigram_jaccard * cfg.bigram_weight
        unigram_boost = m.unigram_jaccard * cfg.unigram_weight
        keyword_boost = min(m.shared_keyword_count, cfg.keyword_cap) * cfg.keyword_weight
        
        title_penalty = 1.0
        if m.shared_title_count > 0 and m.base_score < cfg.title_penalty_below:
            title_penalty = cfg.title_penalty
        
        final = m.base_score * (1 + theme_boost + bigram_boost + unigram_boost + keyword_boost)
        return final * title_penalty
    
    def qualifies(self, m: ScoreBreakdown, final_score: float) -> bool:
        if m.shared_theme_count >= self.config.theme_auto_accept:
            return True
        return final_score >= self.config.min_score
    
    def rank(
        self,
        source: SnapshotEntry,
        entries: Sequence[SnapshotEntry],
        linked_ids: AbstractSet[int] = frozenset(),
    ) -> List[SuggestionResult]:
        """
        Run the full policy for one source myth.
        
        Args:
            source: Snapshot entry of the query myth
            entries: Every entry of the current snapshot
            linked_ids: Myth ids already accepted as parallels of the source
        
        Returns:
            Qualified suggestions, best first, at most top_k
        """
        candidates = self.eligible(source.record.id, entries, linked_ids)
        candidates = self.narrow_pool(source, candidates)
        if not candidates:
            return []
        
        # Source first, then candidates: IDF is local to this batch
        vectors = TermWeightModel().fit([source.document] + [c.document for c in candidates])
        source_vector = vectors[0]
        
        scored: List[SuggestionResult] = []
        for candidate, vector in zip(candidates, vectors[1:]):
            measures = self.measure(source, candidate, cosine(source_vector, vector))
            final = self.composite_score(measures)
            if self.qualifies(measures, final):
                scored.append(SuggestionResult(myth=candidate.record, score=final, rationale=measures))
        
        # sorted() is stable, so equal scores keep pool order
        scored = sorted(scored, key=lambda s: s.score, reverse=True)
        logger.debug(
            f"Myth {source.record.id}: {len(candidates)} candidates, "
            f"{len(scored)} qualified, returning {min(len(scored), self.config.top_k)}"
        )
        return scored[:self.config.top_k]
