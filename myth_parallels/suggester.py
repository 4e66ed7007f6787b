"""
Parallel suggestion service.

One suggest() call runs the whole pipeline as a single unit of work:

    snapshot (rebuilt if stale) → accepted links → ranking policy

The only awaits are the corpus fetch on a cache miss and the accepted-links
fetch. The call is bounded by a timeout; a timed-out call fails as a whole
and never returns a partial list.
"""

import asyncio
import logging
import re
from typing import Any, List, Optional

from .cache import CorpusSnapshot, SnapshotCache
from .config import RankingConfig
from .errors import InvalidInputError, NotFoundError, SuggestionTimeoutError
from .models import AcceptedParallel, SuggestionResult
from .scoring.ranking import RankingPolicy
from .store import MythSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

_DIGITS = re.compile(r'\d+')


def parse_myth_id(value: Any) -> int:
    """
    Validate a myth id from request input.
    
    Accepts positive integers and their decimal string forms.
    
    Raises:
        InvalidInputError: Value is not a well-formed positive integer
        
    Examples:
        >>> parse_myth_id("42")
        42
        >>> parse_myth_id(7)
        7
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"Invalid myth id: {value!r}")
    
    if isinstance(value, int):
        myth_id = value
    elif isinstance(value, float) and value.is_integer():
        myth_id = int(value)
    elif isinstance(value, str) and _DIGITS.fullmatch(value.strip()):
        myth_id = int(value.strip())
    else:
        raise InvalidInputError(f"Invalid myth id: {value!r}")
    
    if myth_id <= 0:
        raise InvalidInputError(f"Myth id must be positive, got {myth_id}")
    return myth_id


class ParallelSuggester:
    """Suggests candidate parallels for a myth from the cached corpus"""
    
    def __init__(
        self,
        source: MythSource,
        cache: Optional[SnapshotCache] = None,
        policy: Optional[RankingPolicy] = None,
        timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Args:
            source: Myth store
            cache: Snapshot cache (a new one over source if omitted)
            policy: Ranking policy (reference constants if omitted)
            timeout_seconds: Per-request bound; None disables it
        """
        self.source = source
        self.cache = cache or SnapshotCache(source)
        self.policy = policy or RankingPolicy(RankingConfig())
        self.timeout_seconds = timeout_seconds
    
    @property
    def title_boost(self) -> int:
        return self.policy.config.title_boost
    
    async def suggest(self, source_id: Any) -> List[SuggestionResult]:
        """
        Rank candidate parallels for a myth.
        
        Args:
            source_id: Myth id (int or decimal string)
        
        Returns:
            Qualified suggestions, best first (possibly empty)
        
        Raises:
            InvalidInputError: Malformed id (checked before any store access)
            NotFoundError: Myth not in the current corpus snapshot
            UpstreamError: Store unreachable
            SuggestionTimeoutError: Request exceeded its time budget
        """
        myth_id = parse_myth_id(source_id)
        
        if self.timeout_seconds is None:
            return await self._suggest(myth_id)
        
        try:
            return await asyncio.wait_for(self._suggest(myth_id), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Suggestion for myth {myth_id} timed out after {self.timeout_seconds}s")
            raise SuggestionTimeoutError(
                f"Suggestion for myth {myth_id} timed out after {self.timeout_seconds}s"
            )
    
    async def _suggest(self, myth_id: int) -> List[SuggestionResult]:
        snapshot = await self.cache.get_snapshot(self.title_boost)
        
        source = snapshot.get(myth_id)
        if source is None:
            raise NotFoundError(f"Source myth not found: {myth_id}")
        
        linked_ids = await self.source.fetch_accepted_links(myth_id)
        
        results = self.policy.rank(source, snapshot.entries, linked_ids)
        logger.info(f"Suggested {len(results)} parallels for myth {myth_id}")
        return results
    
    def invalidate_cache(self) -> None:
        """Force the next suggestion to rebuild the corpus snapshot"""
        self.cache.invalidate()
    
    async def rebuild_cache(self) -> CorpusSnapshot:
        """Drop the snapshot and rebuild it now"""
        self.cache.invalidate()
        return await self.cache.get_snapshot(self.title_boost)
    
    async def accept_parallel(
        self,
        myth_a: Any,
        myth_b: Any,
        score: Optional[float] = None,
        rationale: Optional[str] = None,
        detected_by: str = "human",
    ) -> AcceptedParallel:
        """
        Persist an accepted parallel and invalidate the cache.
        
        Raises:
            InvalidInputError: Malformed ids or a myth linked to itself
            UpstreamError: Store write failed
        """
        a = parse_myth_id(myth_a)
        b = parse_myth_id(myth_b)
        if a == b:
            raise InvalidInputError("Cannot link a myth to itself")
        
        parallel = await self.source.add_parallel(a, b, score, rationale, detected_by)
        self.invalidate_cache()
        return parallel
    
    async def list_parallels(self, myth_id: Any) -> List[AcceptedParallel]:
        return await self.source.list_parallels(parse_myth_id(myth_id))
