"""
Corpus snapshot cache.

Holds every myth record together with the document built from it, so one
suggestion request scores against an internally consistent corpus. The
snapshot goes stale after a TTL (5 minutes by default) and is dropped
immediately by invalidate() after any write to myths or parallels.

Concurrency (single event loop):
- The current snapshot is swapped in one assignment, so a reader sees either
  the old snapshot or the new one, never a half-built one.
- A rebuild runs as its own task. Requesters await it through
  asyncio.shield(), so a cancelled or timed-out request does not cancel the
  rebuild, and requests arriving mid-rebuild share the same task.
- A rebuild that started before invalidate() still answers its waiters but
  does not replace the cache (its data may predate the write).
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from .models import MythRecord, SnapshotEntry
from .store import MythSource
from .text.document import build_document, extract_features

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass
class CorpusSnapshot:
    """Point-in-time copy of the corpus plus derived documents"""
    timestamp: float
    title_boost: int
    entries: List[SnapshotEntry] = field(default_factory=list)
    by_id: Dict[int, SnapshotEntry] = field(default_factory=dict)
    
    def get(self, myth_id: int) -> Optional[SnapshotEntry]:
        return self.by_id.get(myth_id)
    
    def __len__(self) -> int:
        return len(self.entries)


def build_snapshot(records: Iterable[MythRecord], title_boost: int, timestamp: float) -> CorpusSnapshot:
    """Build documents and features for every record"""
    entries = []
    by_id = {}
    for record in records:
        entry = SnapshotEntry(
            record=record,
            document=build_document(record, title_boost),
            features=extract_features(record),
        )
        entries.append(entry)
        by_id[record.id] = entry
    return CorpusSnapshot(timestamp=timestamp, title_boost=title_boost, entries=entries, by_id=by_id)


class SnapshotCache:
    """
    TTL cache for the corpus snapshot.
    
    Created by the composition root and injected where needed; tests use a
    fresh instance each.
    """
    
    def __init__(
        self,
        source: MythSource,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            source: Store the corpus is fetched from
            ttl_seconds: Age after which a snapshot is rebuilt
            clock: Monotonic time source (seconds)
        """
        self.source = source
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[CorpusSnapshot] = None
        self._generation = 0
        self._rebuild_task: Optional[asyncio.Task] = None
        self._rebuild_boost: Optional[int] = None
    
    def peek(self) -> Optional[CorpusSnapshot]:
        """Current snapshot without triggering a rebuild (may be stale)"""
        return self._snapshot
    
    def _is_fresh(self, snapshot: CorpusSnapshot, title_boost: int) -> bool:
        if snapshot.title_boost != title_boost:
            return False
        return self._clock() - snapshot.timestamp < self.ttl_seconds
    
    async def get_snapshot(self, title_boost: int) -> CorpusSnapshot:
        """
        Return the current snapshot, rebuilding it when missing or stale.
        
        A snapshot built with a different title_boost counts as stale.
        
        Raises:
            UpstreamError: The store could not be read during a rebuild
        """
        snapshot = self._snapshot
        if snapshot is not None and self._is_fresh(snapshot, title_boost):
            return snapshot
        
        task = self._rebuild_task
        if task is None or task.done() or self._rebuild_boost != title_boost:
            task = asyncio.ensure_future(self._rebuild(title_boost, self._generation))
            task.add_done_callback(self._log_rebuild_failure)
            self._rebuild_task = task
            self._rebuild_boost = title_boost
        
        return await asyncio.shield(task)
    
    def invalidate(self) -> None:
        """Drop the snapshot so the next request rebuilds it"""
        if self._snapshot is not None:
            logger.info("Suggestion cache invalidated")
        self._snapshot = None
        self._generation += 1
        self._rebuild_task = None
        self._rebuild_boost = None
    
    async def _rebuild(self, title_boost: int, generation: int) -> CorpusSnapshot:
        started = self._clock()
        records = await self.source.fetch_all_myths()
        snapshot = build_snapshot(records, title_boost, timestamp=started)
        
        if generation == self._generation:
            self._snapshot = snapshot
            logger.info(
                f"Suggestion cache rebuilt: {len(snapshot)} myths "
                f"(title_boost={title_boost}, {self._clock() - started:.2f}s)"
            )
        else:
            logger.info("Suggestion cache invalidated during rebuild; result not cached")
        return snapshot
    
    @staticmethod
    def _log_rebuild_failure(task: asyncio.Task) -> None:
        # Retrieve the exception so an unawaited failed rebuild is still logged
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Suggestion cache rebuild failed: {exc}")
