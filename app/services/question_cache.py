import logging
import threading
from typing import Optional

from app.core.stores import ShardedStore
from app.domain.quiz_domain import CacheStats, QuestionBatch
from app.services.trivia_provider import OpenTriviaProvider

logger = logging.getLogger(__name__)


class TournamentQuestionCache:
    """One question batch per tournament, fetched on first use.

    Every participant of a tournament is served the same batch. Concurrent
    first requests for one tournament share a single provider call; other
    tournaments are not held up by it.
    """

    def __init__(
        self,
        provider: OpenTriviaProvider,
        batch_store: Optional[ShardedStore] = None,
        session_store: Optional[ShardedStore] = None,
    ):
        self.provider = provider
        self.batch_store = batch_store if batch_store is not None else ShardedStore()
        self.session_store = session_store
        self._fetch_locks = ShardedStore()

    def get_or_fetch(
        self, tournament_id: int, category: str, difficulty: Optional[str], count: int
    ) -> QuestionBatch:
        batch = self.batch_store.get(tournament_id)
        if batch is not None:
            return batch

        fetch_lock = self._fetch_locks.get_or_create(tournament_id, threading.Lock)
        with fetch_lock:
            batch = self.batch_store.get(tournament_id)
            if batch is not None:
                return batch

            logger.info(
                f"📥 Fetching {count} questions for tournament {tournament_id} "
                f"(category={category}, difficulty={difficulty})"
            )
            questions = self.provider.fetch_questions(category, difficulty, count)
            batch = QuestionBatch(tournament_id=tournament_id, questions=tuple(questions))
            self.batch_store.put(tournament_id, batch)
            logger.info(
                f"✅ Cached {len(batch)} questions for tournament {tournament_id}"
            )
            return batch

    def invalidate(self, tournament_id: int) -> bool:
        removed = self.batch_store.remove(tournament_id) is not None
        self._fetch_locks.remove(tournament_id)
        if removed:
            logger.info(f"🗑️ Question cache cleared for tournament {tournament_id}")
        return removed

    def clear(self) -> None:
        self.batch_store.clear()
        self._fetch_locks.clear()
        logger.info("🗑️ Question cache cleared for all tournaments")

    def stats(self) -> CacheStats:
        return CacheStats(
            cached_tournament_count=len(self.batch_store),
            active_session_count=len(self.session_store) if self.session_store is not None else 0,
        )
