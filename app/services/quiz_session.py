import logging
from datetime import datetime
from typing import Optional, Tuple

from app.core.config import settings
from app.core.exceptions import (
    InvalidQuestionNumber,
    QuizNotFinished,
    SessionNotFound,
    TournamentNotOpen,
)
from app.core.stores import ShardedStore
from app.domain.quiz_domain import (
    AnswerOutcome,
    Question,
    QuizSession,
    SessionKey,
    SessionStatus,
)
from app.domain.tournament_domain import TournamentInfo
from app.schemas.tournament import TournamentStatus
from app.services.question_cache import TournamentQuestionCache

logger = logging.getLogger(__name__)


class QuizSessionManager:
    """Owns the in-progress quiz sessions, keyed by (participant, tournament).

    Sessions idle for longer than the configured TTL count as absent and are
    dropped when touched or when ``purge_expired`` runs. A TTL of zero or less
    keeps sessions until they are completed or discarded.
    """

    def __init__(
        self,
        cache: TournamentQuestionCache,
        session_store: Optional[ShardedStore] = None,
        questions_per_tournament: int = None,
        session_ttl_minutes: int = None,
    ):
        self.cache = cache
        self.session_store = session_store if session_store is not None else ShardedStore()
        self.questions_per_tournament = (
            questions_per_tournament or settings.QUESTIONS_PER_TOURNAMENT
        )
        ttl = (
            settings.QUIZ_SESSION_TTL_MINUTES
            if session_ttl_minutes is None
            else session_ttl_minutes
        )
        self.session_ttl_seconds = ttl * 60

    def start(self, participant_id: int, tournament: TournamentInfo) -> QuizSession:
        """Open a fresh session, replacing any attempt already in progress"""
        window = tournament.window
        if window.status == TournamentStatus.UPCOMING:
            raise TournamentNotOpen.not_started(window.start_date)
        elif window.status == TournamentStatus.PAST:
            raise TournamentNotOpen.ended(window.end_date)
        elif window.status == TournamentStatus.ONGOING:
            pass
        else:
            raise ValueError(f"Unknown tournament status: {window.status}")

        batch = self.cache.get_or_fetch(
            tournament.id,
            tournament.category,
            tournament.difficulty,
            self.questions_per_tournament,
        )
        key = SessionKey(participant_id, tournament.id)
        session = QuizSession(key, batch)
        self.session_store.put(key, session)
        logger.info(
            f"🎯 Quiz session started: participant={participant_id} "
            f"tournament={tournament.id} questions={len(batch)}"
        )
        return session

    def _expires(self) -> bool:
        return self.session_ttl_seconds > 0

    def _require_session(self, participant_id: int, tournament_id: int) -> QuizSession:
        key = SessionKey(participant_id, tournament_id)
        session = self.session_store.get(key)
        if session is None:
            raise SessionNotFound(tournament_id)

        if self._expires() and session.is_expired(datetime.now(), self.session_ttl_seconds):
            self.session_store.remove_if(key, session)
            logger.info(f"⌛ Quiz session expired: {key}")
            raise SessionNotFound(tournament_id)
        return session

    @staticmethod
    def _check_question_number(session: QuizSession, question_number: int) -> None:
        if not session.batch.contains_number(question_number):
            raise InvalidQuestionNumber(question_number, session.total_questions)

    def get_question(
        self, participant_id: int, tournament_id: int, question_number: int
    ) -> Tuple[Question, int]:
        session = self._require_session(participant_id, tournament_id)
        self._check_question_number(session, question_number)
        session.touch()
        return session.batch.get(question_number), session.total_questions

    def submit_answer(
        self, participant_id: int, tournament_id: int, question_number: int, answer: str
    ) -> AnswerOutcome:
        session = self._require_session(participant_id, tournament_id)
        self._check_question_number(session, question_number)
        return session.record_answer(question_number, answer)

    def status(self, participant_id: int, tournament_id: int) -> SessionStatus:
        try:
            session = self._require_session(participant_id, tournament_id)
        except SessionNotFound:
            return SessionStatus.inactive()
        return session.status()

    def claim_completed(self, participant_id: int, tournament_id: int) -> QuizSession:
        """Take a fully answered session out of the table.

        Only one caller can claim a session; a concurrent second completion
        sees SessionNotFound.
        """
        session = self._require_session(participant_id, tournament_id)
        if not session.is_completed:
            raise QuizNotFinished(session.answered_count, session.total_questions)
        if not self.session_store.remove_if(session.key, session):
            raise SessionNotFound(tournament_id)
        return session

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        if not self._expires():
            return 0
        now = now or datetime.now()
        purged = 0
        for key, session in self.session_store.items():
            if session.is_expired(now, self.session_ttl_seconds):
                if self.session_store.remove_if(key, session):
                    purged += 1
        if purged:
            logger.info(f"🧹 Purged {purged} expired quiz session(s)")
        return purged
