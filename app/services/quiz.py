import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ResultNotFound, TournamentNotFound
from app.core.stores import ShardedStore
from app.domain.quiz_domain import QuizDomain, ordered_options
from app.domain.tournament_domain import TournamentDomain, TournamentInfo
from app.repositories.quiz_repository import (
    QuizResultRepository,
    UserTournamentScoreRepository,
)
from app.repositories.tournament_repository import TournamentRepository
from app.schemas.quiz import (
    AdminQuestionListResponse,
    AnswerResultResponse,
    CacheClearResponse,
    CacheStatisticsResponse,
    CategoriesResponse,
    ProviderStatusResponse,
    QuestionListResponse,
    QuizCompletionResponse,
    QuizResultResponse,
    SessionStatusResponse,
    SingleQuestionResponse,
)
from app.schemas.tournament import EligibilityResponse
from app.services.question_cache import TournamentQuestionCache
from app.services.quiz_session import QuizSessionManager
from app.services.scoring import ScoringService
from app.services.trivia_provider import OpenTriviaProvider

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class QuizEngine:
    """Process-wide quiz state shared by all requests"""

    provider: OpenTriviaProvider
    cache: TournamentQuestionCache
    sessions: QuizSessionManager


def build_quiz_engine(provider: OpenTriviaProvider = None) -> QuizEngine:
    provider = provider or OpenTriviaProvider()
    session_store = ShardedStore(settings.STORE_SHARD_COUNT)
    cache = TournamentQuestionCache(
        provider,
        batch_store=ShardedStore(settings.STORE_SHARD_COUNT),
        session_store=session_store,
    )
    sessions = QuizSessionManager(cache, session_store=session_store)
    return QuizEngine(provider=provider, cache=cache, sessions=sessions)


class QuizService:
    """Request-scoped quiz operations on top of the shared engine"""

    def __init__(self, db: Session, engine: QuizEngine):
        self.db = db
        self.engine = engine
        self.tournament_repository = TournamentRepository(db)
        self.result_repository = QuizResultRepository(db)
        self.scoring = ScoringService(
            self.result_repository, UserTournamentScoreRepository(db)
        )

    def _get_tournament(self, tournament_id: int) -> TournamentInfo:
        tournament = self.tournament_repository.get_by_id(tournament_id)
        if not tournament:
            raise TournamentNotFound(tournament_id)
        return TournamentDomain.to_info(tournament)

    def list_questions(self, tournament_id: int, participant_id: int) -> QuestionListResponse:
        """Start the quiz and list every question with shuffled options"""
        tournament = self._get_tournament(tournament_id)
        session = self.engine.sessions.start(participant_id, tournament)
        questions = QuizDomain.to_shuffled_list(session.batch)
        return QuestionListResponse(
            tournament_id=tournament_id,
            total_questions=len(questions),
            questions=questions,
        )

    def list_questions_for_admin(self, tournament_id: int) -> AdminQuestionListResponse:
        """Full batch including answers, for operator review; no session is opened"""
        tournament = self._get_tournament(tournament_id)
        batch = self.engine.cache.get_or_fetch(
            tournament.id,
            tournament.category,
            tournament.difficulty,
            self.engine.sessions.questions_per_tournament,
        )
        return AdminQuestionListResponse(
            tournament_id=tournament_id,
            total_questions=len(batch),
            questions=QuizDomain.to_admin_list(batch),
        )

    def get_question(
        self, tournament_id: int, participant_id: int, question_number: int
    ) -> SingleQuestionResponse:
        question, total = self.engine.sessions.get_question(
            participant_id, tournament_id, question_number
        )
        return SingleQuestionResponse(
            tournament_id=tournament_id,
            question=QuizDomain.to_question_response(
                question, question_number, total, ordered_options(question)
            ),
        )

    def submit_answer(
        self, tournament_id: int, participant_id: int, question_number: int, answer: str
    ) -> AnswerResultResponse:
        outcome = self.engine.sessions.submit_answer(
            participant_id, tournament_id, question_number, answer
        )
        if outcome.correct:
            message = "Correct! Well done!"
        else:
            message = f"Incorrect. The correct answer was: {outcome.correct_answer}"
        return AnswerResultResponse(
            tournament_id=tournament_id,
            correct=outcome.correct,
            correct_answer=outcome.correct_answer,
            user_answer=outcome.user_answer,
            question_number=outcome.question_number,
            current_score=outcome.correct_count,
            total_questions=outcome.total_questions,
            message=message,
        )

    def session_status(self, tournament_id: int, participant_id: int) -> SessionStatusResponse:
        status = self.engine.sessions.status(participant_id, tournament_id)
        if status.completed:
            message = "Quiz completed! Submit to see your final score."
        elif status.active:
            message = (
                f"Quiz in progress. Question {status.current_question} "
                f"of {status.total_questions}"
            )
        else:
            message = "No active quiz session found."
        return SessionStatusResponse(
            tournament_id=tournament_id,
            active=status.active,
            current_question=status.current_question,
            correct_answers=status.correct_answers,
            total_questions=status.total_questions,
            completed=status.completed,
            message=message,
        )

    def complete_quiz(self, tournament_id: int, participant_id: int) -> QuizCompletionResponse:
        tournament = self._get_tournament(tournament_id)
        session = self.engine.sessions.claim_completed(participant_id, tournament_id)
        completion = self.scoring.complete(session, tournament)

        percentage = completion.percentage
        if completion.passed:
            message = f"Congratulations! You passed the quiz with {percentage:.2f}%!"
        else:
            message = (
                f"Quiz completed. You scored {percentage:.2f}%. "
                f"Minimum passing score is {completion.min_passing_score}%."
            )
        return QuizCompletionResponse(
            tournament_id=tournament_id,
            score=completion.correct_answers,
            total_questions=completion.total_questions,
            percentage=percentage,
            passed=completion.passed,
            min_passing_score=completion.min_passing_score,
            time_taken_seconds=completion.time_taken_seconds,
            answer_history=completion.answer_history,
            message=message,
        )

    def clear_cache(self, tournament_id: int) -> CacheClearResponse:
        self.engine.cache.invalidate(tournament_id)
        return CacheClearResponse(
            tournament_id=tournament_id,
            message=f"Cache cleared for tournament {tournament_id}",
        )

    def cache_statistics(self) -> CacheStatisticsResponse:
        stats = self.engine.cache.stats()
        return CacheStatisticsResponse(
            cached_tournaments=stats.cached_tournament_count,
            active_quiz_sessions=stats.active_session_count,
        )

    def available_categories(self) -> CategoriesResponse:
        categories = self.engine.provider.available_categories()
        return CategoriesResponse(categories=categories, count=len(categories))

    def check_provider(self) -> ProviderStatusResponse:
        connected = self.engine.provider.check_connectivity()
        if connected:
            message = "Open Trivia DB is accessible and working correctly."
        else:
            message = "Open Trivia DB is not accessible. Using fallback questions."
        return ProviderStatusResponse(
            connected=connected,
            api_url=self.engine.provider.base_url,
            message=message,
        )

    def check_eligibility(self, tournament_id: int, participant_id: int) -> EligibilityResponse:
        tournament = self._get_tournament(tournament_id)
        has_result = self.result_repository.exists(participant_id, tournament_id)
        return TournamentDomain.to_eligibility(tournament, has_result)

    def get_result(self, tournament_id: int, participant_id: int) -> QuizResultResponse:
        self._get_tournament(tournament_id)
        result = self.result_repository.get_by_user_and_tournament(
            participant_id, tournament_id
        )
        if not result:
            raise ResultNotFound(tournament_id)
        return QuizResultResponse.model_validate(result)
