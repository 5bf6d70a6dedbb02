import logging
import math
from datetime import datetime
from typing import List, Optional, Tuple

from app.domain.quiz_domain import QuizCompletion, QuizSession
from app.domain.tournament_domain import TournamentInfo
from app.repositories.quiz_repository import (
    QuizResultRepository,
    UserTournamentScoreRepository,
)
from app.schemas.quiz import AnswerHistoryEntry

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def calculate_score(
    correct_answers: int, total_questions: int, min_passing_score: float
) -> Tuple[float, bool]:
    """Percentage of correct answers and whether it meets the passing score"""
    if total_questions <= 0:
        return 0.0, False
    percentage = correct_answers * 100 / total_questions
    return percentage, percentage >= min_passing_score


def legacy_score(correct_answers: int, total_questions: int) -> int:
    """Score out of 10 expected by the leaderboard, rounded half up"""
    if total_questions <= 0:
        return 0
    return int(math.floor(correct_answers * 10 / total_questions + 0.5))


def build_answer_history(session: QuizSession) -> List[AnswerHistoryEntry]:
    answers = session.answers()
    history = []
    for number in range(1, session.total_questions + 1):
        recorded = answers.get(number)
        if recorded:
            history.append(
                AnswerHistoryEntry(
                    question_number=number,
                    question=recorded.question,
                    user_answer=recorded.answer,
                    correct_answer=recorded.correct_answer,
                    correct=recorded.correct,
                )
            )
        else:
            history.append(
                AnswerHistoryEntry(
                    question_number=number,
                    question="",
                    user_answer="",
                    correct_answer="",
                    correct=False,
                )
            )
    return history


class ScoringService:
    """Turns a finished session into a result and writes it through to storage.

    A failed write is logged and swallowed: the participant still gets the
    computed result.
    """

    def __init__(
        self,
        result_repository: QuizResultRepository,
        score_repository: Optional[UserTournamentScoreRepository] = None,
    ):
        self.result_repository = result_repository
        self.score_repository = score_repository

    def complete(
        self,
        session: QuizSession,
        tournament: TournamentInfo,
        completed_at: Optional[datetime] = None,
    ) -> QuizCompletion:
        completed_at = completed_at or datetime.now()
        correct = session.correct_count
        total = session.total_questions
        percentage, passed = calculate_score(correct, total, tournament.min_passing_score)
        time_taken = int((completed_at - session.started_at).total_seconds())

        completion = QuizCompletion(
            participant_id=session.key.participant_id,
            tournament_id=session.key.tournament_id,
            correct_answers=correct,
            total_questions=total,
            percentage=percentage,
            passed=passed,
            min_passing_score=tournament.min_passing_score,
            completed_at=completed_at,
            time_taken_seconds=max(time_taken, 0),
            answer_history=build_answer_history(session),
        )
        self._persist(completion)
        logger.info(
            f"🏁 Quiz completed: participant={completion.participant_id} "
            f"tournament={completion.tournament_id} "
            f"score={correct}/{total} ({percentage:.2f}%) passed={passed}"
        )
        return completion

    def _persist(self, completion: QuizCompletion) -> None:
        try:
            self.result_repository.save_result(
                {
                    "user_id": completion.participant_id,
                    "tournament_id": completion.tournament_id,
                    "score": completion.correct_answers,
                    "total_questions": completion.total_questions,
                    "percentage": completion.percentage,
                    "passed": completion.passed,
                    "completed_at": completion.completed_at,
                    "time_taken_seconds": completion.time_taken_seconds,
                }
            )
            if self.score_repository is not None:
                self.score_repository.save_score(
                    user_id=completion.participant_id,
                    tournament_id=completion.tournament_id,
                    score=legacy_score(
                        completion.correct_answers, completion.total_questions
                    ),
                    passed=completion.passed,
                )
        except Exception:
            logger.exception(
                f"❌ Failed to save quiz result for participant "
                f"{completion.participant_id} in tournament {completion.tournament_id}"
            )
            try:
                self.result_repository.rollback()
            except Exception:
                logger.exception("❌ Rollback after failed quiz result save also failed")
