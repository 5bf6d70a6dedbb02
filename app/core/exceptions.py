from datetime import date
from typing import Any, Dict, Optional


class QuizError(Exception):
    """Base class for errors surfaced to quiz participants.

    Every error carries a stable machine-checkable ``reason`` next to the
    human-readable message, plus the HTTP status the routes should answer with.
    """

    reason = "QUIZ_ERROR"
    status_code = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_detail(self) -> Dict[str, Any]:
        detail = {"reason": self.reason, "message": self.message}
        detail.update(self.extra)
        return detail


class TournamentNotFound(QuizError):
    reason = "TOURNAMENT_NOT_FOUND"
    status_code = 404

    def __init__(self, tournament_id: int):
        super().__init__(
            f"Tournament not found with id: {tournament_id}",
            tournament_id=tournament_id,
        )


class SessionNotFound(QuizError):
    reason = "SESSION_NOT_FOUND"
    status_code = 404

    def __init__(self, tournament_id: int):
        super().__init__(
            "No active quiz session found. Please start the quiz first.",
            tournament_id=tournament_id,
        )


class InvalidQuestionNumber(QuizError):
    reason = "INVALID_QUESTION_NUMBER"
    status_code = 400

    def __init__(self, question_number: int, total_questions: int):
        super().__init__(
            f"Invalid question number: {question_number}. "
            f"Expected a number between 1 and {total_questions}.",
            question_number=question_number,
            total_questions=total_questions,
        )


class TournamentNotOpen(QuizError):
    status_code = 403

    def __init__(
        self,
        reason: str,
        message: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        extra = {}
        if start_date is not None:
            extra["start_date"] = start_date.isoformat()
        if end_date is not None:
            extra["end_date"] = end_date.isoformat()
        super().__init__(message, **extra)
        self.reason = reason

    @classmethod
    def not_started(cls, start_date: date) -> "TournamentNotOpen":
        return cls(
            "TOURNAMENT_NOT_STARTED",
            f"Tournament has not started yet. It opens on {start_date.isoformat()}.",
            start_date=start_date,
        )

    @classmethod
    def ended(cls, end_date: date) -> "TournamentNotOpen":
        return cls(
            "TOURNAMENT_ENDED",
            f"Tournament has already ended on {end_date.isoformat()}.",
            end_date=end_date,
        )


class QuizNotFinished(QuizError):
    reason = "QUIZ_NOT_FINISHED"
    status_code = 400

    def __init__(self, answered: int, total_questions: int):
        super().__init__(
            "Quiz is not yet completed. Answer all questions first.",
            answered=answered,
            total_questions=total_questions,
        )


class ResultNotFound(QuizError):
    reason = "RESULT_NOT_FOUND"
    status_code = 404

    def __init__(self, tournament_id: int):
        super().__init__(
            "You have not completed this tournament yet",
            tournament_id=tournament_id,
        )
