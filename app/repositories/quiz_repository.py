from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models.quiz import QuizResult, UserTournamentScore


class QuizResultRepository:
    """Repository for QuizResult database operations following DDD pattern"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user_and_tournament(
        self, user_id: int, tournament_id: int
    ) -> Optional[QuizResult]:
        """Get the stored result of a participant for a tournament"""
        return (
            self.db.query(QuizResult)
            .filter(
                QuizResult.user_id == user_id,
                QuizResult.tournament_id == tournament_id,
            )
            .first()
        )

    def exists(self, user_id: int, tournament_id: int) -> bool:
        return self.get_by_user_and_tournament(user_id, tournament_id) is not None

    def save_result(self, result_data: dict) -> QuizResult:
        """Insert the result, or overwrite the previous attempt of the same participant"""
        existing = self.get_by_user_and_tournament(
            result_data["user_id"], result_data["tournament_id"]
        )
        if existing:
            for field, value in result_data.items():
                setattr(existing, field, value)
            db_result = existing
        else:
            db_result = QuizResult(**result_data)
            self.db.add(db_result)
        self.db.commit()
        self.db.refresh(db_result)
        return db_result

    def rollback(self) -> None:
        self.db.rollback()


class UserTournamentScoreRepository:
    """Repository for the legacy out-of-10 score table"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user_and_tournament(
        self, user_id: int, tournament_id: int
    ) -> Optional[UserTournamentScore]:
        return (
            self.db.query(UserTournamentScore)
            .filter(
                UserTournamentScore.user_id == user_id,
                UserTournamentScore.tournament_id == tournament_id,
            )
            .first()
        )

    def save_score(
        self, user_id: int, tournament_id: int, score: int, passed: bool
    ) -> UserTournamentScore:
        """Insert or update the legacy score row"""
        db_score = self.get_by_user_and_tournament(user_id, tournament_id)
        if db_score:
            db_score.score = score
            db_score.passed = passed
            db_score.completed_at = datetime.now()
        else:
            db_score = UserTournamentScore(
                user_id=user_id,
                tournament_id=tournament_id,
                score=score,
                passed=passed,
                completed_at=datetime.now(),
            )
            self.db.add(db_score)
        self.db.commit()
        self.db.refresh(db_score)
        return db_score
