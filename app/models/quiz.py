from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.types import DateTime

from app.core.database import Base


class QuizResult(Base):
    __tablename__ = "quiz_result"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    tournament_id = Column(
        Integer, ForeignKey("tournament.id"), nullable=False, index=True
    )
    score = Column(Integer, nullable=False)  # Correct answers
    total_questions = Column(Integer, nullable=False)
    percentage = Column(Float, nullable=False)
    passed = Column(Boolean, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=False)
    time_taken_seconds = Column(Integer, nullable=True)

    # Retakes update the existing row
    __table_args__ = (
        UniqueConstraint("user_id", "tournament_id", name="uq_quiz_result_user_tournament"),
    )


class UserTournamentScore(Base):
    """Legacy score table read by the leaderboard (score out of 10)"""

    __tablename__ = "user_tournament_score"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    tournament_id = Column(
        Integer, ForeignKey("tournament.id"), nullable=False, index=True
    )
    score = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "tournament_id", name="uq_user_tournament_score_user_tournament"
        ),
    )
