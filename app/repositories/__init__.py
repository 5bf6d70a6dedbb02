from .quiz_repository import QuizResultRepository, UserTournamentScoreRepository
from .tournament_repository import TournamentRepository

__all__ = [
    "TournamentRepository",
    "QuizResultRepository",
    "UserTournamentScoreRepository",
]
