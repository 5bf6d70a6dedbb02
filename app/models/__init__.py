from .quiz import QuizResult, UserTournamentScore
from .tournament import Tournament

__all__ = ["Tournament", "QuizResult", "UserTournamentScore"]
