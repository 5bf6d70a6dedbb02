from .question_cache import TournamentQuestionCache
from .quiz import QuizEngine, QuizService, build_quiz_engine
from .quiz_session import QuizSessionManager
from .scoring import ScoringService
from .trivia_provider import OpenTriviaProvider

__all__ = [
    "OpenTriviaProvider",
    "TournamentQuestionCache",
    "QuizSessionManager",
    "ScoringService",
    "QuizEngine",
    "QuizService",
    "build_quiz_engine",
]
