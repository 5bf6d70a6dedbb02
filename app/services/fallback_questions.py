"""Hardcoded questions served when Open Trivia DB cannot be used"""

from typing import Dict, List

from app.domain.quiz_domain import Question
from app.schemas.quiz import Difficulty, QuestionType

GENERAL_CATEGORY = "general"

_SCIENCE = [
    Question(
        category="Science & Nature",
        type=QuestionType.MULTIPLE,
        difficulty=Difficulty.MEDIUM,
        question="What is the chemical symbol for gold?",
        correct_answer="Au",
        incorrect_answers=("Ag", "Go", "Gd"),
    ),
    Question(
        category="Science & Nature",
        type=QuestionType.BOOLEAN,
        difficulty=Difficulty.EASY,
        question="The Earth is the third planet from the Sun.",
        correct_answer="True",
        incorrect_answers=("False",),
    ),
    Question(
        category="Science & Nature",
        type=QuestionType.MULTIPLE,
        difficulty=Difficulty.HARD,
        question="What is the most abundant gas in Earth's atmosphere?",
        correct_answer="Nitrogen",
        incorrect_answers=("Oxygen", "Carbon Dioxide", "Argon"),
    ),
]

_HISTORY = [
    Question(
        category="History",
        type=QuestionType.MULTIPLE,
        difficulty=Difficulty.MEDIUM,
        question="In which year did World War II end?",
        correct_answer="1945",
        incorrect_answers=("1944", "1946", "1943"),
    ),
    Question(
        category="History",
        type=QuestionType.BOOLEAN,
        difficulty=Difficulty.EASY,
        question="The Great Wall of China was built in a single dynasty.",
        correct_answer="False",
        incorrect_answers=("True",),
    ),
]

_SPORTS = [
    Question(
        category="Sports",
        type=QuestionType.MULTIPLE,
        difficulty=Difficulty.MEDIUM,
        question="How many players are there in a basketball team on court?",
        correct_answer="5",
        incorrect_answers=("6", "7", "4"),
    ),
    Question(
        category="Sports",
        type=QuestionType.BOOLEAN,
        difficulty=Difficulty.EASY,
        question="A soccer match consists of two halves.",
        correct_answer="True",
        incorrect_answers=("False",),
    ),
]

_GENERAL = [
    Question(
        category="General Knowledge",
        type=QuestionType.MULTIPLE,
        difficulty=Difficulty.MEDIUM,
        question="What is the capital of Australia?",
        correct_answer="Canberra",
        incorrect_answers=("Sydney", "Melbourne", "Perth"),
    ),
    Question(
        category="General Knowledge",
        type=QuestionType.BOOLEAN,
        difficulty=Difficulty.EASY,
        question="There are 7 continents on Earth.",
        correct_answer="True",
        incorrect_answers=("False",),
    ),
    Question(
        category="General Knowledge",
        type=QuestionType.MULTIPLE,
        difficulty=Difficulty.HARD,
        question="Which planet has the most moons?",
        correct_answer="Saturn",
        incorrect_answers=("Jupiter", "Neptune", "Uranus"),
    ),
]

FALLBACK_BANKS: Dict[str, List[Question]] = {
    "science": _SCIENCE,
    "history": _HISTORY,
    "sports": _SPORTS,
    GENERAL_CATEGORY: _GENERAL,
}


def parse_difficulty(value):
    """Map a free-form difficulty string onto ``Difficulty``, None when unknown"""
    if not value:
        return None
    try:
        return Difficulty(value.strip().lower())
    except ValueError:
        return None


def get_fallback_questions(category: str, difficulty, amount: int) -> List[Question]:
    """Category bank (general bank when there is none) re-tagged with the
    requested difficulty and cut down to ``amount``"""
    bank = FALLBACK_BANKS.get((category or "").lower(), FALLBACK_BANKS[GENERAL_CATEGORY])
    target = parse_difficulty(difficulty)
    questions = [q.with_difficulty(target) if target else q for q in bank]
    return questions[: max(amount, 1)]
