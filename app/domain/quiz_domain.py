import random
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional, Tuple

from app.schemas.quiz import (
    AdminQuestionResponse,
    AnswerHistoryEntry,
    Difficulty,
    QuestionResponse,
    QuestionType,
)


@dataclass(frozen=True)
class Question:
    """Single trivia question; the correct answer stays server-side"""

    category: str
    type: QuestionType
    difficulty: Difficulty
    question: str
    correct_answer: str
    incorrect_answers: Tuple[str, ...] = ()

    def all_answers(self) -> List[str]:
        return [self.correct_answer, *self.incorrect_answers]

    def is_correct_answer(self, answer: Optional[str]) -> bool:
        if answer is None:
            return False
        return self.correct_answer.casefold() == answer.casefold()

    def with_difficulty(self, difficulty: Difficulty) -> "Question":
        return replace(self, difficulty=difficulty)


def shuffled_options(question: Question, rng: Optional[random.Random] = None) -> List[str]:
    """Answer options in random order, used when the whole quiz is listed"""
    options = question.all_answers()
    (rng or random).shuffle(options)
    return options


def ordered_options(question: Question) -> List[str]:
    """Answer options in alphabetical order, used for single-question lookups
    so that repeated requests render the same way"""
    return sorted(question.all_answers())


@dataclass(frozen=True)
class QuestionBatch:
    tournament_id: int
    questions: Tuple[Question, ...]

    def __len__(self) -> int:
        return len(self.questions)

    def get(self, question_number: int) -> Question:
        return self.questions[question_number - 1]

    def contains_number(self, question_number: int) -> bool:
        return 1 <= question_number <= len(self.questions)


class SessionKey(NamedTuple):
    participant_id: int
    tournament_id: int


@dataclass(frozen=True)
class RecordedAnswer:
    question_number: int
    answer: str
    correct: bool
    correct_answer: str
    question: str
    submitted_at: datetime


@dataclass(frozen=True)
class AnswerOutcome:
    correct: bool
    correct_answer: str
    user_answer: str
    question_number: int
    correct_count: int
    total_questions: int


@dataclass(frozen=True)
class SessionStatus:
    active: bool
    current_question: int
    correct_answers: int
    total_questions: int
    completed: bool

    @classmethod
    def inactive(cls) -> "SessionStatus":
        return cls(
            active=False,
            current_question=0,
            correct_answers=0,
            total_questions=0,
            completed=False,
        )


class QuizSession:
    """In-progress quiz of one participant in one tournament.

    Holds a read-only reference to the tournament's cached batch. Answers may
    arrive in any order and a resubmission replaces the earlier answer.
    """

    def __init__(self, key: SessionKey, batch: QuestionBatch, started_at: Optional[datetime] = None):
        self.key = key
        self.batch = batch
        self.started_at = started_at or datetime.now()
        self.last_activity = self.started_at
        self._answers: Dict[int, RecordedAnswer] = {}
        self._lock = threading.Lock()

    @property
    def total_questions(self) -> int:
        return len(self.batch)

    def record_answer(self, question_number: int, answer: str) -> AnswerOutcome:
        question = self.batch.get(question_number)
        now = datetime.now()
        recorded = RecordedAnswer(
            question_number=question_number,
            answer=answer,
            correct=question.is_correct_answer(answer),
            correct_answer=question.correct_answer,
            question=question.question,
            submitted_at=now,
        )
        with self._lock:
            self._answers[question_number] = recorded
            self.last_activity = now
            correct_count = self._correct_count()
        return AnswerOutcome(
            correct=recorded.correct,
            correct_answer=recorded.correct_answer,
            user_answer=answer,
            question_number=question_number,
            correct_count=correct_count,
            total_questions=self.total_questions,
        )

    def _correct_count(self) -> int:
        return sum(1 for a in self._answers.values() if a.correct)

    @property
    def correct_count(self) -> int:
        with self._lock:
            return self._correct_count()

    @property
    def answered_count(self) -> int:
        with self._lock:
            return len(self._answers)

    @property
    def current_question_number(self) -> int:
        return self.answered_count + 1

    @property
    def is_completed(self) -> bool:
        return self.answered_count >= self.total_questions

    def answers(self) -> Dict[int, RecordedAnswer]:
        with self._lock:
            return dict(self._answers)

    def touch(self, now: Optional[datetime] = None) -> None:
        self.last_activity = now or datetime.now()

    def is_expired(self, now: datetime, ttl_seconds: float) -> bool:
        return (now - self.last_activity).total_seconds() > ttl_seconds

    def status(self) -> SessionStatus:
        with self._lock:
            answered = len(self._answers)
            correct = self._correct_count()
        return SessionStatus(
            active=True,
            current_question=answered + 1,
            correct_answers=correct,
            total_questions=self.total_questions,
            completed=answered >= self.total_questions,
        )


@dataclass(frozen=True)
class QuizCompletion:
    participant_id: int
    tournament_id: int
    correct_answers: int
    total_questions: int
    percentage: float
    passed: bool
    min_passing_score: float
    completed_at: datetime
    time_taken_seconds: Optional[int]
    answer_history: List[AnswerHistoryEntry]


@dataclass(frozen=True)
class CacheStats:
    cached_tournament_count: int
    active_session_count: int


class QuizDomain:
    """Domain logic for converting quiz entities into API schemas"""

    @staticmethod
    def to_question_response(
        question: Question, question_number: int, total_questions: int, options: List[str]
    ) -> QuestionResponse:
        return QuestionResponse(
            question=question.question,
            type=question.type,
            difficulty=question.difficulty,
            category=question.category,
            answer_options=options,
            question_number=question_number,
            total_questions=total_questions,
        )

    @staticmethod
    def to_shuffled_list(batch: QuestionBatch) -> List[QuestionResponse]:
        total = len(batch)
        return [
            QuizDomain.to_question_response(q, i, total, shuffled_options(q))
            for i, q in enumerate(batch.questions, start=1)
        ]

    @staticmethod
    def to_admin_list(batch: QuestionBatch) -> List[AdminQuestionResponse]:
        return [
            AdminQuestionResponse(
                question_number=i,
                question=q.question,
                type=q.type,
                difficulty=q.difficulty,
                category=q.category,
                correct_answer=q.correct_answer,
                incorrect_answers=list(q.incorrect_answers),
            )
            for i, q in enumerate(batch.questions, start=1)
        ]
