from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, validator


class QuestionType(str, Enum):
    MULTIPLE = "multiple"
    BOOLEAN = "boolean"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionResponse(BaseModel):
    """Question as shown to a participant; the correct answer is never included"""

    question: str = Field(..., description="The question prompt")
    type: QuestionType
    difficulty: Difficulty
    category: str
    answer_options: List[str] = Field(
        ..., description="All answer options, correct one mixed in"
    )
    question_number: int = Field(..., description="Position in the quiz (1-based)")
    total_questions: int


class QuestionListResponse(BaseModel):
    tournament_id: int
    total_questions: int
    questions: List[QuestionResponse]
    message: str = "Quiz started! Good luck!"


class SingleQuestionResponse(BaseModel):
    tournament_id: int
    question: QuestionResponse


class AdminQuestionResponse(BaseModel):
    question_number: int
    question: str
    type: QuestionType
    difficulty: Difficulty
    category: str
    correct_answer: str
    incorrect_answers: List[str]


class AdminQuestionListResponse(BaseModel):
    tournament_id: int
    total_questions: int
    questions: List[AdminQuestionResponse]
    message: str = "Tournament questions retrieved for admin review"


class QuizAnswerRequest(BaseModel):
    answer: str = Field(..., description="The participant's answer text")

    @validator("answer")
    def validate_answer(cls, v):
        if not v or not v.strip():
            raise ValueError("Answer cannot be empty")
        return v


class AnswerResultResponse(BaseModel):
    tournament_id: int
    correct: bool
    correct_answer: str
    user_answer: str
    question_number: int
    current_score: int = Field(..., description="Running count of correct answers")
    total_questions: int
    message: str


class SessionStatusResponse(BaseModel):
    tournament_id: int
    active: bool
    current_question: int
    correct_answers: int
    total_questions: int
    completed: bool
    message: str


class AnswerHistoryEntry(BaseModel):
    question_number: int
    question: str
    user_answer: str
    correct_answer: str
    correct: bool


class QuizCompletionResponse(BaseModel):
    tournament_id: int
    score: int = Field(..., description="Number of correct answers")
    total_questions: int
    percentage: float
    passed: bool
    min_passing_score: float
    time_taken_seconds: Optional[int] = None
    answer_history: List[AnswerHistoryEntry]
    message: str


class CacheStatisticsResponse(BaseModel):
    cached_tournaments: int
    active_quiz_sessions: int


class CacheClearResponse(BaseModel):
    tournament_id: int
    message: str


class CategoriesResponse(BaseModel):
    categories: Dict[str, str]
    count: int


class ProviderStatusResponse(BaseModel):
    connected: bool
    api_url: str
    message: str


class QuizResultResponse(BaseModel):
    id: int
    user_id: int
    tournament_id: int
    score: int
    total_questions: int
    percentage: float
    passed: bool
    time_taken_seconds: Optional[int] = None
    completed_at: datetime

    class Config:
        from_attributes = True
