import logging

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_participant, get_quiz_engine
from app.core.exceptions import QuizError
from app.schemas.quiz import (
    AdminQuestionListResponse,
    AnswerResultResponse,
    CacheClearResponse,
    CacheStatisticsResponse,
    CategoriesResponse,
    ProviderStatusResponse,
    QuestionListResponse,
    QuizAnswerRequest,
    QuizCompletionResponse,
    QuizResultResponse,
    SessionStatusResponse,
    SingleQuestionResponse,
)
from app.schemas.tournament import EligibilityResponse
from app.services.quiz import QuizEngine, QuizService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tournaments", tags=["quiz"])


def _quiz_error(e: QuizError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.to_detail())


def _internal_error(e: Exception) -> HTTPException:
    logger.exception("❌ Unexpected error while handling quiz request")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal server error: {str(e)}",
    )


@router.get("/cache-stats", response_model=CacheStatisticsResponse)
def get_cache_statistics(
    db: Session = Depends(get_db), engine: QuizEngine = Depends(get_quiz_engine)
):
    """Number of cached tournament batches and active quiz sessions"""
    return QuizService(db, engine).cache_statistics()


@router.get("/categories", response_model=CategoriesResponse)
def get_available_categories(
    db: Session = Depends(get_db), engine: QuizEngine = Depends(get_quiz_engine)
):
    """Categories that map onto Open Trivia DB categories"""
    return QuizService(db, engine).available_categories()


@router.get("/test-api", response_model=ProviderStatusResponse)
def test_provider_connectivity(
    db: Session = Depends(get_db), engine: QuizEngine = Depends(get_quiz_engine)
):
    """Check whether Open Trivia DB is reachable"""
    return QuizService(db, engine).check_provider()


@router.get("/{tournament_id}/questions", response_model=QuestionListResponse)
def get_tournament_questions(
    tournament_id: int,
    participant_id: int = Depends(get_current_participant),
    db: Session = Depends(get_db),
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """
    Start the quiz for the current participant and list all questions

    Answer options come back in random order. Starting again discards any
    attempt that was in progress.
    """
    try:
        return QuizService(db, engine).list_questions(tournament_id, participant_id)
    except QuizError as e:
        raise _quiz_error(e)
    except Exception as e:
        raise _internal_error(e)


@router.get("/{tournament_id}/questions/admin", response_model=AdminQuestionListResponse)
def get_tournament_questions_for_admin(
    tournament_id: int,
    db: Session = Depends(get_db),
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """Tournament questions with their answers, for review by an operator"""
    try:
        return QuizService(db, engine).list_questions_for_admin(tournament_id)
    except QuizError as e:
        raise _quiz_error(e)
    except Exception as e:
        raise _internal_error(e)


@router.get(
    "/{tournament_id}/questions/{question_number}",
    response_model=SingleQuestionResponse,
)
def get_question_by_number(
    tournament_id: int,
    question_number: int = Path(..., description="Question number (1-based)"),
    participant_id: int = Depends(get_current_participant),
    db: Session = Depends(get_db),
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """One question of the active session, options in stable alphabetical order"""
    try:
        return QuizService(db, engine).get_question(
            tournament_id, participant_id, question_number
        )
    except QuizError as e:
        raise _quiz_error(e)
    except Exception as e:
        raise _internal_error(e)


@router.post(
    "/{tournament_id}/questions/{question_number}/answer",
    response_model=AnswerResultResponse,
)
def submit_answer(
    tournament_id: int,
    request: QuizAnswerRequest,
    question_number: int = Path(..., description="Question number (1-based)"),
    participant_id: int = Depends(get_current_participant),
    db: Session = Depends(get_db),
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """Submit (or resubmit) the answer to one question"""
    try:
        return QuizService(db, engine).submit_answer(
            tournament_id, participant_id, question_number, request.answer
        )
    except QuizError as e:
        raise _quiz_error(e)
    except Exception as e:
        raise _internal_error(e)


@router.get("/{tournament_id}/session", response_model=SessionStatusResponse)
def get_quiz_session_status(
    tournament_id: int,
    participant_id: int = Depends(get_current_participant),
    db: Session = Depends(get_db),
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """Progress of the current participant's quiz"""
    return QuizService(db, engine).session_status(tournament_id, participant_id)


@router.post("/{tournament_id}/complete", response_model=QuizCompletionResponse)
def complete_quiz(
    tournament_id: int,
    participant_id: int = Depends(get_current_participant),
    db: Session = Depends(get_db),
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """
    Finish the quiz, score it and store the result

    Every question must be answered. The session is closed afterwards.
    """
    try:
        return QuizService(db, engine).complete_quiz(tournament_id, participant_id)
    except QuizError as e:
        raise _quiz_error(e)
    except Exception as e:
        raise _internal_error(e)


@router.delete("/{tournament_id}/cache", response_model=CacheClearResponse)
def clear_tournament_cache(
    tournament_id: int,
    db: Session = Depends(get_db),
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """Drop the cached questions so the next start fetches a fresh batch"""
    return QuizService(db, engine).clear_cache(tournament_id)


@router.get("/{tournament_id}/eligibility", response_model=EligibilityResponse)
def check_participation_eligibility(
    tournament_id: int,
    participant_id: int = Depends(get_current_participant),
    db: Session = Depends(get_db),
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """Whether the tournament is open, and whether a previous result exists"""
    try:
        return QuizService(db, engine).check_eligibility(tournament_id, participant_id)
    except QuizError as e:
        raise _quiz_error(e)
    except Exception as e:
        raise _internal_error(e)


@router.get("/{tournament_id}/my-result", response_model=QuizResultResponse)
def get_my_result(
    tournament_id: int,
    participant_id: int = Depends(get_current_participant),
    db: Session = Depends(get_db),
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """Stored result of the current participant"""
    try:
        return QuizService(db, engine).get_result(tournament_id, participant_id)
    except QuizError as e:
        raise _quiz_error(e)
    except Exception as e:
        raise _internal_error(e)
