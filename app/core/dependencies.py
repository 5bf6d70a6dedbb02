from fastapi import Header, Request

from app.services.quiz import QuizEngine


def get_quiz_engine(request: Request) -> QuizEngine:
    """Shared quiz engine built at application start"""
    return request.app.state.quiz_engine


def get_current_participant(
    x_user_id: int = Header(..., alias="X-User-Id", gt=0)
) -> int:
    """Participant id supplied by the upstream authentication layer (trusted as-is)"""
    return x_user_id
