from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class TournamentStatus(str, Enum):
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    PAST = "PAST"


class EligibilityResponse(BaseModel):
    tournament_id: int
    tournament_name: str
    category: str
    difficulty: str
    min_passing_score: float
    status: TournamentStatus
    can_participate: bool
    reason: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    has_previous_result: bool = False
