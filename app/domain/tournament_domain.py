from dataclasses import dataclass
from datetime import date
from typing import Optional

from app.models.tournament import Tournament
from app.schemas.tournament import EligibilityResponse, TournamentStatus


@dataclass(frozen=True)
class TournamentWindow:
    """Where a tournament stands relative to its open dates.

    ``status`` is the tag; ``start_date``/``end_date`` are the dates that
    explain it.
    """

    status: TournamentStatus
    start_date: date
    end_date: date

    @classmethod
    def classify(cls, start_date: date, end_date: date, today: date) -> "TournamentWindow":
        if today < start_date:
            status = TournamentStatus.UPCOMING
        elif today > end_date:
            status = TournamentStatus.PAST
        else:
            status = TournamentStatus.ONGOING
        return cls(status=status, start_date=start_date, end_date=end_date)


@dataclass(frozen=True)
class TournamentInfo:
    """Read-only tournament metadata consumed by the quiz engine"""

    id: int
    name: str
    category: str
    difficulty: Optional[str]
    min_passing_score: float
    window: TournamentWindow


class TournamentDomain:
    """Domain logic for Tournament entities"""

    @staticmethod
    def to_info(tournament: Tournament, today: Optional[date] = None) -> TournamentInfo:
        today = today or date.today()
        return TournamentInfo(
            id=tournament.id,
            name=tournament.name,
            category=tournament.category,
            difficulty=tournament.difficulty,
            min_passing_score=float(tournament.min_passing_score),
            window=TournamentWindow.classify(
                tournament.start_date, tournament.end_date, today
            ),
        )

    @staticmethod
    def to_eligibility(
        info: TournamentInfo, has_previous_result: bool
    ) -> EligibilityResponse:
        window = info.window
        start_date = None
        end_date = None
        if window.status == TournamentStatus.UPCOMING:
            can_participate = False
            reason = "Tournament has not started yet"
            start_date = window.start_date
        elif window.status == TournamentStatus.PAST:
            can_participate = False
            reason = "Tournament has already ended"
            end_date = window.end_date
        elif window.status == TournamentStatus.ONGOING:
            can_participate = True
            reason = "You can participate in this tournament"
        else:
            raise ValueError(f"Unknown tournament status: {window.status}")

        return EligibilityResponse(
            tournament_id=info.id,
            tournament_name=info.name,
            category=info.category,
            difficulty=info.difficulty or "",
            min_passing_score=info.min_passing_score,
            status=window.status,
            can_participate=can_participate,
            reason=reason,
            start_date=start_date,
            end_date=end_date,
            has_previous_result=has_previous_result,
        )
