from typing import Optional

from sqlalchemy.orm import Session

from app.models.tournament import Tournament


class TournamentRepository:
    """Repository for Tournament database operations following DDD pattern"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tournament_id: int) -> Optional[Tournament]:
        """Get a tournament by ID"""
        return self.db.query(Tournament).filter(Tournament.id == tournament_id).first()
