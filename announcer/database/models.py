from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class AnnouncedSolveRecord(Base):
    """One solve that has been announced. Rows are never updated or deleted."""
    __tablename__ = 'announced_solves'

    id = Column(Integer, primary_key=True, autoincrement=True)
    challenge_id = Column(Integer, nullable=False, index=True)
    solver_id = Column(Integer, nullable=False)

    # Metadata
    announced_at = Column(DateTime, default=func.now())

    __table_args__ = (UniqueConstraint('challenge_id', 'solver_id', name='uq_announced_solve'),)

    def __repr__(self):
        return f"<AnnouncedSolveRecord(challenge_id={self.challenge_id}, solver_id={self.solver_id})>"

class LeaderboardPosition(Base):
    """One row of the last persisted top-N snapshot."""
    __tablename__ = 'leaderboard_snapshot'

    entity_id = Column(Integer, primary_key=True, autoincrement=False)
    rank = Column(Integer, nullable=False)
    name = Column(String(200), nullable=True)

    def __repr__(self):
        return f"<LeaderboardPosition(entity_id={self.entity_id}, rank={self.rank})>"
