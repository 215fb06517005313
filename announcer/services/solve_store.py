"""
Durable set of announced solves.

Backed by the ``announced_solves`` table. Rows are only ever inserted,
so the table doubles as an append-only log of what the channel has seen.
"""

from typing import Set
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from announcer.data_models.ctfd import AnnouncedSolve
from announcer.database.models import AnnouncedSolveRecord
from announcer.services.base import BaseService
from announcer.utils.logger import setup_logger

logger = setup_logger(__name__)


class SolveStore(BaseService):
    """Stores which (challenge, solver) pairs have already been announced."""

    async def load(self) -> Set[AnnouncedSolve]:
        """Return every announced (challenge_id, solver_id) pair."""
        async with self.get_session("load announced solves") as session:
            result = await session.execute(
                select(AnnouncedSolveRecord.challenge_id, AnnouncedSolveRecord.solver_id)
            )
            return {AnnouncedSolve(challenge_id, solver_id) for challenge_id, solver_id in result.all()}

    async def record(self, challenge_id: int, solver_id: int) -> bool:
        """
        Persist an announced solve.

        Recording a pair that is already stored is a no-op.

        Returns:
            True if a new row was written, False if the pair was already present
        """
        async with self.get_session("record solve") as session:
            existing = await session.execute(
                select(AnnouncedSolveRecord.id).where(
                    AnnouncedSolveRecord.challenge_id == challenge_id,
                    AnnouncedSolveRecord.solver_id == solver_id
                )
            )
            if existing.scalar_one_or_none() is not None:
                logger.debug(f"Solve ({challenge_id}, {solver_id}) already recorded")
                return False

            session.add(AnnouncedSolveRecord(challenge_id=challenge_id, solver_id=solver_id))
            try:
                await session.flush()
            except IntegrityError:
                # Inserted by someone else between the check and the flush
                await session.rollback()
                logger.debug(f"Solve ({challenge_id}, {solver_id}) already recorded")
                return False

        return True
