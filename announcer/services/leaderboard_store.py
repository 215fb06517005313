"""
Durable copy of the last top-N snapshot.

The ``leaderboard_snapshot`` table is rewritten in full on every
reconciliation; only the latest state matters for diffing.
"""

from sqlalchemy import select, delete

from announcer.data_models.ctfd import LeaderboardSnapshot
from announcer.database.models import LeaderboardPosition
from announcer.services.base import BaseService
from announcer.utils.logger import setup_logger

logger = setup_logger(__name__)


class LeaderboardStore(BaseService):
    """Stores the most recently observed leaderboard snapshot."""

    async def load(self) -> LeaderboardSnapshot:
        """Return the persisted snapshot, empty on first run."""
        async with self.get_session("load leaderboard snapshot") as session:
            result = await session.execute(select(LeaderboardPosition))
            positions = result.scalars().all()

        ranks = {position.entity_id: position.rank for position in positions}
        names = {position.entity_id: position.name for position in positions if position.name}
        return LeaderboardSnapshot(ranks=ranks, names=names)

    async def replace(self, snapshot: LeaderboardSnapshot):
        """
        Replace the stored snapshot with ``snapshot``.

        Delete and insert run in one transaction, so a failure leaves the
        previous snapshot in place.
        """
        async with self.get_session("replace leaderboard snapshot") as session:
            await session.execute(delete(LeaderboardPosition))
            session.add_all([
                LeaderboardPosition(
                    entity_id=entity_id,
                    rank=rank,
                    name=snapshot.names.get(entity_id)
                )
                for entity_id, rank in snapshot.ranks.items()
            ])

        logger.debug(f"Stored leaderboard snapshot with {len(snapshot)} entries")
