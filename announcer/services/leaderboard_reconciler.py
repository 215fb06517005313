"""
Leaderboard reconciliation.

Compares the freshly fetched top-N snapshot with the persisted one and
announces entities that moved up. Movement is keyed by entity id; the
overtaken party is whoever held the new rank in the previous snapshot.
When several entities move in one cycle, an event may name an occupant
that itself moved. That attribution is accepted as is.
"""

from dataclasses import replace
from typing import Dict, List, Optional

from announcer.data_models.ctfd import LeaderboardSnapshot, OvertakeEvent
from announcer.utils.exceptions import NotifyError, StorageError
from announcer.utils.logger import setup_logger
from announcer.utils.messages import format_overtake

logger = setup_logger(__name__)


def compute_overtakes(previous: LeaderboardSnapshot, current: LeaderboardSnapshot) -> List[OvertakeEvent]:
    """
    Diff two snapshots into overtake events, best new rank first.

    - Entity new to the top N and its rank was held before: "entered" event.
    - Entity improved its rank and the rank was held by someone else: overtake event.
    - Anything else (no previous occupant, same or worse rank, dropped out): nothing.
    """
    events: List[OvertakeEvent] = []

    for entity_id in current.ordered():
        rank = current.ranks[entity_id]
        occupant = previous.occupant(rank)
        if occupant is None:
            continue

        previous_rank = previous.rank_of(entity_id)
        if previous_rank is None:
            events.append(OvertakeEvent(
                entity_id=entity_id,
                rank=rank,
                overtaken_id=occupant,
                entered=True
            ))
        elif previous_rank > rank and occupant != entity_id:
            events.append(OvertakeEvent(
                entity_id=entity_id,
                rank=rank,
                overtaken_id=occupant,
                entered=False
            ))

    return events


class LeaderboardReconciler:
    """Announces top-N rank changes and keeps the stored snapshot current."""

    def __init__(self, store, notifier, name_source, top_n: int = 10):
        """
        Args:
            store: LeaderboardStore (or anything with ``load``/``replace``)
            notifier: Object with an async ``send(text)`` method
            name_source: Object with an async ``get_entity_name(entity_id)`` method
            top_n: Size of the tracked leaderboard, used in message text
        """
        self.store = store
        self.notifier = notifier
        self.name_source = name_source
        self.top_n = top_n
        self.logger = logger

    async def _resolve_name(
        self,
        entity_id: int,
        previous: LeaderboardSnapshot,
        current: LeaderboardSnapshot,
        fetched: Dict[int, str]
    ) -> Optional[str]:
        name = current.names.get(entity_id) or previous.names.get(entity_id)
        if name:
            return name
        if entity_id not in fetched:
            fetched[entity_id] = await self.name_source.get_entity_name(entity_id)
        return fetched[entity_id]

    async def reconcile(self, snapshot: LeaderboardSnapshot) -> List[OvertakeEvent]:
        """
        Announce rank changes between the stored snapshot and ``snapshot``.

        Names are resolved before anything is stored, so a CTFd failure
        leaves the previous snapshot in place for the next cycle. The new
        snapshot is then stored unconditionally and events are sent only
        if that succeeded.

        Returns:
            The overtake events that were produced and stored
        """
        previous = await self.store.load()
        events = compute_overtakes(previous, snapshot)

        fetched: Dict[int, str] = {}
        named_events = []
        for event in events:
            named_events.append(replace(
                event,
                entity_name=await self._resolve_name(event.entity_id, previous, snapshot, fetched),
                overtaken_name=await self._resolve_name(event.overtaken_id, previous, snapshot, fetched)
            ))

        try:
            await self.store.replace(snapshot)
        except StorageError as e:
            self.logger.error(f"Could not store leaderboard snapshot, not announcing {len(named_events)} changes: {e}")
            return []

        for event in named_events:
            if event.entered:
                self.logger.info(f"{event.entity_name} entered the top {self.top_n} at position {event.rank}")
            else:
                self.logger.info(f"{event.entity_name} overtook {event.overtaken_name} for position {event.rank}")
            try:
                await self.notifier.send(format_overtake(event, self.top_n))
            except NotifyError as e:
                self.logger.error(f"Rank change for {event.entity_name} recorded but not delivered: {e}")

        return named_events
