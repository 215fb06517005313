"""
CTFd data models for the announcer.

Immutable value objects passed between the CTFd client, the stores and
the reconcilers. None of them are shared mutable state: a cycle builds
fresh values and hands them on.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, NamedTuple, Optional, Tuple


@dataclass(frozen=True)
class Challenge:
    """A CTFd challenge."""
    id: int
    name: str


@dataclass(frozen=True)
class Solver:
    """A user or team that solved a challenge.

    Identity is the account id only; names loaded back from the
    database are empty.
    """
    account_id: int
    name: str = field(default='', compare=False)


class AnnouncedSolve(NamedTuple):
    """A (challenge, solver) pair that has already been announced."""
    challenge_id: int
    solver_id: int


@dataclass(frozen=True)
class SolveEvent:
    """A solve that must be announced."""
    challenge: Challenge
    solver: Solver
    is_first_blood: bool


@dataclass(frozen=True)
class OvertakeEvent:
    """An entity moved up into a rank previously held by another entity."""
    entity_id: int
    rank: int
    overtaken_id: int
    entered: bool
    entity_name: Optional[str] = None
    overtaken_name: Optional[str] = None


@dataclass(frozen=True)
class LeaderboardSnapshot:
    """Top-N standings at one point in time.

    ``ranks`` maps entity id to a dense rank (1 = best). ``names`` holds
    display names when the source carried them and does not take part
    in comparisons.
    """
    ranks: Dict[int, int] = field(default_factory=dict)
    names: Dict[int, str] = field(default_factory=dict, compare=False)

    @classmethod
    def from_standings(cls, standings: Iterable[Tuple[int, int, Optional[str]]], top_n: int) -> 'LeaderboardSnapshot':
        """
        Build a snapshot from upstream (position, entity_id, name) rows.

        Rows are ordered by position with ties broken by ascending entity
        id, then re-ranked 1..k and truncated to ``top_n``. Duplicate
        entity ids keep their best position.
        """
        ranks: Dict[int, int] = {}
        names: Dict[int, str] = {}
        for _position, entity_id, name in sorted(standings, key=lambda row: (row[0], row[1])):
            if entity_id in ranks:
                continue
            if len(ranks) >= top_n:
                break
            ranks[entity_id] = len(ranks) + 1
            if name:
                names[entity_id] = name
        return cls(ranks=ranks, names=names)

    def rank_of(self, entity_id: int) -> Optional[int]:
        return self.ranks.get(entity_id)

    def occupant(self, rank: int) -> Optional[int]:
        """Return the entity holding ``rank``, or None"""
        for entity_id, entity_rank in self.ranks.items():
            if entity_rank == rank:
                return entity_id
        return None

    def ordered(self):
        """Entity ids sorted best rank first"""
        return sorted(self.ranks, key=lambda entity_id: self.ranks[entity_id])

    def __len__(self):
        return len(self.ranks)
