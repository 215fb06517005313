"""
Solve reconciliation.

Decides which of the solves currently reported by CTFd have not been
announced yet, records each one and then hands it to the notifier.
Recording always happens first, so a solve is announced at most once
even across restarts.
"""

from typing import Iterable, List, Sequence, Set, Tuple

from announcer.data_models.ctfd import AnnouncedSolve, Challenge, SolveEvent, Solver
from announcer.utils.exceptions import NotifyError, StorageError
from announcer.utils.logger import setup_logger
from announcer.utils.messages import format_solve

logger = setup_logger(__name__)

SolveBoard = Iterable[Tuple[Challenge, Sequence[Solver]]]


class SolveReconciler:
    """
    Announces new solves.

    The reconciler keeps no state between calls: the announced set is
    loaded from the store at the start of every call.
    """

    def __init__(self, store, notifier, announce_first_blood_only: bool = True):
        """
        Args:
            store: SolveStore (or anything with ``load``/``record``)
            notifier: Object with an async ``send(text)`` method
            announce_first_blood_only: Only ever announce the earliest solver per challenge
        """
        self.store = store
        self.notifier = notifier
        self.announce_first_blood_only = announce_first_blood_only
        self.logger = logger

    def _is_closed(self, challenge_id: int, announced_challenges: Set[int]) -> bool:
        return self.announce_first_blood_only and challenge_id in announced_challenges

    async def reconcile(self, board: SolveBoard) -> List[SolveEvent]:
        """
        Announce every solve in ``board`` that has not been announced yet.

        Args:
            board: (challenge, solvers) pairs, solvers earliest first

        Returns:
            The solve events that were recorded, in announcement order
        """
        announced = await self.store.load()
        announced_challenges = {solve.challenge_id for solve in announced}
        events: List[SolveEvent] = []

        for challenge, solvers in board:
            for solver in solvers:
                if self._is_closed(challenge.id, announced_challenges):
                    break

                pair = AnnouncedSolve(challenge.id, solver.account_id)
                if pair in announced:
                    continue

                event = SolveEvent(
                    challenge=challenge,
                    solver=solver,
                    is_first_blood=challenge.id not in announced_challenges
                )

                try:
                    await self.store.record(challenge.id, solver.account_id)
                except StorageError as e:
                    # Later solvers could otherwise be announced as first blood
                    self.logger.error(
                        f"Could not record solve of {challenge.name} by {solver.name}, "
                        f"skipping remaining solves for this challenge: {e}"
                    )
                    break

                announced.add(pair)
                announced_challenges.add(challenge.id)
                events.append(event)

                self.logger.info(f"Announcing solve for {challenge.name} by {solver.name}")
                try:
                    await self.notifier.send(format_solve(event))
                except NotifyError as e:
                    self.logger.error(
                        f"Solve of {challenge.name} by {solver.name} recorded but not delivered: {e}"
                    )

        return events

    async def seed(self, board: SolveBoard) -> int:
        """
        Mark every solve in ``board`` as announced without notifying.

        With first-blood-only announcements only the earliest solver of a
        challenge is recorded, since later solvers would never be
        announced anyway.

        Returns:
            Number of newly recorded solves
        """
        announced = await self.store.load()
        announced_challenges = {solve.challenge_id for solve in announced}
        recorded = 0

        for challenge, solvers in board:
            for solver in solvers:
                if self._is_closed(challenge.id, announced_challenges):
                    break

                pair = AnnouncedSolve(challenge.id, solver.account_id)
                if pair in announced:
                    continue

                await self.store.record(challenge.id, solver.account_id)
                announced.add(pair)
                announced_challenges.add(challenge.id)
                recorded += 1

        self.logger.info(f"Marked {recorded} existing solves as announced")
        return recorded
