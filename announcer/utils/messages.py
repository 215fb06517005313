"""
Discord message rendering for announcements.

Display names come from CTFd and are escaped so a team name cannot
inject markdown into the announcement.
"""

from discord.utils import escape_markdown

from announcer.constants import MessageConstants
from announcer.data_models.ctfd import OvertakeEvent, SolveEvent


def _escape(name: str) -> str:
    return escape_markdown(name or MessageConstants.UNKNOWN_NAME)


def format_solve(event: SolveEvent) -> str:
    """Render a solve announcement, with first blood getting its own wording"""
    challenge = _escape(event.challenge.name)
    solver = _escape(event.solver.name)
    if event.is_first_blood:
        return (
            f"First blood for **{challenge}** goes to **{solver}**! "
            f"{MessageConstants.FIRST_BLOOD_EMOJI}"
        )
    return f"{solver} just solved {challenge}! {MessageConstants.SOLVE_EMOJI}"


def format_overtake(event: OvertakeEvent, top_n: int) -> str:
    """Render an overtake or top-N entry announcement"""
    entity = _escape(event.entity_name)
    overtaken = _escape(event.overtaken_name)
    if event.entered:
        return (
            f"**{entity}** has entered the top {top_n}! "
            f"Overtaking **{overtaken}** for position {event.rank}"
        )
    return (
        f"**{entity}** has overtaken **{overtaken}** in the top {top_n}! "
        f"Landing in position {event.rank}"
    )
