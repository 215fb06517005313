"""
CTFd REST API client.

Every response goes through the typed ``APIResponse`` envelope. Transport
failures, non-200 statuses, CTFd-side failures, missing data and schema
mismatches all surface as UpstreamError.
"""

import asyncio
from typing import List, Tuple

import aiohttp
from pydantic import ValidationError

from announcer.constants import CTFdConstants
from announcer.data_models.ctfd import Challenge, LeaderboardSnapshot, Solver
from announcer.schemas.ctfd import (
    AccountPayload, APIResponse, ChallengeList, SolveList, TopStandings
)
from announcer.utils.exceptions import UpstreamError
from announcer.utils.logger import setup_logger

logger = setup_logger(__name__)


def decode_response(endpoint: str, payload, schema):
    """
    Validate a decoded JSON body against ``APIResponse[schema]``.

    Returns:
        The validated ``data`` field

    Raises:
        UpstreamError: If the body does not match, reports failure or has no data
    """
    try:
        response = APIResponse[schema].model_validate(payload)
    except ValidationError as e:
        raise UpstreamError(endpoint, f"unexpected response shape ({e.error_count()} errors)") from e

    if not response.success:
        raise UpstreamError(endpoint, f"CTFd reported failure: {response.errors}")
    if response.data is None:
        raise UpstreamError(endpoint, "response carried no data")
    return response.data


def standings_to_snapshot(endpoint: str, standings: TopStandings, top_n: int) -> LeaderboardSnapshot:
    """Turn the position-keyed scoreboard payload into a snapshot"""
    rows = []
    for position, standing in standings.items():
        try:
            rows.append((int(position), standing.id, standing.name))
        except ValueError as e:
            raise UpstreamError(endpoint, f"invalid scoreboard position '{position}'") from e
    return LeaderboardSnapshot.from_standings(rows, top_n)


class CTFdClient:
    """Read-only client for the parts of the CTFd API the announcer needs."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        session: aiohttp.ClientSession,
        account_type: str = "teams",
        timeout: int = 30
    ):
        self.base_url = base_url.rstrip('/')
        self.session = session
        self.account_type = account_type
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = {
            "Authorization": f"Token {api_key}",
            "Content-Type": "application/json",
            "User-Agent": CTFdConstants.USER_AGENT,
        }
        self.logger = logger

    async def _get(self, path: str, schema):
        url = f"{self.base_url}{CTFdConstants.API_PREFIX}{path}"
        self.logger.debug(f"GET {url}")
        try:
            async with self.session.get(url, headers=self.headers, timeout=self.timeout) as response:
                if response.status != 200:
                    raise UpstreamError(path, f"HTTP {response.status}")
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(path, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise UpstreamError(path, f"invalid JSON: {e}") from e

        return decode_response(path, payload, schema)

    async def get_challenges(self) -> List[Challenge]:
        data = await self._get("/challenges", ChallengeList)
        return [Challenge(id=item.id, name=item.name) for item in data]

    async def get_solvers(self, challenge: Challenge) -> List[Solver]:
        """Solvers of ``challenge``, earliest solve first"""
        data = await self._get(f"/challenges/{challenge.id}/solves", SolveList)
        return [Solver(account_id=item.account_id, name=item.name) for item in data]

    async def get_solve_board(self) -> List[Tuple[Challenge, List[Solver]]]:
        """Every challenge with its solvers"""
        board = []
        for challenge in await self.get_challenges():
            board.append((challenge, await self.get_solvers(challenge)))
        return board

    async def get_top(self, top_n: int) -> LeaderboardSnapshot:
        path = f"/scoreboard/top/{top_n}"
        data = await self._get(path, TopStandings)
        return standings_to_snapshot(path, data, top_n)

    async def get_entity_name(self, entity_id: int) -> str:
        data = await self._get(f"/{self.account_type}/{entity_id}", AccountPayload)
        return data.name
