"""Pydantic schemas for the CTFd REST API responses the announcer reads."""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class CTFdModel(BaseModel):
    """Base for CTFd payloads; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class APIResponse(CTFdModel, Generic[T]):
    """The envelope CTFd wraps every API response in.

    Attributes:
        success: False when CTFd rejected the request
        errors: Error details, a list or a field-to-messages mapping
        data: The payload, absent on failure
    """

    success: bool
    errors: Optional[Any] = None
    data: Optional[T] = None


class ChallengePayload(CTFdModel):
    """Entry of ``GET /api/v1/challenges``."""

    id: int
    name: str


class SolvePayload(CTFdModel):
    """Entry of ``GET /api/v1/challenges/{id}/solves``."""

    account_id: int
    name: str = ""


class StandingPayload(CTFdModel):
    """Entry of ``GET /api/v1/scoreboard/top/{count}``."""

    id: int = Field(..., description="Team or user id")
    name: str = ""


class AccountPayload(CTFdModel):
    """Payload of ``GET /api/v1/teams/{id}`` or ``GET /api/v1/users/{id}``."""

    id: int
    name: str


ChallengeList = List[ChallengePayload]
SolveList = List[SolvePayload]
TopStandings = Dict[str, StandingPayload]
