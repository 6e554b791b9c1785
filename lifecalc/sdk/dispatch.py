"""Request/response contract for running projections off the caller's thread.

A request is one of three tagged variants; the response is either the
matching success payload or an error carrying a message. There are no
partial results: a request completes or fails as a whole.

Usage:
    response = handle_request({"type": "generate_quick", "profile": {...}, "years": 5})
    if response.type == "error":
        print(response.error)
"""

import logging
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .comparison import Change, Comparison, compare_trajectories
from .projection import DEFAULT_QUICK_YEARS, generate_quick_trajectory, generate_trajectory
from .schemas import Profile, Trajectory

logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["generate"] = "generate"
    profile: Profile
    generated_at: Optional[datetime] = None


class GenerateQuickRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["generate_quick"] = "generate_quick"
    profile: Profile
    years: int = DEFAULT_QUICK_YEARS
    generated_at: Optional[datetime] = None


class CompareRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["compare"] = "compare"
    baseline: Trajectory
    alternate: Trajectory
    changes: List[Change] = Field(default_factory=list)
    name: str = "Comparison"
    created_at: Optional[datetime] = None


Request = Annotated[
    Union[GenerateRequest, GenerateQuickRequest, CompareRequest],
    Field(discriminator="type"),
]


class TrajectoryResponse(BaseModel):
    type: Literal["trajectory"] = "trajectory"
    trajectory: Trajectory


class ComparisonResponse(BaseModel):
    type: Literal["comparison"] = "comparison"
    comparison: Comparison


class ErrorResponse(BaseModel):
    type: Literal["error"] = "error"
    error: str


Response = Annotated[
    Union[TrajectoryResponse, ComparisonResponse, ErrorResponse],
    Field(discriminator="type"),
]

_request_adapter = TypeAdapter(Request)


def parse_request(data: Union[dict, BaseModel]) -> Request:
    """Validate a raw dict (or pass through an already-built request)."""
    if isinstance(data, (GenerateRequest, GenerateQuickRequest, CompareRequest)):
        return data
    return _request_adapter.validate_python(data)


def _execute(request: Request) -> Union[TrajectoryResponse, ComparisonResponse]:
    if isinstance(request, GenerateRequest):
        return TrajectoryResponse(
            trajectory=generate_trajectory(request.profile, generated_at=request.generated_at)
        )
    if isinstance(request, GenerateQuickRequest):
        return TrajectoryResponse(
            trajectory=generate_quick_trajectory(
                request.profile, years=request.years, generated_at=request.generated_at
            )
        )
    return ComparisonResponse(
        comparison=compare_trajectories(
            request.baseline,
            request.alternate,
            request.changes,
            name=request.name,
            created_at=request.created_at,
        )
    )


def handle_request(data: Union[dict, BaseModel]) -> Union[TrajectoryResponse, ComparisonResponse, ErrorResponse]:
    """Validate and run one request. Never raises: failures become ErrorResponse."""
    try:
        request = parse_request(data)
        return _execute(request)
    except Exception as e:
        logger.error(f"Request failed: {e}")
        return ErrorResponse(error=str(e))
