"""
Pydantic models for API request/response validation.
Auto-generates OpenAPI documentation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Union


class SearchFilter(BaseModel):
    """Advanced search request body."""
    dsname: str
    epoch: str
    items: str = Field("", description="Comma-separated entity ids, e.g. 'Q42, Q7'")
    languages: List[str] = Field(default_factory=list, description="Language codes, or 'all'")


class DecisionCount(BaseModel):
    """Number of logged edits per editor decision."""
    decision: Optional[Union[str, int]] = None
    num: int


class LeaderboardEntry(BaseModel):
    """Number of logged edits by one user."""
    user: Optional[Union[str, int]] = None
    num: int


class CumulativeEditPoint(BaseModel):
    """Running edit total on one day."""
    date: str
    accumulate_edits: int


class MessageResponse(BaseModel):
    """Plain message response, used for errors and the root route."""
    message: str
