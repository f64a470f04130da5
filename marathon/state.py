"""Serializable candidate session tracked across marathon rounds."""
from __future__ import annotations

from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Score = Union[int, float]


class Session(BaseModel):
    """One candidate's attempt at one company's workflow.

    Serialized with camelCase keys (``companyId``, ``currentRoundIndex``...)
    so the stored snapshot keeps the browser store's shape.
    """

    company_id: str
    current_round_index: int = Field(default=0, ge=0)
    is_round_submitted: bool = False
    is_feedback_viewed: bool = False
    warnings: int = Field(default=0, ge=0)
    is_terminated: bool = False
    scores: Dict[int, Score] = Field(default_factory=dict)
    round_feedback: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_snapshot(self) -> str:
        """Return the JSON snapshot stored under the session storage key."""

        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_snapshot(cls, payload: str) -> "Session":
        return cls.model_validate_json(payload)
