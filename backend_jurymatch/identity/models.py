"""
Data models for identity resolution input and output.

Inputs (IdentityQuery, CandidateRecord) are pydantic models validated at
the library boundary; outputs (ScoreFactors, IdentityCandidate) are plain
dataclasses with to_dict() for callers that persist them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backend_jurymatch.core.exceptions import CandidateStateError

# Band maxima; they sum to 100
NAME_MAX = 40
AGE_MAX = 20
LOCATION_MAX = 20
OCCUPATION_MAX = 10
CORROBORATION_MAX = 10


class _PersonFields(BaseModel):
    """Name and demographic fields shared by the target juror and candidate records."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
        str_strip_whitespace=True,
    )

    full_name: Optional[str] = Field(default=None, alias="fullName")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    middle_name: Optional[str] = Field(default=None, alias="middleName")
    age: Optional[int] = Field(default=None, ge=0, le=130)
    birth_year: Optional[int] = Field(default=None, ge=1800, le=2200, alias="birthYear")
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(default=None, alias="zipCode")
    occupation: Optional[str] = None
    employer: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator(
        "full_name", "first_name", "last_name", "middle_name", "city", "state",
        "zip_code", "occupation", "employer", "email", "phone", "address",
        mode="after",
    )
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @model_validator(mode="after")
    def _require_name(self) -> _PersonFields:
        if not (self.full_name or self.first_name or self.last_name):
            raise ValueError("a name is required: full_name or first_name/last_name")
        return self

    def display_name(self) -> str:
        """Full name, or "first [middle] last" assembled from parts."""
        if self.full_name:
            return self.full_name
        return " ".join(p for p in (self.first_name, self.middle_name, self.last_name) if p)


class IdentityQuery(_PersonFields):
    """The juror being researched: what the court or questionnaire supplied."""

    subject_id: Optional[str] = Field(default=None, alias="subjectId")


class CandidateRecord(_PersonFields):
    """One public-record hit produced by an external search (voter file, donations, people search)."""

    candidate_id: Optional[str] = Field(default=None, alias="candidateId")
    source_type: str = Field(default="unknown", alias="sourceType")
    raw_data: dict[str, Any] = Field(default_factory=dict, alias="rawData")

    def demographics(self) -> dict[str, Any]:
        keys = ("age", "birth_year", "occupation", "employer", "city", "state", "zip_code")
        return {k: getattr(self, k) for k in keys if getattr(self, k) is not None}


@dataclass
class ScoreFactors:
    """
    Itemized score for one candidate.

    total_score is always the sum of the five bands, clamped to [0, 100].
    Every band carries a reason, including bands that awarded nothing.
    """

    name_score: int = 0
    name_reason: str = ""
    age_score: int = 0
    age_reason: str = ""
    location_score: int = 0
    location_reason: str = ""
    occupation_score: int = 0
    occupation_reason: str = ""
    corroboration_score: int = 0
    corroboration_reason: str = ""

    @property
    def total_score(self) -> int:
        total = (
            self.name_score
            + self.age_score
            + self.location_score
            + self.occupation_score
            + self.corroboration_score
        )
        return max(0, min(100, total))

    def reasons(self) -> list[str]:
        return [
            self.name_reason,
            self.age_reason,
            self.location_reason,
            self.occupation_reason,
            self.corroboration_reason,
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name_score": self.name_score,
            "name_reason": self.name_reason,
            "age_score": self.age_score,
            "age_reason": self.age_reason,
            "location_score": self.location_score,
            "location_reason": self.location_reason,
            "occupation_score": self.occupation_score,
            "occupation_reason": self.occupation_reason,
            "corroboration_score": self.corroboration_score,
            "corroboration_reason": self.corroboration_reason,
            "total_score": self.total_score,
        }


@dataclass
class IdentityCandidate:
    """
    A scored public-record identity for a juror.

    Confirm/reject are terminal: once either is set the candidate cannot
    transition again and is never rescored.
    """

    candidate_id: str
    full_name: str
    source_type: str
    score_factors: ScoreFactors
    demographics: dict[str, Any] = field(default_factory=dict)
    record: CandidateRecord | None = None
    """The primary record this candidate was scored from."""
    linked_records: list[CandidateRecord] = field(default_factory=list)
    """Other records clustered into this identity (same person, other sources)."""
    is_confirmed: bool = False
    is_rejected: bool = False
    decided_by: str | None = None
    decided_at: datetime | None = None

    @property
    def total_score(self) -> int:
        return self.score_factors.total_score

    @property
    def is_terminal(self) -> bool:
        return self.is_confirmed or self.is_rejected

    @property
    def source_types(self) -> list[str]:
        seen = [self.source_type]
        for rec in self.linked_records:
            if rec.source_type not in seen:
                seen.append(rec.source_type)
        return seen

    def _decide(self, by: str, *, confirmed: bool) -> None:
        if self.is_terminal:
            state = "confirmed" if self.is_confirmed else "rejected"
            raise CandidateStateError(
                f"Candidate {self.candidate_id} is already {state}",
                candidate_id=self.candidate_id,
                state=state,
            )
        self.is_confirmed = confirmed
        self.is_rejected = not confirmed
        self.decided_by = by
        self.decided_at = datetime.now(timezone.utc)

    def confirm(self, by: str) -> None:
        self._decide(by, confirmed=True)

    def reject(self, by: str) -> None:
        self._decide(by, confirmed=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "full_name": self.full_name,
            "source_type": self.source_type,
            "source_types": self.source_types,
            "demographics": self.demographics,
            "score_factors": self.score_factors.to_dict(),
            "total_score": self.total_score,
            "linked_candidate_ids": [r.candidate_id for r in self.linked_records],
            "is_confirmed": self.is_confirmed,
            "is_rejected": self.is_rejected,
            "decided_by": self.decided_by,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
        }
