"""
Attribute bag and extraction output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from backend_jurymatch.signals.catalog import VOIR_DIRE, Direction


class VoirDireResponse(BaseModel):
    """
    One voir dire answer. A plain string is read as a response with no question.

    yes_no is the juror's direct yes/no answer when the question asked for one.
    """

    model_config = ConfigDict(extra="ignore")

    question: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("question", "questionText", "question_text")
    )
    response: str = Field(
        default="", validation_alias=AliasChoices("response", "responseText", "response_text")
    )
    yes_no: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("yes_no", "yesNo", "yesNoAnswer")
    )

    @field_validator("question", "response", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if value is None:
            return value
        return str(value).strip()


class SubjectAttributes(BaseModel):
    """
    Everything known about a juror (or a persona definition) that signals are read from.

    demographics/questionnaire hold field values, dimensions hold 0-5 scores,
    the list fields hold free text. Missing parts default to empty.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    subject_id: Optional[str] = Field(default=None, alias="subjectId")
    demographics: dict[str, Any] = Field(default_factory=dict)
    questionnaire: dict[str, Any] = Field(default_factory=dict)
    dimensions: dict[str, Any] = Field(default_factory=dict)
    characteristic_phrases: list[str] = Field(default_factory=list, alias="characteristicPhrases")
    life_experiences: list[str] = Field(default_factory=list, alias="lifeExperiences")
    voir_dire_responses: list[VoirDireResponse] = Field(default_factory=list, alias="voirDireResponses")
    research_notes: list[str] = Field(default_factory=list, alias="researchNotes")
    manual_signals: list[str] = Field(default_factory=list, alias="manualSignals")

    @field_validator("demographics", "questionnaire", "dimensions", mode="before")
    @classmethod
    def _none_to_empty_dict(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator(
        "characteristic_phrases", "life_experiences",
        "research_notes", "manual_signals",
        mode="before",
    )
    @classmethod
    def _text_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value if v is not None and str(v).strip()]
        return value

    @field_validator("voir_dire_responses", mode="before")
    @classmethod
    def _responses(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, Mapping)):
            value = [value]
        if isinstance(value, (list, tuple)):
            out = []
            for item in value:
                if item is None or (isinstance(item, str) and not item.strip()):
                    continue
                out.append({"response": item} if isinstance(item, str) else item)
            return out
        return value

    def text(self, sources: tuple[str, ...]) -> str:
        """Free text from the given list fields, one entry per line (voir dire: responses only)."""
        parts: list[str] = []
        for name in sources:
            if name == VOIR_DIRE:
                parts.extend(r.response for r in self.voir_dire_responses if r.response)
            else:
                parts.extend(getattr(self, name, None) or [])
        return "\n".join(parts)


@dataclass(frozen=True)
class ExtractedSignal:
    """
    One observed signal.

    direction is always POSITIVE: whether the signal supports or contradicts
    a persona is decided by the weight table, not at extraction.
    """

    signal_id: str
    confidence: float
    source_reference: str
    direction: Direction = Direction.POSITIVE

    @property
    def from_dimension(self) -> bool:
        return self.source_reference.startswith("dimensions.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "signal_id": self.signal_id,
            "direction": self.direction.value,
            "confidence": self.confidence,
            "source_reference": self.source_reference,
        }
