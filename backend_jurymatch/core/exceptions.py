"""
Application-level exceptions.

Ambiguous input is never an error here: a thin name or a sparse attribute
bag lowers a confidence value instead. Errors are reserved for input that
cannot be scored at all, for malformed reference data, and for illegal
candidate state transitions.
"""

from __future__ import annotations

from typing import Any


class JuryMatchError(Exception):
    """Base class for all backend_jurymatch errors."""

    code = "JURYMATCH_ERROR"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class EmptyInputError(JuryMatchError, ValueError):
    """Name input is empty or has no name tokens left after cleaning."""

    code = "EMPTY_INPUT"


class InputValidationError(JuryMatchError, ValueError):
    """Input at the library boundary is malformed (wrong type, bad fields)."""

    code = "INVALID_INPUT"

    @classmethod
    def from_pydantic(cls, exc: Any, what: str) -> InputValidationError:
        errors = [
            {"loc": ".".join(str(p) for p in err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return cls(f"Invalid {what}: {len(errors)} validation error(s)", errors=errors)


class CandidateStateError(JuryMatchError):
    """Confirmed or rejected candidates are terminal and cannot be changed or rescored."""

    code = "CANDIDATE_TERMINAL"


class CatalogError(JuryMatchError):
    """Signal catalog definition is invalid (duplicate id, bad regex, unknown reference)."""

    code = "CATALOG_INVALID"


class WeightTableError(JuryMatchError):
    """Weight snapshot is missing, malformed, or violates its invariants."""

    code = "WEIGHT_TABLE_INVALID"
