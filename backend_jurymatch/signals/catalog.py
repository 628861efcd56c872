"""
Signal catalog — the named facts extracted from juror and persona attributes.

A SignalCatalog is an explicit, immutable collection injected into the
extractor and the weight builder; nothing reads signal definitions from
module state. default_catalog() returns the production definitions,
tests build their own.

Responsibilities:
- Signal definition (how a signal is read, and its persona weights)
- Catalog validation: unique ids, compilable regexes, resolvable opposites
- Compiled pattern cache per signal
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional

from backend_jurymatch.core.exceptions import CatalogError

DIMENSION_HIGH_THRESHOLD = 4.0
DIMENSION_LOW_THRESHOLD = 2.0

CONFIDENCE_FIELD = 0.9
CONFIDENCE_PATTERN = 0.7
# question matched a signal but the answer is not a yes/no value for it
CONFIDENCE_QUESTION = 0.8
CONFIDENCE_MANUAL = 1.0


class SignalCategory(str, Enum):
    DEMOGRAPHIC = "DEMOGRAPHIC"
    BEHAVIORAL = "BEHAVIORAL"
    ATTITUDINAL = "ATTITUDINAL"
    LINGUISTIC = "LINGUISTIC"
    SOCIAL = "SOCIAL"


class ExtractionMethod(str, Enum):
    FIELD_MAPPING = "FIELD_MAPPING"
    PATTERN_MATCH = "PATTERN_MATCH"
    NLP_CLASSIFICATION = "NLP_CLASSIFICATION"
    MANUAL = "MANUAL"


class ValueType(str, Enum):
    BOOLEAN = "BOOLEAN"
    CATEGORICAL = "CATEGORICAL"
    NUMERIC = "NUMERIC"
    TEXT = "TEXT"


class Direction(str, Enum):
    """How an observed signal relates to a persona."""

    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"


class Pole(str, Enum):
    HIGH = "high"
    LOW = "low"


# Free-text attribute lists a text signal may read
PHRASES = "characteristic_phrases"
LIFE_EXPERIENCES = "life_experiences"
VOIR_DIRE = "voir_dire_responses"
RESEARCH_NOTES = "research_notes"
TEXT_FIELDS = (PHRASES, LIFE_EXPERIENCES, VOIR_DIRE, RESEARCH_NOTES)
SPOKEN_TEXT = (PHRASES, VOIR_DIRE)


@dataclass(frozen=True)
class DimensionCondition:
    """A 0-5 dimension score at one pole: high is >= 4.0, low is <= 2.0."""

    dimension: str
    pole: Pole

    def holds(self, value: float) -> bool:
        if self.pole is Pole.HIGH:
            return value >= DIMENSION_HIGH_THRESHOLD
        return value <= DIMENSION_LOW_THRESHOLD


@dataclass(frozen=True)
class Signal:
    """
    One catalog entry.

    patterns are case-insensitive regex alternatives. value_range is an
    inclusive numeric band (high None means unbounded). dimension_conditions
    must all hold for a dimension hit. persona_weight is the POSITIVE weight
    a persona exhibiting the signal gets; opposite_weight is the NEGATIVE
    weight placed on opposite_signal_id when the hit came from a dimension.
    """

    signal_id: str
    name: str
    category: SignalCategory
    extraction_method: ExtractionMethod
    value_type: ValueType = ValueType.BOOLEAN
    source_field: Optional[str] = None
    fallback_fields: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()
    description: str = ""
    value_range: Optional[tuple[float, Optional[float]]] = None
    dimension_conditions: tuple[DimensionCondition, ...] = ()
    opposite_signal_id: Optional[str] = None
    inference_patterns: tuple[str, ...] = ()
    exclusive_group: Optional[str] = None
    text_sources: tuple[str, ...] = TEXT_FIELDS
    persona_weight: float = 0.5
    opposite_weight: float = 0.0

    @property
    def field_names(self) -> tuple[str, ...]:
        if not self.source_field:
            return ()
        return (self.source_field,) + tuple(self.fallback_fields)


def _compile(signal_id: str, patterns: Iterable[str]) -> Optional[re.Pattern[str]]:
    patterns = [p for p in patterns if p]
    if not patterns:
        return None
    alternation = "|".join(f"(?:{p})" for p in patterns)
    try:
        return re.compile(alternation, re.IGNORECASE)
    except re.error as exc:
        raise CatalogError(
            f"Signal {signal_id} has an invalid pattern: {exc}",
            signal_id=signal_id,
            pattern=alternation,
        ) from exc


class SignalCatalog:
    """Validated, immutable collection of signals in definition order."""

    def __init__(self, signals: Iterable[Signal]) -> None:
        ordered = tuple(signals)
        by_id: dict[str, Signal] = {}
        for sig in ordered:
            if sig.signal_id in by_id:
                raise CatalogError(f"Duplicate signal id {sig.signal_id}", signal_id=sig.signal_id)
            if sig.extraction_method is ExtractionMethod.FIELD_MAPPING and not sig.source_field:
                raise CatalogError(
                    f"Field-mapped signal {sig.signal_id} has no source_field",
                    signal_id=sig.signal_id,
                )
            for w in (sig.persona_weight, sig.opposite_weight):
                if not 0.0 <= w <= 1.0:
                    raise CatalogError(
                        f"Signal {sig.signal_id} weight {w} outside [0, 1]",
                        signal_id=sig.signal_id,
                    )
            by_id[sig.signal_id] = sig

        for sig in ordered:
            if sig.opposite_signal_id and sig.opposite_signal_id not in by_id:
                raise CatalogError(
                    f"Signal {sig.signal_id} references unknown opposite {sig.opposite_signal_id}",
                    signal_id=sig.signal_id,
                )

        self._signals = ordered
        self._by_id = by_id
        self._patterns = {s.signal_id: _compile(s.signal_id, s.patterns) for s in ordered}
        self._inference = {
            s.signal_id: _compile(s.signal_id, s.inference_patterns) for s in ordered
        }

    @classmethod
    def from_dicts(cls, rows: Iterable[Mapping[str, Any]]) -> SignalCatalog:
        """Build a catalog from JSON-style rows (enum values as strings)."""
        signals = []
        for row in rows:
            try:
                data = dict(row)
                data["category"] = SignalCategory(data["category"])
                data["extraction_method"] = ExtractionMethod(data["extraction_method"])
                if "value_type" in data:
                    data["value_type"] = ValueType(data["value_type"])
                for key in ("patterns", "fallback_fields", "inference_patterns", "text_sources"):
                    if key in data:
                        data[key] = tuple(data[key])
                if data.get("value_range") is not None:
                    data["value_range"] = tuple(data["value_range"])
                data["dimension_conditions"] = tuple(
                    DimensionCondition(c["dimension"], Pole(c["pole"]))
                    for c in data.get("dimension_conditions", ())
                )
                signals.append(Signal(**data))
            except (KeyError, TypeError, ValueError) as exc:
                raise CatalogError(
                    f"Invalid signal definition: {exc}", signal_id=row.get("signal_id")
                ) from exc
        return cls(signals)

    def __iter__(self) -> Iterator[Signal]:
        return iter(self._signals)

    def __len__(self) -> int:
        return len(self._signals)

    def __contains__(self, signal_id: object) -> bool:
        return signal_id in self._by_id

    def get(self, signal_id: str) -> Optional[Signal]:
        return self._by_id.get(signal_id)

    def __getitem__(self, signal_id: str) -> Signal:
        try:
            return self._by_id[signal_id]
        except KeyError:
            raise CatalogError(f"Unknown signal {signal_id}", signal_id=signal_id) from None

    @property
    def signal_ids(self) -> tuple[str, ...]:
        return tuple(s.signal_id for s in self._signals)

    def pattern(self, signal_id: str) -> Optional[re.Pattern[str]]:
        return self._patterns.get(signal_id)

    def inference_pattern(self, signal_id: str) -> Optional[re.Pattern[str]]:
        return self._inference.get(signal_id)


def _occupation(signal_id: str, name: str, pattern: str) -> Signal:
    return Signal(
        signal_id=signal_id,
        name=name,
        category=SignalCategory.DEMOGRAPHIC,
        extraction_method=ExtractionMethod.FIELD_MAPPING,
        source_field="occupation",
        patterns=(pattern,),
        description=f"Works as: {name.lower()}",
        persona_weight=0.8,
    )


def _attitude(
    signal_id: str,
    name: str,
    patterns: tuple[str, ...],
    *,
    dimension: Optional[str] = None,
    pole: Pole = Pole.HIGH,
    opposite: Optional[str] = None,
    weight: float = 0.8,
    opposite_weight: float = 0.0,
    description: str = "",
) -> Signal:
    conditions = (DimensionCondition(dimension, pole),) if dimension else ()
    return Signal(
        signal_id=signal_id,
        name=name,
        category=SignalCategory.ATTITUDINAL,
        extraction_method=ExtractionMethod.NLP_CLASSIFICATION,
        patterns=patterns,
        description=description,
        dimension_conditions=conditions,
        opposite_signal_id=opposite,
        persona_weight=weight,
        opposite_weight=opposite_weight,
    )


def _default_signals() -> list[Signal]:
    demographic = [
        _occupation(
            "OCCUPATION_HEALTHCARE",
            "Healthcare Professional",
            r"nurse|doctor|physician|surgeon|therapist|pharmacist|dentist|veterinarian"
            r"|medical|health ?care",
        ),
        _occupation(
            "OCCUPATION_TECH",
            "Technology Professional",
            r"engineer|programmer|developer|software|\bIT\b|\btech|computer|data scientist|analyst",
        ),
        _occupation(
            "OCCUPATION_EDUCATION",
            "Education Professional",
            r"teacher|professor|educator|principal|school",
        ),
        _occupation(
            "OCCUPATION_LEGAL",
            "Legal Professional",
            r"lawyer|attorney|judge|paralegal|legal|\blaw\b",
        ),
        _occupation(
            "OCCUPATION_BUSINESS",
            "Business Professional",
            r"manager|executive|\bCEO\b|\bCFO\b|business|corporate|entrepreneur|owner",
        ),
        _occupation(
            "OCCUPATION_FIRST_RESPONDER",
            "First Responder",
            r"police|officer|firefighter|paramedic|\bEMT\b|sheriff|deputy",
        ),
        Signal(
            signal_id="EDUCATION_BACHELORS",
            name="Bachelor's Degree",
            category=SignalCategory.DEMOGRAPHIC,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            source_field="education",
            fallback_fields=("education_level",),
            patterns=(r"bachelor|\bB\.?A\b|\bB\.?S\b|undergraduate",),
            description="Has a bachelor's degree",
            persona_weight=0.7,
        ),
        Signal(
            signal_id="EDUCATION_ADVANCED",
            name="Advanced Degree",
            category=SignalCategory.DEMOGRAPHIC,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            source_field="education",
            fallback_fields=("education_level",),
            patterns=(r"master|\bMBA\b|\bM\.?S\b|\bM\.?A\b|Ph\.?D|doctorate|\bJ\.?D\b|\bM\.?D\b|graduate degree",),
            description="Has a master's degree or higher",
            persona_weight=0.8,
        ),
    ]
    for signal_id, label, band in (
        ("AGE_RANGE_18_30", "Age 18-30", (18, 30)),
        ("AGE_RANGE_31_50", "Age 31-50", (31, 50)),
        ("AGE_RANGE_51_PLUS", "Age 51+", (51, None)),
    ):
        demographic.append(
            Signal(
                signal_id=signal_id,
                name=label,
                category=SignalCategory.DEMOGRAPHIC,
                extraction_method=ExtractionMethod.FIELD_MAPPING,
                value_type=ValueType.NUMERIC,
                source_field="age",
                value_range=band,
                description=f"{label} years old",
                persona_weight=0.7,
            )
        )
    demographic += [
        # SINGLE first: "never married" must not read as married
        Signal(
            signal_id="MARITAL_STATUS_SINGLE",
            name="Single",
            category=SignalCategory.DEMOGRAPHIC,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            value_type=ValueType.CATEGORICAL,
            source_field="marital_status",
            patterns=(r"single|never married",),
            exclusive_group="marital_status",
            persona_weight=0.6,
        ),
        Signal(
            signal_id="MARITAL_STATUS_MARRIED",
            name="Married",
            category=SignalCategory.DEMOGRAPHIC,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            value_type=ValueType.CATEGORICAL,
            source_field="marital_status",
            patterns=(r"married|marriage",),
            exclusive_group="marital_status",
            persona_weight=0.6,
        ),
        Signal(
            signal_id="HAS_CHILDREN",
            name="Has Children",
            category=SignalCategory.DEMOGRAPHIC,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            source_field="children",
            fallback_fields=("has_children",),
            inference_patterns=(r"\b(?:child|children|son|sons|daughters?|parent|parents|family)\b",),
            description="Has children",
            persona_weight=0.6,
        ),
    ]

    behavioral = [
        Signal(
            signal_id="PRIOR_JURY_SERVICE",
            name="Prior Jury Service",
            category=SignalCategory.BEHAVIORAL,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            source_field="prior_jury_service",
            inference_patterns=(r"\bjury\b|\bjuror\b|served on a (?:jury|panel)",),
            description="Has served on a jury before",
            persona_weight=0.7,
        ),
        Signal(
            signal_id="LITIGATION_EXPERIENCE_PARTY",
            name="Litigation Experience (Party)",
            category=SignalCategory.BEHAVIORAL,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            source_field="litigation_history",
            patterns=(r"party|plaintiff|defendant|\bsued\b|suing|lawsuit",),
            inference_patterns=(r"lawsuit|\bsued\b|litigation",),
            description="Has been a party to litigation",
            persona_weight=0.6,
        ),
        Signal(
            signal_id="LITIGATION_EXPERIENCE_WITNESS",
            name="Litigation Experience (Witness)",
            category=SignalCategory.BEHAVIORAL,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            source_field="litigation_history",
            patterns=(r"witness|testified|deposition",),
            inference_patterns=(r"\bwitness\b|testified|deposition",),
            description="Has been a witness in litigation",
            persona_weight=0.6,
        ),
        Signal(
            signal_id="VOTING_HISTORY_REGULAR",
            name="Regular Voter",
            category=SignalCategory.BEHAVIORAL,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            source_field="voting_history",
            description="Votes regularly in elections",
            persona_weight=0.5,
        ),
    ]

    attitudinal = [
        _attitude(
            "AUTHORITY_DEFERENCE_HIGH",
            "High Authority Deference",
            (
                r"trust.*expert|follow.*rule|they.*know|respect.*authority|defer.*to",
                r"authority.*knows|experts.*right|rules.*exist.*reason",
            ),
            dimension="authoritarianism",
            pole=Pole.HIGH,
            opposite="AUTHORITY_DEFERENCE_LOW",
            weight=0.9,
            opposite_weight=0.8,
            description="Defers to authority figures",
        ),
        _attitude(
            "AUTHORITY_DEFERENCE_LOW",
            "Low Authority Deference",
            (
                r"question.*authority|challenge.*rule|think.*for.*myself|don.*blindly.*trust",
                r"experts.*wrong|rules.*arbitrary|authority.*corrupt",
            ),
            dimension="authoritarianism",
            pole=Pole.LOW,
            opposite="AUTHORITY_DEFERENCE_HIGH",
            weight=0.9,
            opposite_weight=0.8,
            description="Questions authority and rules",
        ),
        _attitude(
            "CORPORATE_TRUST_LOW",
            "Low Corporate Trust",
            (
                r"corporations.*greedy|big.*business.*bad|companies.*don.*care|corporate.*corruption",
                r"corporations.*profit|companies.*exploit|big.*business.*untrustworthy",
            ),
            dimension="institutional_trust_corporations",
            pole=Pole.LOW,
            opposite="CORPORATE_TRUST_HIGH",
            weight=0.8,
            opposite_weight=0.7,
            description="Distrusts corporations",
        ),
        _attitude(
            "CORPORATE_TRUST_HIGH",
            "High Corporate Trust",
            (
                r"corporations.*good|business.*creates.*jobs|companies.*responsible|corporate.*benefit",
                r"big.*business.*necessary|corporations.*innovate|companies.*contribute",
            ),
            dimension="institutional_trust_corporations",
            pole=Pole.HIGH,
            opposite="CORPORATE_TRUST_LOW",
            weight=0.8,
            opposite_weight=0.7,
            description="Trusts corporations",
        ),
        _attitude(
            "RISK_TOLERANCE_LOW",
            "Low Risk Tolerance",
            (
                r"prefer.*safe|avoid.*risk|careful.*decisions|conservative.*approach",
                r"risk.*averse|play.*it.*safe|better.*safe.*sorry",
            ),
            weight=0.6,
            description="Avoids risk",
        ),
        _attitude(
            "RISK_TOLERANCE_HIGH",
            "High Risk Tolerance",
            (
                r"take.*chances|willing.*risk|bold.*decisions|calculated.*risk",
                r"risk.*taker|comfortable.*uncertainty|embrace.*risk",
            ),
            weight=0.6,
            description="Comfortable with risk",
        ),
        _attitude(
            "EVIDENCE_ORIENTATION_HIGH",
            "High Evidence Orientation",
            (
                r"need.*proof|show.*evidence|data.*matters|facts.*important",
                r"evidence.*decide|proof.*required|see.*data|require.*proof",
            ),
            dimension="cognitive_style",
            pole=Pole.HIGH,
            weight=0.8,
            description="Requires strong evidence to decide",
        ),
        Signal(
            signal_id="EMOTIONAL_RESPONSIVENESS_HIGH",
            name="High Emotional Responsiveness",
            category=SignalCategory.ATTITUDINAL,
            extraction_method=ExtractionMethod.NLP_CLASSIFICATION,
            patterns=(
                r"feel.*strongly|emotions.*matter|heart.*decides|empathy.*important",
                r"emotional.*impact|feel.*for.*people|compassion.*matters",
            ),
            dimension_conditions=(
                DimensionCondition("damages_orientation", Pole.HIGH),
                DimensionCondition("attribution_orientation", Pole.LOW),
            ),
            description="Responds to emotional appeals",
            persona_weight=0.7,
        ),
    ]

    linguistic = [
        Signal(
            signal_id="HEDGING_LANGUAGE",
            name="Hedging Language",
            category=SignalCategory.LINGUISTIC,
            extraction_method=ExtractionMethod.PATTERN_MATCH,
            patterns=(
                r"\b(?:maybe|perhaps|might|could|possibly)\b|sort of|kind of|I think|I guess",
                r"not sure|uncertain|unclear",
            ),
            text_sources=SPOKEN_TEXT,
            description="Uses uncertainty markers",
            persona_weight=0.6,
        ),
        Signal(
            signal_id="CERTAINTY_MARKERS",
            name="Certainty Markers",
            category=SignalCategory.LINGUISTIC,
            extraction_method=ExtractionMethod.PATTERN_MATCH,
            patterns=(
                r"\b(?:definitely|absolutely|certainly|always|never|clearly|obviously)\b|without.*doubt",
                r"I know|I believe|I am sure|I'm sure|no question",
            ),
            text_sources=SPOKEN_TEXT,
            description="Speaks with strong conviction",
            persona_weight=0.7,
        ),
        Signal(
            signal_id="QUESTIONING_LANGUAGE",
            name="Questioning Language",
            category=SignalCategory.LINGUISTIC,
            extraction_method=ExtractionMethod.PATTERN_MATCH,
            patterns=(
                r"\b(?:why|how)\b|what.*if|I wonder|I question|seems like|but what about",
                r"could you explain|I don.?t understand|need.*clarification",
            ),
            text_sources=SPOKEN_TEXT,
            description="Asks analytical questions",
            persona_weight=0.7,
        ),
    ]

    social = [
        Signal(
            signal_id="POLITICAL_AFFILIATION_DEMOCRAT",
            name="Democratic Party Affiliation",
            category=SignalCategory.SOCIAL,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            value_type=ValueType.CATEGORICAL,
            source_field="political_affiliation",
            patterns=(r"democrat|liberal|progressive|\bD\b|\bblue\b",),
            exclusive_group="political_affiliation",
            persona_weight=0.8,
        ),
        Signal(
            signal_id="POLITICAL_AFFILIATION_REPUBLICAN",
            name="Republican Party Affiliation",
            category=SignalCategory.SOCIAL,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            value_type=ValueType.CATEGORICAL,
            source_field="political_affiliation",
            patterns=(r"republican|conservative|\bGOP\b|\bR\b|\bred\b",),
            exclusive_group="political_affiliation",
            persona_weight=0.8,
        ),
        Signal(
            signal_id="POLITICAL_AFFILIATION_INDEPENDENT",
            name="Independent/No Party Affiliation",
            category=SignalCategory.SOCIAL,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            value_type=ValueType.CATEGORICAL,
            source_field="political_affiliation",
            patterns=(r"independent|unaffiliated|no.*party|\bNPA?\b",),
            exclusive_group="political_affiliation",
            persona_weight=0.8,
        ),
        Signal(
            signal_id="DONATION_HISTORY",
            name="Political Donation History",
            category=SignalCategory.SOCIAL,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            source_field="donations",
            description="Has made political donations",
            persona_weight=0.5,
        ),
        Signal(
            signal_id="ORGANIZATIONAL_MEMBERSHIPS",
            name="Organizational Memberships",
            category=SignalCategory.SOCIAL,
            extraction_method=ExtractionMethod.FIELD_MAPPING,
            source_field="organizations",
            description="Member of organizations",
            persona_weight=0.5,
        ),
    ]

    return demographic + behavioral + attitudinal + linguistic + social


_DEFAULT: Optional[SignalCatalog] = None


def default_catalog() -> SignalCatalog:
    """Production signal definitions (built once, shared read-only)."""
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = SignalCatalog(_default_signals())
    return _DEFAULT
