"""
Signal extraction — turn an attribute bag into the set of observed signals.

The same extractor reads juror attributes at classification time and
persona definitions at weight-build time, so a persona and a juror that
share a trait always produce the same signal id.

Rules per extraction method:
- FIELD_MAPPING: questionnaire value first, then demographics (snake_case or
  camelCase key). Regex patterns classify text; value_range tests numbers;
  otherwise the value is tested as an affirmative. An absent field falls back
  to inference_patterns over life experiences.
- PATTERN_MATCH / NLP_CLASSIFICATION: dimension conditions first, then the
  pattern alternation over the signal's free-text sources.
  A voir dire yes/no answer to a question that matches the signal decides it.
- MANUAL: only via manual_signals tags.
Missing data never raises; it yields no signal.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from backend_jurymatch.core.exceptions import InputValidationError
from backend_jurymatch.jurymatch_logging import get_logger
from backend_jurymatch.signals.catalog import (
    CONFIDENCE_FIELD,
    CONFIDENCE_MANUAL,
    CONFIDENCE_PATTERN,
    CONFIDENCE_QUESTION,
    LIFE_EXPERIENCES,
    VOIR_DIRE,
    ExtractionMethod,
    Signal,
    SignalCatalog,
    SignalCategory,
    ValueType,
    default_catalog,
)
from backend_jurymatch.signals.models import ExtractedSignal, SubjectAttributes

logger = get_logger(__name__)

AttributesLike = Union[SubjectAttributes, Mapping[str, Any]]

_AFFIRMATIVE = frozenset({"yes", "y", "true", "t"})
_MISSING = object()


def coerce_attributes(attributes: AttributesLike) -> SubjectAttributes:
    """Validate an attribute bag. None and non-mappings raise InputValidationError."""
    if isinstance(attributes, SubjectAttributes):
        return attributes
    if not isinstance(attributes, Mapping):
        raise InputValidationError(
            "Subject attributes must be a dict or SubjectAttributes",
            received_type=type(attributes).__name__,
        )
    try:
        return SubjectAttributes.model_validate(dict(attributes))
    except ValidationError as exc:
        raise InputValidationError.from_pydantic(exc, "subject attributes") from exc


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _lookup(attrs: SubjectAttributes, names: tuple[str, ...]) -> tuple[str, Any]:
    """(reference, value) for the first populated field, or ("", _MISSING)."""
    for section in ("questionnaire", "demographics"):
        bag = getattr(attrs, section)
        for name in names:
            for key in (name, _camel(name)):
                value = bag.get(key, None)
                if not _is_blank(value):
                    return f"{section}.{key}", value
    return "", _MISSING


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def _as_text(value: Any) -> str:
    if isinstance(value, (list, tuple, set)):
        return "\n".join(str(v) for v in value)
    if isinstance(value, dict):
        return "\n".join(f"{k} {v}" for k, v in value.items())
    return str(value)


def is_affirmative(value: Any) -> bool:
    """True, a positive number, yes/true, or a non-empty collection."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    text = str(value).strip().lower()
    if text in _AFFIRMATIVE:
        return True
    number = _as_number(text)
    return number is not None and number > 0


def _in_range(value: Any, band: tuple[float, Optional[float]]) -> bool:
    number = _as_number(value)
    if number is None:
        return False
    low, high = band
    return number >= low and (high is None or number <= high)


class SignalExtractor:
    """Extract catalog signals from attribute bags. Stateless apart from the catalog."""

    def __init__(self, catalog: Optional[SignalCatalog] = None) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()

    def _field_signal(self, signal: Signal, attrs: SubjectAttributes) -> Optional[ExtractedSignal]:
        reference, value = _lookup(attrs, signal.field_names)
        if value is _MISSING:
            inference = self.catalog.inference_pattern(signal.signal_id)
            if inference is not None and inference.search(attrs.text((LIFE_EXPERIENCES,))):
                return ExtractedSignal(signal.signal_id, CONFIDENCE_PATTERN, LIFE_EXPERIENCES)
            return None

        if signal.value_range is not None:
            hit = _in_range(value, signal.value_range)
        else:
            pattern = self.catalog.pattern(signal.signal_id)
            hit = bool(pattern.search(_as_text(value))) if pattern is not None else is_affirmative(value)
        return ExtractedSignal(signal.signal_id, CONFIDENCE_FIELD, reference) if hit else None

    def _dimension_signal(self, signal: Signal, attrs: SubjectAttributes) -> Optional[ExtractedSignal]:
        if not signal.dimension_conditions:
            return None
        for condition in signal.dimension_conditions:
            score = _as_number(attrs.dimensions.get(condition.dimension))
            if score is None or not condition.holds(score):
                return None
        reference = "+".join(f"dimensions.{c.dimension}" for c in signal.dimension_conditions)
        return ExtractedSignal(signal.signal_id, CONFIDENCE_FIELD, reference)

    def _text_signal(self, signal: Signal, attrs: SubjectAttributes) -> Optional[ExtractedSignal]:
        pattern = self.catalog.pattern(signal.signal_id)
        if pattern is None:
            return None
        for source in signal.text_sources:
            if source == VOIR_DIRE:
                hit = self._voir_dire_signal(signal, pattern, attrs)
                if hit is not None:
                    return hit
            elif pattern.search(attrs.text((source,))):
                return ExtractedSignal(signal.signal_id, CONFIDENCE_PATTERN, source)
        return None

    def _voir_dire_signal(
        self, signal: Signal, pattern: re.Pattern[str], attrs: SubjectAttributes
    ) -> Optional[ExtractedSignal]:
        """
        A question that matches the signal lets a yes/no answer decide it:
        yes emits at 0.9, no settles that answer as absent. Otherwise the
        question and response are matched together; linguistic signals read
        the juror's response only.
        """
        for item in attrs.voir_dire_responses:
            if item.question and item.yes_no is not None and pattern.search(item.question):
                if signal.value_type is not ValueType.BOOLEAN:
                    return ExtractedSignal(signal.signal_id, CONFIDENCE_QUESTION, VOIR_DIRE)
                if item.yes_no:
                    return ExtractedSignal(signal.signal_id, CONFIDENCE_FIELD, VOIR_DIRE)
                continue
            if signal.category is SignalCategory.LINGUISTIC or not item.question:
                text = item.response
            else:
                text = f"{item.question}\n{item.response}"
            if text and pattern.search(text):
                return ExtractedSignal(signal.signal_id, CONFIDENCE_PATTERN, VOIR_DIRE)
        return None

    def _evaluate(self, signal: Signal, attrs: SubjectAttributes) -> Optional[ExtractedSignal]:
        method = signal.extraction_method
        if method is ExtractionMethod.FIELD_MAPPING:
            return self._field_signal(signal, attrs)
        if method in (ExtractionMethod.PATTERN_MATCH, ExtractionMethod.NLP_CLASSIFICATION):
            return self._dimension_signal(signal, attrs) or self._text_signal(signal, attrs)
        return None

    def extract(self, attributes: AttributesLike) -> list[ExtractedSignal]:
        """
        Observed signals in catalog order, each at most once.

        Within an exclusive_group only the first matching signal is kept.
        Manual tags for catalog signals are added (or override an automatic
        hit) with confidence 1.0; unknown tags are logged and ignored.
        """
        attrs = coerce_attributes(attributes)
        manual = {tag.strip().upper() for tag in attrs.manual_signals if tag and tag.strip()}
        unknown = sorted(tag for tag in manual if tag not in self.catalog)
        if unknown:
            logger.warning("manual_signals_unknown", subject_id=attrs.subject_id, signal_ids=unknown)

        found: list[ExtractedSignal] = []
        # A manual tag claims its exclusive group before any automatic hit
        taken_groups = {
            s.exclusive_group for s in self.catalog if s.signal_id in manual and s.exclusive_group
        }
        for signal in self.catalog:
            if signal.signal_id in manual:
                found.append(ExtractedSignal(signal.signal_id, CONFIDENCE_MANUAL, "manual"))
                continue
            if signal.exclusive_group and signal.exclusive_group in taken_groups:
                continue
            hit = self._evaluate(signal, attrs)
            if hit is None:
                continue
            found.append(hit)
            if signal.exclusive_group:
                taken_groups.add(signal.exclusive_group)

        logger.debug(
            "signals_extracted",
            subject_id=attrs.subject_id,
            count=len(found),
            signal_ids=[s.signal_id for s in found],
        )
        return found

    def extract_signal_ids(self, attributes: AttributesLike) -> frozenset[str]:
        return frozenset(s.signal_id for s in self.extract(attributes))
