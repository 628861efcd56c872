"""
Signals package: named facts read from juror and persona attributes.

Catalog definitions (injected, immutable) and the extractor that applies
them to an attribute bag.
"""

from backend_jurymatch.signals.catalog import (
    DimensionCondition,
    Direction,
    ExtractionMethod,
    Pole,
    Signal,
    SignalCatalog,
    SignalCategory,
    ValueType,
    default_catalog,
)
from backend_jurymatch.signals.extractor import SignalExtractor, coerce_attributes
from backend_jurymatch.signals.models import ExtractedSignal, SubjectAttributes, VoirDireResponse

__all__ = [
    "DimensionCondition",
    "Direction",
    "ExtractedSignal",
    "ExtractionMethod",
    "Pole",
    "Signal",
    "SignalCatalog",
    "SignalCategory",
    "SignalExtractor",
    "SubjectAttributes",
    "ValueType",
    "VoirDireResponse",
    "coerce_attributes",
    "default_catalog",
]
