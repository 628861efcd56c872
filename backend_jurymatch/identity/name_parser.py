"""
Name normalization: free-text name -> structured, phonetically encoded parts.

Handles "First Last", "First Middle Last", "First M. Last", "Last, First",
"Last, First Middle" and trailing generational/professional suffixes.
Ambiguity (single token, initials, a comma with nothing after it) lowers
ParsedName.confidence rather than raising; only input with no name at all
is an error.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any

from backend_jurymatch.core.exceptions import EmptyInputError, InputValidationError
from backend_jurymatch.identity.phonetic import metaphone
from backend_jurymatch.identity.similarity import string_similarity

SUFFIXES = frozenset({"JR", "SR", "II", "III", "IV", "V", "ESQ", "MD", "PHD", "DDS"})
PREFIXES = ("MR", "MRS", "MS", "MISS", "DR", "REV", "HON")

# Confidence levels for ambiguous shapes
CONFIDENCE_FULL = 100
CONFIDENCE_MANY_TOKENS = 90
CONFIDENCE_COMMA_MANY_TOKENS = 85
CONFIDENCE_COMMA_NO_GIVEN = 50
CONFIDENCE_SURNAME_ONLY = 40
CAP_FIRST_INITIAL = 70
CAP_LAST_INITIAL = 60

_DISALLOWED = re.compile(r"[^A-Za-z\s\-'.,]")
_WHITESPACE = re.compile(r"\s+")
_HAS_LETTER = re.compile(r"[A-Z]")


@dataclass(frozen=True)
class ParsedName:
    """Structured name. confidence (0-100) measures parse ambiguity, not match quality."""

    full_name: str
    first_name: str
    last_name: str
    middle_name: str | None = None
    suffix: str | None = None
    confidence: int = CONFIDENCE_FULL
    phonetic_first: str = ""
    phonetic_last: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def normalize_name_text(raw: str) -> str:
    """Collapse whitespace, drop disallowed characters, periods to spaces, uppercase."""
    text = _WHITESPACE.sub(" ", raw.strip())
    text = _DISALLOWED.sub("", text)
    text = text.replace(".", " ")
    return _WHITESPACE.sub(" ", text).strip().upper()


def _strip_prefixes(text: str) -> str:
    stripped = True
    while stripped:
        stripped = False
        for prefix in PREFIXES:
            if text.startswith(prefix + " "):
                text = text[len(prefix) + 1:].lstrip()
                stripped = True
    return text


def _tokens(segment: str) -> list[str]:
    return [t for t in segment.split(" ") if t and _HAS_LETTER.search(t)]


def _pop_suffix(tokens: list[str]) -> str | None:
    if tokens and tokens[-1] in SUFFIXES:
        return tokens.pop()
    return None


def _assign_first_format(tokens: list[str]) -> tuple[str, str | None, str, int]:
    """(first, middle, last, confidence) for "First [Middle] Last" token lists."""
    if len(tokens) == 1:
        return "", None, tokens[0], CONFIDENCE_SURNAME_ONLY
    if len(tokens) == 2:
        return tokens[0], None, tokens[1], CONFIDENCE_FULL
    if len(tokens) == 3:
        return tokens[0], tokens[1], tokens[2], CONFIDENCE_FULL
    return tokens[0], " ".join(tokens[1:-1]), tokens[-1], CONFIDENCE_MANY_TOKENS


def _assign_given_names(tokens: list[str]) -> tuple[str, str | None, int]:
    """(first, middle, confidence) for the part after the comma."""
    if not tokens:
        return "", None, CONFIDENCE_COMMA_NO_GIVEN
    if len(tokens) == 1:
        return tokens[0], None, CONFIDENCE_FULL
    if len(tokens) == 2:
        return tokens[0], tokens[1], CONFIDENCE_FULL
    return tokens[0], " ".join(tokens[1:]), CONFIDENCE_COMMA_MANY_TOKENS


def parse_name(raw: str) -> ParsedName:
    """
    Parse a free-text name into first/middle/last/suffix with a confidence score.

    Raises:
        InputValidationError: raw is not a string.
        EmptyInputError: raw is empty or contains no name tokens.
    """
    if not isinstance(raw, str):
        raise InputValidationError(
            "Name input must be a string", received_type=type(raw).__name__
        )
    if not raw.strip():
        raise EmptyInputError("Name input cannot be empty")

    normalized = _strip_prefixes(normalize_name_text(raw))

    first = ""
    middle: str | None = None
    last = ""
    suffix: str | None = None

    if "," in normalized:
        segments = [s.strip() for s in normalized.split(",")]
        surname_tokens = _tokens(segments[0])
        given_tokens = _tokens(segments[1])
        # "Smith, John, Jr" style trailing segments
        for extra in segments[2:]:
            extra_tokens = _tokens(extra)
            if extra_tokens and all(t in SUFFIXES for t in extra_tokens):
                suffix = suffix or extra_tokens[-1]
        suffix_only = bool(given_tokens) and all(t in SUFFIXES for t in given_tokens)
        suffix = _pop_suffix(given_tokens) or suffix
        if len(surname_tokens) > 1:
            suffix = _pop_suffix(surname_tokens) or suffix

        if suffix_only and len(surname_tokens) > 1:
            # "John Smith, Jr": the comma only sets off the suffix
            first, middle, last, confidence = _assign_first_format(surname_tokens)
        elif surname_tokens:
            last = " ".join(surname_tokens)
            first, middle, confidence = _assign_given_names(given_tokens)
        elif given_tokens:
            first, middle, last, confidence = _assign_first_format(given_tokens)
        else:
            raise EmptyInputError("Could not parse name", raw=raw)
    else:
        tokens = _tokens(normalized)
        if len(tokens) > 1:
            suffix = _pop_suffix(tokens)
        if not tokens:
            raise EmptyInputError("Could not parse name", raw=raw)
        first, middle, last, confidence = _assign_first_format(tokens)

    # Initials are weak evidence
    if len(first) == 1:
        confidence = min(confidence, CAP_FIRST_INITIAL)
    if len(last) == 1:
        confidence = min(confidence, CAP_LAST_INITIAL)

    full_name = " ".join(p for p in (first, middle, last, suffix) if p)
    return ParsedName(
        full_name=full_name,
        first_name=first,
        last_name=last,
        middle_name=middle,
        suffix=suffix,
        confidence=confidence,
        phonetic_first=metaphone(first) if first else "",
        phonetic_last=metaphone(last) if last else "",
    )


def ensure_parsed(name: ParsedName | str) -> ParsedName:
    """Accept either a ParsedName or a raw string."""
    if isinstance(name, ParsedName):
        return name
    return parse_name(name)


def name_similarity(a: ParsedName | str, b: ParsedName | str) -> int:
    """
    Single 0-100 similarity between two names.

    Last name up to 50 (exact 50, phonetic 35, edit similarity > 0.7 25),
    first name up to 40 (exact 40, phonetic 28, matching initial 15,
    similarity 20), middle name up to 10 (exact 10, initial 5).
    """
    pa, pb = ensure_parsed(a), ensure_parsed(b)
    score = 0

    if pa.last_name == pb.last_name:
        score += 50
    elif pa.phonetic_last and pa.phonetic_last == pb.phonetic_last:
        score += 35
    elif string_similarity(pa.last_name, pb.last_name) > 0.7:
        score += 25

    if pa.first_name and pb.first_name:
        if pa.first_name == pb.first_name:
            score += 40
        elif pa.phonetic_first and pa.phonetic_first == pb.phonetic_first:
            score += 28
        elif len(pa.first_name) == 1 or len(pb.first_name) == 1:
            if pa.first_name[0] == pb.first_name[0]:
                score += 15
        elif string_similarity(pa.first_name, pb.first_name) > 0.7:
            score += 20

    if pa.middle_name and pb.middle_name:
        if pa.middle_name == pb.middle_name:
            score += 10
        elif pa.middle_name[0] == pb.middle_name[0]:
            score += 5

    return min(100, score)
