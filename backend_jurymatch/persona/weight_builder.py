"""
Offline weight-table build — persona definitions in, versioned snapshot out.

Each persona is read by the same SignalExtractor used on jurors. Every
signal the persona exhibits gets the signal's POSITIVE persona_weight. A
signal exhibited through a dimension score (e.g. authoritarianism >= 4)
also puts its opposite_weight as NEGATIVE on the opposite pole's signal,
so a juror showing the opposite trait counts against that persona instead
of merely failing to count for it.

Run: python -m backend_jurymatch.persona.weight_builder --personas personas.json --output weights.csv
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from backend_jurymatch.config import get_settings
from backend_jurymatch.core.exceptions import (
    CatalogError,
    InputValidationError,
    JuryMatchError,
    WeightTableError,
)
from backend_jurymatch.jurymatch_logging import configure_structlog, get_logger
from backend_jurymatch.persona.models import PersonaProfile
from backend_jurymatch.persona.weights import (
    PersonaMeta,
    SignalPersonaWeight,
    WeightTable,
    write_weight_table,
)
from backend_jurymatch.signals.catalog import Direction, SignalCatalog, default_catalog
from backend_jurymatch.signals.extractor import SignalExtractor

logger = get_logger(__name__)

PersonaLike = Union[PersonaProfile, Mapping[str, Any]]


def _coerce_persona(persona: PersonaLike) -> PersonaProfile:
    if isinstance(persona, PersonaProfile):
        return persona
    if not isinstance(persona, Mapping):
        raise InputValidationError(
            "Persona must be a dict or PersonaProfile", received_type=type(persona).__name__
        )
    try:
        return PersonaProfile.model_validate(dict(persona))
    except ValidationError as exc:
        raise InputValidationError.from_pydantic(exc, "persona profile") from exc


def persona_weights(
    persona: PersonaProfile, extractor: SignalExtractor
) -> list[SignalPersonaWeight]:
    """Weight entries for one persona (POSITIVE per exhibited signal, plus dual NEGATIVEs)."""
    catalog = extractor.catalog
    positive: dict[str, float] = {}
    negative: dict[str, float] = {}
    for hit in extractor.extract(persona):
        signal = catalog[hit.signal_id]
        positive[signal.signal_id] = signal.persona_weight
        if hit.from_dimension and signal.opposite_signal_id and signal.opposite_weight > 0:
            opposite = signal.opposite_signal_id
            negative[opposite] = max(negative.get(opposite, 0.0), signal.opposite_weight)

    entries = [
        SignalPersonaWeight(sid, persona.persona_id, Direction.POSITIVE, w)
        for sid, w in positive.items()
    ]
    entries += [
        SignalPersonaWeight(sid, persona.persona_id, Direction.NEGATIVE, w)
        for sid, w in negative.items()
    ]
    return entries


def build_weight_table(
    personas: Iterable[PersonaLike],
    catalog: Optional[SignalCatalog] = None,
) -> WeightTable:
    """Deterministic build: same personas and catalog always give the same version."""
    extractor = SignalExtractor(catalog)
    profiles = sorted((_coerce_persona(p) for p in personas), key=lambda p: p.persona_id)

    entries: list[SignalPersonaWeight] = []
    metas: list[PersonaMeta] = []
    seen: set[str] = set()
    for profile in profiles:
        if profile.persona_id in seen:
            raise WeightTableError(
                f"Duplicate persona id {profile.persona_id}", persona_id=profile.persona_id
            )
        seen.add(profile.persona_id)
        metas.append(
            PersonaMeta(
                persona_id=profile.persona_id,
                name=profile.name,
                archetype=profile.archetype,
                archetype_strength=profile.archetype_strength,
            )
        )
        rows = persona_weights(profile, extractor)
        logger.debug("persona_weights_built", persona_id=profile.persona_id, entries=len(rows))
        entries.extend(rows)

    table = WeightTable(entries, metas)
    logger.info(
        "weight_table_built",
        personas=len(metas),
        entries=len(table),
        catalog_signals=len(extractor.catalog),
        version=table.version,
    )
    return table


def load_personas(path: Path) -> list[PersonaProfile]:
    """Read personas from a JSON file: a list, or an object with a "personas" list."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise InputValidationError(f"Personas file not found: {path}", path=str(path)) from exc
    except json.JSONDecodeError as exc:
        raise InputValidationError(f"Personas file is not valid JSON: {exc}", path=str(path)) from exc
    if isinstance(data, dict):
        data = data.get("personas", [])
    if not isinstance(data, list):
        raise InputValidationError("Personas JSON must be a list", path=str(path))
    return [_coerce_persona(p) for p in data]


def load_catalog(path: Path) -> SignalCatalog:
    path = Path(path)
    try:
        rows = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Catalog file unreadable: {exc}", path=str(path)) from exc
    if isinstance(rows, dict):
        rows = rows.get("signals", [])
    return SignalCatalog.from_dicts(rows)


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint. Run: python -m backend_jurymatch.persona.weight_builder --personas PATH [--output PATH] [--catalog PATH]"""
    import argparse

    parser = argparse.ArgumentParser(description="Build the JuryMatch signal-persona weight snapshot")
    parser.add_argument("--personas", type=Path, required=True, help="Persona definitions JSON")
    parser.add_argument(
        "--output", type=Path, default=None, help="Output CSV (default: JURYMATCH_WEIGHT_TABLE_PATH)"
    )
    parser.add_argument("--catalog", type=Path, default=None, help="Signal catalog JSON (default: built-in)")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_structlog(settings.log_level, settings.log_format)
    out_path = args.output or settings.weight_table_path
    try:
        catalog = load_catalog(args.catalog) if args.catalog else default_catalog()
        table = build_weight_table(load_personas(args.personas), catalog)
        write_weight_table(table, out_path)
    except JuryMatchError as exc:
        logger.error("weight_table_build_failed", error=exc.message, code=exc.code, **exc.details)
        print(f"[weight_builder] {exc.message}")
        return 1
    print(f"[weight_builder] Saved {len(table)} weights for {len(table.personas)} personas to {out_path} (version {table.version})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
