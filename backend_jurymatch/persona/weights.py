"""
Signal-persona weight snapshot.

A WeightTable is an immutable, versioned snapshot produced offline by the
weight builder. It is persisted as CSV (pandas) and held in a
WeightTableStore whose reference is swapped atomically when a new snapshot
is loaded; a classification reads the reference once and keeps it.

CSV columns: persona_id, persona_name, archetype, archetype_strength,
signal_id, direction, weight. A row with an empty signal_id carries persona
metadata only (a persona that exhibits no catalog signal).
"""

from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

import pandas as pd

from backend_jurymatch.core.exceptions import WeightTableError
from backend_jurymatch.jurymatch_logging import get_logger
from backend_jurymatch.signals.catalog import Direction

logger = get_logger(__name__)

COLUMNS = [
    "persona_id",
    "persona_name",
    "archetype",
    "archetype_strength",
    "signal_id",
    "direction",
    "weight",
]
DEFAULT_ARCHETYPE_STRENGTH = 0.5


@dataclass(frozen=True)
class SignalPersonaWeight:
    signal_id: str
    persona_id: str
    direction: Direction
    weight: float


@dataclass(frozen=True)
class PersonaMeta:
    persona_id: str
    name: str
    archetype: Optional[str] = None
    archetype_strength: float = DEFAULT_ARCHETYPE_STRENGTH


class WeightTable:
    """
    Immutable snapshot of signal-persona weights plus persona metadata.

    Invariants checked on construction: weights and archetype strengths in
    [0, 1], one entry per (signal, persona, direction). version is a content
    hash, so equal tables have equal versions regardless of entry order.
    """

    def __init__(
        self,
        entries: Iterable[SignalPersonaWeight],
        personas: Iterable[PersonaMeta] = (),
    ) -> None:
        meta: dict[str, PersonaMeta] = {}
        for p in personas:
            if not 0.0 <= p.archetype_strength <= 1.0:
                raise WeightTableError(
                    f"Persona {p.persona_id} archetype_strength {p.archetype_strength} outside [0, 1]",
                    persona_id=p.persona_id,
                )
            meta[p.persona_id] = p

        seen: set[tuple[str, str, Direction]] = set()
        kept: list[SignalPersonaWeight] = []
        by_persona: dict[str, dict[str, dict[Direction, float]]] = {}
        for e in entries:
            key = (e.signal_id, e.persona_id, e.direction)
            if key in seen:
                raise WeightTableError(
                    f"Duplicate weight for signal {e.signal_id}, persona {e.persona_id}, {e.direction.value}",
                    signal_id=e.signal_id,
                    persona_id=e.persona_id,
                )
            if not 0.0 <= e.weight <= 1.0:
                raise WeightTableError(
                    f"Weight {e.weight} outside [0, 1]", signal_id=e.signal_id, persona_id=e.persona_id
                )
            seen.add(key)
            kept.append(e)
            by_persona.setdefault(e.persona_id, {}).setdefault(e.signal_id, {})[e.direction] = e.weight
            meta.setdefault(e.persona_id, PersonaMeta(e.persona_id, e.persona_id))

        self._meta = dict(sorted(meta.items()))
        self._by_persona = by_persona
        self._entries = tuple(
            sorted(kept, key=lambda e: (e.persona_id, e.signal_id, e.direction.value))
        )
        self._max_positive = {
            pid: sum(d.get(Direction.POSITIVE, 0.0) for d in signals.values())
            for pid, signals in by_persona.items()
        }
        self.version = self._content_hash()

    def _content_hash(self) -> str:
        h = hashlib.sha256()
        for p in self._meta.values():
            h.update(f"P|{p.persona_id}|{p.name}|{p.archetype or ''}|{p.archetype_strength:.6f}\n".encode())
        for e in self._entries:
            h.update(f"W|{e.persona_id}|{e.signal_id}|{e.direction.value}|{e.weight:.6f}\n".encode())
        return h.hexdigest()[:16]

    @property
    def entries(self) -> tuple[SignalPersonaWeight, ...]:
        return self._entries

    @property
    def personas(self) -> tuple[PersonaMeta, ...]:
        return tuple(self._meta.values())

    def persona(self, persona_id: str) -> Optional[PersonaMeta]:
        return self._meta.get(persona_id)

    def weights_for(self, persona_id: str) -> Mapping[str, Mapping[Direction, float]]:
        """signal_id -> {direction: weight} for one persona."""
        return self._by_persona.get(persona_id, {})

    def lookup(self, persona_id: str, signal_id: str) -> Mapping[Direction, float]:
        return self.weights_for(persona_id).get(signal_id, {})

    def max_positive(self, persona_id: str) -> float:
        """Normalization denominator: the persona's total POSITIVE weight."""
        return self._max_positive.get(persona_id, 0.0)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def to_frame(self) -> pd.DataFrame:
        rows = []
        with_entries = set()
        for e in self._entries:
            p = self._meta[e.persona_id]
            with_entries.add(p.persona_id)
            rows.append(
                {
                    "persona_id": p.persona_id,
                    "persona_name": p.name,
                    "archetype": p.archetype or "",
                    "archetype_strength": p.archetype_strength,
                    "signal_id": e.signal_id,
                    "direction": e.direction.value,
                    "weight": e.weight,
                }
            )
        for p in self._meta.values():
            if p.persona_id not in with_entries:
                rows.append(
                    {
                        "persona_id": p.persona_id,
                        "persona_name": p.name,
                        "archetype": p.archetype or "",
                        "archetype_strength": p.archetype_strength,
                        "signal_id": "",
                        "direction": "",
                        "weight": 0.0,
                    }
                )
        return pd.DataFrame(rows, columns=COLUMNS)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> WeightTable:
        """Validate a snapshot frame and build the table. Raises WeightTableError."""
        missing = [c for c in COLUMNS if c not in df.columns]
        if missing:
            raise WeightTableError(f"Weight table missing columns: {missing}", missing=missing)

        df = df.copy()
        for col in ("persona_id", "persona_name", "archetype", "signal_id", "direction"):
            df[col] = df[col].fillna("").astype(str).str.strip()
        df["weight"] = pd.to_numeric(df["weight"], errors="coerce")
        df["archetype_strength"] = pd.to_numeric(df["archetype_strength"], errors="coerce")

        if (df["persona_id"] == "").any():
            raise WeightTableError("Weight table has rows without persona_id")
        bad_strength = df["archetype_strength"].isna()
        if bad_strength.any():
            raise WeightTableError(
                "Weight table has non-numeric archetype_strength",
                rows=df.index[bad_strength].tolist(),
            )

        weighted = df[df["signal_id"] != ""]
        bad_direction = ~weighted["direction"].isin([d.value for d in Direction])
        if bad_direction.any():
            raise WeightTableError(
                "Weight table has invalid direction values",
                values=sorted(set(weighted.loc[bad_direction, "direction"])),
            )
        bad_weight = weighted["weight"].isna() | (weighted["weight"] < 0) | (weighted["weight"] > 1)
        if bad_weight.any():
            raise WeightTableError(
                "Weight table has weights outside [0, 1]",
                rows=weighted.index[bad_weight].tolist(),
            )

        personas = []
        for pid, group in df.groupby("persona_id", sort=True):
            first = group.iloc[0]
            personas.append(
                PersonaMeta(
                    persona_id=pid,
                    name=first["persona_name"] or pid,
                    archetype=first["archetype"] or None,
                    archetype_strength=float(first["archetype_strength"]),
                )
            )
        entries = [
            SignalPersonaWeight(
                signal_id=row.signal_id,
                persona_id=row.persona_id,
                direction=Direction(row.direction),
                weight=float(row.weight),
            )
            for row in weighted.itertuples(index=False)
        ]
        return cls(entries, personas)


def write_weight_table(table: WeightTable, path: Path) -> Path:
    """Persist a snapshot as CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table.to_frame().to_csv(path, index=False)
    logger.info(
        "weight_table_saved",
        path=str(path),
        rows=len(table),
        personas=len(table.personas),
        version=table.version,
    )
    return path


def load_weight_table(path: Path) -> WeightTable:
    """Load and validate a CSV snapshot. Raises WeightTableError."""
    path = Path(path)
    if not path.exists():
        raise WeightTableError(f"Weight table not found: {path}", path=str(path))
    try:
        df = pd.read_csv(path, dtype={"persona_id": str, "signal_id": str}, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise WeightTableError(f"Weight table unreadable: {exc}", path=str(path)) from exc
    table = WeightTable.from_frame(df)
    logger.info(
        "weight_table_loaded",
        path=str(path),
        rows=len(table),
        personas=len(table.personas),
        version=table.version,
    )
    return table


class WeightTableStore:
    """
    Holds the current snapshot. swap() replaces the reference under a lock;
    readers call current() once per classification and keep that snapshot.
    """

    def __init__(self, table: Optional[WeightTable] = None) -> None:
        self._lock = threading.Lock()
        self._table = table if table is not None else WeightTable(())

    def current(self) -> WeightTable:
        return self._table

    def swap(self, table: WeightTable) -> WeightTable:
        """Install a new snapshot; returns the one it replaced."""
        if not isinstance(table, WeightTable):
            raise WeightTableError(
                "Only a WeightTable can be installed", received_type=type(table).__name__
            )
        with self._lock:
            previous, self._table = self._table, table
        logger.info("weight_table_swapped", previous_version=previous.version, version=table.version)
        return previous

    def reload(self, path: Path) -> WeightTable:
        """Load a snapshot from disk then swap it in; the old one stays on failure."""
        table = load_weight_table(path)
        self.swap(table)
        return table
