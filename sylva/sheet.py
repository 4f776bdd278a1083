"""Row conversion for the source spreadsheet ("1 Partes usadas, atributos").

The sheet's first data row holds the three ecosystem service names; each
species row marks its services with an "X" in those columns. Parts used are
written in Portuguese, comma separated and joined with " e " ("and").
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Sequence

SHEET_NAME = "1 Partes usadas, atributos"
SERVICE_COLUMNS = ("Ecosystem Service", "Unnamed: 3", "Unnamed: 4")

PARTS_TRANSLATION: Dict[str, str] = {
    "fruto": "fruit",
    "frutos": "fruits",
    "folha": "leaf",
    "folhas": "leaves",
    "casca": "bark",
    "tronco": "trunk",
    "galhos": "branches",
    "sementes": "seeds",
    "semente": "seed",
    "raiz": "root",
    "raízes": "roots",
    "látex": "latex",
    "flores": "flowers",
    "resina": "resin",
    "seiva": "sap",
}

_AND_RE = re.compile(r"\se\s", re.IGNORECASE)
_PAREN_RE = re.compile(r"\(.*?\)")


def _cell(row: Mapping[str, Any], key: str) -> str:
    v = row.get(key)
    if v is None or (isinstance(v, float) and v != v):  # NaN from pandas
        return ""
    return str(v)


def split_parts(raw: str) -> List[str]:
    parts: List[str] = []
    for chunk in (raw or "").split(","):
        parts.extend(p.strip() for p in _AND_RE.split(chunk))
    return [p for p in parts if p]


def translate_part(part: str) -> str:
    clean = _PAREN_RE.sub("", part.lower()).strip()
    return PARTS_TRANSLATION.get(clean, part.strip())


def row_to_record(row: Mapping[str, Any], service_names: Sequence[str],
                  service_columns: Sequence[str] = SERVICE_COLUMNS) -> Dict[str, Any]:
    services = [
        name for col, name in zip(service_columns, service_names)
        if _cell(row, col).strip().upper() == "X"
    ]
    traits_raw = _cell(row, "Related Functional Traits")
    record: Dict[str, Any] = {
        "Species": _cell(row, "Species").strip(),
        "Family": _cell(row, "Family").strip(),
        "EcosystemService": services,
        "PartsUsed": [translate_part(p) for p in split_parts(_cell(row, "Parts used"))],
        "RelatedFunctionalTraits": traits_raw.split(",") if traits_raw else [],
    }
    obs = _cell(row, "OBS").strip()
    if obs:
        record["OBS"] = obs
    return record


def rows_to_catalog(rows: Sequence[Mapping[str, Any]],
                    service_columns: Sequence[str] = SERVICE_COLUMNS) -> List[Dict[str, Any]]:
    """Convert sheet rows (header row of service names first) to catalog records."""
    if not rows:
        return []
    service_names = [_cell(rows[0], col).strip() for col in service_columns]
    records = [row_to_record(r, service_names, service_columns) for r in rows[1:]]
    return [r for r in records if r["Species"]]


def embedding_text(record: Mapping[str, Any]) -> str:
    """Text embedded for each catalog entry by the offline embedding job."""
    return (
        f"Species: {record.get('Species', '')}\n"
        f"Family: {record.get('Family', '')}\n"
        f"EcosystemService: {', '.join(record.get('EcosystemService') or [])}\n"
        f"PartsUsed: {', '.join(record.get('PartsUsed') or [])}\n"
        f"RelatedFunctionalTraits: {', '.join(record.get('RelatedFunctionalTraits') or [])}"
    )
