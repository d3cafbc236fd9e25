"""
Tabular ingest — comma-separated text into typed rows.

The format is simple: one header line, one row per line, a bare
comma as separator. Quoted fields containing commas are NOT supported; the
quotes are stripped but the comma still splits the field.

Column roles are guessed from header names with a prioritized list of
(role, pattern) rules. Add a rule to ROLE_RULES to recognise a new header
spelling; nothing downstream needs to change.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from metabohyp.core.errors import FormatError

Cell = Union[int, float, str]
Row = dict[str, Cell]

# A cell becomes a number only when the whole trimmed text is a numeric
# literal. Empty cells, "NA", "inf" and the like stay strings.
NUMERIC_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
INTEGER_RE = re.compile(r"^[+-]?\d+$")


class Role(str, Enum):
    IDENTIFIER = "identifier"
    EFFECT_SIZE = "effect_size"
    SIGNIFICANCE = "significance"
    CATEGORY = "category"


# Evaluated in this order for every header; the first header matching a
# role claims it.
ROLE_RULES: list[tuple[Role, re.Pattern[str]]] = [
    (Role.IDENTIFIER, re.compile(r"^(metabolite|compound|name|id|feature)", re.IGNORECASE)),
    (Role.EFFECT_SIZE, re.compile(r"^(fc|fold.?change|log2fc|logfc|ratio)", re.IGNORECASE)),
    (Role.SIGNIFICANCE, re.compile(r"^(p.?val|pvalue|p$|fdr|q.?val|adj)", re.IGNORECASE)),
    (Role.CATEGORY, re.compile(r"^(pathway|kegg|hmdb|class|category|super)", re.IGNORECASE)),
]


class ColumnRoles(BaseModel):
    """Which column plays which part. A role is None when no header matched."""

    model_config = ConfigDict(frozen=True)

    identifier: Optional[str] = None
    effect_size: Optional[str] = None
    significance: Optional[str] = None
    category: Optional[str] = None


def _clean(cell: str) -> str:
    return cell.strip().strip('"').strip()


def coerce_cell(cell: str) -> Cell:
    """Turn a cleaned cell into int/float when it is a numeric literal."""
    if NUMERIC_RE.match(cell):
        return int(cell) if INTEGER_RE.match(cell) else float(cell)
    return cell


def parse_table(text: str) -> tuple[list[str], list[Row]]:
    """
    Parse delimited text into headers and rows.

    Blank lines are skipped. Short rows simply lack the trailing columns;
    extra cells beyond the header are dropped.
    """
    lines = [line.rstrip("\r") for line in (text or "").strip().split("\n")]
    lines = [line for line in lines if line.strip()]
    if not lines:
        raise FormatError("The file is empty.")

    headers = [_clean(h) for h in lines[0].split(",")]
    if not any(headers):
        raise FormatError("The header line has no column names.")

    rows: list[Row] = []
    for line in lines[1:]:
        values = [_clean(v) for v in line.split(",")]
        rows.append({h: coerce_cell(v) for h, v in zip(headers, values)})
    return headers, rows


def infer_roles(headers: list[str]) -> ColumnRoles:
    """Assign each role to the first header matching its pattern."""
    detected: dict[str, str] = {}
    for header in headers:
        for role, pattern in ROLE_RULES:
            if role.value not in detected and pattern.match(header):
                detected[role.value] = header
    return ColumnRoles(**detected)
