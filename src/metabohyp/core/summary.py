"""
Statistical summary of a differential table.

A row is significant when |effect size| > 0.5 and significance < 0.05, both
strict. A missing effect size counts as 0 and a missing p-value as 1, so a
row without a p-value is never significant.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from metabohyp.core.table import ColumnRoles, Row

EFFECT_THRESHOLD = 0.5
SIGNIFICANCE_THRESHOLD = 0.05
TOP_N = 10


@dataclass(frozen=True)
class Summary:
    total_count: int
    significant_count: int
    increased_count: int
    decreased_count: int
    top_increased: list[Row]
    top_decreased: list[Row]
    roles: ColumnRoles


def numeric(row: Row, column: Optional[str]) -> Optional[float]:
    """Return the cell as a float, or None when missing or non-numeric."""
    if column is None:
        return None
    value = row.get(column)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def effect_size(row: Row, roles: ColumnRoles) -> float:
    value = numeric(row, roles.effect_size)
    return 0.0 if value is None else value


def is_significant(row: Row, roles: ColumnRoles) -> bool:
    p = numeric(row, roles.significance)
    p = 1.0 if p is None else p
    return abs(effect_size(row, roles)) > EFFECT_THRESHOLD and p < SIGNIFICANCE_THRESHOLD


def summarize(rows: list[Row], roles: ColumnRoles) -> Summary | None:
    """Compute counts and top-changed lists, or None when there is no data."""
    if not rows:
        return None

    significant = [row for row in rows if is_significant(row, roles)]
    increased = [row for row in significant if effect_size(row, roles) > 0]
    decreased = [row for row in significant if effect_size(row, roles) < 0]

    # sorted() is stable, including with reverse=True
    top_increased = sorted(increased, key=lambda r: effect_size(r, roles), reverse=True)
    top_decreased = sorted(decreased, key=lambda r: effect_size(r, roles))

    return Summary(
        total_count=len(rows),
        significant_count=len(significant),
        increased_count=len(increased),
        decreased_count=len(decreased),
        top_increased=top_increased[:TOP_N],
        top_decreased=top_decreased[:TOP_N],
        roles=roles,
    )
