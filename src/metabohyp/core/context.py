"""
Prompt context — the fixed-format data block every prompt template embeds.
"""

from __future__ import annotations

from typing import Optional

from metabohyp.core.summary import Summary, is_significant, numeric
from metabohyp.core.table import ColumnRoles, Row

MISSING = "N/A"
MAX_SIGNIFICANT_ROWS = 50


def _fixed(value: Optional[float], digits: int) -> str:
    return MISSING if value is None else f"{value:.{digits}f}"


def _scientific(value: Optional[float]) -> str:
    return MISSING if value is None else f"{value:.2e}"


def _text(row: Row, column: Optional[str]) -> str:
    if column is None or row.get(column) in (None, ""):
        return MISSING
    return str(row[column])


def _top_line(row: Row, roles: ColumnRoles) -> str:
    line = (
        f"- {_text(row, roles.identifier)}: "
        f"FC={_fixed(numeric(row, roles.effect_size), 2)}, "
        f"p={_scientific(numeric(row, roles.significance))}"
    )
    if roles.category:
        line += f", Pathway: {_text(row, roles.category)}"
    return line


def _detail_line(row: Row, roles: ColumnRoles) -> str:
    return (
        f"{_text(row, roles.identifier)}: "
        f"FC={_fixed(numeric(row, roles.effect_size), 3)}, "
        f"p={_scientific(numeric(row, roles.significance))}"
    )


def build_context(rows: list[Row], summary: Summary | None, roles: ColumnRoles) -> str:
    """Render the summary and significant rows for the LLM. Empty without data."""
    if not rows or summary is None:
        return ""

    significant = [row for row in rows if is_significant(row, roles)][:MAX_SIGNIFICANT_ROWS]

    return (
        "DIFFERENTIAL METABOLOMICS DATA SUMMARY\n"
        "=====================================\n"
        f"Total metabolites: {summary.total_count}\n"
        f"Significant changes (|FC| > 0.5, p < 0.05): {summary.significant_count}\n"
        f"- Increased: {summary.increased_count}\n"
        f"- Decreased: {summary.decreased_count}\n"
        "\n"
        "TOP INCREASED METABOLITES:\n"
        + "\n".join(_top_line(row, roles) for row in summary.top_increased)
        + "\n\n"
        "TOP DECREASED METABOLITES:\n"
        + "\n".join(_top_line(row, roles) for row in summary.top_decreased)
        + "\n\n"
        "FULL SIGNIFICANT METABOLITES DATA:\n"
        + "\n".join(_detail_line(row, roles) for row in significant)
        + "\n"
    )
