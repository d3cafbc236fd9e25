"""
Session — in-memory state of one analysis.

A Session owns the uploaded table (headers, rows, inferred roles and the
derived summary) and one result slot per workflow. Slots are independent:
a failure in one never touches another, and a slot's result is replaced
only by a complete success.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from metabohyp.core.context import build_context
from metabohyp.core.summary import Summary, summarize
from metabohyp.core.table import ColumnRoles, Row, infer_roles, parse_table


class Workflow(str, Enum):
    HYPOTHESES = "hypotheses"
    EXPERIMENTAL = "experimental"
    LITERATURE = "literature"


class ResultSlot(BaseModel):
    """Latest result (and latest error) of a single workflow."""

    workflow: Workflow
    result: Optional[Any] = None
    error: str = ""
    updated_at: str = ""

    def succeed(self, value: Any) -> None:
        self.result = value
        self.error = ""
        self.updated_at = datetime.now(timezone.utc).isoformat()

    def fail(self, message: str) -> None:
        self.error = message
        self.updated_at = datetime.now(timezone.utc).isoformat()


def _default_slots() -> dict[Workflow, ResultSlot]:
    return {w: ResultSlot(workflow=w) for w in Workflow}


class Session(BaseModel):
    """
    Mutable runtime state for an analysis session.
    """

    headers: list[str] = Field(default_factory=list)
    rows: list[Row] = Field(default_factory=list)
    roles: ColumnRoles = Field(default_factory=ColumnRoles)
    summary: Optional[Summary] = None
    slots: dict[Workflow, ResultSlot] = Field(default_factory=_default_slots)

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def load_table(self, text: str) -> Summary | None:
        """Replace the dataset. On FormatError the previous data is kept."""
        headers, rows = parse_table(text)
        roles = infer_roles(headers)
        summary = summarize(rows, roles)

        self.headers = headers
        self.rows = rows
        self.roles = roles
        self.summary = summary
        return summary

    @property
    def has_data(self) -> bool:
        return self.summary is not None

    def context(self) -> str:
        return build_context(self.rows, self.summary, self.roles)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def slot(self, workflow: Workflow) -> ResultSlot:
        return self.slots[workflow]

    @property
    def hypotheses(self) -> Any:
        return self.slots[Workflow.HYPOTHESES].result

    @property
    def experimental_design(self) -> Any:
        return self.slots[Workflow.EXPERIMENTAL].result

    @property
    def literature_analysis(self) -> Any:
        return self.slots[Workflow.LITERATURE].result

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def export(self) -> dict[str, Any]:
        """JSON-serialisable snapshot of the summary and all results."""
        summary: dict[str, Any] | None = None
        if self.summary is not None:
            summary = {
                "total": self.summary.total_count,
                "significant": self.summary.significant_count,
                "increased": self.summary.increased_count,
                "decreased": self.summary.decreased_count,
                "top_increased": self.summary.top_increased,
                "top_decreased": self.summary.top_decreased,
                "columns": self.roles.model_dump(),
            }

        results: dict[str, Any] = {}
        for workflow, slot in self.slots.items():
            value = slot.result
            if isinstance(value, list):
                value = [
                    v.model_dump(by_alias=True) if isinstance(v, BaseModel) else v
                    for v in value
                ]
            results[workflow.value] = {
                "result": value,
                "error": slot.error,
                "updated_at": slot.updated_at,
            }
        return {"summary": summary, "results": results}
