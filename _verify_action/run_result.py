"""
Typed view of a run record from GET /api/repos/{owner}/{slug}/runs.

The server's run JSON is decoded once, here, with every default applied at
decode time. Stage 6 renders from these objects and never reaches back into
the raw dict.

    {
      "id": 42,
      "status": "verified",
      "check_status": "fail",             # "pass" | "fail" | absent
      "diff_summary": {                   # absent on a baseline revision
        "row_count_change": -50,
        "col_count_change": 0,
        "cols_added": 0,
        "cols_removed": 0,
        "cols_type_changed": 0
      },
      "version": 3,
      "row_count": 950,
      "col_count": 12
    }
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

TERMINAL_SUCCESS_STATUSES = ("verified", "completed")
FAILED_STATUS = "failed"

CHECK_STATUS_NONE = "none"
COUNT_PLACEHOLDER = "—"


@dataclass(frozen=True)
class DiffSummary:
    row_count_change: int = 0
    col_count_change: int = 0
    cols_added: int = 0
    cols_removed: int = 0
    cols_type_changed: int = 0
    raw: Optional[dict] = None

    @classmethod
    def from_api(cls, data: dict) -> "DiffSummary":
        return cls(
            row_count_change=_int_or_zero(data.get("row_count_change")),
            col_count_change=_int_or_zero(data.get("col_count_change")),
            cols_added=_int_or_zero(data.get("cols_added")),
            cols_removed=_int_or_zero(data.get("cols_removed")),
            cols_type_changed=_int_or_zero(data.get("cols_type_changed")),
            raw=data,
        )

    def has_structural_changes(self) -> bool:
        return any((
            self.row_count_change,
            self.cols_added,
            self.cols_removed,
            self.cols_type_changed,
        ))

    def to_output(self) -> str:
        """Compact JSON of the server's diff object, as sent."""
        return json.dumps(
            self.raw if self.raw is not None else {}, separators=(",", ":"), ensure_ascii=False
        )


@dataclass(frozen=True)
class RunResult:
    id: Any
    status: str
    check_status: str = CHECK_STATUS_NONE
    diff_summary: Optional[DiffSummary] = None
    version: Any = None
    row_count: Any = None
    col_count: Any = None

    @classmethod
    def from_api(cls, run: dict) -> "RunResult":
        diff = run.get("diff_summary")
        return cls(
            id=run.get("id"),
            status=str(run.get("status") or ""),
            check_status=str(run.get("check_status") or CHECK_STATUS_NONE),
            diff_summary=DiffSummary.from_api(diff) if isinstance(diff, dict) else None,
            version=run.get("version"),
            row_count=run.get("row_count"),
            col_count=run.get("col_count"),
        )

    @property
    def is_terminal_success(self) -> bool:
        return self.status in TERMINAL_SUCCESS_STATUSES

    @property
    def is_failed(self) -> bool:
        return self.status == FAILED_STATUS

    @property
    def verdict(self) -> str:
        """PASS unless the check explicitly failed. A baseline always passes."""
        return "FAIL" if self.check_status == "fail" else "PASS"

    @property
    def version_label(self) -> str:
        return "null" if self.version is None else str(self.version)

    @property
    def row_count_label(self) -> str:
        return COUNT_PLACEHOLDER if self.row_count is None else str(self.row_count)

    @property
    def col_count_label(self) -> str:
        return COUNT_PLACEHOLDER if self.col_count is None else str(self.col_count)

    def diff_summary_output(self) -> str:
        return self.diff_summary.to_output() if self.diff_summary else "null"


def build_proof_url(api_base: str, owner: str, slug: str, revision_id) -> str:
    """Proof download URL. Pure string formatting; nothing is fetched."""
    return f"{api_base}/api/repos/{owner}/{slug}/runs/{revision_id}/proof"


def _int_or_zero(value) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
