from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""IssueRecord model for the JSON Lines issue log.

Every place where the pipeline silently defaults (zeroed cell, skipped sheet,
discarded row) creates one of these so data loss stays diagnosable. row=-1
marks sheet- or workbook-level issues where no single row applies.
"""

__all__ = [
    "IssueRecord",
    "MALFORMED_CELL",
    "HEADER_NOT_FOUND",
    "EMPTY_SHEET",
    "SHEET_EXCLUDED",
    "BLANK_IDENTIFIER",
    "PLACEHOLDER_USED",
    "NO_VALID_DATA",
]

MALFORMED_CELL = "MALFORMED_CELL"
HEADER_NOT_FOUND = "HEADER_NOT_FOUND"
EMPTY_SHEET = "EMPTY_SHEET"
SHEET_EXCLUDED = "SHEET_EXCLUDED"
BLANK_IDENTIFIER = "BLANK_IDENTIFIER"
PLACEHOLDER_USED = "PLACEHOLDER_USED"
NO_VALID_DATA = "NO_VALID_DATA"


@dataclass(frozen=True)
class IssueRecord:
    """Structured issue record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        workbook: Workbook file name (or "<memory>" for in-memory sheets)
        sheet: Sheet name, "<WORKBOOK>" for workbook-level issues
        row: 1-based sheet row number, -1 when not row specific
        issue_type: Classification in UPPER_SNAKE_CASE
        message: Human readable detail (includes the offending raw value)
    """
    timestamp: str
    workbook: str
    sheet: str
    row: int
    issue_type: str
    message: str

    @staticmethod
    def create(workbook: str, sheet: str, row: int, issue_type: str, message: str) -> IssueRecord:
        """Create a new IssueRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return IssueRecord(
            timestamp=ts,
            workbook=workbook,
            sheet=sheet,
            row=row,
            issue_type=issue_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー禁止: asdict のフィールドのみ出力
        return json.dumps(asdict(self), ensure_ascii=False)
