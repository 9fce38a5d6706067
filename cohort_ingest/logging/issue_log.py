from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from ..models.issue_record import IssueRecord

"""Issue log buffering.

Defaulting events are collected in memory during a run and written once as
JSON Lines to ``<directory>/issues-YYYYMMDD-HHMMSS.log`` (UTC). Nothing is
written for a run without issues.
"""

__all__ = [
    "IssueRecord",
    "IssueLogBuffer",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class IssueLogBuffer:
    """In-memory buffer for issue records. flush() appends JSON Lines.

    Serial use only; one buffer per ingestion run.
    """

    def __init__(self, directory: Path | str = "logs") -> None:
        self.directory = Path(directory)
        self._records: list[IssueRecord] = []
        self._file_path: Path | None = None
        self.counts: Counter[str] = Counter()  # issue_type -> total (survives flush)

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.directory / f"issues-{stamp}.log"
        return self._file_path

    def append(self, record: IssueRecord) -> None:
        self._records.append(record)
        self.counts[record.issue_type] += 1

    def records(self) -> list[IssueRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None when empty."""
        if not self._records:
            return None
        self.directory.mkdir(parents=True, exist_ok=True)
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
