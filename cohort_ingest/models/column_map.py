from __future__ import annotations

from dataclasses import dataclass, field

"""ColumnMap model: semantic role -> column index for one sheet."""

__all__ = [
    "ColumnMap",
]


@dataclass(frozen=True)
class ColumnMap:
    """Column indices resolved from a sheet's header row.

    Only ``identifier`` is mandatory. Unresolved optional roles are None and
    the Row Extractor falls back to placeholders / zero for them.
    """
    header_row_index: int  # 0-based position of the header among the sheet rows
    identifier: int
    name: int | None = None
    status: int | None = None
    rework_count: int | None = None
    semesters: dict[str, int] = field(default_factory=dict)  # "sem1" -> column index

    def describe(self) -> dict[str, object]:
        """Plain dict view (used by --inspect-data)."""
        return {
            "header_row": self.header_row_index,
            "identifier": self.identifier,
            "name": self.name,
            "status": self.status,
            "rework_count": self.rework_count,
            "semesters": dict(self.semesters),
        }
