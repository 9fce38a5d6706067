from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

One bar per workbook, advanced once per sheet. In non-TTY environments (CI,
redirected output) no bar is created so logs stay free of control
sequences.
"""

__all__ = [
    "SheetProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True when stdout is a TTY and a progress bar may be displayed."""
    return sys.stdout.isatty()


class SheetProgressTracker:
    """Progress bar over the sheets of one workbook."""

    def __init__(self, total_sheets: int, *, description: str = "Ingesting sheets", enabled: bool = True) -> None:
        """Initialize progress tracker.

        Args:
            total_sheets: Number of sheets in the workbook
            description: Base description for the bar
            enabled: False forces the bar off even on a TTY
        """
        self.total_sheets = total_sheets
        self.description = description
        self.current_sheet = 0

        self.enabled = enabled and is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_sheets,
                desc=description,
                unit="sheet",
                disable=False,
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_sheet(self, sheet_name: str) -> None:
        self.current_sheet += 1
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({sheet_name})")

    def finish_sheet(self, records: int = 0) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(records=records)
            self.pbar.set_description(self.description)

    def close(self) -> None:
        """Close the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> SheetProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
