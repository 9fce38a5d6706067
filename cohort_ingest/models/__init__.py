"""Domain models for the cohort ingestion pipeline.

This package contains the record types flowing through the pipeline, the
run result types and the configuration dataclass.
"""

from .column_map import ColumnMap
from .config_models import IngestConfig
from .issue_record import IssueRecord
from .processing_result import IngestionResult, SheetOutcome, SheetStatus
from .records import ConsolidatedStudent, IngestionBundle, StudentRecord, YearlyStat

__all__ = [
    # Configuration
    "IngestConfig",
    # Pipeline records
    "ColumnMap",
    "StudentRecord",
    "ConsolidatedStudent",
    "YearlyStat",
    "IngestionBundle",
    # Run results
    "IngestionResult",
    "SheetOutcome",
    "SheetStatus",
    "IssueRecord",
]
