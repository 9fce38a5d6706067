"""cohort_ingest: student record workbook ingestion pipeline.

Multi-sheet workbooks (one sheet per cohort year, free-form layout) are
turned into typed per-year records, cross-year student histories and
per-year statistics.
"""

from .models.records import ConsolidatedStudent, IngestionBundle, StudentRecord, YearlyStat
from .services.orchestrator import IngestError, NoValidDataError, ingest_file, ingest_workbook

__version__ = "0.1.0"

__all__ = [
    "StudentRecord",
    "ConsolidatedStudent",
    "YearlyStat",
    "IngestionBundle",
    "IngestError",
    "NoValidDataError",
    "ingest_file",
    "ingest_workbook",
]
