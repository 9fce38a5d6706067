"""Aggregation, consolidation, orchestration and read-only views."""
