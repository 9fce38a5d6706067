"""Workbook decoding and per-sheet extraction (cell normalizer, header locator, row extractor)."""
