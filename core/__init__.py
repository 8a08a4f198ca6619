"""Core (UI-agnostic) letter dashboard logic.

This package contains:
- row normalization and workbook ingestion (XLSX/XLS -> Dataset)
- scope filter normalization
- year-scoped aggregates and dashboard payloads (JSON-serializable)
- chart helpers (Altair -> Vega-Lite spec dict)
- the dataset store adapter and its shared-secret check
"""
