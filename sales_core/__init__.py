"""Core (UI-agnostic) sales dashboard logic.

This package contains:
- row standardization (arbitrary CSV/JSON records -> NormalizedRow)
- date canonicalization
- filter normalization and row filtering
- KPI and series aggregation (JSON-serializable payloads)
- delimited-text export
"""
