"""Core (UI-agnostic) call-metrics dashboard logic.

This package contains:
- CSV loading and record normalization (CSV -> pandas)
- filter selection and the filter engine
- team averages and chart-series shaping
- chart helpers (Altair -> Vega-Lite spec dict)
- page compute functions (JSON-serializable payloads)
"""
