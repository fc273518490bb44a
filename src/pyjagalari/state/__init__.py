"""State/store layer.

This package holds the last good telemetry snapshot and decides whether a
newly fetched snapshot may replace it.  The engine components only ever
reconcile against what this store accepted.
"""
