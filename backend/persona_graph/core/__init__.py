"""Core Layer — pure domain rules, error hierarchy and boundary protocols; no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or models/
    - All rule functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
