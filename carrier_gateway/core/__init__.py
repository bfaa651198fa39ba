"""Core Layer — pure domain logic: vendor mappers, sub-API selection, date rules.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - All functions are pure and deterministic (the clock is a parameter)

Design Decisions:
    - Functional core separated from imperative shell (ADR: ExMA impureim sandwich)
"""
