"""Pydantic Schemas — canonical records, query models, carrier config and envelopes.

Invariants:
    - Schemas validate at system boundaries (query strings, vendor payloads, config files)
    - Domain types from core/ used for enum fields
"""
