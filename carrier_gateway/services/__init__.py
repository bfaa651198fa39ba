"""Services Layer — sub-API adapters, carrier routers, registry and fan-out.

Invariants:
    - Router -> adapter dispatch uses explicit dict mapping (no auto-discovery)
    - One adapter module per carrier

Design Decisions:
    - Adapters do I/O and delegate shape changes to core/ mappers (ADR: ExMA impureim sandwich)
"""
