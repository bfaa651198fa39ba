"""Route Modules — health probes, schedule search and tracking, one APIRouter each.

Invariants:
    - Handlers resolve carriers and delegate to the aggregator or registry; no vendor logic here
    - Every data route answers with the CarrierDataResponse envelope (schemas/responses.py)
"""
