"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - All contracts derive from CamelModel: camelCase out, either case in

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
    - ORCID-shaped payloads (records, works, fundings) pass through as plain dicts
"""
