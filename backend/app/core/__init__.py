"""Core Layer — ORCID id rules, ORCID JSON mapping, query building, paging, payload rules.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - No IO and no async; only orcid_mapping reads the clock (current-year fallback)

Design Decisions:
    - Functional core separated from imperative shell (ADR: ExMA impureim sandwich)
    - ORM rows reach core only through record_protocols.py structural types
"""
