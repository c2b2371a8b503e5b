"""Services Layer — transactions and orchestration over core/ and infrastructure/.

Invariants:
    - Services own the transaction: commit on success, session manager rolls back on error
    - Services return view dicts (core/orcid_mapping.py shapes), never ORM rows

Design Decisions:
    - One service module per resource for locality (ADR: ExMA no god objects)
"""
