"""API Layer — FastAPI routers for the ORCID proxy, researcher search and local profiles.

Invariants:
    - Routers are included explicitly in main.py, one per resource
    - Every failure leaves through api/error_handlers.py as the {"error": {...}} envelope

Design Decisions:
    - Routes validate path ids and read settings, then delegate to services/
      (ADR: ExMA impureim sandwich)
"""
