"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure depends on core/ only for errors and pure helpers
    - All external calls wrapped with retry/timeout/error mapping

Design Decisions:
    - Resilient wrappers over raw clients (ADR: single responsibility)
"""
