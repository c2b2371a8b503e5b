"""Database Declarations — the SQLAlchemy Base shared by models, Alembic and tests.

Invariants:
    - Engine and sessions live in infrastructure/database.py, never here

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
