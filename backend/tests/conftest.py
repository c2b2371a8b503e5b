"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database or ORCID credentials
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("ORCID_CLIENT_ID", "APP-TESTCLIENT")
os.environ.setdefault("ORCID_CLIENT_SECRET", "test-secret")
os.environ.setdefault("LOG_FORMAT", "text")
