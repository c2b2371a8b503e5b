"""Route Modules — health, orcid_proxy, researchers, profiles, publications, projects.

Invariants:
    - Each module defines its own APIRouter under /api/v1 with its own tag
    - Static path segments are declared before catch-all path parameters
"""
