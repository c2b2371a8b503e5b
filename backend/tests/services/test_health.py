"""Health & Service Info — liveness, readiness, root banner, unknown routes.

Invariants:
    - Liveness always 200; readiness checks the database
    - GET / lists the API endpoints
    - Unknown routes get a 404 envelope with the endpoint listing
"""

from fastapi import APIRouter, FastAPI

from app.api.error_handlers import list_endpoints


async def test_liveness(client):
    res = await client.get("/api/v1/health/")

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "healthy"
    assert body["service"] == "orcid-plus-api"
    assert body["uptime_seconds"] >= 0


async def test_readiness_with_database(client):
    res = await client.get("/api/v1/health/ready")

    assert res.status_code == 200
    assert res.json()["checks"] == {"database": "healthy"}


async def test_root_lists_endpoints(client):
    res = await client.get("/")

    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "ORCID++ API is running"
    assert "GET /api/v1/researchers/{orcid}" in body["endpoints"]
    assert "PUT /api/v1/profiles/{orcid}" in body["endpoints"]


async def test_unknown_route_lists_endpoints(client):
    res = await client.get("/api/v1/does-not-exist")

    assert res.status_code == 404
    error = res.json()["error"]
    assert error["code"] == "NOT_FOUND"
    assert error["requested"] == "GET /api/v1/does-not-exist"
    assert "POST /api/v1/orcid/token" in error["available_endpoints"]


async def test_endpoint_listing_covers_every_router(client):
    endpoints = (await client.get("/")).json()["endpoints"]

    assert endpoints
    for expected in (
        "GET /api/v1/health/",
        "GET /api/v1/orcid/profile/{orcid}/{section}",
        "GET /api/v1/researchers/search/all",
        "POST /api/v1/profiles/{orcid}/import",
        "GET /api/v1/profiles/{orcid}/publications",
        "DELETE /api/v1/profiles/{orcid}/projects/{project_id}",
    ):
        assert expected in endpoints
    assert all(key.split(" ", 1)[1].startswith("/api/") for key in endpoints)


def test_list_endpoints_reads_included_routers():
    mini = FastAPI()
    sub = APIRouter(prefix="/api/v1/things")

    @sub.get("/{thing_id}")
    async def get_thing(thing_id: int):
        return {"id": thing_id}

    @sub.post("")
    async def create_thing():
        return {}

    mini.include_router(sub)

    assert list_endpoints(mini) == {
        "GET /api/v1/things/{thing_id}": "Get Thing",
        "POST /api/v1/things": "Create Thing",
    }
