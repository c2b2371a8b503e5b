"""Profile Routes — local profile upsert/read and import from ORCID.

Invariants:
    - PUT creates then updates; areas and links are replaced, never merged
    - Name and institution required; email format checked (field-level 400)
    - Saving a profile links earlier author rows that carry the same ORCID id
    - Import copies record, works and fundings once; re-import skips existing titles
    - Imported ORCID strings are cut to their column sizes
"""

from sqlalchemy import select

from app.models.project import Project
from app.models.user import User
from app.models.work import Work
from app.models.work_author import WorkAuthor

from tests.services.orcid_fixtures import (
    ORCID_A, ORCID_B, record_json, work_json, funding_json,
)


PROFILE = {
    "name": "Ada Lovelace",
    "institution": "Universidade de Brasília",
    "department": "Computer Science",
    "role": "Professor",
    "email": "ada@example.org",
    "bio": "Analytical engines.",
    "institutionalPage": "https://unb.br/ada",
    "researchAreas": ["Graphs", "graphs", "  AI "],
    "externalLinks": [
        {"name": "Lab", "url": "https://lab.example.org"},
        {"name": "", "url": ""},
    ],
}


async def test_put_creates_profile(client):
    res = await client.put(f"/api/v1/profiles/{ORCID_A}", json=PROFILE)

    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Profile created successfully"
    person = body["data"]["person"]
    assert person["name"]["given-names"]["value"] == "Ada Lovelace"
    assert person["keywords"]["keyword"] == [{"content": "Graphs"}, {"content": "AI"}]
    assert person["researcher-urls"]["researcher-url"] == [
        {"url-name": "Lab", "url": {"value": "https://lab.example.org"}},
    ]
    assert body["data"]["orcid-identifier"]["path"] == ORCID_A


async def test_put_twice_updates_and_replaces_collections(client):
    await client.put(f"/api/v1/profiles/{ORCID_A}", json=PROFILE)
    res = await client.put(
        f"/api/v1/profiles/{ORCID_A}",
        json={**PROFILE, "researchAreas": ["Logic"], "externalLinks": []},
    )

    assert res.json()["message"] == "Profile updated successfully"
    person = res.json()["data"]["person"]
    assert person["keywords"]["keyword"] == [{"content": "Logic"}]
    assert person["researcher-urls"]["researcher-url"] == []


async def test_get_profile(client):
    await client.put(f"/api/v1/profiles/{ORCID_A}", json=PROFILE)

    res = await client.get(f"/api/v1/profiles/{ORCID_A}")

    assert res.status_code == 200
    record = res.json()
    employment = record["activities-summary"]["employments"]["affiliation-group"][0]
    summary = employment["summaries"][0]["employment-summary"]
    assert summary["organization"]["name"] == "Universidade de Brasília"
    assert summary["role-title"] == "Professor"
    assert record["institutional-page"] == "https://unb.br/ada"


async def test_get_unknown_profile_is_404(client):
    res = await client.get(f"/api/v1/profiles/{ORCID_B}")

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_missing_institution_is_400(client):
    res = await client.put(
        f"/api/v1/profiles/{ORCID_A}", json={**PROFILE, "institution": "   "},
    )

    assert res.status_code == 400
    assert res.json()["error"]["details"] == [
        {"field": "institution", "message": "Institution is required"},
    ]


async def test_missing_name_is_400(client):
    res = await client.put(f"/api/v1/profiles/{ORCID_A}", json={**PROFILE, "name": ""})
    assert res.json()["error"]["details"][0]["field"] == "name"


async def test_bad_email_is_400(client):
    res = await client.put(
        f"/api/v1/profiles/{ORCID_A}", json={**PROFILE, "email": "ada-at-example"},
    )

    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Invalid email format"


async def test_bad_link_rejected_and_nothing_saved(client):
    res = await client.put(
        f"/api/v1/profiles/{ORCID_A}",
        json={**PROFILE, "externalLinks": [{"name": "FTP", "url": "ftp://x.org"}]},
    )

    assert res.status_code == 400
    assert (await client.get(f"/api/v1/profiles/{ORCID_A}")).status_code == 404


async def test_invalid_orcid_is_400(client):
    res = await client.put("/api/v1/profiles/not-an-orcid", json=PROFILE)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_ORCID"


async def test_saving_profile_links_existing_author_rows(client, test_db):
    await client.post(
        f"/api/v1/profiles/{ORCID_B}/publications",
        json={
            "title": "Joint Paper", "year": 2020,
            "authors": [{"name": "Grace"}, {"name": "Ada", "orcidId": ORCID_A}],
        },
    )

    await client.put(f"/api/v1/profiles/{ORCID_A}", json=PROFILE)

    user_id = (await test_db.execute(
        select(User.id).where(User.orcid_id == ORCID_A),
    )).scalar_one()
    author = (await test_db.execute(
        select(WorkAuthor).where(WorkAuthor.orcid_id == ORCID_A),
    )).scalar_one()
    assert author.user_id == user_id


async def test_stub_profile_is_completed_by_put(client):
    await client.post(
        f"/api/v1/profiles/{ORCID_A}/publications",
        json={"title": "Early Work", "authors": [{"name": "Ada"}]},
    )
    stub = await client.get(f"/api/v1/profiles/{ORCID_A}")
    assert stub.json()["person"]["name"]["given-names"]["value"] == ORCID_A

    res = await client.put(f"/api/v1/profiles/{ORCID_A}", json=PROFILE)

    assert res.json()["message"] == "Profile updated successfully"
    works = res.json()["data"]["activities-summary"]["works"]["group"]
    assert len(works) == 1


# ─── Import ──────────────────────────────────────────────────────

def _seed_orcid(fake_orcid):
    fake_orcid.routes[f"/v3.0/{ORCID_A}/record"] = record_json(
        ORCID_A, "Ada", "Lovelace", work_codes=[1, 2], funding_codes=[7],
    )
    fake_orcid.routes[f"/v3.0/{ORCID_A}/work/1"] = work_json(1, "Graph Coloring", "2019")
    fake_orcid.routes[f"/v3.0/{ORCID_A}/work/2"] = work_json(2, "Planar Embeddings", "2022")
    fake_orcid.routes[f"/v3.0/{ORCID_A}/funding/7"] = funding_json(7, "Graph Atlas")


async def test_import_copies_record_works_and_fundings(client, fake_orcid):
    _seed_orcid(fake_orcid)

    res = await client.post(f"/api/v1/profiles/{ORCID_A}/import")

    assert res.status_code == 200
    body = res.json()
    assert body["created"] is True
    assert body["imported"] == {"publications": 2, "projects": 1, "skipped": 0}

    profile = (await client.get(f"/api/v1/profiles/{ORCID_A}")).json()
    assert profile["person"]["emails"]["email"] == [{"email": "ada@example.org"}]
    assert profile["person"]["researcher-urls"]["researcher-url"] == [
        {"url-name": "Lab", "url": {"value": "https://lab.example.org"}},
    ]

    pubs = (await client.get(f"/api/v1/profiles/{ORCID_A}/publications")).json()
    assert [p["title"] for p in pubs["items"]] == ["Planar Embeddings", "Graph Coloring"]
    assert pubs["items"][0]["identifier"] == {"type": "doi", "value": "10.1000/2"}
    assert [a["name"] for a in pubs["items"][0]["authors"]] == [
        "Ada Lovelace", "Charles Babbage",
    ]

    projects = (await client.get(f"/api/v1/profiles/{ORCID_A}/projects")).json()
    assert projects["items"][0]["name"] == "Graph Atlas"
    assert projects["items"][0]["ongoing"] is True


async def test_reimport_skips_existing_items(client, fake_orcid):
    _seed_orcid(fake_orcid)
    await client.post(f"/api/v1/profiles/{ORCID_A}/import")

    res = await client.post(f"/api/v1/profiles/{ORCID_A}/import")

    body = res.json()
    assert body["created"] is False
    assert body["imported"] == {"publications": 0, "projects": 0, "skipped": 3}


async def test_import_fits_oversized_orcid_values_into_columns(client, fake_orcid, test_db):
    fake_orcid.routes[f"/v3.0/{ORCID_A}/record"] = record_json(
        ORCID_A, "Ada", "Lovelace", work_codes=[1], funding_codes=[7],
    )
    work = work_json(1, "T" * 1500)
    work["journal-title"] = {"value": "J" * 700}
    work["external-ids"]["external-id"][0]["external-id-value"] = "9" * 600
    work["contributors"]["contributor"][0]["credit-name"] = {"value": "A" * 400}
    fake_orcid.routes[f"/v3.0/{ORCID_A}/work/1"] = work
    funding = funding_json(7, "F" * 700)
    funding["organization"] = {"name": "O" * 700, "address": None}
    fake_orcid.routes[f"/v3.0/{ORCID_A}/funding/7"] = funding

    res = await client.post(f"/api/v1/profiles/{ORCID_A}/import")

    assert res.status_code == 200
    assert res.json()["imported"] == {"publications": 1, "projects": 1, "skipped": 0}
    stored = (await test_db.execute(select(Work))).scalar_one()
    assert len(stored.title) == 1000
    assert len(stored.source) == 500
    assert len(stored.identifier_value) == 500
    names = (await test_db.execute(select(WorkAuthor.name))).scalars().all()
    assert max(len(name) for name in names) == 255
    project = (await test_db.execute(select(Project))).scalar_one()
    assert len(project.name) == 500
    assert len(project.funding_agency) == 500

    again = await client.post(f"/api/v1/profiles/{ORCID_A}/import")
    assert again.json()["imported"] == {"publications": 0, "projects": 0, "skipped": 2}


async def test_import_fails_when_record_unavailable(client):
    res = await client.post(f"/api/v1/profiles/{ORCID_A}/import")

    assert res.status_code == 404
    assert (await client.get(f"/api/v1/profiles/{ORCID_A}")).status_code == 404
