"""ORCID Mapping — ORCID v3.0 JSON ↔ Researcher / Publication / Project views.

Tests:
    - Record → Researcher reads employment (plain and wrapped summaries), education, keywords
    - Null-heavy records degrade to defaults instead of raising
    - Work → Publication: identifier, contributors, links, year fallback
    - Funding → Project: agency label, amount, ongoing flag, synthesized description
    - Local rows rendered as ORCID JSON read back through the same mappers
    - Put-code / search extraction and OAuth authorize URL
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from urllib.parse import parse_qs, urlparse

from app.core.orcid_mapping import (
    map_record_to_researcher, map_work_to_publication, map_funding_to_project,
    map_work_summary_to_publication, extract_put_codes, extract_search_orcid_ids,
    search_total, build_orcid_auth_url, work_to_orcid_json, project_to_orcid_json,
    user_to_orcid_record, current_year, UNKNOWN_RESEARCHER,
)

ORCID = "0000-0002-1825-0097"
NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _record(employment_summary: dict) -> dict:
    return {
        "orcid-identifier": {"path": ORCID},
        "person": {
            "name": {
                "given-names": {"value": "Ada"},
                "family-name": {"value": "Lovelace"},
            },
            "biography": {"content": "Analyst."},
            "emails": {"email": [{"email": "ada@example.org"}]},
            "keywords": {"keyword": [{"content": "Graphs"}, {"content": None}]},
            "researcher-urls": {"researcher-url": [
                {"url-name": "Lab", "url": {"value": "https://lab.example.org"}},
                {"url-name": "Broken", "url": None},
            ]},
        },
        "activities-summary": {
            "employments": {"affiliation-group": [{"summaries": [employment_summary]}]},
            "educations": {"affiliation-group": [{"summaries": [{"education-summary": {
                "organization": {"name": "USP"},
                "role-title": "PhD",
                "start-date": {"year": {"value": "2005"}},
                "end-date": {"year": {"value": "2009"}},
            }}]}]},
            "works": {"group": [{"work-summary": [{"put-code": 11}]},
                                {"work-summary": [{"put-code": 12}]}]},
        },
    }


EMPLOYMENT = {
    "organization": {"name": "Universidade de Brasília"},
    "department-name": "Computer Science",
    "role-title": "Professor",
}


def test_record_to_researcher_with_wrapped_employment():
    researcher = map_record_to_researcher(_record({"employment-summary": EMPLOYMENT}))
    assert researcher["name"] == "Ada Lovelace"
    assert researcher["orcid_id"] == ORCID
    assert researcher["institution"] == "Universidade de Brasília"
    assert researcher["department"] == "Computer Science"
    assert researcher["role"] == "Professor"
    assert researcher["email"] == "ada@example.org"
    assert researcher["research_areas"] == ["Graphs"]
    assert researcher["education"] == ["PhD - USP (2005-2009)"]
    assert researcher["external_links"] == [
        {"name": "Lab", "url": "https://lab.example.org"},
    ]
    assert researcher["publications_count"] == 2


def test_record_to_researcher_with_plain_employment():
    researcher = map_record_to_researcher(_record(EMPLOYMENT))
    assert researcher["institution"] == "Universidade de Brasília"


def test_null_heavy_record_uses_defaults():
    researcher = map_record_to_researcher({
        "orcid-identifier": None,
        "person": {"name": None, "emails": None, "keywords": {"keyword": None}},
        "activities-summary": None,
    })
    assert researcher["name"] == UNKNOWN_RESEARCHER
    assert researcher["orcid_id"] == ""
    assert researcher["email"] == ""
    assert researcher["research_areas"] == []
    assert researcher["publications_count"] == 0


def test_credit_name_used_when_given_and_family_missing():
    record = {"person": {"name": {"credit-name": {"value": "A. Lovelace"}}}}
    assert map_record_to_researcher(record)["name"] == "A. Lovelace"


def test_work_to_publication():
    work = {
        "put-code": 5,
        "title": {"title": {"value": "On Engines"}},
        "publication-date": {"year": {"value": "1843"}},
        "type": "journal-article",
        "journal-title": {"value": "Taylor's Memoirs"},
        "short-description": "Notes.",
        "external-ids": {"external-id": [{
            "external-id-type": "doi",
            "external-id-value": "10.1000/5",
            "external-id-url": {"value": "https://doi.org/10.1000/5"},
        }]},
        "contributors": {"contributor": [
            {"credit-name": {"value": "Ada Lovelace"},
             "contributor-orcid": {"path": ORCID}},
            {"credit-name": {"value": "Charles Babbage"}, "contributor-orcid": None},
            {"credit-name": None},
        ]},
    }
    publication = map_work_to_publication(work)
    assert publication["id"] == "5"
    assert publication["year"] == 1843
    assert publication["identifier"] == {"type": "doi", "value": "10.1000/5"}
    assert publication["links"] == [{"name": "doi Link", "url": "https://doi.org/10.1000/5"}]
    assert [a["name"] for a in publication["authors"]] == ["Ada Lovelace", "Charles Babbage"]
    assert publication["authors"][1]["orcid_id"] == ""


def test_work_without_date_or_title_falls_back():
    publication = map_work_to_publication({"put-code": 1, "title": None})
    assert publication["title"] == "Untitled"
    assert publication["year"] == current_year()
    assert publication["identifier"] == {"type": "other", "value": ""}


def test_local_work_without_year_keeps_it_missing():
    publication = map_work_to_publication(
        {"put-code": 2, "publication-date": None}, default_year=None,
    )
    assert publication["year"] is None


def test_local_funding_without_start_keeps_it_missing():
    project = map_funding_to_project(
        {"put-code": 4, "start-date": None, "end-date": {"year": {"value": "2010"}}},
        default_year=None,
    )
    assert project["start_year"] is None
    assert project["end_year"] == 2010


def test_work_summary_is_owned_by_record_holder():
    publication = map_work_summary_to_publication({}, "Ada", ORCID, index=3)
    assert publication["id"] == "pub-3"
    assert publication["authors"] == [{"name": "Ada", "orcid_id": ORCID, "email": None}]


def test_funding_to_project():
    project = map_funding_to_project({
        "put-code": 7,
        "type": "grant",
        "title": {"title": {"value": "Graph Atlas"}},
        "start-date": {"year": {"value": "2020"}},
        "end-date": None,
        "organization": {"name": "CNPq", "address": {"city": "Brasília", "country": "BR"}},
        "amount": {"value": "50000", "currency-code": "BRL"},
    })
    assert project["id"] == "7"
    assert project["name"] == project["title"] == "Graph Atlas"
    assert project["funding_agency"] == "CNPq, Brasília, BR"
    assert project["funding"] == "50000 BRL"
    assert project["description"] == "grant funding from CNPq, Brasília, BR"
    assert project["start_year"] == 2020
    assert project["end_year"] is None
    assert project["ongoing"] is True
    assert project["role"] == "Researcher"


def test_funding_id_falls_back_to_external_id():
    project = map_funding_to_project({
        "external-ids": {"external-id": [{"external-id-value": "CNPQ-1"}]},
    })
    assert project["id"] == "CNPQ-1"


def test_extract_put_codes_skips_empty_groups():
    section = {"group": [
        {"work-summary": [{"put-code": 3}, {"put-code": 4}]},
        {"work-summary": []},
        {"work-summary": [{"put-code": 9}]},
    ]}
    assert extract_put_codes(section, "work-summary") == ["3", "9"]


def test_search_extraction():
    response = {"num-found": 42, "result": [
        {"orcid-identifier": {"path": ORCID}}, {"orcid-identifier": None},
    ]}
    assert extract_search_orcid_ids(response) == [ORCID]
    assert search_total(response) == 42
    assert search_total({"result": None}) == 0


def test_auth_url_carries_oauth_parameters():
    url = build_orcid_auth_url(
        "https://orcid.org/oauth/", "APP-1", "http://localhost/cb", "xyz",
    )
    parsed = urlparse(url)
    assert parsed.path == "/oauth/authorize"
    params = parse_qs(parsed.query)
    assert params["client_id"] == ["APP-1"]
    assert params["response_type"] == ["code"]
    assert params["scope"] == ["/authenticate"]
    assert params["redirect_uri"] == ["http://localhost/cb"]
    assert params["state"] == ["xyz"]


# ─── Local rows ──────────────────────────────────────────────────

def _work_row(**overrides):
    fields = dict(
        id=5, title="Local Work", year=2021, work_type="conference-paper",
        source="SBC", abstract="Short.", identifier_type="doi",
        identifier_value="10.1/x", links=[{"name": "PDF", "url": "https://x.org/p.pdf"}],
        created_at=NOW, updated_at=NOW,
        authors=[
            SimpleNamespace(position=1, name="Second", orcid_id=None, email=None),
            SimpleNamespace(position=0, name="First", orcid_id=ORCID, email="f@x.org"),
        ],
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_local_work_reads_back_as_publication():
    rendered = work_to_orcid_json(_work_row(), ORCID, project_ids=[9, 2])
    assert rendered["path"] == f"/{ORCID}/work/5"
    assert rendered["created-date"] == {"value": int(NOW.timestamp() * 1000)}

    publication = map_work_to_publication(rendered)
    assert publication["id"] == "5"
    assert publication["type"] == "conference-paper"
    assert publication["identifier"] == {"type": "doi", "value": "10.1/x"}
    assert [a["name"] for a in publication["authors"]] == ["First", "Second"]
    assert publication["authors"][0]["email"] == "f@x.org"
    assert publication["links"] == [{"name": "PDF", "url": "https://x.org/p.pdf"}]
    assert publication["project_ids"] == ["2", "9"]


def test_local_work_without_identifier_has_no_external_ids():
    rendered = work_to_orcid_json(_work_row(identifier_value=None), ORCID)
    assert rendered["external-ids"] == {"external-id": []}


def test_local_project_reads_back_as_ongoing_project():
    row = SimpleNamespace(
        id=3, name="Atlas", start_year=2022, end_year=None,
        funding_agency="FAPDF", funding="R$ 10.000", description=None,
        created_at=NOW, updated_at=NOW,
    )
    project = map_funding_to_project(
        project_to_orcid_json(row, ORCID, "Coordinator", [4]),
    )
    assert project["id"] == "3"
    assert project["funding_agency"] == "FAPDF"
    assert project["funding"] == "R$ 10.000"
    assert project["role"] == "Coordinator"
    assert project["ongoing"] is True
    assert project["publication_ids"] == ["4"]


def test_local_user_reads_back_as_researcher():
    user = SimpleNamespace(
        orcid_id=ORCID, name="Ada Lovelace", institution="UnB",
        department=None, role="Professor", email=None, bio=None,
        institutional_page="https://unb.br/ada", updated_at=NOW,
    )
    record = user_to_orcid_record(
        user, research_areas=["Graphs"],
        external_links=[("Lab", "https://lab.org")],
        works=[_work_row()],
    )
    researcher = map_record_to_researcher(record)
    assert researcher["name"] == "Ada Lovelace"
    assert researcher["institution"] == "UnB"
    assert researcher["role"] == "Professor"
    assert researcher["email"] == ""
    assert researcher["institutional_page"] == "https://unb.br/ada"
    assert researcher["external_links"] == [{"name": "Lab", "url": "https://lab.org"}]
    assert researcher["publications_count"] == 1
