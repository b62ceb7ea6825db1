"""
Tender discovery tests: OCDS mapping and the Contracts Finder refresh
"""
import datetime as dt

import httpx

from bidguard.infra.mongodb.repositories.tender_repo import TenderRepository
from bidguard.services.tender_service import (
    TenderService,
    format_value,
    map_release,
    parse_deadline,
    format_tender_summary,
    format_company_profile,
)


RELEASE = {
    "ocid": "ocds-b5fd17-abc123",
    "tender": {
        "title": "Integrated care records platform",
        "description": "Electronic patient records for hospital trusts.",
        "value": {"amount": 1234567},
        "tenderPeriod": {"endDate": "2026-12-01T12:00:00Z"},
        "mainProcurementCategory": "services",
        "deliveryAddresses": [{"region": "Yorkshire and the Humber"}],
    },
    "buyer": {"name": "NHS England"},
}


def test_format_value():
    assert format_value(1234567) == "£1,230,000"
    assert format_value("50000") == "£50,000"
    assert format_value(None) == "TBC"
    assert format_value(0) == "TBC"
    assert format_value("n/a") == "TBC"


def test_map_release():
    tender = map_release(RELEASE)

    assert tender["tender_id"] == "ocds-b5fd17-abc123"
    assert tender["buyer"] == "NHS England"
    assert tender["value"] == "£1,230,000"
    assert tender["deadline"] == "2026-12-01"
    assert tender["region"] == "Yorkshire and the Humber"
    assert tender["industry"] == "healthcare"
    assert tender["source"] == "contracts_finder"


def test_map_release_defaults():
    tender = map_release({"id": "notice-1", "compiledRelease": {"tender": {}}})

    assert tender["title"] == "Untitled Opportunity"
    assert tender["buyer"] == "UK Government Body"
    assert tender["value"] == "TBC"
    assert tender["deadline"] == "Rolling"
    assert tender["region"] == "United Kingdom"

    assert map_release({"tender": {"title": "No id"}}) is None


def test_summaries():
    summary = format_tender_summary(map_release(RELEASE))
    assert "Title: Integrated care records platform" in summary
    assert "Value: £1,230,000" in summary

    assert format_company_profile(None) == "No company profile provided."
    profile = format_company_profile({"company_name": "Acme", "iso_certs": ["ISO 9001"]})
    assert "Certifications: ISO 9001" in profile
    assert "Sectors: Not stated" in profile


def service_with(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TenderService(http_client=client)


def test_refresh_upserts_live_tenders():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"results": [RELEASE, {"tender": {}}]})

    service = service_with(handler)
    tenders = service.refresh_from_contracts_finder()

    assert [t["tender_id"] for t in tenders] == ["ocds-b5fd17-abc123"]
    assert requests[0].url.params["stages"] == "tender"

    # a second refresh updates in place
    service.refresh_from_contracts_finder()
    repo = TenderRepository()
    assert repo.count() == 1
    assert repo.get("ocds-b5fd17-abc123")["buyer"] == "NHS England"
    assert [t["tender_id"] for t in service.list_tenders(industry="healthcare")] == ["ocds-b5fd17-abc123"]


def test_refresh_survives_api_errors():
    service = service_with(lambda request: httpx.Response(500, text="maintenance"))
    assert service.refresh_from_contracts_finder() == []
    assert TenderRepository().count() == 0

    service = service_with(lambda request: httpx.Response(200, text="<html>not json</html>"))
    assert service.fetch_contracts_finder() == []


def test_refresh_survives_unexpected_payloads():
    service = service_with(lambda request: httpx.Response(200, json=[]))
    assert service.refresh_from_contracts_finder() == []

    service = service_with(lambda request: httpx.Response(200, json={"results": "oops"}))
    assert service.refresh_from_contracts_finder() == []


def test_malformed_releases_are_skipped():
    bad = {"ocid": "ocds-bad", "tender": "Broken"}
    payload = {"results": [bad, "not-a-release", RELEASE]}
    service = service_with(lambda request: httpx.Response(200, json=payload))

    tenders = service.refresh_from_contracts_finder()
    assert [t["tender_id"] for t in tenders] == ["ocds-b5fd17-abc123"]


def test_parse_deadline():
    assert parse_deadline("2026-12-01T12:00:00Z") == dt.datetime(2026, 12, 1)
    assert parse_deadline("") is None
    assert parse_deadline("Rolling") is None
    assert map_release(RELEASE)["deadline_at"] == dt.datetime(2026, 12, 1)


def test_rolling_tenders_do_not_sort_first():
    fetched = dt.datetime(2026, 10, 1)
    repo = TenderRepository()
    repo.upsert_many([
        {"tender_id": "rolling", "title": "Framework", "deadline": "Rolling", "deadline_at": None, "fetched_at": fetched},
        {"tender_id": "nov", "title": "SOC", "deadline": "2026-11-01", "deadline_at": dt.datetime(2026, 11, 1), "fetched_at": fetched},
        {"tender_id": "dec", "title": "Wards", "deadline": "2026-12-01", "deadline_at": dt.datetime(2026, 12, 1), "fetched_at": fetched},
        {"tender_id": "stale", "title": "Old", "deadline": "2027-01-01", "deadline_at": dt.datetime(2027, 1, 1),
         "fetched_at": fetched - dt.timedelta(days=7)},
    ])

    assert [t["tender_id"] for t in repo.search()] == ["dec", "nov", "rolling", "stale"]
