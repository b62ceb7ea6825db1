"""
Companies House verification tests against a mock transport
"""
import base64

import httpx

from bidguard.services.companies_house_service import (
    CompaniesHouseService,
    clean_company_number,
    format_company_context,
)


COMPANY = {
    "company_name": "ACME DIGITAL LTD",
    "company_number": "01234567",
    "company_status": "active",
    "date_of_creation": "2012-03-14",
    "type": "ltd",
    "sic_codes": ["62020"],
    "registered_office_address": {"address_line_1": "1 Wellington Street", "locality": "Leeds", "region": "West Yorkshire"},
}


def service_with(handler, api_key="ch-key"):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return CompaniesHouseService(api_key=api_key, http_client=client)


def test_clean_company_number():
    assert clean_company_number(" sc 123 456 ") == "SC123456"
    assert clean_company_number("") == ""


def test_verify_active_company():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=COMPANY)

    result = service_with(handler).verify_company("0123 4567")

    assert result["verified"] is True
    assert result["error"] is None
    assert result["company"]["company_name"] == "ACME DIGITAL LTD"
    assert result["company"]["registered_office_address"] == {
        "address_line_1": "1 Wellington Street",
        "locality": "Leeds",
    }
    assert requests[0].url.path == "/company/01234567"
    expected = "Basic " + base64.b64encode(b"ch-key:").decode()
    assert requests[0].headers["Authorization"] == expected


def test_dissolved_company_is_not_verified():
    dissolved = dict(COMPANY, company_status="dissolved")
    result = service_with(lambda request: httpx.Response(200, json=dissolved)).verify_company("01234567")

    assert result["verified"] is False
    assert result["error"] == "Company status: dissolved"
    assert result["company"]["company_number"] == "01234567"


def test_verification_failures():
    missing = service_with(lambda request: httpx.Response(404, json={"errors": []}))
    assert missing.verify_company("99999999") == {"verified": False, "company": None, "error": "Company not found"}

    broken = service_with(lambda request: httpx.Response(502, text="bad gateway"))
    assert broken.verify_company("01234567")["error"] == "API error: 502"

    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    assert service_with(refuse).verify_company("01234567")["error"] == "Network error"

    odd = service_with(lambda request: httpx.Response(200, json=["not", "a", "company"]))
    assert odd.verify_company("01234567")["verified"] is False


def test_verification_needs_a_key():
    calls = []
    service = service_with(lambda request: calls.append(request) or httpx.Response(200, json=COMPANY), api_key="")

    assert service.verify_company("01234567") == {
        "verified": False,
        "company": None,
        "error": "API key not configured",
    }
    assert service.search_companies("Acme") == []
    assert calls == []


def test_search_companies():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"items": [
            {"title": "ACME DIGITAL LTD", "company_number": "01234567", "company_status": "active",
             "address_snippet": "1 Wellington Street, Leeds"},
            "junk",
        ]})

    results = service_with(handler).search_companies("Acme Digital", limit=3)

    assert [r["company_number"] for r in results] == ["01234567"]
    assert results[0]["company_name"] == "ACME DIGITAL LTD"
    assert requests[0].url.params["q"] == "Acme Digital"
    assert requests[0].url.params["items_per_page"] == "3"

    failing = service_with(lambda request: httpx.Response(500))
    assert failing.search_companies("Acme") == []


def test_company_context():
    context = format_company_context(COMPANY)
    assert "Registered Name: ACME DIGITAL LTD" in context
    assert "Incorporated: 2012-03-14" in context
    assert "SIC Codes: 62020" in context
