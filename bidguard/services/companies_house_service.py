"""
Companies House Service

Company verification against the Companies House public data API:
- verify_company: the registered company exists and is active
- search_companies: name search for the profile form
"""
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from bidguard.config import settings

logger = logging.getLogger(__name__)


def clean_company_number(company_number: str) -> str:
    return re.sub(r"\s", "", company_number or "").upper()


def company_summary(company: Dict[str, Any]) -> Dict[str, Any]:
    """The registered fields a bidder profile needs."""
    address = company.get("registered_office_address") or {}
    return {
        "company_name": company.get("company_name"),
        "company_number": company.get("company_number"),
        "company_status": company.get("company_status"),
        "date_of_creation": company.get("date_of_creation"),
        "type": company.get("type"),
        "sic_codes": company.get("sic_codes") or [],
        "registered_office_address": {
            key: address.get(key)
            for key in ("address_line_1", "locality", "postal_code", "country")
            if address.get(key)
        },
    }


def format_company_context(company: Dict[str, Any]) -> str:
    return (
        "VERIFIED COMPANY DATA (Companies House):\n"
        f"- Registered Name: {company.get('company_name')}\n"
        f"- Company Number: {company.get('company_number')}\n"
        f"- Status: {company.get('company_status')}\n"
        f"- Incorporated: {company.get('date_of_creation') or 'Unknown'}\n"
        f"- Type: {company.get('type') or 'Unknown'}\n"
        f"- SIC Codes: {', '.join(company.get('sic_codes') or []) or 'Not specified'}"
    )


class CompaniesHouseService:
    def __init__(self, api_key: Optional[str] = None, http_client: Optional[httpx.Client] = None):
        self.api_key = settings.COMPANIES_HOUSE_API_KEY if api_key is None else api_key
        self.http_client = http_client

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = settings.COMPANIES_HOUSE_URL.rstrip("/") + path
        # The API key is the basic-auth username with an empty password
        auth = (self.api_key, "")
        if self.http_client is not None:
            return self.http_client.get(url, params=params, auth=auth)
        with httpx.Client(timeout=settings.COMPANIES_HOUSE_TIMEOUT) as client:
            return client.get(url, params=params, auth=auth)

    def verify_company(self, company_number: str) -> Dict[str, Any]:
        """
        Check a company number against the register.

        Returns:
            {"verified": bool, "company": summary or None, "error": reason or None}
        """
        if not self.api_key:
            logger.warning("[CompaniesHouse] API key not configured")
            return {"verified": False, "company": None, "error": "API key not configured"}

        number = clean_company_number(company_number)
        if not number:
            return {"verified": False, "company": None, "error": "Company number required"}

        try:
            response = self._get(f"/company/{number}")
            if response.status_code == 404:
                return {"verified": False, "company": None, "error": "Company not found"}
            if response.is_error:
                return {"verified": False, "company": None, "error": f"API error: {response.status_code}"}
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[CompaniesHouse] Verification failed for {number}: {str(e)}")
            return {"verified": False, "company": None, "error": "Network error"}

        if not isinstance(payload, dict):
            return {"verified": False, "company": None, "error": "Unexpected API response"}

        company = company_summary(payload)
        if company["company_status"] != "active":
            return {"verified": False, "company": company, "error": f"Company status: {company['company_status']}"}

        logger.info(f"[CompaniesHouse] Verified {number} ({company['company_name']})")
        return {"verified": True, "company": company, "error": None}

    def search_companies(self, query: str, limit: int = 5) -> List[Dict[str, Any]]:
        """Name search; empty when unconfigured or the API fails."""
        if not self.api_key or not query:
            return []
        try:
            response = self._get("/search/companies", params={"q": query, "items_per_page": limit})
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[CompaniesHouse] Search failed: {str(e)}")
            return []

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            return []
        return [
            {
                "company_name": item.get("title"),
                "company_number": item.get("company_number"),
                "company_status": item.get("company_status"),
                "date_of_creation": item.get("date_of_creation"),
                "address_snippet": item.get("address_snippet"),
            }
            for item in items
            if isinstance(item, dict)
        ]


_companies_house_service: Optional[CompaniesHouseService] = None


def get_companies_house_service() -> CompaniesHouseService:
    global _companies_house_service
    if _companies_house_service is None:
        _companies_house_service = CompaniesHouseService()
    return _companies_house_service
