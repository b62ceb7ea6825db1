"""
Tender Service

Tender discovery and bid/no-bid qualification:
- Live tenders from the Contracts Finder OCDS search API
- Stored tender search by industry / text
- Saved tenders per user
- Qualification against the user's company profile
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from bidguard.agents import QualifierAgent
from bidguard.config import settings
from bidguard.domain.errors import NotFoundError
from bidguard.infra.mongodb.repositories.profile_repo import ProfileRepository, get_profile_repo
from bidguard.infra.mongodb.repositories.tender_repo import (
    TenderRepository,
    SavedTenderRepository,
    get_tender_repo,
    get_saved_tender_repo,
)
from bidguard.models.agent_outputs import QualificationResult
from bidguard.services.audit_service import AuditService, get_audit_service
from bidguard.utils.industry_classifier import classify_tender

logger = logging.getLogger(__name__)


def format_value(amount: Any) -> str:
    """GBP amount to three significant figures, or 'TBC'."""
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        return "TBC"
    if not amount:
        return "TBC"
    rounded = float(f"{amount:.3g}")
    if rounded.is_integer():
        return f"£{rounded:,.0f}"
    return f"£{rounded:,.2f}"


def parse_deadline(end_date: str) -> Optional[datetime]:
    """OCDS endDate to a datetime; None for rolling or unparseable dates."""
    try:
        return datetime.strptime(end_date[:10], "%Y-%m-%d")
    except (TypeError, ValueError):
        return None


def map_release(item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Map one OCDS release to a tender record. Releases without an id are skipped."""
    compiled = item.get("compiledRelease") or {}
    tender = item.get("tender") or compiled.get("tender") or {}
    buyer = item.get("buyer") or compiled.get("buyer") or {}

    tender_id = item.get("ocid") or item.get("id")
    if not tender_id:
        return None

    title = tender.get("title") or "Untitled Opportunity"
    description = tender.get("description") or "No description provided."
    end_date = (tender.get("tenderPeriod") or {}).get("endDate") or ""
    addresses = tender.get("deliveryAddresses") or [{}]

    return {
        "tender_id": str(tender_id),
        "title": title,
        "buyer": buyer.get("name") or "UK Government Body",
        "value": format_value((tender.get("value") or {}).get("amount")),
        "deadline": end_date.split("T")[0] if end_date else "Rolling",
        "deadline_at": parse_deadline(end_date),
        "category": tender.get("mainProcurementCategory") or "Public Sector",
        "description": description,
        "region": addresses[0].get("region") or "United Kingdom",
        "industry": classify_tender(title, description),
        "source": "contracts_finder",
    }


def format_tender_summary(tender: Dict[str, Any]) -> str:
    return (
        f"Title: {tender.get('title', 'Untitled')}\n"
        f"Buyer: {tender.get('buyer') or 'Unknown'}\n"
        f"Value: {tender.get('value') or 'TBC'}\n"
        f"Deadline: {tender.get('deadline') or 'Rolling'}\n"
        f"Region: {tender.get('region') or 'United Kingdom'}\n"
        f"Industry: {tender.get('industry') or 'general'}\n"
        f"Description: {tender.get('description') or ''}"
    )


def format_company_profile(profile: Optional[Dict[str, Any]]) -> str:
    if not profile:
        return "No company profile provided."
    return (
        f"Company: {profile.get('company_name') or 'Unknown'}\n"
        f"Size: {profile.get('company_size') or 'Not stated'}\n"
        f"Sectors: {', '.join(profile.get('sectors') or []) or 'Not stated'}\n"
        f"Certifications: {', '.join(profile.get('iso_certs') or []) or 'None listed'}\n"
        f"Description: {profile.get('business_description') or 'Not provided'}"
    )


class TenderService:
    def __init__(
        self,
        tender_repo: Optional[TenderRepository] = None,
        saved_tender_repo: Optional[SavedTenderRepository] = None,
        profile_repo: Optional[ProfileRepository] = None,
        audit_service: Optional[AuditService] = None,
        qualifier: Optional[QualifierAgent] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.tenders = tender_repo or get_tender_repo()
        self.saved_tenders = saved_tender_repo or get_saved_tender_repo()
        self.profiles = profile_repo or get_profile_repo()
        self.audit = audit_service or get_audit_service()
        self._qualifier = qualifier
        self.http_client = http_client

    @property
    def qualifier(self) -> QualifierAgent:
        if self._qualifier is None:
            self._qualifier = QualifierAgent()
        return self._qualifier

    def list_tenders(self, industry: Optional[str] = None, query: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
        return self.tenders.search(industry=industry, query=query, limit=limit)

    def fetch_contracts_finder(self) -> List[Dict[str, Any]]:
        """
        Fetch open tender notices from Contracts Finder.

        Returns:
            Mapped tenders; empty if the API is unavailable
        """
        params = {"limit": settings.CONTRACTS_FINDER_LIMIT, "stages": "tender"}
        try:
            if self.http_client is not None:
                response = self.http_client.get(settings.CONTRACTS_FINDER_URL, params=params)
            else:
                with httpx.Client(timeout=settings.CONTRACTS_FINDER_TIMEOUT) as client:
                    response = client.get(settings.CONTRACTS_FINDER_URL, params=params)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[Tenders] Contracts Finder unavailable: {str(e)}")
            return []

        if not isinstance(payload, dict):
            logger.error(f"[Tenders] Unexpected Contracts Finder payload: {type(payload).__name__}")
            return []

        releases = payload.get("results") or payload.get("releases") or []
        if not isinstance(releases, list):
            logger.error("[Tenders] Contracts Finder releases are not a list")
            return []

        tenders = []
        for item in releases:
            try:
                tender = map_release(item)
            except (AttributeError, TypeError, IndexError) as e:
                logger.warning(f"[Tenders] Skipping malformed release: {e}")
                continue
            if tender:
                tenders.append(tender)
        logger.info(f"[Tenders] Fetched {len(tenders)} tenders from Contracts Finder")
        return tenders

    def refresh_from_contracts_finder(self) -> List[Dict[str, Any]]:
        """Fetch live tenders and upsert them into the tenders collection."""
        tenders = self.fetch_contracts_finder()
        if tenders:
            for tender in tenders:
                tender["fetched_at"] = datetime.utcnow()
            self.tenders.upsert_many(tenders)
        return tenders

    def qualify(self, tender_id: str, user_id: str) -> QualificationResult:
        """
        Raises:
            NotFoundError: the tender is not stored
        """
        tender = self.tenders.get(tender_id)
        if not tender:
            raise NotFoundError("Tender not found")
        profile = self.profiles.get_by_user_id(user_id)
        return self.qualifier.run(
            format_tender_summary(tender),
            format_company_profile(profile),
            "No history available",
        )

    def save_tender(self, user_id: str, tender: Dict[str, Any]) -> bool:
        saved = self.saved_tenders.save(user_id, tender)
        self.audit.log_tender_saved(user_id, tender["tender_id"], {"title": tender.get("title")})
        return saved

    def list_saved(self, user_id: str) -> List[Dict[str, Any]]:
        return self.saved_tenders.list_for_user(user_id)


_tender_service: Optional[TenderService] = None


def get_tender_service() -> TenderService:
    global _tender_service
    if _tender_service is None:
        _tender_service = TenderService()
    return _tender_service
