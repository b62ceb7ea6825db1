"""
Profile Routes

Company profile, credit balance and AI-assisted company bio.
"""
import logging
from typing import Optional, List

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field

from bidguard.agents import CompanyResearcherAgent
from bidguard.domain.constants import CompanySize
from bidguard.infra.mongodb.repositories.profile_repo import ProfileRepository, get_profile_repo
from bidguard.middleware.auth import verify_key
from bidguard.services.audit_service import AuditService, get_audit_service
from bidguard.services.companies_house_service import (
    CompaniesHouseService,
    get_companies_house_service,
    format_company_context,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["profile"])

_company_researcher: Optional[CompanyResearcherAgent] = None


def get_company_researcher() -> CompanyResearcherAgent:
    global _company_researcher
    if _company_researcher is None:
        _company_researcher = CompanyResearcherAgent()
    return _company_researcher


# ===================== REQUEST MODELS =====================

class UpdateProfileRequest(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    business_description: Optional[str] = Field(None, max_length=5000)
    website: Optional[str] = Field(None, max_length=500)
    sectors: Optional[List[str]] = Field(None, max_length=20)
    iso_certs: Optional[List[str]] = Field(None, max_length=20)
    company_size: Optional[CompanySize] = None


class CompanyResearchRequest(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    website: Optional[str] = Field(None, max_length=500)
    current_description: Optional[str] = Field(None, max_length=5000)
    companies_house_number: Optional[str] = Field(None, max_length=20)


# ===================== ENDPOINTS =====================

@router.get("/profile")
async def get_profile(
    user: dict = Depends(verify_key),
    repo: ProfileRepository = Depends(get_profile_repo),
):
    try:
        profile = repo.get_by_user_id(user["user_id"])
        if not profile:
            raise HTTPException(404, "Profile not found")
        return {"success": True, "profile": repo.public_view(profile)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting profile: {str(e)}")
        raise HTTPException(500, str(e))


@router.put("/profile")
async def update_profile(
    request: UpdateProfileRequest,
    user: dict = Depends(verify_key),
    repo: ProfileRepository = Depends(get_profile_repo),
    audit: AuditService = Depends(get_audit_service),
):
    """Update only the provided fields."""
    try:
        updates = request.model_dump(mode="json", exclude_none=True)
        if not updates:
            raise HTTPException(400, "No fields to update")

        if not repo.update_profile(user["user_id"], updates):
            raise HTTPException(404, "Profile not found")

        audit.log_profile_updated(user["user_id"], sorted(updates))
        return {"success": True, "profile": repo.public_view(repo.get_by_user_id(user["user_id"]))}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating profile: {str(e)}")
        raise HTTPException(500, str(e))


@router.get("/credits")
async def get_credits(
    user: dict = Depends(verify_key),
    repo: ProfileRepository = Depends(get_profile_repo),
):
    try:
        return repo.get_credit_status(user["user_id"])
    except Exception as e:
        logger.error(f"[Credits] Error reading credits: {str(e)}")
        raise HTTPException(500, str(e))


@router.post("/company-research")
async def company_research(
    request: CompanyResearchRequest,
    _: dict = Depends(verify_key),
    agent: CompanyResearcherAgent = Depends(get_company_researcher),
    companies_house: CompaniesHouseService = Depends(get_companies_house_service),
):
    """Draft a 150-200 word bid-ready company bio, optionally verified against Companies House."""
    try:
        verification = None
        registered_details = None
        if request.companies_house_number:
            verification = companies_house.verify_company(request.companies_house_number)
            if verification["verified"]:
                registered_details = format_company_context(verification["company"])

        bio = agent.run(
            request.company_name,
            request.website,
            request.current_description,
            registered_details,
        )
        return {"success": True, "enhanced_description": bio, "verification": verification}
    except Exception as e:
        logger.error(f"[CompanyResearch] Error: {str(e)}")
        raise HTTPException(500, "Company research failed")
