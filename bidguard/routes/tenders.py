"""
Tender Routes

Discovery (stored + live Contracts Finder), industries, qualification
and saved tenders.
"""
import logging
from typing import Optional, List, Dict, Any

from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel, Field

from bidguard.domain.errors import NotFoundError
from bidguard.middleware.auth import verify_key
from bidguard.services.tender_service import TenderService, get_tender_service
from bidguard.utils.industry_classifier import get_all_industries

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/tenders", tags=["tenders"])


class TenderBody(BaseModel):
    """A tender as shown to the user"""
    tender_id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=500)
    buyer: Optional[str] = Field(None, max_length=200)
    value: Optional[str] = Field(None, max_length=100)
    deadline: Optional[str] = Field(None, max_length=50)
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=20000)
    region: Optional[str] = Field(None, max_length=200)
    industry: Optional[str] = Field(None, max_length=50)


class TenderListResponse(BaseModel):
    success: bool
    tenders: List[Dict[str, Any]]
    count: int


@router.get("", response_model=TenderListResponse)
async def list_tenders(
    industry: Optional[str] = Query(None, max_length=50),
    q: Optional[str] = Query(None, max_length=200, description="Text search on title, buyer and description"),
    limit: int = Query(50, ge=1, le=200),
    _: dict = Depends(verify_key),
    service: TenderService = Depends(get_tender_service),
):
    try:
        tenders = service.list_tenders(industry=industry, query=q, limit=limit)
        return {"success": True, "tenders": tenders, "count": len(tenders)}
    except Exception as e:
        logger.error(f"Error listing tenders: {str(e)}")
        raise HTTPException(500, str(e))


@router.post("/refresh", response_model=TenderListResponse)
async def refresh_tenders(
    _: dict = Depends(verify_key),
    service: TenderService = Depends(get_tender_service),
):
    """Pull the latest open notices from Contracts Finder."""
    try:
        tenders = service.refresh_from_contracts_finder()
        return {"success": True, "tenders": tenders, "count": len(tenders)}
    except Exception as e:
        logger.error(f"Error refreshing tenders: {str(e)}")
        raise HTTPException(500, str(e))


@router.get("/industries")
async def list_industries():
    return {"success": True, "industries": get_all_industries()}


@router.post("/saved")
async def save_tender(
    request: TenderBody,
    user: dict = Depends(verify_key),
    service: TenderService = Depends(get_tender_service),
):
    try:
        service.save_tender(user["user_id"], request.model_dump())
        return {"success": True}
    except Exception as e:
        logger.error(f"Error saving tender: {str(e)}")
        raise HTTPException(500, "Failed to save tender")


@router.get("/saved")
async def list_saved_tenders(
    user: dict = Depends(verify_key),
    service: TenderService = Depends(get_tender_service),
):
    try:
        saved = service.list_saved(user["user_id"])
        return {"success": True, "tenders": saved, "count": len(saved)}
    except Exception as e:
        logger.error(f"Error listing saved tenders: {str(e)}")
        raise HTTPException(500, str(e))


@router.post("/{tender_id}/qualify")
async def qualify_tender(
    tender_id: str,
    user: dict = Depends(verify_key),
    service: TenderService = Depends(get_tender_service),
):
    """Bid / no-bid advisory for this tender against the user's profile."""
    try:
        result = service.qualify(tender_id, user["user_id"])
        return {"success": True, "qualification": result.model_dump(mode="json")}
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except Exception as e:
        logger.error(f"Error qualifying tender: {str(e)}")
        raise HTTPException(500, str(e))
