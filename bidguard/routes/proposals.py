"""
Proposal Routes

Autonomous bid generation and access to generated proposals.
Every read and write is scoped to the calling user.
"""
import logging
from typing import Optional, List, Dict, Any

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from bidguard.domain.errors import InsufficientCreditsError, NotFoundError
from bidguard.middleware.auth import verify_key
from bidguard.services.proposal_service import (
    ProposalService,
    StartProposalRequest,
    get_proposal_service,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/proposals", tags=["proposals"])


# ===================== REQUEST/RESPONSE MODELS =====================

class StartProposalBody(BaseModel):
    """Start autonomous generation for a tender"""
    tender_id: str = Field(..., min_length=1, max_length=100)
    tender_title: str = Field(..., min_length=1, max_length=500)
    tender_buyer: Optional[str] = Field(None, max_length=200)
    idea_injection: Optional[str] = Field(None, max_length=5000, description="Bidder's own ideas to weave into the bid")


class StartProposalResponse(BaseModel):
    success: bool
    proposal_id: str
    message: str


class UpdateProposalBody(BaseModel):
    final_content: str = Field(..., min_length=1)


class ProposalListResponse(BaseModel):
    success: bool
    proposals: List[Dict[str, Any]]
    count: int


# ===================== ENDPOINTS =====================

@router.post("/start", response_model=StartProposalResponse)
async def start_proposal(
    request: StartProposalBody,
    user: dict = Depends(verify_key),
    service: ProposalService = Depends(get_proposal_service),
):
    """Consume a credit, create the proposal and queue the generation job."""
    try:
        return service.start(user["user_id"], StartProposalRequest(**request.model_dump()))
    except InsufficientCreditsError as e:
        raise HTTPException(402, str(e))
    except Exception as e:
        logger.error(f"Error starting proposal: {str(e)}")
        raise HTTPException(500, "Failed to start proposal generation")


@router.get("/list", response_model=ProposalListResponse)
async def list_proposals(
    user: dict = Depends(verify_key),
    service: ProposalService = Depends(get_proposal_service),
):
    """The user's 20 most recent proposals."""
    try:
        proposals = service.list(user["user_id"])
        return {"success": True, "proposals": proposals, "count": len(proposals)}
    except Exception as e:
        logger.error(f"Error listing proposals: {str(e)}")
        raise HTTPException(500, str(e))


@router.get("/{proposal_id}")
async def get_proposal(
    proposal_id: str,
    user: dict = Depends(verify_key),
    service: ProposalService = Depends(get_proposal_service),
):
    try:
        return {"success": True, "proposal": service.get(user["user_id"], proposal_id)}
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except Exception as e:
        logger.error(f"Error getting proposal: {str(e)}")
        raise HTTPException(500, str(e))


@router.patch("/{proposal_id}")
async def update_proposal(
    proposal_id: str,
    request: UpdateProposalBody,
    user: dict = Depends(verify_key),
    service: ProposalService = Depends(get_proposal_service),
):
    """Save the user's edits to the final content."""
    try:
        proposal = service.update_final_content(user["user_id"], proposal_id, request.final_content)
        return {"success": True, "proposal": proposal}
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except Exception as e:
        logger.error(f"Error updating proposal: {str(e)}")
        raise HTTPException(500, str(e))


@router.get("/{proposal_id}/export", response_class=PlainTextResponse)
async def export_proposal(
    proposal_id: str,
    user: dict = Depends(verify_key),
    service: ProposalService = Depends(get_proposal_service),
):
    """Download the proposal as markdown."""
    try:
        content = service.export(user["user_id"], proposal_id)
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except Exception as e:
        logger.error(f"Error exporting proposal: {str(e)}")
        raise HTTPException(500, str(e))
    return PlainTextResponse(
        content,
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{proposal_id}.md"'},
    )
