"""
Red Team Route

Standalone critique of a pasted proposal, optionally against the RFP text.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field

from bidguard.agents import CriticAgent
from bidguard.middleware.auth import verify_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["red-team"])

_critic: Optional[CriticAgent] = None


def get_critic_agent() -> CriticAgent:
    global _critic
    if _critic is None:
        _critic = CriticAgent()
    return _critic


class RedTeamRequest(BaseModel):
    rfp: Optional[str] = Field(None, max_length=50000)
    proposal: Optional[str] = Field(None, max_length=100000)
    project_name: str = Field("Tender Response", max_length=500)
    strategy_name: str = Field("Submitted Draft", max_length=100)


@router.post("/red-team")
async def red_team(
    request: RedTeamRequest,
    _: dict = Depends(verify_key),
    critic: CriticAgent = Depends(get_critic_agent),
):
    if not request.proposal or not request.proposal.strip():
        raise HTTPException(400, "Proposal text is required")

    try:
        critique = critic.run(request.strategy_name, request.project_name, request.proposal, rfp=request.rfp)
    except Exception as e:
        logger.error(f"[RedTeam] Critique failed: {str(e)}")
        raise HTTPException(500, "Red team analysis failed")

    return critique.model_dump(mode="json")
