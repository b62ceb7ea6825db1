"""Event envelope and payload schemas for background jobs."""
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from bidguard.domain.constants import EVENT_GENERATE_AUTONOMOUS_PROPOSAL, EVENT_GENERATE_PROPOSAL


class Event(BaseModel):
    name: str
    data: Dict[str, Any] = Field(default_factory=dict)
    id: str = Field(default_factory=lambda: f"evt_{uuid.uuid4().hex}")
    ts: datetime = Field(default_factory=datetime.utcnow)


class AutonomousProposalRequested(BaseModel):
    """Payload of app/generate-autonomous-proposal"""
    proposal_id: str
    user_id: str
    tender_id: str
    tender_title: str
    tender_buyer: Optional[str] = None
    idea_injection: Optional[str] = None

    def to_event(self) -> Event:
        return Event(name=EVENT_GENERATE_AUTONOMOUS_PROPOSAL, data=self.model_dump())


class ProposalJobRequested(BaseModel):
    """Payload of app/generate-proposal"""
    job_id: str
    strategy_name: str
    executive_summary: str
    project_name: str
    client_name: str
    research_summary: str = ""

    def to_event(self) -> Event:
        return Event(name=EVENT_GENERATE_PROPOSAL, data=self.model_dump())
