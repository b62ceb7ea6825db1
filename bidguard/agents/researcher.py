"""
Researcher Agent

Gathers live market intelligence on the buyer with the web-grounded
research model.
"""
import logging
from typing import Optional

from pydantic import ValidationError

from bidguard.models.agent_outputs import ResearchOutput
from bidguard.utils.llm_service import extract_json, get_research_llm
from bidguard.utils.prompt_engine import PromptEngine

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = "You are a factual research analyst. Only report information you can verify on the live web."


def fallback_research(project_name: str, client_name: str) -> ResearchOutput:
    """Generic research pack used when live research is unavailable."""
    return ResearchOutput(
        client_news=[f"[Fallback] Live research unavailable for {client_name}. Verify recent news manually."],
        competitor_wins=["[Fallback] Incumbent and recent award data not retrieved."],
        pain_points=[
            "Budget pressure across UK public sector bodies",
            f"Delivery risk and value for money scrutiny on {project_name}",
            "Social Value and Net Zero commitments now scored in most tenders",
        ],
        evidence_bullets=[
            "Procurement Act 2023 raises transparency and performance reporting expectations",
            "Social Value typically carries 10% or more of the quality score (PPN 06/20)",
        ],
    )


class ResearcherAgent:
    def __init__(self, llm=None, prompt_engine: Optional[PromptEngine] = None):
        self.llm = llm or get_research_llm()
        self.prompt_engine = prompt_engine or PromptEngine()

    def run(self, project_name: str, client_name: str = "Unknown Client") -> ResearchOutput:
        logger.info(f"[Researcher] Researching {client_name} for {project_name}")
        prompt = self.prompt_engine.research_prompt(project_name, client_name or "Unknown Client")

        try:
            raw = self.llm.generate_text(prompt, system_message=SYSTEM_MESSAGE)
            research = ResearchOutput(**extract_json(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"[Researcher] Could not parse research output, using fallback: {e}")
            return fallback_research(project_name, client_name)
        except Exception as e:
            logger.error(f"[Researcher] Research failed, using fallback: {str(e)}")
            return fallback_research(project_name, client_name)

        logger.info(
            f"[Researcher] Found {len(research.client_news)} news items, "
            f"{len(research.evidence_bullets)} evidence bullets"
        )
        return research
