"""Company bio research for the bidder's own profile."""
import logging
from typing import Optional

from bidguard.domain.errors import AgentError
from bidguard.utils.llm_service import get_research_llm
from bidguard.utils.prompt_engine import PromptEngine
from bidguard.utils.refusal import strip_refusal

logger = logging.getLogger(__name__)


class CompanyResearcherAgent:
    def __init__(self, llm=None, prompt_engine: Optional[PromptEngine] = None):
        self.llm = llm or get_research_llm()
        self.prompt_engine = prompt_engine or PromptEngine()

    def run(
        self,
        company_name: str,
        website: Optional[str] = None,
        current_description: Optional[str] = None,
        registered_details: Optional[str] = None,
    ) -> str:
        prompt = self.prompt_engine.company_research_prompt(
            company_name, website, current_description, registered_details
        )
        try:
            bio = strip_refusal(self.llm.generate_text(prompt, max_tokens=500))
        except Exception as e:
            logger.error(f"[CompanyResearch] Failed for {company_name}: {str(e)}")
            raise AgentError(f"Company research failed: {e}") from e

        if not bio:
            raise AgentError("Company research returned no content")
        logger.info(f"[CompanyResearch] Enhanced bio for {company_name} ({len(bio.split())} words)")
        return bio
