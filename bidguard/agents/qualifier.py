"""
Qualifier Agent

Bid / no-bid advisory for a tender against the bidder's company profile.
"""
import logging
from typing import Optional

from pydantic import ValidationError

from bidguard.domain.constants import Recommendation, TrafficLight
from bidguard.models.agent_outputs import QualificationResult
from bidguard.utils.llm_service import extract_json, get_reasoning_llm
from bidguard.utils.prompt_engine import PromptEngine

logger = logging.getLogger(__name__)


class QualifierAgent:
    def __init__(self, llm=None, prompt_engine: Optional[PromptEngine] = None):
        self.llm = llm or get_reasoning_llm()
        self.prompt_engine = prompt_engine or PromptEngine()

    def run(self, tender_summary: str, company_profile: str, win_loss_history: str = "No history available") -> QualificationResult:
        """
        Returns:
            QualificationResult. Unparseable output yields a 50% cautious
            verdict; a system error yields a 0% cautious verdict.
        """
        prompt = self.prompt_engine.qualification_prompt(tender_summary, company_profile, win_loss_history)

        try:
            raw = self.llm.generate_text(prompt)
        except Exception as e:
            logger.error(f"[Qualifier] LLM call failed: {str(e)}")
            return QualificationResult(
                recommendation=Recommendation.CAUTION,
                confidence_score=0,
                traffic_light=TrafficLight.AMBER,
                reasoning=["System error during analysis"],
                strategic_advice="Please try again later.",
            )

        try:
            result = QualificationResult(**extract_json(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"[Qualifier] Unparseable qualification output: {e}")
            return QualificationResult(
                recommendation=Recommendation.CAUTION,
                confidence_score=50,
                traffic_light=TrafficLight.AMBER,
                reasoning=["Manual review recommended"],
                strategic_advice="Automated analysis could not be parsed. Review the tender manually.",
            )

        logger.info(f"[Qualifier] {result.recommendation.value} ({result.confidence_score}%, {result.traffic_light.value})")
        return result
