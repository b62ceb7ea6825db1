"""
Critic Agent (Red Team)

Scores a bid the way a hostile evaluator would. The verdict is always
recomputed from the score so a model cannot ACCEPT a weak bid.
"""
import logging
from typing import Optional

from pydantic import ValidationError

from bidguard.config import settings
from bidguard.domain.constants import CritiqueStatus
from bidguard.domain.errors import AgentError
from bidguard.models.agent_outputs import CritiqueOutput
from bidguard.utils.llm_service import extract_json, get_reasoning_llm, truncate_to_tokens
from bidguard.utils.prompt_engine import PromptEngine
from bidguard.utils.text_processing import word_count

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = "You are a hostile UK public sector bid evaluator. Reply with JSON only."


def verdict_for(score: float) -> CritiqueStatus:
    return CritiqueStatus.ACCEPT if score >= settings.CRITIQUE_ACCEPT_SCORE else CritiqueStatus.REJECT


def fallback_critique(content: str = "") -> CritiqueOutput:
    """Conservative critique used by the pipeline when the red team is unavailable."""
    return CritiqueOutput(
        score=6.0,
        status=CritiqueStatus.REJECT,
        harsh_feedback=["Red team review unavailable. Treat this draft as unreviewed."],
        evidence_score=0,
        social_value_present=False,
        word_count=word_count(content),
    )


def prepare_content(content: str) -> str:
    """Bound the text handed to the critic."""
    if len(content) <= settings.CRITIQUE_MAX_CHARS:
        return content
    logger.info(f"[RedTeam] Truncating {len(content)} characters for critique")
    return truncate_to_tokens(content[:settings.CRITIQUE_MAX_CHARS], settings.CRITIQUE_MAX_TOKENS)


class CriticAgent:
    def __init__(self, llm=None, prompt_engine: Optional[PromptEngine] = None):
        self.llm = llm or get_reasoning_llm()
        self.prompt_engine = prompt_engine or PromptEngine()

    def run(self, strategy_name: str, project_name: str, content: str, rfp: Optional[str] = None) -> CritiqueOutput:
        """
        Critique a proposal.

        Raises:
            AgentError: the LLM failed or returned an unusable critique
        """
        prompt = self.prompt_engine.critique_prompt(
            strategy_name=strategy_name,
            project_name=project_name,
            content=prepare_content(content or ""),
            rfp=rfp,
        )

        try:
            raw = self.llm.generate_text(prompt, system_message=SYSTEM_MESSAGE)
            critique = CritiqueOutput(**extract_json(raw))
        except (ValueError, ValidationError) as e:
            raise AgentError(f"Red team returned an unusable critique: {e}") from e
        except Exception as e:
            logger.error(f"[RedTeam] Critique failed: {str(e)}")
            raise AgentError(f"Red team critique failed: {e}") from e

        critique.status = verdict_for(critique.score)
        critique.word_count = word_count(content or "")
        logger.info(f"[RedTeam] {strategy_name}: {critique.score}/10 {critique.status.value}")
        return critique
