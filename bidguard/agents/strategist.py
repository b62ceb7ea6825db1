"""
Strategist Agent

Drafts one of the three competing bid strategies (Safe, Innovative,
Disruptive) for a tender.
"""
import logging
from typing import Dict, Optional

from pydantic import ValidationError

from bidguard.domain.constants import Strategy
from bidguard.models.agent_outputs import StrategyDraft
from bidguard.utils.llm_service import extract_json, get_reasoning_llm
from bidguard.utils.prompt_engine import PromptEngine

logger = logging.getLogger(__name__)

FALLBACK_STRATEGIES: Dict[Strategy, Dict] = {
    Strategy.SAFE: {
        "executive_summary": "A low-risk, fully compliant delivery model built on proven methods, "
                             "experienced staff and transparent governance.",
        "key_theme": "Reliability and Compliance",
        "strengths": ["Low delivery risk", "Straightforward evaluation against the specification"],
        "weaknesses": ["Limited differentiation from incumbents"],
    },
    Strategy.INNOVATIVE: {
        "executive_summary": "A modernised delivery model that introduces targeted technology and "
                             "process improvements while keeping delivery risk controlled.",
        "key_theme": "Measured Innovation",
        "strengths": ["Clear value for money story", "Balances risk with improvement"],
        "weaknesses": ["Requires evidence that the new approach is proven"],
    },
    Strategy.DISRUPTIVE: {
        "executive_summary": "A challenger approach that rethinks how the service is delivered, "
                             "targeting step-change outcomes rather than incremental gains.",
        "key_theme": "Challenger Transformation",
        "strengths": ["Strong differentiation", "High potential reward for the buyer"],
        "weaknesses": ["Higher perceived risk", "Evaluators may favour a safer bid"],
    },
}


def fallback_strategy(strategy: Strategy) -> StrategyDraft:
    return StrategyDraft(strategy_name=strategy.value, **FALLBACK_STRATEGIES[strategy])


class StrategistAgent:
    def __init__(self, llm=None, prompt_engine: Optional[PromptEngine] = None):
        self.llm = llm or get_reasoning_llm()
        self.prompt_engine = prompt_engine or PromptEngine()

    def run(
        self,
        strategy: str,
        project_name: str,
        client_name: str,
        research_summary: str,
        idea_injection: str = "",
    ) -> StrategyDraft:
        strategy = Strategy(strategy)
        context = research_summary
        if idea_injection:
            context = f"{research_summary}\n\nBidder's Own Ideas (must be reflected in the bid):\n{idea_injection}"

        prompt = self.prompt_engine.strategy_prompt(strategy.value, project_name, client_name, context)
        try:
            raw = self.llm.generate_text(prompt)
            data = extract_json(raw)
            data["strategy_name"] = strategy.value
            draft = StrategyDraft(**data)
        except (ValueError, ValidationError) as e:
            logger.warning(f"[Strategist] {strategy.value} draft unparseable, using fallback: {e}")
            return fallback_strategy(strategy)
        except Exception as e:
            logger.error(f"[Strategist] {strategy.value} draft failed, using fallback: {str(e)}")
            return fallback_strategy(strategy)

        logger.info(f"[Strategist] Drafted {strategy.value} strategy: {draft.key_theme}")
        return draft
