"""
Writer Agent

Turns the selected strategy into the full bid, revises it against red
team feedback, and writes the long-form draft for single-shot jobs.
Every output passes through the refusal fallback and UK spelling rules.
"""
import logging
from typing import Dict, Any, Optional

from bidguard.domain.errors import AgentError
from bidguard.utils.llm_service import get_reasoning_llm
from bidguard.utils.prompt_engine import PromptEngine
from bidguard.utils.refusal import generate_with_refusal_retry
from bidguard.utils.text_processing import enforce_uk_spelling, find_banned_words

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = (
    "You are an elite UK Government bid writer. Write in British English, "
    "in markdown, and never mention that you are an AI."
)


class WriterAgent:
    def __init__(self, llm=None, prompt_engine: Optional[PromptEngine] = None):
        self.llm = llm or get_reasoning_llm()
        self.prompt_engine = prompt_engine or PromptEngine()

    def _write(self, prompt: str, label: str) -> str:
        try:
            text = generate_with_refusal_retry(self.llm, prompt, system_message=SYSTEM_MESSAGE)
        except Exception as e:
            logger.error(f"[Writer] {label} failed: {str(e)}")
            raise AgentError(f"Writer failed during {label}: {e}") from e

        if not text:
            raise AgentError(f"Writer produced no content during {label}")

        text = enforce_uk_spelling(text)
        banned = find_banned_words(text)
        if banned:
            logger.warning(f"[Writer] Banned words in {label}: {', '.join(banned)}")
        return text

    def run(
        self,
        strategy_name: str,
        original_summary: str,
        project_name: str,
        client_name: str,
        research_summary: str,
    ) -> str:
        logger.info(f"[Writer] Writing {strategy_name} proposal for {project_name}")
        prompt = self.prompt_engine.writer_prompt(
            strategy_name=strategy_name,
            original_summary=original_summary,
            project_name=project_name,
            client_name=client_name,
            research_summary=research_summary,
        )
        return self._write(prompt, "proposal")

    def revise(self, draft: str, critique: Dict[str, Any]) -> str:
        """Rewrite `draft` so it answers the red team's critique."""
        logger.info(f"[Writer] Revising draft after red team score {critique.get('score')}")
        return self._write(self.prompt_engine.revision_prompt(draft, critique), "revision")

    def write_long_form(
        self,
        strategy_name: str,
        original_summary: str,
        project_name: str,
        client_name: str,
        research_summary: str,
    ) -> str:
        prompt = self.prompt_engine.long_form_prompt(
            strategy_name=strategy_name,
            original_summary=original_summary,
            project_name=project_name,
            client_name=client_name,
            research_summary=research_summary,
        )
        return self._write(prompt, "long-form draft")
