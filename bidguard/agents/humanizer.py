"""
Humanizer Agent

Final editing pass that strips AI tells from the accepted draft.
"""
import logging
from typing import Optional

from pydantic import ValidationError

from bidguard.models.agent_outputs import HumanizerOutput
from bidguard.utils.llm_service import extract_json, get_reasoning_llm
from bidguard.utils.prompt_engine import PromptEngine
from bidguard.utils.text_processing import enforce_uk_spelling

logger = logging.getLogger(__name__)


class HumanizerAgent:
    def __init__(self, llm=None, prompt_engine: Optional[PromptEngine] = None):
        self.llm = llm or get_reasoning_llm()
        self.prompt_engine = prompt_engine or PromptEngine()

    def run(self, text: str) -> HumanizerOutput:
        """Humanize `text`; on any failure the original is returned unchanged."""
        try:
            raw = self.llm.generate_text(self.prompt_engine.humanizer_prompt(text))
            output = HumanizerOutput(**extract_json(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"[Humanizer] Unparseable output, returning original: {e}")
            return HumanizerOutput(refined_text=text, changes_made=["Failed to humanize, returned original"])
        except Exception as e:
            logger.error(f"[Humanizer] Failed, returning original: {str(e)}")
            return HumanizerOutput(refined_text=text, changes_made=["Failed to humanize, returned original"])

        if not output.refined_text.strip():
            return HumanizerOutput(refined_text=text, changes_made=["Failed to humanize, returned original"])

        output.refined_text = enforce_uk_spelling(output.refined_text)
        logger.info(f"[Humanizer] Applied {len(output.changes_made)} changes")
        return output
