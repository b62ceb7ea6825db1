import logging
import json
import re
from functools import lru_cache
from typing import List, Optional, Dict, Any

from openai import OpenAI
import tiktoken
from tenacity import retry, wait_exponential, stop_after_attempt

from bidguard.config import settings
from bidguard.domain.errors import LLMUnavailableError

logger = logging.getLogger(__name__)

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
_JSON_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_DECODER = json.JSONDecoder()


@lru_cache(maxsize=1)
def _get_encoding():
    return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str) -> int:
    """Count tokens in text, falling back to a word count if the tokenizer is unavailable."""
    try:
        return len(_get_encoding().encode(text))
    except Exception as e:
        logger.error(f"Error counting tokens: {str(e)}")
        return len(text.split())


def truncate_to_tokens(text: str, max_tokens: int) -> str:
    """Cut text down to at most `max_tokens` tokens."""
    try:
        encoding = _get_encoding()
        tokens = encoding.encode(text)
        if len(tokens) <= max_tokens:
            return text
        return encoding.decode(tokens[:max_tokens])
    except Exception as e:
        logger.error(f"Error truncating by tokens: {str(e)}")
        return " ".join(text.split()[:max_tokens])


def strip_reasoning(text: str) -> str:
    """Remove <think>...</think> blocks emitted by reasoning models."""
    return _THINK_BLOCK.sub("", text or "").strip()


def extract_json(text: str) -> Dict[str, Any]:
    """
    Pull the first JSON object out of an LLM response.

    Handles markdown fences, reasoning blocks and leading/trailing chatter,
    including chatter that itself contains braces.

    Raises:
        ValueError: If no JSON object can be parsed
    """
    cleaned = _JSON_FENCE.sub("", strip_reasoning(text))
    start = cleaned.find("{")
    if start == -1:
        raise ValueError("No JSON object found in LLM response")

    last_error = None
    while start != -1:
        try:
            parsed, _ = _DECODER.raw_decode(cleaned, start)
        except json.JSONDecodeError as e:
            last_error = e
        else:
            if isinstance(parsed, dict):
                return parsed
        start = cleaned.find("{", start + 1)

    raise ValueError(f"Invalid JSON in LLM response: {last_error or 'no object found'}")


class LLMService:
    """Chat-completions client for one provider/model pair (Perplexity and Gemini both speak the OpenAI protocol)"""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        temperature: float = 0.4,
        max_tokens: int = 4000,
        provider: str = "perplexity",
        client: Optional[OpenAI] = None,
    ):
        """
        Args:
            api_key: Provider API key
            model: Model name (e.g. sonar-pro, sonar-reasoning, gemini-2.0-flash)
            base_url: OpenAI-compatible endpoint of the provider
            temperature: Default sampling temperature
            max_tokens: Default completion budget
            provider: Label used in logs
            client: Pre-built client (tests)
        """
        self.client = client or OpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.provider = provider
        logger.info(f"LLM service initialized - {provider}: {model} (temperature {temperature})")

    @retry(wait=wait_exponential(multiplier=1, min=2, max=10), stop=stop_after_attempt(3), reraise=True)
    def generate_text(
        self,
        prompt: str,
        system_message: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate text from a single prompt.

        Returns:
            Generated text with reasoning blocks removed
        """
        messages = []
        if system_message:
            messages.append({"role": "system", "content": system_message})
        messages.append({"role": "user", "content": prompt})

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"[{self.provider}] Prompt tokens: {count_tokens(prompt)}")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=max_tokens or self.max_tokens,
            )
        except Exception as e:
            logger.error(f"[{self.provider}] Error generating text: {str(e)}")
            raise

        generated_text = strip_reasoning(response.choices[0].message.content or "")
        if not generated_text:
            raise ValueError(f"{self.provider} returned an empty completion")

        logger.info(f"[{self.provider}] Generated {len(generated_text)} characters with {self.model}")
        return generated_text


class FallbackLLM:
    """Tries each provider in order and returns the first successful completion."""

    def __init__(self, providers: List[LLMService]):
        self.providers = [p for p in providers if p is not None]

    @property
    def model(self) -> str:
        return self.providers[0].model if self.providers else "unconfigured"

    def generate_text(self, prompt: str, system_message: Optional[str] = None, **kwargs) -> str:
        if not self.providers:
            raise LLMUnavailableError("No LLM provider configured. Set PERPLEXITY_API_KEY or GEMINI_API_KEY.")

        errors = []
        for index, llm in enumerate(self.providers):
            try:
                return llm.generate_text(prompt, system_message=system_message, **kwargs)
            except Exception as e:
                errors.append(f"{llm.provider}: {e}")
                if index + 1 < len(self.providers):
                    logger.warning(f"[LLM] {llm.provider} failed, falling back to {self.providers[index + 1].provider}")

        raise LLMUnavailableError("All LLM providers failed - " + "; ".join(errors))


def _build_chain(perplexity_model: str, temperature: float) -> FallbackLLM:
    providers = []
    if settings.PERPLEXITY_API_KEY:
        providers.append(LLMService(
            api_key=settings.PERPLEXITY_API_KEY,
            base_url=settings.PERPLEXITY_BASE_URL,
            model=perplexity_model,
            temperature=temperature,
            max_tokens=settings.LLM_MAX_TOKENS,
            provider="perplexity",
        ))
    else:
        logger.warning("Missing PERPLEXITY_API_KEY. Functionality will be limited.")

    if settings.GEMINI_API_KEY:
        providers.append(LLMService(
            api_key=settings.GEMINI_API_KEY,
            base_url=settings.GEMINI_BASE_URL,
            model=settings.GEMINI_MODEL,
            temperature=temperature,
            max_tokens=settings.LLM_MAX_TOKENS,
            provider="gemini",
        ))
    return FallbackLLM(providers)


_research_llm: Optional[FallbackLLM] = None
_reasoning_llm: Optional[FallbackLLM] = None


def get_research_llm() -> FallbackLLM:
    """Low-temperature web-grounded model for factual research."""
    global _research_llm
    if _research_llm is None:
        _research_llm = _build_chain(settings.PERPLEXITY_RESEARCH_MODEL, settings.RESEARCH_TEMPERATURE)
    return _research_llm


def get_reasoning_llm() -> FallbackLLM:
    """Balanced-temperature model for drafting and critique."""
    global _reasoning_llm
    if _reasoning_llm is None:
        _reasoning_llm = _build_chain(settings.PERPLEXITY_REASONING_MODEL, settings.REASONING_TEMPERATURE)
    return _reasoning_llm
