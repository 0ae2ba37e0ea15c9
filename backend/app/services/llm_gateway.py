"""
LLM Gateway - the single seam between the pipeline and the model provider

Wraps OpenAI's chat completions and embeddings endpoints behind two calls:

    - generate_content(prompt, json_mode, model, temperature) -> str
    - generate_embedding(text) -> List[float]

Error Contract:
    - LLMSafetyBlockError: the provider refused or filtered the content
      (finish_reason "content_filter", a model refusal, or a content-policy
      rejection of the request)
    - LLMError: every other provider or transport failure, or empty output

Analysis stages treat both as "stage failed, apply fallback"; the proposal
endpoint surfaces them as a retryable request error.

Usage:
    gateway = get_llm_gateway()
    text = await gateway.generate_content(prompt, json_mode=True)
    vector = await gateway.generate_embedding(job_description)
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional

import openai

from app.middleware.metrics import record_llm_failure, record_llm_latency
from app.services.cache import EmbeddingCache

logger = logging.getLogger(__name__)

SAFETY_ERROR_CODES = {"content_filter", "content_policy_violation"}


class LLMError(Exception):
    """Provider call failed or returned nothing usable."""


class LLMSafetyBlockError(LLMError):
    """Provider blocked the prompt or the completion on safety grounds."""


def parse_json_object(content: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of a model response.

    The only normalization applied is stripping a surrounding Markdown code
    fence. Anything that is not a JSON object raises ValueError.
    """
    if not content or not content.strip():
        raise ValueError("Empty LLM response")

    content = content.strip()

    # Handle markdown code blocks
    if content.startswith("```"):
        lines = content.split("\n")
        if lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        content = "\n".join(lines[1:])

    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


class LLMGateway:
    """
    Async gateway over an OpenAI-compatible client.

    Attributes:
        client: AsyncOpenAI client (or a test double with the same shape)
        model: Default chat model
        temperature: Default sampling temperature
        embedding_model: Embedding model name
        embedding_dimensions: Vector size, used for the empty-text zero vector
        cache: Optional embedding cache
    """

    def __init__(
        self,
        client: Any,
        model: str = "gpt-4o-mini",
        temperature: float = 0.0,
        embedding_model: str = "text-embedding-3-small",
        embedding_dimensions: int = 1536,
        cache: Optional[EmbeddingCache] = None,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.embedding_model = embedding_model
        self.embedding_dimensions = embedding_dimensions
        self.cache = cache

    async def generate_content(
        self,
        prompt: str,
        json_mode: bool = False,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Run a single-prompt completion and return the text.

        Raises:
            LLMSafetyBlockError: content was blocked
            LLMError: any other failure
        """
        kwargs: Dict[str, Any] = {
            "model": model or self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature if temperature is None else temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        start = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(**kwargs)
        except openai.BadRequestError as e:
            if getattr(e, "code", None) in SAFETY_ERROR_CODES:
                record_llm_failure("generate", "safety_block")
                raise LLMSafetyBlockError(f"Blocked: {e}") from e
            record_llm_failure("generate", "error")
            raise LLMError(f"Failed to generate content: {e} (Model: {kwargs['model']})") from e
        except openai.OpenAIError as e:
            record_llm_failure("generate", "error")
            raise LLMError(f"Failed to generate content: {e} (Model: {kwargs['model']})") from e
        finally:
            record_llm_latency("generate", time.perf_counter() - start)

        if not response.choices:
            record_llm_failure("generate", "error")
            raise LLMError("Provider returned no choices")

        choice = response.choices[0]
        if choice.finish_reason == "content_filter" or getattr(choice.message, "refusal", None):
            record_llm_failure("generate", "safety_block")
            raise LLMSafetyBlockError(f"Blocked: {choice.finish_reason}")

        content = choice.message.content
        if not content:
            record_llm_failure("generate", "error")
            raise LLMError("Provider returned empty content")
        return content

    async def generate_embedding(self, text: str) -> List[float]:
        """
        Embed a single text. Empty text returns a zero vector without an API call.

        Raises:
            LLMError: provider failure
        """
        text = text.replace("\n", " ").strip()
        if not text:
            return [0.0] * self.embedding_dimensions

        if self.cache is not None:
            cached = await self.cache.get(self.embedding_model, text)
            if cached is not None:
                return cached

        start = time.perf_counter()
        try:
            response = await self.client.embeddings.create(
                input=[text],
                model=self.embedding_model,
            )
        except openai.OpenAIError as e:
            record_llm_failure("embed", "error")
            raise LLMError(f"Failed to generate embedding: {e}") from e
        finally:
            record_llm_latency("embed", time.perf_counter() - start)

        embedding = response.data[0].embedding
        if self.cache is not None:
            await self.cache.set(self.embedding_model, text, embedding)
        return embedding


# ==============================================================================
# Singleton Pattern for Dependency Injection
# ==============================================================================

_llm_gateway: Optional[LLMGateway] = None


def build_llm_gateway(settings: Any, cache: Optional[EmbeddingCache] = None) -> LLMGateway:
    """Build a gateway with its own AsyncOpenAI client from settings."""
    from openai import AsyncOpenAI

    return LLMGateway(
        client=AsyncOpenAI(api_key=settings.openai_api_key),
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        embedding_model=settings.embedding_model,
        embedding_dimensions=settings.embedding_dimensions,
        cache=cache,
    )


def get_llm_gateway() -> LLMGateway:
    """
    Get the shared LLMGateway instance for the API process.

    Builds one AsyncOpenAI client and one embedding cache from settings and
    reuses them across requests.
    """
    global _llm_gateway
    if _llm_gateway is None:
        from app.config import get_settings
        from app.services.cache import get_embedding_cache

        settings = get_settings()
        _llm_gateway = build_llm_gateway(settings, cache=get_embedding_cache(settings.redis_url))
        logger.info("Created singleton LLMGateway (model=%s)", settings.llm_model)
    return _llm_gateway

