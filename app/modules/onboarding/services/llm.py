import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar

import httpx
import openai
from openai import AsyncOpenAI

from app.modules.onboarding.services.exceptions import (
    MalformedResponse,
    NoCredentialError,
    ServiceError,
)
from app.modules.onboarding.services.validation import validate

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================================
# Model catalog
# ============================================================

AVAILABLE_MODELS: List[Dict[str, str]] = [
    {"id": "gpt-5", "name": "GPT-5", "description": "Flagship model - best overall quality", "category": "Recommended"},
    {"id": "gpt-5.1", "name": "GPT-5.1", "description": "Enhanced stability, production-ready", "category": "Recommended"},
    {"id": "gpt-5-mini", "name": "GPT-5 Mini", "description": "Fast and cost-efficient GPT-5", "category": "Fast"},
    {"id": "o3", "name": "o3", "description": "Deep analysis and reasoning", "category": "Reasoning"},
    {"id": "o3-mini", "name": "o3 Mini", "description": "Fast reasoning model", "category": "Reasoning"},
    {"id": "o4-mini", "name": "o4-mini", "description": "Fast reasoning, good for quotes", "category": "Recommended"},
    {"id": "gpt-4o", "name": "GPT-4o", "description": "Omni model - text and vision", "category": "Stable"},
    {"id": "gpt-4o-mini", "name": "GPT-4o Mini", "description": "Fast and affordable GPT-4o", "category": "Fast"},
    {"id": "gpt-4-turbo", "name": "GPT-4 Turbo", "description": "High quality with faster response", "category": "Stable"},
]


def _normalize_model(name: str) -> str:
    """Normalize model name by removing spaces and lowercasing."""
    return re.sub(r"\s+", "", (name or "")).lower()


def supports_temperature(model: str) -> bool:
    """Reasoning models (o-series, GPT-5) reject a sampling temperature."""
    m = _normalize_model(model)
    if m.startswith("gpt-5"):
        return False
    return not re.match(r"^o\d", m)


# ============================================================
# Credentials
# ============================================================

@dataclass(frozen=True)
class Credentials:
    api_key: Optional[str]
    model: str

    def require_key(self) -> str:
        if not self.api_key:
            raise NoCredentialError("No OpenAI API key configured")
        return self.api_key


def resolve_credentials(api_key: Optional[str], model: Optional[str], settings) -> Credentials:
    """Request-supplied key/model win over the deployment defaults."""
    key = (api_key or "").strip() or settings.OPENAI_API_KEY
    return Credentials(api_key=key or None, model=(model or "").strip() or settings.LLM_MODEL)


# ============================================================
# Generation service
# ============================================================

class GenerationService(Protocol):
    model: str

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        response_shape: Type[Any],
        temperature: Optional[float] = None,
    ) -> str:
        ...


def schema_instructions(response_shape: Type[Any]) -> str:
    """JSON schema text appended to system prompts."""
    schema = response_shape.model_json_schema() if hasattr(response_shape, "model_json_schema") else {}
    return "Respond with ONLY a JSON object matching this JSON schema:\n" + json.dumps(schema, indent=2)


class OpenAIGenerationService:
    """Chat Completions in JSON mode. One request per call, never retried."""

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float = 60.0,
        deadline: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.model = model
        self.deadline = deadline
        self._client = client or AsyncOpenAI(
            api_key=api_key, timeout=timeout, max_retries=0, http_client=http_client
        )

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        response_shape: Type[Any],
        temperature: Optional[float] = None,
    ) -> str:
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt.strip() + "\n\n" + schema_instructions(response_shape)},
                {"role": "user", "content": user_prompt.strip()},
            ],
            "response_format": {"type": "json_object"},
        }
        if temperature is not None and supports_temperature(self.model):
            params["temperature"] = temperature

        logger.info(f"[LLM] Chat Completions: model={self.model}, temperature={params.get('temperature')}")

        try:
            if self.deadline:
                completion = await asyncio.wait_for(
                    self._client.chat.completions.create(**params), timeout=self.deadline
                )
            else:
                completion = await self._client.chat.completions.create(**params)
        except asyncio.TimeoutError as e:
            raise ServiceError("Generation request exceeded deadline", context={"deadline": self.deadline}) from e
        except openai.OpenAIError as e:
            raise ServiceError(f"Generation request failed: {e}", context={"model": self.model}) from e

        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise ServiceError("No content from OpenAI", context={"model": self.model})
        return content


async def request_structured(
    service: GenerationService,
    system_prompt: str,
    user_prompt: str,
    response_shape: Type[T],
    temperature: Optional[float] = None,
) -> T:
    """Issue one generation request and return its schema-valid result.

    Any validation failure is reported as ``ServiceError``.
    """
    content = await service.generate(system_prompt, user_prompt, response_shape, temperature)
    try:
        return validate(content, response_shape)
    except MalformedResponse as e:
        raise ServiceError(f"Invalid response from generation service: {e.message}", context=e.context) from e
