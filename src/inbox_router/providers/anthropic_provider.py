"""Anthropic implementation of the ModelHandle contract.

Transient errors (429, 5xx, network) are retried by the Anthropic SDK
(max_retries from ProviderConfig). Anything still failing after that is
re-raised as ModelInvocationError so callers depend on one exception type.

Usage:
    from inbox_router.providers.anthropic_provider import build_model_factory

    factory = build_model_factory(config.provider)
    model = factory("claude-haiku-4-5-20251001")
    response = await model.generate(GenerationRequest(system_prompt="...", user_prompt="..."))
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import anthropic

from inbox_router.core.errors import ModelInvocationError, ProviderNotConfiguredError
from inbox_router.core.logging import get_logger
from inbox_router.providers.base import GenerationRequest, GenerationResponse, ModelHandle

if TYPE_CHECKING:
    from inbox_router.config_schema import ProviderConfig

logger = get_logger(__name__)

# Anthropic requires max_tokens on every request
DEFAULT_MAX_TOKENS = 1024


def provider_model_name(model_id: str) -> str:
    """Strip a "provider/" prefix from a model ID (e.g. "anthropic/claude-x" -> "claude-x")."""
    if "/" in model_id:
        return model_id.split("/", 1)[1]
    return model_id


class AnthropicModel(ModelHandle):
    """A Claude model reachable through an AsyncAnthropic client."""

    def __init__(self, model_id: str, client: anthropic.AsyncAnthropic):
        super().__init__(model_id)
        self._client = client
        self._model_name = provider_model_name(model_id)

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Send one messages.create call and return the concatenated text blocks.

        Args:
            request: System/user prompt and sampling settings

        Returns:
            GenerationResponse with text and token usage

        Raises:
            ModelInvocationError: If the API call fails after SDK retries
        """
        kwargs: dict[str, Any] = {
            "model": self._model_name,
            "max_tokens": request.max_output_tokens or DEFAULT_MAX_TOKENS,
            "system": request.system_prompt,
            "messages": [{"role": "user", "content": request.user_prompt}],
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature

        try:
            response = await self._client.messages.create(**kwargs)
        except anthropic.RateLimitError as e:
            logger.error("anthropic_rate_limited", model_id=self.model_id, error=str(e))
            raise ModelInvocationError(
                f"Rate limited by Anthropic after SDK retries: {e}",
                model_id=self.model_id,
            ) from e
        except anthropic.APIConnectionError as e:
            logger.error("anthropic_connection_error", model_id=self.model_id, error=str(e))
            raise ModelInvocationError(
                f"Could not reach Anthropic API after SDK retries: {e}",
                model_id=self.model_id,
            ) from e
        except anthropic.APIStatusError as e:
            logger.error(
                "anthropic_api_error",
                model_id=self.model_id,
                status_code=e.status_code,
                error=str(e),
            )
            raise ModelInvocationError(
                f"Anthropic API status error {e.status_code}: {e.message}",
                model_id=self.model_id,
            ) from e
        except anthropic.APIError as e:
            logger.error("anthropic_error", model_id=self.model_id, error=str(e))
            raise ModelInvocationError(
                f"Anthropic API error: {e}",
                model_id=self.model_id,
            ) from e

        text = "".join(block.text for block in response.content if block.type == "text")
        usage = getattr(response, "usage", None)

        return GenerationResponse(
            text=text,
            model_id=self.model_id,
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
        )


class AnthropicModelFactory:
    """ModelFactory that hands out AnthropicModel instances sharing one client."""

    def __init__(self, client: anthropic.AsyncAnthropic):
        self._client = client

    def __call__(self, model_id: str) -> AnthropicModel:
        return AnthropicModel(model_id, self._client)


def build_model_factory(
    config: ProviderConfig,
    environ: Mapping[str, str] | None = None,
) -> AnthropicModelFactory:
    """Create the Anthropic model factory from provider settings.

    Args:
        config: Provider configuration
        environ: Environment mapping (defaults to os.environ)

    Returns:
        AnthropicModelFactory backed by a configured AsyncAnthropic client

    Raises:
        ProviderNotConfiguredError: If the API key variable is unset or empty
    """
    env = os.environ if environ is None else environ
    api_key = env.get(config.api_key_env, "").strip()
    if not api_key:
        raise ProviderNotConfiguredError(
            f"No model provider configured: environment variable {config.api_key_env} "
            "is not set. Export your Anthropic API key (or add it to .env) and retry."
        )

    client = anthropic.AsyncAnthropic(
        api_key=api_key,
        max_retries=config.max_retries,
        timeout=config.timeout_seconds,
    )
    logger.debug(
        "anthropic_client_created",
        max_retries=config.max_retries,
        timeout_seconds=config.timeout_seconds,
    )
    return AnthropicModelFactory(client)
