"""Model providers behind the ModelHandle contract."""

from inbox_router.providers.anthropic_provider import (
    AnthropicModel,
    AnthropicModelFactory,
    build_model_factory,
)
from inbox_router.providers.base import (
    GenerationRequest,
    GenerationResponse,
    ModelFactory,
    ModelHandle,
)

__all__ = [
    "AnthropicModel",
    "AnthropicModelFactory",
    "GenerationRequest",
    "GenerationResponse",
    "ModelFactory",
    "ModelHandle",
    "build_model_factory",
]
