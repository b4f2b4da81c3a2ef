"""Pydantic configuration schema for the inbox model router.

This module defines the configuration schema that mirrors config.yaml
structure. Environment variables (AI_ROUTING_ENABLED, AI_MODEL_*) are layered
on top of the YAML values at call time; see inbox_router.config.

Usage:
    from inbox_router.config_schema import AppConfig

    config = AppConfig(**yaml_data)
    model_id = config.routing.model_for_tier("frontier")
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Current schema version - increment when adding new required fields
CURRENT_SCHEMA_VERSION = 1

DEFAULT_LIGHT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_FRONTIER_MODEL = "claude-opus-4-1-20250805"
DEFAULT_MODEL = "claude-sonnet-4-5-20250929"

ModelTier = Literal["light", "frontier"]


def _validate_model_id(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Model identifier cannot be empty")
    return v.strip()


class RoutingConfig(BaseModel):
    """Tier-to-model mapping and the routing kill switch.

    Frozen so a snapshot taken at the start of a routing call cannot change
    underneath it.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(
        default=True,
        description="Route by classification; when false every call uses the frontier model",
    )
    light_model: str = Field(
        default=DEFAULT_LIGHT_MODEL,
        description="Fast, cheap model for routine correspondence",
    )
    frontier_model: str = Field(
        default=DEFAULT_FRONTIER_MODEL,
        description="Highest-capability model for high-stakes correspondence",
    )
    classifier_model: str | None = Field(
        default=None,
        description="Model used for classification (defaults to light_model)",
    )
    default_model: str = Field(
        default=DEFAULT_MODEL,
        description="Model for operations that are not routed",
    )

    @field_validator("light_model", "frontier_model", "default_model")
    @classmethod
    def validate_model_ids(cls, v: str) -> str:
        """Reject blank model identifiers."""
        return _validate_model_id(v)

    @field_validator("classifier_model")
    @classmethod
    def validate_classifier_model(cls, v: str | None) -> str | None:
        """Treat blank classifier model as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def classifier_model_id(self) -> str:
        """Model used by the classifier."""
        return self.classifier_model or self.light_model

    def model_for_tier(self, tier: ModelTier) -> str:
        """Resolve a tier to a model identifier.

        This is the only place tiers become model IDs. With routing disabled
        the frontier model is returned regardless of tier.
        """
        if not self.enabled:
            return self.frontier_model
        return self.light_model if tier == "light" else self.frontier_model


class ClassifierConfig(BaseModel):
    """Classifier request settings."""

    max_output_tokens: int = Field(
        default=200,
        ge=16,
        le=4096,
        description="Output token budget for the classification answer",
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Sampling temperature (0 for deterministic classification)",
    )
    max_input_chars: int = Field(
        default=20000,
        ge=500,
        le=200000,
        description="Thread content longer than this is truncated before classification",
    )


class ProviderConfig(BaseModel):
    """Anthropic provider settings."""

    api_key_env: str = Field(
        default="ANTHROPIC_API_KEY",
        description="Environment variable holding the Anthropic API key",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="SDK-level retries for transient errors (429, 5xx, network)",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Per-request timeout passed to the SDK",
    )

    @field_validator("api_key_env")
    @classmethod
    def validate_api_key_env(cls, v: str) -> str:
        """Ensure the variable name is usable."""
        if not v or not v.strip():
            raise ValueError("api_key_env cannot be empty")
        return v.strip()


class AppConfig(BaseModel):
    """Root configuration schema for the inbox model router.

    Every section is optional; an empty config.yaml (or none at all) yields
    the defaults above.
    """

    schema_version: int = Field(
        default=CURRENT_SCHEMA_VERSION,
        ge=1,
        description="Config schema version for migration tracking",
    )

    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
