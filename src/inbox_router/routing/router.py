"""Model router: classification, model selection and prompt composition.

route_email() is the single entry point. The classification comes from the
first matching rule:
1. Routing disabled -> needs_attention / frontier, no classification
2. force_tier supplied -> representative category for that tier
3. use_quick_check -> regex pre-filter
4. Otherwise -> full model classification

The tier is then resolved to a model ID by RoutingConfig.model_for_tier(),
the base prompt is decorated with the category's enhancement fragment, and
the decision is reported to telemetry.

Only a missing model provider can make route_email() raise; the classifier
absorbs every per-call failure.

Usage:
    router = ModelRouter(classifier=classifier, model_factory=factory, telemetry=telemetry)
    result = await router.route_email(
        classification_input, base_prompt=INBOX_PROMPT, session_id="draft-42"
    )
    response = await result.model.generate(
        GenerationRequest(system_prompt=result.system_prompt, user_prompt=...)
    )
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from inbox_router.config import get_routing_config
from inbox_router.core.logging import bind_session_id, get_logger
from inbox_router.routing.categories import Classification, is_valid_tier
from inbox_router.routing.classifier import quick_classification
from inbox_router.routing.enhanced_prompts import apply_enhanced_prompt
from inbox_router.routing.telemetry import (
    ClassificationSummary,
    NullTelemetry,
    RoutingEvent,
    build_classification_summary,
)

if TYPE_CHECKING:
    from inbox_router.config_schema import ModelTier, RoutingConfig
    from inbox_router.providers.base import ModelFactory, ModelHandle
    from inbox_router.routing.categories import ClassificationInput, EmailCategory
    from inbox_router.routing.classifier import EmailClassifier
    from inbox_router.routing.telemetry import RoutingTelemetry

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RoutingResult:
    """Everything a caller needs to run the actual generation.

    Attributes:
        model: Handle for the selected model
        model_id: Selected model identifier
        system_prompt: Base prompt, plus the enhancement fragment if any
        classification: The classification the decision was based on
        classification_summary: Compact form for API responses
        enhanced: Whether an enhancement fragment was appended
    """

    model: ModelHandle
    model_id: str
    system_prompt: str
    classification: Classification
    classification_summary: ClassificationSummary
    enhanced: bool = False


def _disabled_classification() -> Classification:
    return Classification(
        category="needs_attention",
        tier="frontier",
        confidence=1.0,
        reason="Routing disabled, using frontier model",
        signals=(),
    )


def _forced_classification(tier: ModelTier) -> Classification:
    return Classification(
        category="needs_attention" if tier == "frontier" else "routine_reply",
        tier=tier,
        confidence=1.0,
        reason=f"Tier forced to {tier}",
        signals=(),
    )


class ModelRouter:
    """Routes correspondence to a model tier with optional enhanced prompting."""

    def __init__(
        self,
        classifier: EmailClassifier,
        model_factory: ModelFactory,
        config_provider: Callable[[], RoutingConfig] = get_routing_config,
        telemetry: RoutingTelemetry | None = None,
    ):
        """Initialize the router.

        Args:
            classifier: Model-based classifier used when no shortcut applies
            model_factory: Turns a model ID into a ModelHandle. May raise
                ProviderNotConfiguredError, which is propagated to callers.
            config_provider: Called once per routing call for the config snapshot
            telemetry: Event sink (events are discarded if omitted)
        """
        self._classifier = classifier
        self._model_factory = model_factory
        self._config_provider = config_provider
        self._telemetry = telemetry or NullTelemetry()

    async def route_email(
        self,
        classification_input: ClassificationInput,
        base_prompt: str,
        session_id: str,
        *,
        force_tier: ModelTier | None = None,
        use_quick_check: bool = False,
    ) -> RoutingResult:
        """Classify, pick a model and compose the system prompt for one thread.

        Args:
            classification_input: Thread text and sender metadata
            base_prompt: Caller's system prompt
            session_id: Caller's session identifier (for telemetry and logs)
            force_tier: Skip classification and use this tier
            use_quick_check: Use the regex pre-filter instead of the classifier

        Returns:
            RoutingResult

        Raises:
            ValueError: If force_tier is not a known tier and routing is enabled
            ProviderNotConfiguredError: If no model provider is configured
        """
        with bind_session_id(session_id):
            config = self._config_provider()

            if not config.enabled:
                classification = _disabled_classification()
            elif force_tier is not None:
                if not is_valid_tier(force_tier):
                    raise ValueError(
                        f"Unknown tier {force_tier!r}; expected 'light' or 'frontier'"
                    )
                classification = _forced_classification(force_tier)
            elif use_quick_check:
                classification = quick_classification(classification_input.thread_content)
            else:
                classification = await self._classifier.classify(classification_input)

            model_id = config.model_for_tier(classification.tier)
            model = self._model_factory(model_id)

            system_prompt = apply_enhanced_prompt(base_prompt, classification.category)
            enhanced = system_prompt != base_prompt

            self._emit(
                RoutingEvent(
                    session_id=session_id,
                    classification=classification,
                    model_id=model_id,
                    enhanced=enhanced,
                    timestamp=datetime.now(UTC),
                )
            )

            return RoutingResult(
                model=model,
                model_id=model_id,
                system_prompt=system_prompt,
                classification=classification,
                classification_summary=build_classification_summary(classification),
                enhanced=enhanced,
            )

    def get_model_for_existing_classification(
        self,
        category: EmailCategory,
        tier: ModelTier,
    ) -> tuple[ModelHandle, str]:
        """Resolve a model for a classification the caller already holds.

        Used by revision flows so a follow-up draft keeps the original tier
        instead of being re-classified.

        Args:
            category: Previously assigned category (kept for logging)
            tier: Previously assigned tier

        Returns:
            Tuple of (model handle, model ID)

        Raises:
            ValueError: If tier is not a known tier
            ProviderNotConfiguredError: If no model provider is configured
        """
        if not is_valid_tier(tier):
            raise ValueError(f"Unknown tier {tier!r}; expected 'light' or 'frontier'")

        model_id = self._config_provider().model_for_tier(tier)
        logger.debug(
            "model_resolved_for_existing_classification",
            category=category,
            tier=tier,
            model_id=model_id,
        )
        return self._model_factory(model_id), model_id

    def get_default_model_instance(self) -> tuple[ModelHandle, str]:
        """Return the default model for operations that are not routed.

        Raises:
            ProviderNotConfiguredError: If no model provider is configured
        """
        model_id = self._config_provider().default_model
        return self._model_factory(model_id), model_id

    def _emit(self, event: RoutingEvent) -> None:
        try:
            self._telemetry.record_routing(event)
        except Exception as e:
            # Telemetry must never affect routing
            logger.warning("routing_telemetry_failed", error=str(e))
