"""Email classifier that picks a category (and so a tier) with a light model.

classify() never raises. Its failure handling is deliberately asymmetric:
- Unusable model output (not JSON, unknown category): needs_attention / light
- Model invocation failure (provider error, missing credentials): needs_attention / frontier

quick_high_stakes_check() is a regex pre-filter that costs no model call.

Usage:
    from inbox_router.routing.classifier import EmailClassifier

    classifier = EmailClassifier(model_factory=factory, telemetry=telemetry)
    classification = await classifier.classify(
        ClassificationInput(thread_content="...", subject="Re: renewal")
    )
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import regex

from inbox_router.config import get_routing_config
from inbox_router.config_schema import ClassifierConfig, RoutingConfig
from inbox_router.core.logging import get_logger
from inbox_router.providers.base import GenerationRequest
from inbox_router.routing.categories import Classification, ClassificationInput
from inbox_router.routing.parsing import parse_classifier_response
from inbox_router.routing.prompts import CLASSIFIER_SYSTEM_PROMPT, build_classification_prompt
from inbox_router.routing.telemetry import ClassificationEvent, NullTelemetry

if TYPE_CHECKING:
    from inbox_router.providers.base import ModelFactory
    from inbox_router.routing.telemetry import RoutingTelemetry

logger = get_logger(__name__)

INVOCATION_FAILURE_CLASSIFICATION = Classification(
    category="needs_attention",
    tier="frontier",
    confidence=0.0,
    reason="Classification failed, using frontier model for safety",
    signals=(),
)

# Word-boundary cues that mark a thread as high-stakes without a model call.
# Stems (frustrat, escalat) match any suffix.
HIGH_STAKES_PATTERNS: tuple[str, ...] = (
    r"\bcancel\b",
    r"\bdisappointed\b",
    r"\bfrustrat",
    r"\bescalat",
    r"\blegal\b",
    r"\bcontract\b",
    r"\brenewal\b",
    r"\bpricing\b",
    r"\bconfidential\b",
    r"\burgent\b",
    r"\bunacceptable\b",
    r"\bcomplaint\b",
    r"\bterminate\b",
)

_HIGH_STAKES_RE = regex.compile("|".join(HIGH_STAKES_PATTERNS), regex.IGNORECASE)

# Seconds allowed for the quick-check regex before giving up
_QUICK_CHECK_TIMEOUT = 1.0

QUICK_CHECK_CONFIDENCE = 0.7


def quick_high_stakes_check(text: str) -> bool:
    """Return True if text contains any high-stakes cue word.

    A regex timeout counts as high-stakes so a pathological input errs toward
    the more capable tier.
    """
    if not text:
        return False
    try:
        return _HIGH_STAKES_RE.search(text, timeout=_QUICK_CHECK_TIMEOUT) is not None
    except TimeoutError:
        logger.warning("quick_check_timeout", text_length=len(text))
        return True


def quick_classification(text: str) -> Classification:
    """Wrap quick_high_stakes_check() into a minimal Classification."""
    if quick_high_stakes_check(text):
        return Classification(
            category="high_stakes_complaint",
            tier="frontier",
            confidence=QUICK_CHECK_CONFIDENCE,
            reason="High-stakes signals detected in quick check",
            signals=("quick_check_positive",),
        )
    return Classification(
        category="routine_reply",
        tier="light",
        confidence=QUICK_CHECK_CONFIDENCE,
        reason="No high-stakes signals in quick check",
        signals=(),
    )


class EmailClassifier:
    """Classifies correspondence into a category using the classifier model.

    Attributes:
        _model_factory: Builds a model handle for the classifier model ID
        _config_provider: Returns the current RoutingConfig snapshot
        _settings: Token budget, temperature and input truncation
        _telemetry: Sink for classification events
    """

    def __init__(
        self,
        model_factory: ModelFactory,
        config_provider: Callable[[], RoutingConfig] = get_routing_config,
        settings: ClassifierConfig | None = None,
        telemetry: RoutingTelemetry | None = None,
    ):
        """Initialize the classifier.

        Args:
            model_factory: Turns a model ID into a ModelHandle
            config_provider: Called once per classification for the routing snapshot
            settings: Classifier request settings (defaults if omitted)
            telemetry: Event sink (events are discarded if omitted)
        """
        self._model_factory = model_factory
        self._config_provider = config_provider
        self._settings = settings or ClassifierConfig()
        self._telemetry = telemetry or NullTelemetry()

    async def classify(self, classification_input: ClassificationInput) -> Classification:
        """Classify one email thread.

        Args:
            classification_input: Thread text and sender metadata

        Returns:
            Classification. Never raises; see module docstring for fallbacks.
        """
        start_time = time.monotonic()
        model_id: str | None = None

        try:
            model_id = self._config_provider().classifier_model_id
            model = self._model_factory(model_id)
            response = await model.generate(
                GenerationRequest(
                    system_prompt=CLASSIFIER_SYSTEM_PROMPT,
                    user_prompt=build_classification_prompt(
                        classification_input,
                        max_input_chars=self._settings.max_input_chars,
                    ),
                    temperature=self._settings.temperature,
                    max_output_tokens=self._settings.max_output_tokens,
                )
            )
        except Exception as e:
            # Any failure to obtain an answer falls back to the frontier tier
            logger.error(
                "classification_failed",
                model_id=model_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return INVOCATION_FAILURE_CLASSIFICATION

        classification = parse_classifier_response(response.text)
        latency_ms = int((time.monotonic() - start_time) * 1000)

        self._emit(
            ClassificationEvent(
                input=classification_input,
                classification=classification,
                latency_ms=latency_ms,
                model_id=model_id,
            )
        )
        return classification

    def _emit(self, event: ClassificationEvent) -> None:
        try:
            self._telemetry.record_classification(event)
        except Exception as e:
            # Telemetry must never affect classification
            logger.warning("classification_telemetry_failed", error=str(e))
