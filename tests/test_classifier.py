"""Tests for EmailClassifier and the regex quick check.

The model provider is replaced by FakeModelFactory from conftest, so every
test runs offline.
"""

import pytest

from inbox_router.config_schema import ClassifierConfig, RoutingConfig
from inbox_router.core.errors import ModelInvocationError, ProviderNotConfiguredError
from inbox_router.routing.categories import ClassificationInput, tier_of
from inbox_router.routing.classifier import (
    INVOCATION_FAILURE_CLASSIFICATION,
    EmailClassifier,
    quick_classification,
    quick_high_stakes_check,
)
from inbox_router.routing.parsing import PARSE_FAILURE_CLASSIFICATION
from inbox_router.routing.prompts import CLASSIFIER_SYSTEM_PROMPT, TRUNCATION_MARKER

from conftest import (
    CLASSIFIER_MODEL,
    LIGHT_MODEL,
    CapturingTelemetry,
    ExplodingTelemetry,
    FakeModelFactory,
)

# ============================================================================
# Model classification
# ============================================================================


async def test_classify_returns_parsed_category(
    classifier: EmailClassifier,
    routine_input: ClassificationInput,
) -> None:
    result = await classifier.classify(routine_input)

    assert result.category == "routine_reply"
    assert result.tier == "light"
    assert result.confidence == 0.92
    assert result.signals == ("thanks",)


async def test_classify_uses_classifier_model_and_settings(
    classifier: EmailClassifier,
    model_factory: FakeModelFactory,
    routine_input: ClassificationInput,
) -> None:
    """Test that the request goes to the classifier model deterministically."""
    await classifier.classify(routine_input)

    assert model_factory.created == [CLASSIFIER_MODEL]
    model_id, request = model_factory.requests[0]
    assert model_id == CLASSIFIER_MODEL
    assert request.system_prompt == CLASSIFIER_SYSTEM_PROMPT
    assert request.temperature == 0.0
    assert request.max_output_tokens == 200


async def test_classifier_model_defaults_to_light_model(
    model_factory: FakeModelFactory,
    routine_input: ClassificationInput,
) -> None:
    config = RoutingConfig(light_model=LIGHT_MODEL)
    classifier = EmailClassifier(model_factory=model_factory, config_provider=lambda: config)

    await classifier.classify(routine_input)

    assert model_factory.created == [LIGHT_MODEL]


async def test_user_prompt_contains_email_fields(
    model_factory: FakeModelFactory,
    routing_config: RoutingConfig,
) -> None:
    classifier = EmailClassifier(model_factory=model_factory, config_provider=lambda: routing_config)
    await classifier.classify(
        ClassificationInput(
            thread_content="Can we revisit pricing before renewal?",
            subject="Renewal",
            sender_name="Pat Buyer",
            sender_email="pat@example.com",
            sender_context="Enterprise account, renews in March",
        )
    )

    prompt = model_factory.requests[0][1].user_prompt
    assert prompt.startswith("Classify this email:\n\nSubject: Renewal\n")
    assert "From: Pat Buyer <pat@example.com>" in prompt
    assert "Sender Context: Enterprise account, renews in March" in prompt
    assert prompt.endswith("Email Content:\nCan we revisit pricing before renewal?")


async def test_user_prompt_without_sender(
    classifier: EmailClassifier,
    model_factory: FakeModelFactory,
) -> None:
    await classifier.classify(ClassificationInput(thread_content="hello", subject="Hi"))

    prompt = model_factory.requests[0][1].user_prompt
    assert "From: Unknown <unknown>" in prompt
    assert "Sender Context" not in prompt


async def test_long_thread_is_truncated(
    model_factory: FakeModelFactory,
    routing_config: RoutingConfig,
) -> None:
    classifier = EmailClassifier(
        model_factory=model_factory,
        config_provider=lambda: routing_config,
        settings=ClassifierConfig(max_input_chars=500),
    )
    await classifier.classify(ClassificationInput(thread_content="x" * 2000, subject="Long"))

    prompt = model_factory.requests[0][1].user_prompt
    assert prompt.endswith("x" * 500 + TRUNCATION_MARKER)
    assert "x" * 501 not in prompt


# ============================================================================
# Fallbacks
# ============================================================================


async def test_unparseable_response_defaults_to_light(
    routing_config: RoutingConfig,
    routine_input: ClassificationInput,
) -> None:
    factory = FakeModelFactory(response_text="I think this is a routine email.")
    classifier = EmailClassifier(model_factory=factory, config_provider=lambda: routing_config)

    result = await classifier.classify(routine_input)

    assert result == PARSE_FAILURE_CLASSIFICATION
    assert result.tier == "light"
    assert result.confidence == 0.3


async def test_unknown_category_defaults_to_light(
    routing_config: RoutingConfig,
    routine_input: ClassificationInput,
) -> None:
    factory = FakeModelFactory(response_text='{"category": "spam", "confidence": 0.99}')
    classifier = EmailClassifier(model_factory=factory, config_provider=lambda: routing_config)

    result = await classifier.classify(routine_input)

    assert result.category == "needs_attention"
    assert result.tier == "light"


async def test_invocation_failure_defaults_to_frontier(
    routing_config: RoutingConfig,
    complaint_input: ClassificationInput,
) -> None:
    """Test that a failed model call escalates instead of raising."""
    factory = FakeModelFactory(error=ModelInvocationError("503 overloaded"))
    classifier = EmailClassifier(model_factory=factory, config_provider=lambda: routing_config)

    result = await classifier.classify(complaint_input)

    assert result == INVOCATION_FAILURE_CLASSIFICATION
    assert result.category == "needs_attention"
    assert result.tier == "frontier"
    assert result.confidence == 0.0


async def test_missing_provider_defaults_to_frontier(
    routing_config: RoutingConfig,
    routine_input: ClassificationInput,
) -> None:
    factory = FakeModelFactory()
    factory.factory_error = ProviderNotConfiguredError("no key")
    classifier = EmailClassifier(model_factory=factory, config_provider=lambda: routing_config)

    result = await classifier.classify(routine_input)

    assert result.tier == "frontier"
    assert factory.generate_calls == 0


async def test_unexpected_error_defaults_to_frontier(
    routing_config: RoutingConfig,
    routine_input: ClassificationInput,
) -> None:
    factory = FakeModelFactory(error=KeyError("content"))
    classifier = EmailClassifier(model_factory=factory, config_provider=lambda: routing_config)

    result = await classifier.classify(routine_input)

    assert result == INVOCATION_FAILURE_CLASSIFICATION


GARBAGE_RESPONSES = [
    pytest.param("", id="empty"),
    pytest.param("   \n\t ", id="whitespace"),
    pytest.param("```json\n```", id="empty-fence"),
    pytest.param("```", id="lone-fence"),
    pytest.param("[" * 100000, id="deep-array-nesting"),
    pytest.param('{"a": ' * 5000, id="deep-object-nesting"),
    pytest.param(
        '{"category": "routine_reply", "confidence": ' + "1" * 5000 + "}",
        id="oversized-integer",
    ),
    pytest.param(
        '{"category": "high_stakes_contract", "confidence": ' + "9" * 4000 + "}",
        id="huge-integer-confidence",
    ),
    pytest.param('{"category": "routine_reply", "confidence": -1e400}', id="negative-infinity"),
    pytest.param('{"category": "routine_reply", "signals": {"a": 1}}', id="object-signals"),
    pytest.param("I cannot classify this email. " * 5000, id="long-prose"),
    pytest.param('{"category": "\\ud800"}', id="lone-surrogate"),
    pytest.param("null", id="null"),
]


@pytest.mark.parametrize("response_text", GARBAGE_RESPONSES)
async def test_garbage_response_never_raises(
    routing_config: RoutingConfig,
    routine_input: ClassificationInput,
    response_text: str,
) -> None:
    """Test that any model output yields a consistent classification."""
    factory = FakeModelFactory(response_text=response_text)
    classifier = EmailClassifier(model_factory=factory, config_provider=lambda: routing_config)

    result = await classifier.classify(routine_input)

    assert 0.0 <= result.confidence <= 1.0
    assert result.tier == tier_of(result.category)


@pytest.mark.parametrize(
    "response_text",
    ["[" * 100000, '{"category": "routine_reply", "confidence": ' + "1" * 5000 + "}"],
)
async def test_decoder_limit_failures_default_to_light(
    routing_config: RoutingConfig,
    routine_input: ClassificationInput,
    response_text: str,
) -> None:
    factory = FakeModelFactory(response_text=response_text)
    classifier = EmailClassifier(model_factory=factory, config_provider=lambda: routing_config)

    result = await classifier.classify(routine_input)

    assert result == PARSE_FAILURE_CLASSIFICATION


# ============================================================================
# Telemetry
# ============================================================================


async def test_classification_is_reported(
    classifier: EmailClassifier,
    telemetry: CapturingTelemetry,
    routine_input: ClassificationInput,
) -> None:
    result = await classifier.classify(routine_input)

    assert len(telemetry.classifications) == 1
    event = telemetry.classifications[0]
    assert event.classification == result
    assert event.input is routine_input
    assert event.model_id == CLASSIFIER_MODEL
    assert event.latency_ms >= 0


async def test_invocation_failure_is_not_reported(
    routing_config: RoutingConfig,
    telemetry: CapturingTelemetry,
    routine_input: ClassificationInput,
) -> None:
    factory = FakeModelFactory(error=ModelInvocationError("down"))
    classifier = EmailClassifier(
        model_factory=factory, config_provider=lambda: routing_config, telemetry=telemetry
    )

    await classifier.classify(routine_input)

    assert telemetry.classifications == []


async def test_failing_telemetry_does_not_affect_result(
    model_factory: FakeModelFactory,
    routing_config: RoutingConfig,
    routine_input: ClassificationInput,
) -> None:
    classifier = EmailClassifier(
        model_factory=model_factory,
        config_provider=lambda: routing_config,
        telemetry=ExplodingTelemetry(),
    )

    result = await classifier.classify(routine_input)

    assert result.category == "routine_reply"


# ============================================================================
# Quick check
# ============================================================================


class TestQuickHighStakesCheck:
    """Tests for the regex pre-filter."""

    @pytest.mark.parametrize(
        "text",
        [
            "We want to cancel our subscription.",
            "I am DISAPPOINTED with the service",
            "This is really frustrating",
            "I will be escalating this to your CEO",
            "Our legal team has questions",
            "Please send the contract",
            "Let's discuss renewal",
            "Pricing seems high",
            "This is confidential",
            "URGENT: outage",
            "This is unacceptable",
            "I want to file a complaint",
            "We will terminate the agreement",
        ],
    )
    def test_cue_words_match(self, text: str) -> None:
        assert quick_high_stakes_check(text) is True

    @pytest.mark.parametrize(
        "text",
        [
            "Thanks, sounds good!",
            "See you Thursday at 10.",
            "Here is the weekly status update.",
            "",
        ],
    )
    def test_routine_text_does_not_match(self, text: str) -> None:
        assert quick_high_stakes_check(text) is False

    def test_word_boundaries(self) -> None:
        """Test that whole-word cues do not match inside longer words."""
        assert quick_high_stakes_check("Cancelling the meeting") is False
        assert quick_high_stakes_check("The contractor arrives at 9") is False

    def test_positive_classification(self) -> None:
        result = quick_classification("we want to cancel")

        assert result.category == "high_stakes_complaint"
        assert result.tier == "frontier"
        assert result.confidence == 0.7
        assert result.signals == ("quick_check_positive",)

    def test_negative_classification(self) -> None:
        result = quick_classification("Thanks, sounds good!")

        assert result.category == "routine_reply"
        assert result.tier == "light"
        assert result.confidence == 0.7
        assert result.signals == ()
