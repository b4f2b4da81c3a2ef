"""Pytest fixtures and configuration for inbox router tests.

Provides config isolation, a scriptable fake model provider, and a capturing
telemetry sink.
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from inbox_router.config import reset_config
from inbox_router.config_schema import RoutingConfig
from inbox_router.providers.base import GenerationRequest, GenerationResponse, ModelHandle
from inbox_router.routing.categories import ClassificationInput
from inbox_router.routing.classifier import EmailClassifier
from inbox_router.routing.router import ModelRouter
from inbox_router.routing.telemetry import ClassificationEvent, RoutingEvent

ROUTING_ENV_VARS = (
    "AI_ROUTING_ENABLED",
    "AI_MODEL_LIGHT",
    "AI_MODEL_FRONTIER",
    "AI_MODEL_CLASSIFIER",
    "AI_MODEL",
    "INBOX_ROUTER_CONFIG_PATH",
    "ANTHROPIC_API_KEY",
)

LIGHT_MODEL = "test-light-model"
FRONTIER_MODEL = "test-frontier-model"
CLASSIFIER_MODEL = "test-classifier-model"
DEFAULT_MODEL = "test-default-model"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeModel(ModelHandle):
    """ModelHandle that returns scripted text or raises a scripted error."""

    def __init__(self, model_id: str, factory: "FakeModelFactory"):
        super().__init__(model_id)
        self._factory = factory

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        self._factory.requests.append((self.model_id, request))
        if self._factory.error is not None:
            raise self._factory.error
        return GenerationResponse(text=self._factory.response_text, model_id=self.model_id)


class FakeModelFactory:
    """ModelFactory recording every model ID it was asked for."""

    def __init__(self, response_text: str = "", error: Exception | None = None):
        self.response_text = response_text
        self.error = error
        self.created: list[str] = []
        self.requests: list[tuple[str, GenerationRequest]] = []
        self.factory_error: Exception | None = None

    def __call__(self, model_id: str) -> FakeModel:
        if self.factory_error is not None:
            raise self.factory_error
        self.created.append(model_id)
        return FakeModel(model_id, self)

    @property
    def generate_calls(self) -> int:
        return len(self.requests)


class CapturingTelemetry:
    """Telemetry sink that keeps every event."""

    def __init__(self) -> None:
        self.classifications: list[ClassificationEvent] = []
        self.routings: list[RoutingEvent] = []

    def record_classification(self, event: ClassificationEvent) -> None:
        self.classifications.append(event)

    def record_routing(self, event: RoutingEvent) -> None:
        self.routings.append(event)


class ExplodingTelemetry:
    """Telemetry sink whose every call fails."""

    def record_classification(self, event: ClassificationEvent) -> None:
        raise RuntimeError("telemetry backend down")

    def record_routing(self, event: RoutingEvent) -> None:
        raise RuntimeError("telemetry backend down")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_config_singleton() -> Generator[None, None, None]:
    """Reset the config singleton before each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Clear routing env vars and run from an empty directory (no config/config.yaml)."""
    for var in ROUTING_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def routing_config() -> RoutingConfig:
    """Return an enabled routing config with distinct test model IDs."""
    return RoutingConfig(
        enabled=True,
        light_model=LIGHT_MODEL,
        frontier_model=FRONTIER_MODEL,
        classifier_model=CLASSIFIER_MODEL,
        default_model=DEFAULT_MODEL,
    )


@pytest.fixture
def disabled_routing_config(routing_config: RoutingConfig) -> RoutingConfig:
    """Return the same config with routing switched off."""
    return routing_config.model_copy(update={"enabled": False})


@pytest.fixture
def model_factory() -> FakeModelFactory:
    """Return a fake factory answering with a routine classification."""
    return FakeModelFactory(
        response_text=(
            '{"category": "routine_reply", "confidence": 0.92, '
            '"reason": "Simple acknowledgment", "signals": ["thanks"]}'
        )
    )


@pytest.fixture
def telemetry() -> CapturingTelemetry:
    return CapturingTelemetry()


@pytest.fixture
def classifier(
    model_factory: FakeModelFactory,
    routing_config: RoutingConfig,
    telemetry: CapturingTelemetry,
) -> EmailClassifier:
    return EmailClassifier(
        model_factory=model_factory,
        config_provider=lambda: routing_config,
        telemetry=telemetry,
    )


@pytest.fixture
def router(
    classifier: EmailClassifier,
    model_factory: FakeModelFactory,
    routing_config: RoutingConfig,
    telemetry: CapturingTelemetry,
) -> ModelRouter:
    return ModelRouter(
        classifier=classifier,
        model_factory=model_factory,
        config_provider=lambda: routing_config,
        telemetry=telemetry,
    )


@pytest.fixture
def routine_input() -> ClassificationInput:
    return ClassificationInput(
        thread_content="Thanks, sounds good!",
        subject="Re: Thursday sync",
        sender_name="Dana Client",
        sender_email="dana@example.com",
    )


@pytest.fixture
def complaint_input() -> ClassificationInput:
    return ClassificationInput(
        thread_content="We are extremely disappointed and want to cancel immediately.",
        subject="Cancelling our contract",
        sender_email="client@example.com",
    )
