"""Custom exception types for the inbox model router.

Error messages state what failed, why it failed, and how to fix it.

Only configuration problems are meant to reach callers. Classifier failures
(bad model output, provider outages) are absorbed by the classifier and turned
into a fallback classification; see inbox_router.routing.classifier.
"""


class RouterError(Exception):
    """Base exception for all inbox router errors."""

    pass


class ConfigLoadError(RouterError):
    """Raised when config.yaml cannot be loaded (file not found, YAML parse error)."""

    pass


class ConfigValidationError(RouterError):
    """Raised when config.yaml fails Pydantic validation.

    Includes specific field errors with actionable messages.
    """

    pass


class ProviderNotConfiguredError(RouterError):
    """Raised when no model provider credentials are available.

    This is a deployment problem, not a runtime condition, so the router lets
    it propagate instead of routing around it.
    """

    pass


class ModelInvocationError(RouterError):
    """Raised when a model provider call fails after SDK retries.

    Attributes:
        model_id: The model identifier that was being called
    """

    def __init__(self, message: str, model_id: str | None = None):
        super().__init__(message)
        self.model_id = model_id
