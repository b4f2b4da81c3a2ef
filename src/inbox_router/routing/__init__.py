"""Classification and model-routing decision engine.

This package turns a piece of correspondence into (category, tier, model, prompt):
- Category taxonomy with fixed category -> tier mapping
- Classifier backed by a light model, plus a regex quick check
- Enhanced-prompt library for high-stakes categories
- Router that combines the above into one RoutingResult
- Telemetry sinks and aggregate metrics
"""

from inbox_router.routing.categories import (
    ALL_CATEGORIES,
    CATEGORY_METADATA,
    CategoryInfo,
    Classification,
    ClassificationInput,
    EmailCategory,
    is_high_stakes,
    tier_of,
)
from inbox_router.routing.classifier import (
    EmailClassifier,
    quick_classification,
    quick_high_stakes_check,
)
from inbox_router.routing.enhanced_prompts import apply_enhanced_prompt, get_enhanced_prompt
from inbox_router.routing.parsing import parse_classifier_response, strip_markdown_fences
from inbox_router.routing.router import ModelRouter, RoutingResult
from inbox_router.routing.telemetry import (
    ClassificationEvent,
    ClassificationSummary,
    NullTelemetry,
    RoutingEvent,
    RoutingMetrics,
    RoutingStats,
    RoutingTelemetry,
    StructlogTelemetry,
    build_classification_summary,
)

__all__ = [
    # Categories
    "ALL_CATEGORIES",
    "CATEGORY_METADATA",
    "CategoryInfo",
    "Classification",
    "ClassificationInput",
    "EmailCategory",
    "is_high_stakes",
    "tier_of",
    # Classifier
    "EmailClassifier",
    "quick_classification",
    "quick_high_stakes_check",
    # Parsing
    "parse_classifier_response",
    "strip_markdown_fences",
    # Enhanced prompts
    "apply_enhanced_prompt",
    "get_enhanced_prompt",
    # Router
    "ModelRouter",
    "RoutingResult",
    # Telemetry
    "ClassificationEvent",
    "ClassificationSummary",
    "NullTelemetry",
    "RoutingEvent",
    "RoutingMetrics",
    "RoutingStats",
    "RoutingTelemetry",
    "StructlogTelemetry",
    "build_classification_summary",
]
