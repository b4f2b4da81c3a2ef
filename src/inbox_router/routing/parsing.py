"""Parsing of the classifier model's JSON answer.

Models are asked for a bare JSON object but sometimes wrap it in a Markdown
code fence. strip_markdown_fences() removes that wrapping; the parser then
validates the object and falls back to a fixed default when it is unusable.
"""

from __future__ import annotations

import json
import math
from typing import Any

from inbox_router.core.logging import get_logger
from inbox_router.routing.categories import Classification, is_valid_category

logger = get_logger(__name__)

DEFAULT_CONFIDENCE = 0.5
DEFAULT_REASON = "Classification completed"

PARSE_FAILURE_CLASSIFICATION = Classification(
    category="needs_attention",
    tier="light",
    confidence=0.3,
    reason="Unable to parse classification, defaulting to needs_attention",
    signals=(),
)


def strip_markdown_fences(text: str) -> str:
    """Strip a surrounding Markdown code fence from model output.

    Handles ```json and bare ``` openers, with or without a newline after the
    opener, and a trailing ``` closer. Text without fences is only trimmed.

    Args:
        text: Raw text that may contain markdown fences

    Returns:
        Text with fences removed
    """
    stripped = text.strip()

    if stripped.startswith("```json"):
        stripped = stripped[len("```json") :]
    elif stripped.startswith("```"):
        stripped = stripped[len("```") :]

    if stripped.endswith("```"):
        stripped = stripped[: -len("```")]

    return stripped.strip()


def _clamp_confidence(value: Any) -> float:
    """Coerce a model-supplied confidence into [0, 1]."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return DEFAULT_CONFIDENCE
    if isinstance(value, float) and math.isnan(value):
        return DEFAULT_CONFIDENCE
    # A literal 0 is treated as missing
    if value == 0:
        return DEFAULT_CONFIDENCE
    # Clamp before float() so oversized integers cannot overflow
    return float(min(1.0, max(0.0, value)))


def _coerce_signals(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item is not None)


def parse_classifier_response(text: str) -> Classification:
    """Parse the classifier model's answer into a Classification.

    The tier is always derived from the returned category; any tier the model
    volunteers is ignored.

    Args:
        text: Raw model output

    Returns:
        Parsed Classification, or PARSE_FAILURE_CLASSIFICATION when the output
        is not a JSON object with a known category
    """
    cleaned = strip_markdown_fences(text or "")

    try:
        parsed = json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, integer digit limits and excessive nesting
        logger.warning(
            "classifier_response_unparseable",
            error_type=type(e).__name__,
            error=str(e),
            preview=cleaned[:200],
        )
        return PARSE_FAILURE_CLASSIFICATION

    if not isinstance(parsed, dict):
        logger.warning(
            "classifier_response_not_object",
            got=type(parsed).__name__,
        )
        return PARSE_FAILURE_CLASSIFICATION

    category = parsed.get("category")
    if not is_valid_category(category):
        logger.warning("classifier_response_unknown_category", category=repr(category))
        return PARSE_FAILURE_CLASSIFICATION

    reason = parsed.get("reason")
    if not isinstance(reason, str) or not reason.strip():
        reason = DEFAULT_REASON

    return Classification.for_category(
        category=category,
        confidence=_clamp_confidence(parsed.get("confidence")),
        reason=reason,
        signals=_coerce_signals(parsed.get("signals")),
    )
