"""Email categories, tiers, and the classification value types.

The category set is closed. Adding a category means adding its metadata here
(which fixes its tier) and, for frontier categories, an enhancement fragment
in inbox_router.routing.enhanced_prompts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, get_args

from inbox_router.config_schema import ModelTier

EmailCategory = Literal[
    # Light tier - routine operations
    "routine_reply",
    "routine_update",
    "needs_attention",
    # Frontier tier - high-stakes situations
    "high_stakes_complaint",
    "high_stakes_contract",
    "high_stakes_escalation",
    "high_stakes_sensitive",
    "complex_negotiation",
]

BadgeVariant = Literal["default", "secondary", "destructive", "outline"]

ALL_CATEGORIES: tuple[EmailCategory, ...] = get_args(EmailCategory)
ALL_TIERS: tuple[ModelTier, ...] = get_args(ModelTier)


@dataclass(frozen=True, slots=True)
class CategoryInfo:
    """Static metadata for a category.

    Only ``tier`` drives routing; the rest is for display.
    """

    tier: ModelTier
    label: str
    description: str
    badge_variant: BadgeVariant


CATEGORY_METADATA: dict[EmailCategory, CategoryInfo] = {
    "routine_reply": CategoryInfo(
        tier="light",
        label="Routine",
        description="Simple acknowledgment or scheduling",
        badge_variant="outline",
    ),
    "routine_update": CategoryInfo(
        tier="light",
        label="Update",
        description="FYI, status update, or newsletter",
        badge_variant="outline",
    ),
    "needs_attention": CategoryInfo(
        tier="light",
        label="Attention",
        description="Requires thoughtful response",
        badge_variant="secondary",
    ),
    "high_stakes_complaint": CategoryInfo(
        tier="frontier",
        label="Customer Complaint",
        description="Frustration or negative sentiment detected",
        badge_variant="destructive",
    ),
    "high_stakes_contract": CategoryInfo(
        tier="frontier",
        label="Contract/Pricing",
        description="Pricing, renewal, or legal terms",
        badge_variant="destructive",
    ),
    "high_stakes_escalation": CategoryInfo(
        tier="frontier",
        label="Escalation",
        description="Executive involvement or formal escalation",
        badge_variant="destructive",
    ),
    "high_stakes_sensitive": CategoryInfo(
        tier="frontier",
        label="Sensitive",
        description="Legal, HR, or confidential matters",
        badge_variant="destructive",
    ),
    "complex_negotiation": CategoryInfo(
        tier="frontier",
        label="Negotiation",
        description="Multi-party decisions or complex business",
        badge_variant="default",
    ),
}


def tier_of(category: EmailCategory) -> ModelTier:
    """Get the tier for a given category."""
    return CATEGORY_METADATA[category].tier


def is_high_stakes(category: EmailCategory) -> bool:
    """Check if a category is high-stakes (frontier tier)."""
    return tier_of(category) == "frontier"


def is_valid_category(value: Any) -> bool:
    """Check whether an arbitrary value names a known category."""
    return isinstance(value, str) and value in CATEGORY_METADATA


def is_valid_tier(value: Any) -> bool:
    """Check whether an arbitrary value names a known tier."""
    return isinstance(value, str) and value in ALL_TIERS


# ---------------------------------------------------------------------------
# Classification value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClassificationInput:
    """The correspondence to classify.

    Attributes:
        thread_content: Full text of the email thread
        subject: Subject line
        sender_name: Sender display name (optional)
        sender_email: Sender address (optional)
        sender_context: Contact or company context known about the sender (optional)
    """

    thread_content: str
    subject: str
    sender_name: str | None = None
    sender_email: str | None = None
    sender_context: str | None = None


@dataclass(frozen=True, slots=True)
class Classification:
    """Result of classifying a thread.

    Attributes:
        category: Detected category
        tier: Model tier to use
        confidence: Confidence score (0.0-1.0)
        reason: Human-readable explanation
        signals: Short descriptions of the cues that were detected
    """

    category: EmailCategory
    tier: ModelTier
    confidence: float
    reason: str
    signals: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def for_category(
        cls,
        category: EmailCategory,
        confidence: float,
        reason: str,
        signals: tuple[str, ...] = (),
    ) -> Classification:
        """Build a classification whose tier is derived from its category."""
        return cls(
            category=category,
            tier=tier_of(category),
            confidence=confidence,
            reason=reason,
            signals=tuple(signals),
        )

    @property
    def is_high_stakes(self) -> bool:
        return self.tier == "frontier"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "category": self.category,
            "tier": self.tier,
            "confidence": self.confidence,
            "reason": self.reason,
            "signals": list(self.signals),
        }
