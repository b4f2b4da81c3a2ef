"""Tests for the category taxonomy and Classification value type."""

import pytest

from inbox_router.routing.categories import (
    ALL_CATEGORIES,
    ALL_TIERS,
    CATEGORY_METADATA,
    Classification,
    is_high_stakes,
    is_valid_category,
    is_valid_tier,
    tier_of,
)

LIGHT_CATEGORIES = ("routine_reply", "routine_update", "needs_attention")
FRONTIER_CATEGORIES = (
    "high_stakes_complaint",
    "high_stakes_contract",
    "high_stakes_escalation",
    "high_stakes_sensitive",
    "complex_negotiation",
)


class TestTierMapping:
    """Tests for tier_of and is_high_stakes."""

    def test_taxonomy_is_closed_set_of_eight(self) -> None:
        """Test that exactly the documented categories exist."""
        assert set(ALL_CATEGORIES) == set(LIGHT_CATEGORIES) | set(FRONTIER_CATEGORIES)
        assert set(CATEGORY_METADATA) == set(ALL_CATEGORIES)

    @pytest.mark.parametrize("category", ALL_CATEGORIES)
    def test_every_category_has_a_tier(self, category: str) -> None:
        """Test that tier_of is total over the taxonomy."""
        assert tier_of(category) in ALL_TIERS

    @pytest.mark.parametrize("category", ALL_CATEGORIES)
    def test_high_stakes_matches_frontier_tier(self, category: str) -> None:
        """Test is_high_stakes(c) == (tier_of(c) == 'frontier')."""
        assert is_high_stakes(category) == (tier_of(category) == "frontier")

    @pytest.mark.parametrize("category", LIGHT_CATEGORIES)
    def test_routine_categories_are_light(self, category: str) -> None:
        assert tier_of(category) == "light"

    @pytest.mark.parametrize("category", FRONTIER_CATEGORIES)
    def test_high_stakes_categories_are_frontier(self, category: str) -> None:
        assert tier_of(category) == "frontier"

    def test_unknown_category_is_invalid(self) -> None:
        assert not is_valid_category("spam")
        assert not is_valid_category(None)
        assert not is_valid_category(3)
        assert is_valid_category("routine_update")

    def test_tier_validation(self) -> None:
        assert is_valid_tier("light")
        assert is_valid_tier("frontier")
        assert not is_valid_tier("medium")


class TestClassification:
    """Tests for the Classification dataclass."""

    def test_for_category_derives_tier(self) -> None:
        """Test that the factory never lets tier disagree with category."""
        classification = Classification.for_category(
            "high_stakes_contract", confidence=0.8, reason="renewal terms"
        )
        assert classification.tier == "frontier"
        assert classification.is_high_stakes

    def test_to_dict(self) -> None:
        classification = Classification.for_category(
            "routine_reply", confidence=0.9, reason="ack", signals=("thanks",)
        )
        assert classification.to_dict() == {
            "category": "routine_reply",
            "tier": "light",
            "confidence": 0.9,
            "reason": "ack",
            "signals": ["thanks"],
        }

    def test_is_immutable(self) -> None:
        classification = Classification.for_category("routine_reply", 0.9, "ack")
        with pytest.raises(AttributeError):
            classification.tier = "frontier"  # type: ignore[misc]
