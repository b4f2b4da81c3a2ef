"""Telemetry for classification and routing decisions.

Telemetry is observational only. The classifier and router receive a
RoutingTelemetry sink at construction time and report each decision to it;
nothing a sink does can change a decision.

RoutingMetrics is an in-memory aggregate owned by whoever composes the
application (the CLI, a web app), not a module-level singleton.

Usage:
    metrics = RoutingMetrics()
    telemetry = StructlogTelemetry(metrics=metrics)
    router = ModelRouter(..., telemetry=telemetry)
    ...
    stats = metrics.get_stats()
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from inbox_router.core.logging import get_logger

if TYPE_CHECKING:
    from inbox_router.routing.categories import Classification, ClassificationInput

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClassificationEvent:
    """One completed classifier round trip."""

    input: ClassificationInput
    classification: Classification
    latency_ms: int
    model_id: str


@dataclass(frozen=True, slots=True)
class RoutingEvent:
    """One routing decision."""

    session_id: str
    classification: Classification
    model_id: str
    enhanced: bool
    timestamp: datetime


class RoutingTelemetry(Protocol):
    """Sink for classification and routing events."""

    def record_classification(self, event: ClassificationEvent) -> None: ...

    def record_routing(self, event: RoutingEvent) -> None: ...


# ---------------------------------------------------------------------------
# Aggregate metrics
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RoutingStats:
    """Snapshot of the aggregate counters."""

    total: int
    avg_latency_ms: float
    by_category: dict[str, int] = field(default_factory=dict)
    by_tier: dict[str, int] = field(default_factory=dict)
    frontier_percentage: float = 0.0
    routed_total: int = 0
    enhanced_total: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "avg_latency_ms": self.avg_latency_ms,
            "by_category": dict(self.by_category),
            "by_tier": dict(self.by_tier),
            "frontier_percentage": self.frontier_percentage,
            "routed_total": self.routed_total,
            "enhanced_total": self.enhanced_total,
        }


class RoutingMetrics:
    """Thread-safe in-memory counters over classifications and routing decisions.

    Classification counters (total, latency, per-category, per-tier, frontier
    percentage) cover model-based classifications. routed_total and
    enhanced_total count every routing decision regardless of how its
    classification was obtained.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._category_counts: dict[str, int] = {}
        self._tier_counts: dict[str, int] = {}
        self._total_classifications = 0
        self._total_latency_ms = 0
        self._routed_total = 0
        self._enhanced_total = 0

    def record_classification(self, classification: Classification, latency_ms: int) -> None:
        with self._lock:
            self._total_classifications += 1
            self._total_latency_ms += latency_ms
            self._category_counts[classification.category] = (
                self._category_counts.get(classification.category, 0) + 1
            )
            self._tier_counts[classification.tier] = (
                self._tier_counts.get(classification.tier, 0) + 1
            )

    def record_routing(self, enhanced: bool) -> None:
        with self._lock:
            self._routed_total += 1
            if enhanced:
                self._enhanced_total += 1

    def get_stats(self) -> RoutingStats:
        """Return a consistent snapshot of all counters."""
        with self._lock:
            total = self._total_classifications
            frontier = self._tier_counts.get("frontier", 0)
            return RoutingStats(
                total=total,
                avg_latency_ms=self._total_latency_ms / total if total else 0.0,
                by_category=dict(self._category_counts),
                by_tier=dict(self._tier_counts),
                frontier_percentage=(frontier / total) * 100 if total else 0.0,
                routed_total=self._routed_total,
                enhanced_total=self._enhanced_total,
            )

    def reset(self) -> None:
        with self._lock:
            self._category_counts.clear()
            self._tier_counts.clear()
            self._total_classifications = 0
            self._total_latency_ms = 0
            self._routed_total = 0
            self._enhanced_total = 0


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


class StructlogTelemetry:
    """Logs each event with structlog and feeds an optional RoutingMetrics."""

    def __init__(self, metrics: RoutingMetrics | None = None):
        self._metrics = metrics

    @property
    def metrics(self) -> RoutingMetrics | None:
        return self._metrics

    def record_classification(self, event: ClassificationEvent) -> None:
        classification = event.classification
        logger.info(
            "email_classified",
            subject=event.input.subject,
            sender_email=event.input.sender_email,
            category=classification.category,
            tier=classification.tier,
            confidence=round(classification.confidence, 3),
            reason=classification.reason,
            signals=list(classification.signals),
            classifier_model=event.model_id,
            latency_ms=event.latency_ms,
        )
        if self._metrics is not None:
            self._metrics.record_classification(classification, event.latency_ms)

    def record_routing(self, event: RoutingEvent) -> None:
        logger.info(
            "model_routed",
            session_id=event.session_id,
            category=event.classification.category,
            tier=event.classification.tier,
            model_id=event.model_id,
            enhanced=event.enhanced,
            timestamp=event.timestamp.isoformat(),
        )
        if self._metrics is not None:
            self._metrics.record_routing(event.enhanced)


class NullTelemetry:
    """Discards all events."""

    def record_classification(self, event: ClassificationEvent) -> None:
        pass

    def record_routing(self, event: RoutingEvent) -> None:
        pass


@dataclass(frozen=True, slots=True)
class ClassificationSummary:
    """Category, tier and reason for API responses."""

    category: str
    tier: str
    reason: str
    is_high_stakes: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "tier": self.tier,
            "reason": self.reason,
            "is_high_stakes": self.is_high_stakes,
        }


def build_classification_summary(classification: Classification) -> ClassificationSummary:
    """Build the compact summary returned alongside a routing decision."""
    return ClassificationSummary(
        category=classification.category,
        tier=classification.tier,
        reason=classification.reason,
        is_high_stakes=classification.tier == "frontier",
    )
