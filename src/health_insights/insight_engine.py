"""
Insight Engine for Health Insights.

Runs every domain analyzer over a user's profile and recent history and
merges the results into one confidence-filtered batch of insights.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .analyzers import AnalysisContext, Analyzer, default_analyzers
from .models import (
    DetailedEntry, HealthTrend, Insight, InsightPriority, MetricRecord, UserProfile,
    utc_now
)

logger = logging.getLogger(__name__)

# Insights must be strictly more confident than this to be emitted
CONFIDENCE_THRESHOLD = 0.6

PRIORITY_ORDER = {
    InsightPriority.CRITICAL: 0,
    InsightPriority.HIGH: 1,
    InsightPriority.MEDIUM: 2,
    InsightPriority.LOW: 3,
}


@dataclass
class AnalyzerFailure:
    """An analyzer that raised during an evaluation pass."""
    analyzer: str
    error: str


@dataclass
class InsightBatch:
    """Result of one evaluation pass."""
    insights: list[Insight] = field(default_factory=list)
    failures: list[AnalyzerFailure] = field(default_factory=list)


class InsightEngine:
    """
    Generates personalized health insights.

    The engine is stateless: every call evaluates the supplied history from
    scratch and returns a fresh batch. It never reads or writes storage.
    """

    def __init__(self, analyzers: Optional[list[Analyzer]] = None):
        """
        Initialize insight engine.

        Args:
            analyzers: Analyzers to run (the eight domain analyzers if not provided)
        """
        self.analyzers = analyzers if analyzers is not None else default_analyzers()

    def generate_insights(
        self,
        profile: UserProfile,
        recent_metrics: Optional[list[MetricRecord]] = None,
        detailed_entries: Optional[list[DetailedEntry]] = None,
        trends: Optional[list[HealthTrend]] = None,
        now: Optional[datetime] = None
    ) -> list[Insight]:
        """
        Generate insights for a profile and its recent history.

        Args:
            profile: Fully populated user profile
            recent_metrics: Metric history (any order, may be empty)
            detailed_entries: Detailed entries of any type (may be empty)
            trends: Precomputed health trends
            now: Evaluation time, used for timestamps and age (defaults to now)

        Returns:
            Insights with confidence above CONFIDENCE_THRESHOLD, in analyzer order
        """
        return self.evaluate(profile, recent_metrics, detailed_entries, trends, now).insights

    def evaluate(
        self,
        profile: UserProfile,
        recent_metrics: Optional[list[MetricRecord]] = None,
        detailed_entries: Optional[list[DetailedEntry]] = None,
        trends: Optional[list[HealthTrend]] = None,
        now: Optional[datetime] = None
    ) -> InsightBatch:
        """
        Like generate_insights, but also reports analyzers that failed.
        """
        context = AnalysisContext(
            profile=profile,
            metrics=list(recent_metrics or []),
            entries=list(detailed_entries or []),
            trends=list(trends or []),
            now=now or utc_now()
        )

        batch = InsightBatch()
        for analyzer in self.analyzers:
            try:
                produced = analyzer.analyze(context)
            except Exception as e:
                logger.exception("Analyzer %s failed for user %s", analyzer.name, profile.id)
                batch.failures.append(AnalyzerFailure(analyzer=analyzer.name, error=str(e)))
                continue

            logger.debug("Analyzer %s produced %d insights", analyzer.name, len(produced))
            batch.insights.extend(produced)

        batch.insights = [i for i in batch.insights if i.confidence > CONFIDENCE_THRESHOLD]
        return batch


def sort_by_priority(insights: list[Insight]) -> list[Insight]:
    """Return insights ordered CRITICAL -> HIGH -> MEDIUM -> LOW."""
    return sorted(insights, key=lambda i: PRIORITY_ORDER[i.priority])
