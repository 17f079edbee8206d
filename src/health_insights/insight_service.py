"""
Insight Service for Health Insights.

Boundary between storage and the insight engine: reads recent history
through a HealthHistoryReader, runs the engine, and hands the resulting
batch to a callback or repository.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Protocol

from .config import Settings, get_settings
from .health_store import HealthDataStore, StorageResult
from .insight_engine import InsightEngine
from .models import DetailedEntry, HealthTrend, Insight, MetricRecord, UserProfile

logger = logging.getLogger(__name__)


class HealthHistoryReader(Protocol):
    """Read side of the health record store, newest records first."""

    def get_recent_metrics(self, metric_type: Optional[str] = None, limit: Optional[int] = None) -> list[MetricRecord]:
        ...

    def get_recent_detailed_entries(self, entry_type: Optional[str] = None, limit: Optional[int] = None) -> list[DetailedEntry]:
        ...

    def get_trends(self, metric_type: Optional[str] = None) -> list[HealthTrend]:
        ...


class InsightService:
    """
    Generates insights for a profile from stored history.
    """

    def __init__(
        self,
        reader: HealthHistoryReader,
        engine: Optional[InsightEngine] = None,
        on_insights_generated: Optional[Callable[[list[Insight]], None]] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize insight service.

        Args:
            reader: Source of metric history, detailed entries and trends
            engine: InsightEngine instance (created if not provided)
            on_insights_generated: Called with every generated batch
            settings: Settings instance (loaded from the environment if not provided)
        """
        self.reader = reader
        self.engine = engine or InsightEngine()
        self.on_insights_generated = on_insights_generated
        self.settings = settings or get_settings()

    def generate_for(self, profile: UserProfile, now: Optional[datetime] = None) -> list[Insight]:
        """
        Read recent history and generate insights for a profile.

        History that cannot be read is treated as empty, so the engine
        still runs and may still emit profile-based insights.
        """
        metrics = self._read(
            "metrics",
            lambda: self.reader.get_recent_metrics(None, self.settings.metric_history_limit)
        )
        entries = self._read(
            "detailed entries",
            lambda: self.reader.get_recent_detailed_entries(None, self.settings.detailed_history_limit)
        )
        trends = self._read("trends", lambda: self.reader.get_trends(None))

        insights = self.engine.generate_insights(profile, metrics, entries, trends, now=now)
        logger.info("Generated %d insights for user %s", len(insights), profile.id)

        if self.on_insights_generated is not None:
            self.on_insights_generated(insights)
        return insights

    def generate_and_store(
        self,
        profile: UserProfile,
        repository: HealthDataStore,
        now: Optional[datetime] = None
    ) -> StorageResult:
        """Generate insights and append them to the insight repository."""
        insights = self.generate_for(profile, now=now)
        return repository.save_insights(insights, skip_duplicates=self.settings.skip_duplicate_insights)

    @staticmethod
    def _read(what: str, read: Callable[[], list]) -> list:
        try:
            return list(read())
        except Exception:
            logger.warning("Could not read %s; continuing with empty history", what, exc_info=True)
            return []
