"""
Unit tests for InsightService.
"""

from datetime import datetime

import pytest

from health_insights.config import Settings
from health_insights.health_store import HealthDataStore
from health_insights.insight_service import InsightService
from health_insights.models import MetricRecord


class RecordingReader:
    """In-memory reader that records the limits it was asked for."""

    def __init__(self, metrics=None, entries=None, trends=None):
        self.metrics = metrics or []
        self.entries = entries or []
        self.trends = trends or []
        self.calls = []

    def get_recent_metrics(self, metric_type=None, limit=None):
        self.calls.append(("metrics", limit))
        return self.metrics[:limit] if limit else self.metrics

    def get_recent_detailed_entries(self, entry_type=None, limit=None):
        self.calls.append(("detailed", limit))
        return self.entries[:limit] if limit else self.entries

    def get_trends(self, metric_type=None):
        self.calls.append(("trends", None))
        return self.trends


class FailingReader(RecordingReader):

    def get_recent_detailed_entries(self, entry_type=None, limit=None):
        raise OSError("disk unavailable")


class TestInsightService:
    """Test suite for the storage/engine boundary."""

    def test_reads_with_configured_limits(self, make_profile, now):
        reader = RecordingReader()
        settings = Settings(metric_history_limit=4, detailed_history_limit=12)

        InsightService(reader, settings=settings).generate_for(make_profile(), now=now)

        assert reader.calls == [("metrics", 4), ("detailed", 12), ("trends", None)]

    def test_generates_from_reader_history(self, make_profile, make_sleep, now):
        reader = RecordingReader(entries=make_sleep(3, hours=5))

        insights = InsightService(reader, settings=Settings()).generate_for(make_profile(), now=now)

        assert [i.title for i in insights] == ["Insufficient Sleep Duration"]

    def test_failed_read_is_treated_as_empty(self, make_profile, make_metrics, now):
        """Test that profile and metric rules still run when entries cannot be read."""
        reader = FailingReader(metrics=make_metrics("blood_pressure", [150, 150]))

        insights = InsightService(reader, settings=Settings()).generate_for(
            make_profile(weight=95), now=now
        )

        assert {i.title for i in insights} == {
            "Significant Weight Management Needed", "Elevated Blood Pressure Detected"
        }

    def test_callback_receives_batch(self, make_profile, now):
        received = []
        service = InsightService(
            RecordingReader(), on_insights_generated=received.append, settings=Settings()
        )

        insights = service.generate_for(make_profile(weight=95), now=now)

        assert received == [insights]

    def test_callback_called_for_empty_batch(self, make_profile, now):
        received = []
        service = InsightService(
            RecordingReader(), on_insights_generated=received.append, settings=Settings()
        )

        service.generate_for(make_profile(), now=now)

        assert received == [[]]

    def test_mixed_timezone_metrics_still_generate(self, tmp_path, make_profile, now):
        """Test that naive and aware readings are evaluated together instead of being dropped."""
        store = HealthDataStore(str(tmp_path / "mixed"))
        for i, value in enumerate([150, 155, 160]):
            store.save_metric(MetricRecord(
                id=f"naive_{i}", user_id="user-1", metric_type="blood_pressure", value=value,
                timestamp=datetime(2026, 5, 28 - i, 9, 0)
            ))
        store.save_metric(MetricRecord.model_validate({
            "id": "aware", "user_id": "user-1", "metric_type": "blood_pressure", "value": 150,
            "timestamp": "2026-05-31T09:00:00Z"
        }))

        insights = InsightService(store, settings=Settings()).generate_for(make_profile(), now=now)

        assert [i.title for i in insights] == ["Elevated Blood Pressure Detected"]


class TestGenerateAndStore:
    """Test suite for storing generated batches."""

    @pytest.fixture
    def store(self, tmp_path, make_sleep):
        store = HealthDataStore(str(tmp_path / "store"))
        for entry in make_sleep(3, hours=5, quality=2):
            store.save_detailed_entry(entry)
        return store

    def test_appends_every_run_by_default(self, store, make_profile, now):
        service = InsightService(store, settings=Settings())

        service.generate_and_store(make_profile(), store, now=now)
        result = service.generate_and_store(make_profile(), store, now=now)

        assert result.success
        assert len(store.get_insights()) == 4

    def test_skips_duplicates_when_configured(self, store, make_profile, now):
        service = InsightService(store, settings=Settings(skip_duplicate_insights=True))

        service.generate_and_store(make_profile(), store, now=now)
        result = service.generate_and_store(make_profile(), store, now=now)

        assert result.message == "Stored 0 insights"
        assert len(store.get_insights()) == 2
