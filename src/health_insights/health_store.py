"""
Health Data Store for Health Insights.

Provides file-based local storage of the user profile, metric history,
detailed entries, trends and generated insights. Each collection is kept
as a single JSON document under the store's base directory.
"""

import hashlib
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from .models import (
    DetailedEntry, HealthTrend, Insight, MetricRecord, UserProfile,
    as_utc, detailed_entry_list_adapter, utc_now
)

logger = logging.getLogger(__name__)


@dataclass
class StorageResult:
    """Result of storage operation."""
    success: bool
    message: str = ""
    key: Optional[str] = None


class StoreError(Exception):
    """Raised when the data store cannot be used at all."""
    pass


def insight_dedup_key(insight: Insight) -> str:
    """Content key identifying semantically identical insights."""
    raw = f"{insight.type.value}|{insight.category.value}|{insight.title}"
    return hashlib.sha256(raw.encode('utf-8')).hexdigest()


class HealthDataStore:
    """
    JSON file storage for a single user's health data.

    Collections are append-only; reads return records newest first.
    A collection that cannot be read is logged and treated as empty by
    readers; writers refuse to modify it.
    """

    FILES = {
        'profile': 'user_profile.json',
        'insights': 'health_insights.json',
        'metrics': 'metric_history.json',
        'detailed': 'detailed_data.json',
        'trends': 'health_trends.json',
    }

    _metric_adapter = TypeAdapter(list[MetricRecord])
    _trend_adapter = TypeAdapter(list[HealthTrend])
    _insight_adapter = TypeAdapter(list[Insight])

    def __init__(self, base_path: str = "data/health_insights"):
        """
        Initialize data store.

        Args:
            base_path: Directory holding the collection files

        Raises:
            StoreError: If base_path exists and is not a directory
        """
        self.base_path = Path(base_path)
        if self.base_path.exists() and not self.base_path.is_dir():
            raise StoreError(f"Store path is not a directory: {self.base_path}")
        self.base_path.mkdir(parents=True, exist_ok=True)

    # Profile

    def save_profile(self, profile: UserProfile) -> StorageResult:
        profile = profile.model_copy(update={'updated_at': utc_now()})
        return self._write('profile', profile.model_dump(mode='json'))

    def get_profile(self) -> Optional[UserProfile]:
        raw = self._read('profile')
        if raw is None:
            return None
        try:
            return UserProfile.model_validate(raw)
        except ValidationError as e:
            logger.warning("Stored profile is invalid: %s", e)
            return None

    def update_profile(self, **changes: Any) -> Optional[UserProfile]:
        """
        Apply field changes to the stored profile.

        Returns:
            The updated profile, or None if no profile is stored
        """
        current = self.get_profile()
        if current is None:
            return None
        updated = UserProfile.model_validate({**current.model_dump(), **changes})
        result = self.save_profile(updated)
        if not result.success:
            return None
        return self.get_profile()

    # Metrics

    def save_metric(self, metric: MetricRecord) -> StorageResult:
        return self._append('metrics', self._metric_adapter, metric)

    def get_recent_metrics(self, metric_type: Optional[str] = None, limit: Optional[int] = None) -> list[MetricRecord]:
        """Metric history, optionally filtered by type, newest first."""
        metrics = self._load('metrics', self._metric_adapter)
        if metric_type:
            metrics = [m for m in metrics if m.metric_type == metric_type]
        metrics.sort(key=lambda m: m.timestamp, reverse=True)
        return metrics[:limit] if limit else metrics

    # Detailed entries

    def save_detailed_entry(self, entry: DetailedEntry) -> StorageResult:
        return self._append('detailed', detailed_entry_list_adapter, entry)

    def get_recent_detailed_entries(self, entry_type: Optional[str] = None, limit: Optional[int] = None) -> list[DetailedEntry]:
        """Detailed entries, optionally filtered by type, newest first."""
        entries = self._load('detailed', detailed_entry_list_adapter)
        if entry_type:
            entries = [e for e in entries if e.type == entry_type]
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit] if limit else entries

    # Trends

    def save_trend(self, trend: HealthTrend) -> StorageResult:
        return self._append('trends', self._trend_adapter, trend)

    def get_trends(self, metric_type: Optional[str] = None) -> list[HealthTrend]:
        trends = self._load('trends', self._trend_adapter)
        if metric_type:
            trends = [t for t in trends if t.metric_type == metric_type]
        trends.sort(key=lambda t: t.created_at, reverse=True)
        return trends

    # Insights

    def save_insight(self, insight: Insight) -> StorageResult:
        return self.save_insights([insight])

    def save_insights(self, insights: list[Insight], skip_duplicates: bool = False) -> StorageResult:
        """
        Append insights to the repository.

        Args:
            insights: Insights to store
            skip_duplicates: Drop insights whose type/category/title is already stored

        Returns:
            StorageResult; message reports how many insights were stored
        """
        try:
            stored = self._load('insights', self._insight_adapter, strict=True)
        except StoreError as e:
            return self._refused(e)
        to_add = list(insights)

        if skip_duplicates:
            seen = {insight_dedup_key(i) for i in stored}
            to_add = []
            for insight in insights:
                key = insight_dedup_key(insight)
                if key not in seen:
                    seen.add(key)
                    to_add.append(insight)
            skipped = len(insights) - len(to_add)
            if skipped:
                logger.info("Skipped %d duplicate insights", skipped)

        result = self._write('insights', self._insight_adapter.dump_python(stored + to_add, mode='json'))
        if result.success:
            result.message = f"Stored {len(to_add)} insights"
        return result

    def get_insights(
        self,
        insight_type: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        is_read: Optional[bool] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> list[Insight]:
        """
        Stored insights matching all given filters, newest first.
        """
        start = as_utc(start) if start else None
        end = as_utc(end) if end else None
        results = []
        for insight in self._load('insights', self._insight_adapter):
            if insight_type and insight.type.value != insight_type:
                continue
            if category and insight.category.value != category:
                continue
            if priority and insight.priority.value != priority:
                continue
            if is_read is not None and insight.is_read != is_read:
                continue
            if start and insight.created_at < start:
                continue
            if end and insight.created_at > end:
                continue
            results.append(insight)

        results.sort(key=lambda i: i.created_at, reverse=True)
        return results

    def mark_insight_as_read(self, insight_id: str) -> StorageResult:
        return self._update_insight(insight_id, lambda i: {'is_read': True})

    def toggle_insight_favorite(self, insight_id: str) -> StorageResult:
        return self._update_insight(insight_id, lambda i: {'is_favorited': not i.is_favorited})

    # Whole-store operations

    def restore(
        self,
        profile: Optional[UserProfile] = None,
        insights: Optional[list[Insight]] = None,
        metrics: Optional[list[MetricRecord]] = None,
        detailed: Optional[list[DetailedEntry]] = None,
        trends: Optional[list[HealthTrend]] = None
    ) -> StorageResult:
        """
        Replace every collection that is given; others are left untouched.

        All given collections are staged before any of them is replaced.
        """
        writes = {}
        if profile is not None:
            writes['profile'] = profile.model_dump(mode='json')
        if insights is not None:
            writes['insights'] = self._insight_adapter.dump_python(insights, mode='json')
        if metrics is not None:
            writes['metrics'] = self._metric_adapter.dump_python(metrics, mode='json')
        if detailed is not None:
            writes['detailed'] = detailed_entry_list_adapter.dump_python(detailed, mode='json')
        if trends is not None:
            writes['trends'] = self._trend_adapter.dump_python(trends, mode='json')

        result = self._write_all(writes)
        if not result.success:
            return result
        return StorageResult(success=True, message=f"Restored {len(writes)} collections")

    def clear_all(self) -> None:
        """Delete every collection file."""
        for name in self.FILES.values():
            path = self.base_path / name
            if path.exists():
                path.unlink()

    def _update_insight(self, insight_id: str, changes) -> StorageResult:
        try:
            insights = self._load('insights', self._insight_adapter, strict=True)
        except StoreError as e:
            return self._refused(e, insight_id)
        for index, insight in enumerate(insights):
            if insight.id == insight_id:
                insights[index] = insight.model_copy(update=changes(insight))
                return self._write('insights', self._insight_adapter.dump_python(insights, mode='json'), key=insight_id)
        return StorageResult(success=False, message="Insight not found", key=insight_id)

    def _append(self, collection: str, adapter: TypeAdapter, record: Any) -> StorageResult:
        try:
            records = self._load(collection, adapter, strict=True)
        except StoreError as e:
            return self._refused(e, record.id)
        records.append(record)
        return self._write(collection, adapter.dump_python(records, mode='json'), key=record.id)

    @staticmethod
    def _refused(error: StoreError, key: Optional[str] = None) -> StorageResult:
        logger.error("%s", error)
        return StorageResult(success=False, message=str(error), key=key)

    def _load(self, collection: str, adapter: TypeAdapter, strict: bool = False) -> list:
        """
        Load and validate a collection.

        With strict=False an unreadable collection is logged and read as
        empty. Writers load with strict=True so that a collection which
        cannot be parsed raises StoreError instead of being overwritten.
        """
        raw = self._read(collection, strict)
        if raw is None:
            return []
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            if strict:
                raise StoreError(
                    f"Refusing to modify {collection}: {e.error_count()} invalid fields in stored data"
                ) from e
            logger.warning("Ignoring invalid %s collection: %s", collection, e)
            return []

    def _read(self, collection: str, strict: bool = False) -> Any:
        path = self.base_path / self.FILES[collection]
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            if strict:
                raise StoreError(f"Refusing to modify {collection}: cannot read {path}: {e}") from e
            logger.warning("Failed to load %s: %s", path, e)
            return None

    def _write(self, collection: str, payload: Any, key: Optional[str] = None) -> StorageResult:
        return self._write_all({collection: payload}, key=key)

    def _write_all(self, payloads: dict[str, Any], key: Optional[str] = None) -> StorageResult:
        """
        Write collections atomically as a group.

        Every payload is written to a temp file before any collection file
        is replaced; if staging fails, no collection changes.
        """
        staged = []
        try:
            for collection, payload in payloads.items():
                path = self.base_path / self.FILES[collection]
                tmp_path = path.with_suffix('.tmp')
                with open(tmp_path, 'w', encoding='utf-8') as f:
                    staged.append((tmp_path, path))
                    json.dump(payload, f, indent=2)
            for tmp_path, path in staged:
                os.replace(tmp_path, path)
        except (OSError, TypeError) as e:
            for tmp_path, _ in staged:
                tmp_path.unlink(missing_ok=True)
            logger.error("Failed to save %s: %s", ", ".join(payloads), e)
            return StorageResult(success=False, message=f"Storage failed: {e}", key=key)
        return StorageResult(success=True, message="Data stored successfully", key=key)
