"""
Export Manager for Health Insights.

Exports every stored collection as one JSON document and restores a
store from such a document.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from .health_store import HealthDataStore
from .models import HealthTrend, Insight, MetricRecord, UserProfile, detailed_entry_list_adapter

logger = logging.getLogger(__name__)

EXPORT_VERSION = "2.0"


@dataclass
class ExportResult:
    """Result of export or import operation."""
    success: bool
    message: str = ""
    data: Optional[dict] = None


class ExportManager:
    """
    Manages data export and import in the JSON backup format.
    """

    _insights = TypeAdapter(list[Insight])
    _metrics = TypeAdapter(list[MetricRecord])
    _trends = TypeAdapter(list[HealthTrend])

    def __init__(self, store: HealthDataStore):
        """
        Initialize export manager.

        Args:
            store: HealthDataStore to export from and import into
        """
        self.store = store

    def export_user_data(self) -> str:
        """
        Serialize all user data as a JSON document.

        Returns:
            Indented JSON with profile, insights, metric history,
            detailed data, trends, export date and format version
        """
        profile = self.store.get_profile()
        document = {
            "profile": profile.model_dump(mode='json') if profile else None,
            "insights": self._insights.dump_python(self.store.get_insights(), mode='json'),
            "metricHistory": self._metrics.dump_python(self.store.get_recent_metrics(), mode='json'),
            "detailedData": detailed_entry_list_adapter.dump_python(
                self.store.get_recent_detailed_entries(), mode='json'
            ),
            "trends": self._trends.dump_python(self.store.get_trends(), mode='json'),
            "exportDate": datetime.now().isoformat(),
            "version": EXPORT_VERSION,
        }
        return json.dumps(document, indent=2)

    def import_user_data(self, json_text: str) -> ExportResult:
        """
        Restore collections from an exported document.

        Every section present in the document replaces the stored
        collection. The whole document is validated before anything is
        written, so an invalid document leaves the store unchanged.
        """
        try:
            document = json.loads(json_text)
            if not isinstance(document, dict):
                return ExportResult(success=False, message="Import failed: document must be a JSON object")

            restored = {}
            if document.get("profile"):
                restored['profile'] = UserProfile.model_validate(document["profile"])
            if "insights" in document:
                restored['insights'] = self._insights.validate_python(document["insights"])
            if "metricHistory" in document:
                restored['metrics'] = self._metrics.validate_python(document["metricHistory"])
            if "detailedData" in document:
                restored['detailed'] = detailed_entry_list_adapter.validate_python(document["detailedData"])
            if "trends" in document:
                restored['trends'] = self._trends.validate_python(document["trends"])

        except json.JSONDecodeError as e:
            return ExportResult(success=False, message=f"Import failed: invalid JSON: {e}")
        except ValidationError as e:
            logger.warning("Rejected import document: %s", e)
            return ExportResult(success=False, message=f"Import failed: {e.error_count()} invalid fields")

        result = self.store.restore(**restored)
        if not result.success:
            return ExportResult(success=False, message=result.message)

        return ExportResult(
            success=True,
            message=f"Imported {', '.join(sorted(restored)) or 'nothing'}",
            data={name: (len(value) if isinstance(value, list) else 1) for name, value in restored.items()}
        )
