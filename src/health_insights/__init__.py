"""Rule-based personal health insight generation."""

from .insight_engine import InsightEngine, sort_by_priority
from .models import Insight, UserProfile

__all__ = ["InsightEngine", "Insight", "UserProfile", "sort_by_priority"]
