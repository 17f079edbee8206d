"""
Unit tests for Insight Engine.

Tests orchestration of the domain analyzers: confidence filtering,
failure isolation, determinism and an end-to-end at-risk profile.
"""

import pytest

from health_insights.analyzers import Analyzer
from health_insights.insight_engine import InsightEngine, sort_by_priority
from health_insights.models import (
    Insight, InsightCategory, InsightPriority, InsightType
)


class FixedConfidenceAnalyzer(Analyzer):
    """Emits one insight per configured confidence."""

    name = "fixed"

    def __init__(self, confidences):
        self.confidences = confidences

    def analyze(self, context):
        return [
            self._insight(
                context, f"fixed_{i}",
                type=InsightType.RECOMMENDATION,
                title=f"Fixed {confidence}",
                content="Fixed confidence insight",
                category=InsightCategory.GENERAL,
                priority=InsightPriority.LOW,
                confidence=confidence
            )
            for i, confidence in enumerate(self.confidences)
        ]


class BrokenAnalyzer(Analyzer):
    name = "broken"

    def analyze(self, context):
        raise KeyError("totalSleep")


class TestInsightEngine:
    """Test suite for InsightEngine."""

    def test_runs_eight_analyzers_by_default(self):
        """Test that the default engine wires up every domain analyzer."""
        engine = InsightEngine()

        names = [a.name for a in engine.analyzers]

        assert names == [
            "weight", "sleep", "nutrition", "exercise",
            "vitals", "preventive_care", "medication", "stress_mood"
        ]

    def test_empty_history_yields_no_insights_for_healthy_young_profile(self, make_profile, now):
        """Test graceful degradation with no records at all."""
        engine = InsightEngine()

        insights = engine.generate_insights(make_profile(), [], [], [], now=now)

        assert insights == []

    def test_missing_history_arguments_are_treated_as_empty(self, make_profile, now):
        """Test that None history behaves like empty lists."""
        engine = InsightEngine()

        insights = engine.generate_insights(make_profile(weight=95), now=now)

        assert [i.title for i in insights] == ["Significant Weight Management Needed"]

    def test_low_confidence_insights_are_filtered(self, make_profile, now):
        """Test that only insights above 0.6 confidence survive."""
        engine = InsightEngine(analyzers=[FixedConfidenceAnalyzer([0.5, 0.6, 0.61, 0.9])])

        insights = engine.generate_insights(make_profile(), now=now)

        assert [i.confidence for i in insights] == [0.61, 0.9]

    def test_failing_analyzer_does_not_abort_batch(self, make_profile, make_sleep, now):
        """Test that one analyzer crashing leaves the others' results intact."""
        from health_insights.analyzers import SleepAnalyzer
        engine = InsightEngine(analyzers=[BrokenAnalyzer(), SleepAnalyzer()])

        batch = engine.evaluate(make_profile(), [], make_sleep(3, hours=5), [], now=now)

        assert [i.title for i in batch.insights] == ["Insufficient Sleep Duration"]
        assert len(batch.failures) == 1
        assert batch.failures[0].analyzer == "broken"
        assert "totalSleep" in batch.failures[0].error

    def test_generation_is_deterministic(
        self, make_profile, make_sleep, make_exercise, make_symptoms, now
    ):
        """Test that repeated runs agree on everything except ids."""
        engine = InsightEngine()
        profile = make_profile(weight=90, date_of_birth="1970-02-02")
        entries = make_sleep(5, hours=6, quality=2) + make_exercise([5, 5, 5]) + make_symptoms(4, mood=2, stress=5)

        def signature(insights):
            return [(i.type, i.category, i.priority, i.confidence, i.content) for i in insights]

        first = engine.generate_insights(profile, [], entries, [], now=now)
        second = engine.generate_insights(profile, [], entries, [], now=now)

        assert signature(first) == signature(second)
        assert {i.id for i in first}.isdisjoint({i.id for i in second})

    def test_end_to_end_at_risk_profile(
        self, make_profile, make_sleep, make_exercise, make_medication, now
    ):
        """Test the combined at-risk profile produces the expected warnings."""
        engine = InsightEngine()
        profile = make_profile(
            height=165, weight=85, date_of_birth="1981-03-10", medications=["Metformin"]
        )
        entries = (
            make_sleep(7, hours=5.5, quality=2)
            + make_exercise([10, None, None, None, None, None, None])
            + make_medication([[True, True, True, False, False]] * 3)
        )

        insights = engine.generate_insights(profile, [], entries, [], now=now)
        found = {(i.title, i.priority) for i in insights}

        assert found == {
            ("Significant Weight Management Needed", InsightPriority.HIGH),
            ("Insufficient Sleep Duration", InsightPriority.HIGH),
            ("Poor Sleep Quality Detected", InsightPriority.MEDIUM),
            ("Increase Physical Activity", InsightPriority.HIGH),
            ("Medication Adherence Needs Improvement", InsightPriority.HIGH),
            ("Important Health Screenings for Your 40s", InsightPriority.MEDIUM),
        }
        assert all(i.confidence > 0.6 for i in insights)
        assert all(i.user_id == profile.id for i in insights)
        assert all(i.created_at == now for i in insights)
        assert "31.2" in next(i.content for i in insights if i.category == InsightCategory.NUTRITION)

    def test_data_points_only_reference_supplied_domains(
        self, make_profile, make_sleep, make_symptoms, now
    ):
        """Test that insights never cite a domain with no records."""
        engine = InsightEngine()
        entries = make_sleep(3, hours=4, quality=1) + make_symptoms(3, mood=1, stress=5)

        insights = engine.generate_insights(make_profile(weight=50), [], entries, [], now=now)
        cited = {point for i in insights for point in i.data_points}

        assert cited == {"weight", "height", "sleep", "symptoms"}

    def test_unsorted_history_is_evaluated_newest_first(self, make_profile, make_sleep, now):
        """Test that only the seven most recent sleep logs count, whatever the input order."""
        engine = InsightEngine()
        recent = make_sleep(7, hours=8, quality=4)
        old = [
            e.model_copy(update={'timestamp': e.timestamp.replace(year=2025), 'id': f"old_{e.id}"})
            for e in make_sleep(7, hours=3, quality=1)
        ]

        insights = engine.generate_insights(make_profile(), [], old + recent, [], now=now)

        assert insights == []


class TestSortByPriority:

    @staticmethod
    def _insight(priority):
        return Insight(
            id=f"i_{priority.value}", user_id="user-1", type=InsightType.WARNING,
            title="t", content="c", category=InsightCategory.GENERAL,
            priority=priority, confidence=0.9
        )

    def test_orders_critical_first(self):
        """Test priority ordering critical -> high -> medium -> low."""
        insights = [self._insight(p) for p in (
            InsightPriority.LOW, InsightPriority.CRITICAL, InsightPriority.MEDIUM, InsightPriority.HIGH
        )]

        ordered = sort_by_priority(insights)

        assert [i.priority for i in ordered] == [
            InsightPriority.CRITICAL, InsightPriority.HIGH, InsightPriority.MEDIUM, InsightPriority.LOW
        ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
