"""
Unit tests for the scenario simulator.

Runs each simulated week through the insight service to check the
engine's behavior on realistic data.
"""

import pytest

from health_insights.config import Settings
from health_insights.health_store import HealthDataStore
from health_insights.insight_service import InsightService
from health_insights.scenarios import SCENARIOS, build_test_profile, simulate_health_scenario


@pytest.fixture
def store(tmp_path):
    return HealthDataStore(str(tmp_path / "store"))


def titles_for(store, profile, now):
    service = InsightService(store, settings=Settings())
    return {i.title for i in service.generate_for(profile, now=now)}


class TestScenarioSimulator:
    """Test suite for simulated health scenarios."""

    def test_unknown_scenario(self, store):
        with pytest.raises(ValueError):
            simulate_health_scenario(store, "marathon-runner")

    @pytest.mark.parametrize("scenario,weight", [
        ("healthy", 65), ("at-risk", 75), ("chronic-condition", 85)
    ])
    def test_profile_per_scenario(self, scenario, weight, now):
        profile = build_test_profile(scenario, now)

        assert profile.weight == weight
        assert profile.height == 165
        assert bool(profile.medications) == (scenario == "chronic-condition")

    def test_store_is_replaced(self, store, now):
        simulate_health_scenario(store, "at-risk", now=now, seed=1)
        simulate_health_scenario(store, "healthy", now=now, seed=1)

        assert len(store.get_recent_detailed_entries()) == 21
        assert store.get_recent_metrics() == []

    def test_seeded_runs_are_reproducible(self, store, tmp_path, now):
        other = HealthDataStore(str(tmp_path / "other"))

        simulate_health_scenario(store, "at-risk", now=now, seed=7)
        simulate_health_scenario(other, "at-risk", now=now, seed=7)

        assert [m.value for m in store.get_recent_metrics()] == [m.value for m in other.get_recent_metrics()]

    def test_healthy_week(self, store, now):
        profile = simulate_health_scenario(store, "healthy", now=now, seed=1)

        assert titles_for(store, profile, now) == {
            "Excellent Exercise Consistency!",
            "Important Health Screenings for Your 40s",
        }

    def test_at_risk_week(self, store, now):
        profile = simulate_health_scenario(store, "at-risk", now=now, seed=1)

        assert titles_for(store, profile, now) == {
            "Weight Management Opportunity",
            "Insufficient Sleep Duration",
            "Poor Sleep Quality Detected",
            "Increase Physical Activity",
            "Elevated Blood Pressure Detected",
            "Important Health Screenings for Your 40s",
            "Elevated Stress Levels Detected",
            "Concerning Mood Patterns",
        }

    def test_chronic_condition_week(self, store, now):
        profile = simulate_health_scenario(store, "chronic-condition", now=now, seed=1)

        titles = titles_for(store, profile, now)

        assert "Significant Weight Management Needed" in titles
        assert "Important Health Screenings for Your 40s" in titles
        assert "Insufficient Sleep Duration" not in titles

    def test_every_scenario_is_listed(self):
        assert SCENARIOS == ("healthy", "at-risk", "chronic-condition")
