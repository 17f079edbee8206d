"""
Demo script to exercise Health Insights end to end.
"""

import sys
import tempfile
from pathlib import Path

# Allow running without `pip install -e .`
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from health_insights.analyzers import AnalysisContext, ExerciseAnalyzer, SleepAnalyzer  # noqa: E402
from health_insights.config import Settings  # noqa: E402
from health_insights.export_manager import ExportManager  # noqa: E402
from health_insights.health_store import HealthDataStore  # noqa: E402
from health_insights.insight_engine import InsightEngine, sort_by_priority  # noqa: E402
from health_insights.insight_service import InsightService  # noqa: E402
from health_insights.scenarios import SCENARIOS, simulate_health_scenario  # noqa: E402


def print_section(title):
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def main():
    print_section("Health Insights - Demo")

    data_dir = tempfile.mkdtemp(prefix="health_insights_demo_")
    settings = Settings(data_dir=data_dir)
    store = HealthDataStore(settings.data_dir)
    engine = InsightEngine()
    service = InsightService(store, engine=engine, settings=settings)

    print("\n✓ System initialized successfully")
    print(f"  Data directory: {data_dir}")
    print(f"  Analyzers: {', '.join(a.name for a in engine.analyzers)}")

    for number, scenario in enumerate(SCENARIOS, start=1):
        print_section(f"Test {number}: {scenario} scenario")

        profile = simulate_health_scenario(store, scenario, seed=42)
        print(f"\nProfile: {profile.first_name} {profile.last_name}, "
              f"{profile.height:.0f} cm, {profile.weight:.0f} kg, born {profile.date_of_birth}")

        entries = store.get_recent_detailed_entries()
        metrics = store.get_recent_metrics()
        print(f"Stored {len(entries)} detailed entries and {len(metrics)} metrics")

        context = AnalysisContext(profile=profile, metrics=metrics, entries=entries)
        sleep = SleepAnalyzer().measure(context)
        exercise = ExerciseAnalyzer().measure(context)
        if sleep:
            print(f"  Sleep: {sleep.average_hours:.1f} h, quality {sleep.average_quality:.1f}/5")
        if exercise:
            print(f"  Exercise: {exercise.weekly_minutes:.0f} min/week")

        result = service.generate_and_store(profile, store)
        insights = sort_by_priority(store.get_insights())
        print(f"\n✓ {result.message}")

        for insight in insights:
            print(f"\n[{insight.priority.value.upper()}] {insight.title} ({insight.type.value}, "
                  f"confidence {insight.confidence:.0%})")
            print(f"  {insight.content}")
            for item in insight.action_items[:2]:
                print(f"    • {item}")

    print_section(f"Test {len(SCENARIOS) + 1}: Duplicate handling")

    profile = store.get_profile()
    before = len(store.get_insights())
    store.save_insights(service.generate_for(profile), skip_duplicates=True)
    print(f"\nInsights before: {before}, after re-running with duplicate skipping: {len(store.get_insights())}")

    print_section(f"Test {len(SCENARIOS) + 2}: Data Export")

    export_manager = ExportManager(store)
    exported = export_manager.export_user_data()
    print(f"\n✓ Exported {len(exported)} characters of JSON")

    restored = HealthDataStore(str(Path(data_dir) / "restored"))
    result = ExportManager(restored).import_user_data(exported)
    print(f"{'✓' if result.success else '✗'} {result.message}")

    print("\n" + "=" * 70)
    print("  Health Insights is operational!")
    print("=" * 70 + "\n")


if __name__ == "__main__":
    main()
