"""
Main entry point for Health Insights CLI.
"""

import logging
import sys

from .config import get_settings
from .ui import HealthInsightsUI


def main():
    """Run the Health Insights CLI."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    print("=" * 60)
    print("     Health Insights")
    print("=" * 60)

    ui = HealthInsightsUI(settings)
    if ui.profile is None:
        print("\nNo profile found. Let's set one up.")
        ui.setup_profile()
    else:
        ui.generate_insights()

    actions = {
        "1": ui.setup_profile,
        "2": ui.input_sleep,
        "3": ui.input_exercise,
        "4": ui.input_nutrition,
        "5": ui.input_symptoms,
        "6": ui.input_medication,
        "7": ui.input_metric,
        "8": ui.generate_insights,
        "9": ui.view_insights,
        "10": ui.load_scenario,
        "11": ui.export_data,
    }

    # Main menu loop
    while True:
        print("\n" + "=" * 60)
        print("Main Menu")
        print("=" * 60)
        print("1. Edit Profile")
        print("2. Record Sleep")
        print("3. Record Exercise")
        print("4. Record Nutrition")
        print("5. Record Symptoms")
        print("6. Record Medication")
        print("7. Record Metric")
        print("8. Generate Insights")
        print("9. View Insights")
        print("10. Load Test Scenario")
        print("11. Export Data")
        print("12. Exit")
        print()

        choice = input("Select an option (1-12): ").strip()

        if choice == "12":
            print("\nThank you for using Health Insights!")
            sys.exit(0)
        elif choice in actions:
            actions[choice]()
        else:
            print("\n✗ Invalid option. Please select 1-12.")


if __name__ == "__main__":
    main()
