#!/usr/bin/env python3
"""Season Calendar Generator.

Generate mode (default):
    seasoncal [config.yaml] [-o DIR] [--include-byes]

    Generates the round-robin pairings and the dated calendar from the YAML
    config and writes:
      {DIR}/calendar.txt   - Human-readable matchday view + per-team schedule
      {DIR}/calendar.csv   - Flat records, one row per scheduled match
      {DIR}/pairings.txt   - Round-robin rounds per leg, byes included
      {DIR}/stats.txt      - Validation report + statistics

Verify mode:
    seasoncal --verify <calendar.csv> [config.yaml]

    Re-imports a calendar CSV and checks all constraints against config.
    Exit code 0 if valid, 1 if violations found.

Examples:
    seasoncal                             # default config.yaml, output/
    seasoncal spring.yaml -o spring2026   # alternate config, custom dir
    seasoncal --verify output/calendar.csv
"""

import argparse
import sys
from pathlib import Path

from seasoncal.config import load_config
from seasoncal.constraints import validate_calendar, format_validation_report
from seasoncal.output import write_calendar
from seasoncal.scheduler import schedule
from seasoncal.stats import compute_stats, format_stats_report


def _format_summary(summary: dict) -> str:
    pairings = summary["pairings"]
    calendar = summary["calendar"]
    return (
        f"Pairings: {pairings['total_rounds']} rounds "
        f"({pairings['rounds_per_leg']} per leg), "
        f"{pairings['total_matches']} matches, {pairings['total_byes']} byes\n"
        f"Calendar: {calendar['total_matchdays']} matchdays "
        f"({calendar['first_date']} to {calendar['last_date']}), "
        f"{calendar['split_rounds']} rounds split across Saturdays"
    )


def main():
    parser = argparse.ArgumentParser(
        description="Season Calendar Generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Output files (generate mode):
  {dir}/calendar.txt   Human-readable calendar (matchday view + per-team)
  {dir}/calendar.csv   Flat calendar records for import
  {dir}/pairings.txt   Round-robin rounds per leg
  {dir}/stats.txt      Validation report + balance statistics

Exit codes:
  0  Calendar valid
  1  Invalid input, constraint violations, or generation error
""",
    )
    parser.add_argument(
        "config", nargs="?", default="config.yaml",
        help="Path to config YAML file (default: config.yaml)"
    )
    parser.add_argument(
        "--output-prefix", "-o", default="output",
        help="Output directory for generated files (default: output/)"
    )
    parser.add_argument(
        "--include-byes", action="store_true",
        help="Also write bye records to calendar.csv"
    )
    parser.add_argument(
        "--verify", metavar="CSV",
        help="Verify an existing calendar CSV instead of generating"
    )
    args = parser.parse_args()

    config_path = args.config
    if not Path(config_path).exists():
        print(f"Error: config file {config_path} not found")
        sys.exit(1)

    print(f"Loading config from {config_path}...")
    config = load_config(config_path)
    season = config["season"]

    if args.verify:
        from seasoncal.verify import parse_calendar_csv
        print(f"Verifying calendar from {args.verify}...")
        try:
            matchdays = parse_calendar_csv(args.verify, config)
        except (OSError, ValueError) as e:
            print(f"Error: {args.verify}: {e}")
            sys.exit(1)
        print(f"Loaded {len(matchdays)} matchdays")

        result = validate_calendar(matchdays, config["teams"], season["legs"],
                                   capacity=season["capacity"],
                                   fields=config["fields"],
                                   time_slots=config["time_slots"])
        print(format_validation_report(result))
        sys.exit(0 if result["valid"] else 1)

    print(f"Generating calendar for {len(config['teams'])} teams, "
          f"{season['legs']} leg(s)...")
    result = schedule(config)

    for w in result.warnings:
        print(f"Warning: {w}")

    if not result.ok:
        print(f"Error: {result.error}")
        sys.exit(1)

    print(_format_summary(result.summary))

    print("\nValidating...")
    validation = validate_calendar(result.matchdays, config["teams"],
                                   season["legs"], fields=config["fields"],
                                   time_slots=config["time_slots"])
    report = format_validation_report(validation)
    print(report)

    stats = compute_stats(result.matchdays, config["teams"], config["fields"],
                          config["time_slots"], rounds=result.rounds)
    stats_text = format_stats_report(stats, config["teams"])
    print("\n" + stats_text)

    print("\nWriting output files...")
    write_calendar(
        result.matchdays, config["teams"],
        output_prefix=args.output_prefix,
        season_name=season["name"],
        include_byes=args.include_byes,
        rounds=result.rounds,
    )

    stats_path = Path(args.output_prefix) / "stats.txt"
    stats_path.write_text(report + "\n\n" + stats_text)
    print(f"Written: {stats_path}")

    if validation["valid"]:
        print("\nCalendar generated successfully!")
    else:
        print(f"\nCalendar has {len(validation['errors'])} constraint violations.")
        sys.exit(1)


if __name__ == "__main__":
    main()
