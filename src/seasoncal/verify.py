"""Standalone verifier for generated calendars.

Validates a calendar CSV (as written by the generator) against a config.
Usage: seasoncal-verify <calendar.csv> [config.yaml]
"""

import csv
import sys
from datetime import time
from pathlib import Path

from seasoncal.config import load_config, parse_date
from seasoncal.constraints import validate_calendar, format_validation_report
from seasoncal.models import (
    Field, Match, Matchday, ScheduledMatch, Team, TimeSlot,
)
from seasoncal.output import RECORD_COLUMNS
from seasoncal.stats import compute_stats, format_stats_report


def _cell(row: dict, column: str) -> str:
    return (row.get(column) or "").strip()


def parse_calendar_csv(csv_path: str | Path, config: dict) -> list[Matchday]:
    """Parse a flat calendar CSV back into Matchday objects.

    Team, field and time slot ids missing from the config become bare
    placeholders so that the validator can report them. A missing column or
    a malformed number or date raises ValueError naming the CSV line.
    """
    teams = {t.id: t for t in config["teams"]}
    fields = {f.id: f for f in config["fields"]}
    slots = {s.id: s for s in config["time_slots"]}
    capacity = config["season"]["capacity"]

    matchdays: dict[int, Matchday] = {}
    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        missing = [c for c in RECORD_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"missing columns: {', '.join(missing)}")

        for row in reader:
            number_str = _cell(row, "matchday_number")
            if not number_str:
                continue
            try:
                number = int(number_str)
                leg = int(_cell(row, "leg_number"))
                day = parse_date(_cell(row, "date"))
                is_bye = _cell(row, "is_bye") == "1"
                away_id = _cell(row, "away_team_id")
                seq = None
                if not is_bye and away_id:
                    seq = int(_cell(row, "sequence_number"))
            except (IndexError, ValueError) as e:
                raise ValueError(f"line {reader.line_num}: {e}") from e

            md = matchdays.get(number)
            if md is None:
                md = Matchday(number=number, date=day, leg_number=leg,
                              capacity=capacity)
                matchdays[number] = md

            home_id = _cell(row, "home_team_id")
            home = teams.get(home_id, Team(id=home_id))
            if seq is None:
                md.byes.append(Match(home_team=home, away_team=None,
                                     is_bye=True, leg=leg, round=0))
                continue

            away = teams.get(away_id, Team(id=away_id))
            field_id = _cell(row, "field_id")
            slot_id = _cell(row, "time_slot_id")
            md.scheduled_matches.append(ScheduledMatch(
                match=Match(home_team=home, away_team=away, is_bye=False,
                            leg=leg, round=0),
                sequence_number=seq,
                field=fields.get(field_id, Field(id=field_id, name=field_id)),
                time_slot=slots.get(slot_id, TimeSlot(
                    id=slot_id, name=slot_id,
                    start_time=time(0, 0), end_time=time(0, 0),
                )),
            ))

    return [matchdays[n] for n in sorted(matchdays)]


def main():
    if len(sys.argv) < 2:
        print("Usage: seasoncal-verify <calendar.csv> [config.yaml]")
        print("  Validates a calendar CSV against constraints in config.")
        sys.exit(1)

    csv_path = sys.argv[1]
    config_path = sys.argv[2] if len(sys.argv) > 2 else "config.yaml"

    if not Path(csv_path).exists():
        print(f"Error: {csv_path} not found")
        sys.exit(1)
    if not Path(config_path).exists():
        print(f"Error: {config_path} not found")
        sys.exit(1)

    print(f"Loading config from {config_path}...")
    config = load_config(config_path)

    print(f"Parsing calendar from {csv_path}...")
    try:
        matchdays = parse_calendar_csv(csv_path, config)
    except ValueError as e:
        print(f"Error: {csv_path}: {e}")
        sys.exit(1)
    print(f"Loaded {len(matchdays)} matchdays")

    if not matchdays:
        print("No matchdays found in CSV. Check the format.")
        sys.exit(1)

    result = validate_calendar(matchdays, config["teams"],
                               config["season"]["legs"],
                               capacity=config["season"]["capacity"],
                               fields=config["fields"],
                               time_slots=config["time_slots"])
    print(format_validation_report(result))

    stats = compute_stats(matchdays, config["teams"], config["fields"],
                          config["time_slots"])
    print("\n" + format_stats_report(stats, config["teams"]))

    sys.exit(0 if result["valid"] else 1)


if __name__ == "__main__":
    main()
