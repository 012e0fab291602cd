"""Output formatters for generated calendars."""

import csv
from io import StringIO
from pathlib import Path

from seasoncal.models import Matchday, MatchdayKind, Round, Team

# Bye records carry no sequence number, field or time slot; sequence numbers
# of real matches stay within 1..capacity.
RECORD_COLUMNS = [
    "matchday_number", "date", "leg_number", "sequence_number",
    "home_team_id", "away_team_id", "is_bye", "field_id", "time_slot_id",
]


def calendar_records(matchdays: list[Matchday],
                     include_byes: bool = False) -> list[dict]:
    """Flatten matchdays into the record shape the persistence layer writes.

    Bye records follow the real matches of their matchday with no
    sequence number, opponent, field or time slot.
    """
    records = []
    for md in matchdays:
        for sm in md.scheduled_matches:
            records.append({
                "matchday_number": md.number,
                "date": md.date,
                "leg_number": md.leg_number,
                "sequence_number": sm.sequence_number,
                "home_team_id": sm.match.home_team.id,
                "away_team_id": sm.match.away_team.id,
                "is_bye": False,
                "field_id": sm.field.id,
                "time_slot_id": sm.time_slot.id,
            })
        if not include_byes:
            continue
        for m in md.byes:
            records.append({
                "matchday_number": md.number,
                "date": md.date,
                "leg_number": md.leg_number,
                "sequence_number": None,
                "home_team_id": m.home_team.id,
                "away_team_id": None,
                "is_bye": True,
                "field_id": None,
                "time_slot_id": None,
            })
    return records


def format_calendar_csv(matchdays: list[Matchday],
                        include_byes: bool = False) -> str:
    """Format the calendar as a flat CSV, one row per record."""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(RECORD_COLUMNS)
    for rec in calendar_records(matchdays, include_byes=include_byes):
        row = []
        for col in RECORD_COLUMNS:
            value = rec[col]
            if value is None:
                row.append("")
            elif col == "date":
                row.append(value.isoformat())
            elif col == "is_bye":
                row.append("1" if value else "0")
            else:
                row.append(value)
        writer.writerow(row)
    return output.getvalue()


def _fmt_time_12h(t) -> str:
    """Format a time as 12-hour with am/pm (e.g., '5:00pm', '10:00am')."""
    h = t.hour
    suffix = "am" if h < 12 else "pm"
    if h == 0:
        h = 12
    elif h > 12:
        h -= 12
    return f"{h}:{t.minute:02d}{suffix}"


def format_pairings(rounds: list[Round]) -> str:
    """Format round-robin rounds as text, one block per leg and round."""
    lines = []
    for rnd in rounds:
        lines.append(f"LEG {rnd.leg_number} - ROUND {rnd.round_number}")
        for i, m in enumerate(rnd.matches, 1):
            if m.is_bye:
                lines.append(f"  {i:>2}. {m.home_team.display_name} - BYE")
            else:
                lines.append(f"  {i:>2}. {m.home_team.display_name} vs "
                             f"{m.away_team.display_name}")
        lines.append("")
    return "\n".join(lines)


def format_calendar(matchdays: list[Matchday], teams: list[Team],
                    season_name: str = "") -> str:
    """Format the calendar as human-readable text, by matchday then by team."""
    lines = []
    lines.append("=" * 80)
    lines.append(f"{season_name or 'SEASON'} CALENDAR".upper())
    lines.append("=" * 80)

    for md in matchdays:
        flex = ", flex week" if md.kind is MatchdayKind.FLEX else ""
        lines.append(
            f"\n--- MATCHDAY {md.number}  {md.date.strftime('%a %m/%d/%Y')}  "
            f"(leg {md.leg_number}, round {md.round_number}{flex}) ---"
        )
        for sm in md.scheduled_matches:
            start = _fmt_time_12h(sm.time_slot.start_time)
            lines.append(
                f"  {sm.sequence_number:>2}. {start:>7}  "
                f"{sm.match.home_team.display_name:<20} vs "
                f"{sm.match.away_team.display_name:<20} @ {sm.field.name}"
            )
        for m in md.byes:
            lines.append(f"      BYE: {m.home_team.display_name}")

    lines.append("\n" + "=" * 80)
    lines.append("PER-TEAM SCHEDULES")
    lines.append("=" * 80)

    for team in teams:
        lines.append(f"\n{team.display_name}:")
        n = 0
        for md in matchdays:
            for sm in md.scheduled_matches:
                if not sm.match.involves(team):
                    continue
                n += 1
                is_home = sm.match.home_team == team
                opponent = sm.match.opponent(team)
                h_a = "H" if is_home else "V"
                lines.append(
                    f"  {n:>2}. {md.date.strftime('%a %m/%d')} "
                    f"{_fmt_time_12h(sm.time_slot.start_time):>7} {h_a} vs "
                    f"{opponent.display_name:<20} @ {sm.field.name}"
                )

    return "\n".join(lines)


def write_calendar(matchdays: list[Matchday], teams: list[Team],
                   output_prefix: str = "output", season_name: str = "",
                   include_byes: bool = False,
                   rounds: list[Round] | None = None):
    """Write all output files into {output_prefix}/ directory."""
    out_dir = Path(output_prefix)
    out_dir.mkdir(parents=True, exist_ok=True)

    text_path = out_dir / "calendar.txt"
    text_path.write_text(format_calendar(matchdays, teams, season_name=season_name))
    print(f"Written: {text_path}")

    csv_path = out_dir / "calendar.csv"
    csv_path.write_text(format_calendar_csv(matchdays, include_byes=include_byes))
    print(f"Written: {csv_path}")

    if rounds:
        pairings_path = out_dir / "pairings.txt"
        pairings_path.write_text(format_pairings(rounds))
        print(f"Written: {pairings_path}")
