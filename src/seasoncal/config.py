"""Config loading and validation for the season calendar generator."""

from datetime import date, time
from pathlib import Path

import yaml

from seasoncal.models import DayOfWeek, Field, Team, TimeSlot


def parse_time(s: str) -> time:
    """Parse time strings like '5:30pm', '10am', '17:00'."""
    s = s.strip()
    s_lower = s.lower()

    is_pm = s_lower.endswith("pm")
    is_am = s_lower.endswith("am")

    s_clean = s_lower
    if is_pm or is_am:
        s_clean = s_clean[:-2].strip()

    if ":" in s_clean:
        parts = s_clean.split(":")
        h = int(parts[0])
        m = int(parts[1])
    else:
        h = int(s_clean)
        m = 0

    if is_pm and h < 12:
        h += 12
    elif is_am and h == 12:
        h = 0

    return time(h, m)


def _time_value(value) -> time:
    # YAML 1.1 reads unquoted 17:00 as a base-60 integer (1020)
    if isinstance(value, int):
        return time(value // 60, value % 60)
    return parse_time(str(value))


def parse_date(s: str) -> date:
    """Parse date string YYYY-MM-DD."""
    parts = s.strip().split("-")
    return date(int(parts[0]), int(parts[1]), int(parts[2]))


def parse_date_range(s: str) -> tuple[date, date]:
    """Parse 'YYYY-MM-DD:YYYY-MM-DD' into (start, end) dates."""
    parts = s.split(":")
    return parse_date(parts[0]), parse_date(parts[1])


def load_config(path: str | Path) -> dict:
    """Load a season config YAML, returning structured data.

    Returns dict with:
    - season: {name, start_date, end_date, legs, capacity, alternate_home_away,
      flex_every}
    - teams: list[Team] (active only, in file order)
    - fields: list[Field] (active only, sorted by order)
    - time_slots: list[TimeSlot] (sorted by order)
    - blackout_ranges: list of (start, end) dates with no matchday
    - flex_dates: list of Saturdays held in reserve as flex weeks
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f)

    # Teams: file order is the round-robin tie-break, so it is preserved
    teams = []
    for tdata in raw.get("teams", []):
        team = Team(
            id=str(tdata["id"]),
            name=tdata.get("name", ""),
            active=tdata.get("active", True),
        )
        if not team.active:
            print(f"Warning: team {team.id} is inactive and will not be scheduled")
            continue
        teams.append(team)

    fields = []
    for i, fdata in enumerate(raw.get("fields", []), 1):
        fld = Field(
            id=str(fdata["id"]),
            name=fdata.get("name", str(fdata["id"])),
            active=fdata.get("active", True),
            order=fdata.get("order", i),
        )
        if not fld.active:
            print(f"Warning: field {fld.id} is inactive and will not be used")
            continue
        fields.append(fld)
    fields.sort(key=lambda f: f.order)

    time_slots = []
    for i, sdata in enumerate(raw.get("time_slots", []), 1):
        time_slots.append(TimeSlot(
            id=str(sdata["id"]),
            name=sdata.get("name", str(sdata["id"])),
            start_time=_time_value(sdata["start"]),
            end_time=_time_value(sdata["end"]),
            order=sdata.get("order", i),
        ))
    time_slots.sort(key=lambda s: s.order)

    blackout_ranges = []
    for br in raw.get("blackout_dates", []):
        s = str(br)
        if ":" in s:
            blackout_ranges.append(parse_date_range(s))
        else:
            d = parse_date(s)
            blackout_ranges.append((d, d))

    flex_dates = [parse_date(str(fd)) for fd in raw.get("flex_dates", [])]

    # Season; capacity defaults to one match per field/time slot combination
    rseason = raw["season"]
    season = {
        "name": rseason.get("name", ""),
        "start_date": parse_date(str(rseason["start_date"])),
        "end_date": parse_date(str(rseason["end_date"])),
        "legs": rseason.get("legs", 1),
        "capacity": rseason.get("capacity", len(fields) * len(time_slots)),
        "alternate_home_away": rseason.get("alternate_home_away", False),
        "flex_every": rseason.get("flex_every", 0),
    }

    # Validate
    errors = []
    if not teams:
        errors.append("No active teams")
    if not fields:
        errors.append("No active fields")
    if not time_slots:
        errors.append("No time slots")
    for slot in time_slots:
        if slot.end_time <= slot.start_time:
            errors.append(f"Time slot {slot.id} ends before it starts")
    if season["flex_every"] < 0:
        errors.append(f"flex_every must be 0 or more (got {season['flex_every']})")
    for fd in flex_dates:
        if fd.weekday() != DayOfWeek.Sat.value:
            errors.append(f"Flex date {fd} is not a Saturday")

    if errors:
        print("Config validation errors:")
        for e in errors:
            print(f"  {e}")

    return {
        "season": season,
        "teams": teams,
        "fields": fields,
        "time_slots": time_slots,
        "blackout_ranges": blackout_ranges,
        "flex_dates": flex_dates,
    }
