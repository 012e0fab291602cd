"""Calendar assignment engine for the season calendar generator.

Two phases:
1. Generate round-robin pairings (roundrobin.py)
2. Assignment: pack each round onto Saturday matchdays, splitting a round
   across consecutive Saturdays only when it exceeds the matchday capacity,
   then bind every match to a field and a time slot.

Core principle: a round plays on a single Saturday whenever it fits. Nothing
here performs I/O; persisting the calendar (and deleting a previous one for
the same season) is the caller's job.
"""

from datetime import date, timedelta

from seasoncal.models import (
    CalendarResult, DayOfWeek, ErrorKind, Field, Match, Matchday, MatchdayKind,
    Round, ScheduledMatch, SchedulingError, SeasonResult, TimeSlot,
)
from seasoncal.roundrobin import generate_pairings, verify_pairings

WEEK = timedelta(days=7)
MAX_TEAMS_WARNING = 50
MAX_LEGS_WARNING = 4


def first_saturday(d: date) -> date:
    """Return the first Saturday on or after `d`."""
    return d + timedelta(days=(DayOfWeek.Sat.value - d.weekday()) % 7)


def is_blacked_out(d: date, blackout_ranges: list[tuple[date, date]]) -> bool:
    return any(start <= d <= end for start, end in blackout_ranges)


def playable_saturdays(start_date: date,
                       blackout_ranges: list[tuple[date, date]] | None = None,
                       flex_every: int = 0, flex_dates=None):
    """Yield (date, kind) for every playable Saturday from start_date onward.

    Blacked-out Saturdays are not yielded and do not count. Every
    `flex_every`-th playable Saturday, and any date in `flex_dates`, is a
    flex week.
    """
    blackout_ranges = blackout_ranges or []
    flex_dates = set(flex_dates or ())
    current = first_saturday(start_date)
    count = 0
    while True:
        if not is_blacked_out(current, blackout_ranges):
            count += 1
            if current in flex_dates or (flex_every > 0 and count % flex_every == 0):
                yield current, MatchdayKind.FLEX
            else:
                yield current, MatchdayKind.REGULAR
        current += WEEK


def count_saturdays(start_date: date, end_date: date,
                    blackout_ranges: list[tuple[date, date]] | None = None) -> int:
    """Count playable Saturdays in [start_date, end_date]."""
    blackout_ranges = blackout_ranges or []
    count = 0
    current = first_saturday(start_date)
    while current <= end_date:
        if not is_blacked_out(current, blackout_ranges):
            count += 1
        current += WEEK
    return count


def _place_matches(matches: list[Match], fields: list[Field],
                   time_slots: list[TimeSlot]) -> list[ScheduledMatch]:
    """Fill every field at the earliest time slot before the next slot."""
    placed = []
    for idx, m in enumerate(matches):
        placed.append(ScheduledMatch(
            match=m,
            sequence_number=idx + 1,
            field=fields[idx % len(fields)],
            time_slot=time_slots[(idx // len(fields)) % len(time_slots)],
        ))
    return placed


def _validate_resources(start_date: date, end_date: date, capacity: int,
                        fields: list[Field],
                        time_slots: list[TimeSlot]) -> SchedulingError | None:
    if capacity < 1:
        return SchedulingError(
            ErrorKind.INVALID_CAPACITY,
            f"Capacity must be at least 1 match per matchday (got {capacity})",
        )
    if not fields:
        return SchedulingError(ErrorKind.MISSING_RESOURCE,
                               "At least one field is required")
    if not time_slots:
        return SchedulingError(ErrorKind.MISSING_RESOURCE,
                               "At least one time slot is required")
    if start_date >= end_date:
        return SchedulingError(
            ErrorKind.INVALID_DATE_RANGE,
            f"Start date {start_date} must be before end date {end_date}",
        )
    return None


def assign_calendar(rounds: list[Round], start_date: date, end_date: date,
                    capacity: int, fields: list[Field],
                    time_slots: list[TimeSlot],
                    blackout_ranges: list[tuple[date, date]] | None = None,
                    flex_every: int = 0, flex_dates=None) -> CalendarResult:
    """Assign rounds to Saturday matchdays.

    Rounds are taken in order. A round whose real matches fit in `capacity`
    becomes one matchday; a larger round is cut into consecutive chunks of
    `capacity` that land on successive Saturdays. Bye matches are never
    scheduled but are attached to the first matchday cut from their round.
    Saturdays inside a blackout range are skipped. A flex week (see
    `playable_saturdays`) is passed over while the following Saturday is a
    regular one on or before `end_date`; otherwise it is played.

    `end_date` is advisory: overrunning it produces a warning, not an error.
    """
    error = _validate_resources(start_date, end_date, capacity, fields, time_slots)
    if error is not None:
        return CalendarResult(error=error)

    warnings = []
    grid_size = len(fields) * len(time_slots)
    if capacity > grid_size:
        warnings.append(
            f"Capacity {capacity} exceeds {grid_size} field/time slot "
            f"combinations; slots will repeat within a matchday"
        )

    saturdays = playable_saturdays(start_date, blackout_ranges,
                                   flex_every, flex_dates)
    upcoming = next(saturdays)
    matchdays: list[Matchday] = []
    split_rounds = 0
    skipped_rounds = 0
    flex_skipped = 0

    for rnd in rounds:
        real_matches = rnd.real_matches
        if not real_matches:
            skipped_rounds += 1
            continue

        chunks = [real_matches[i:i + capacity]
                  for i in range(0, len(real_matches), capacity)]
        if len(chunks) > 1:
            split_rounds += 1

        byes = [m for m in rnd.matches if m.is_bye]
        for chunk_idx, chunk in enumerate(chunks):
            day, kind = upcoming
            upcoming = next(saturdays)
            if (kind is MatchdayKind.FLEX
                    and upcoming[1] is MatchdayKind.REGULAR
                    and upcoming[0] <= end_date):
                flex_skipped += 1
                day, kind = upcoming
                upcoming = next(saturdays)

            matchdays.append(Matchday(
                number=len(matchdays) + 1,
                date=day,
                leg_number=rnd.leg_number,
                capacity=capacity,
                scheduled_matches=_place_matches(chunk, fields, time_slots),
                round_number=rnd.round_number,
                byes=byes if chunk_idx == 0 else [],
                kind=kind,
            ))

    if matchdays and matchdays[-1].date > end_date:
        warnings.append(
            f"Calendar ends on {matchdays[-1].date}, after the season end "
            f"date {end_date}"
        )

    for md in matchdays:
        assert len(md.scheduled_matches) <= capacity, (
            f"Matchday {md.number} holds {len(md.scheduled_matches)} matches"
        )

    return CalendarResult(
        matchdays=matchdays,
        warnings=warnings,
        summary=summarize_calendar(matchdays, split_rounds, skipped_rounds,
                                   flex_skipped),
    )


def summarize_calendar(matchdays: list[Matchday], split_rounds: int = 0,
                       skipped_rounds: int = 0, flex_skipped: int = 0) -> dict:
    total = sum(len(md.scheduled_matches) for md in matchdays)
    return {
        "total_matchdays": len(matchdays),
        "total_matches": total,
        "split_rounds": split_rounds,
        "skipped_rounds": skipped_rounds,
        "flex_weeks_used": sum(1 for md in matchdays
                               if md.kind is MatchdayKind.FLEX),
        "flex_weeks_skipped": flex_skipped,
        "first_date": matchdays[0].date if matchdays else None,
        "last_date": matchdays[-1].date if matchdays else None,
        "average_matches_per_matchday": (
            total / len(matchdays) if matchdays else 0.0
        ),
    }


def season_warnings(config: dict) -> list[str]:
    """Pre-generation sanity warnings for a season config."""
    season = config["season"]
    teams = config["teams"]
    fields = config["fields"]
    time_slots = config["time_slots"]
    legs = season["legs"]
    warnings = []

    if len(teams) > MAX_TEAMS_WARNING:
        warnings.append(
            f"{len(teams)} teams is a lot; consider splitting into divisions"
        )
    if legs > MAX_LEGS_WARNING:
        warnings.append(f"{legs} legs may make the season very long")

    if fields and time_slots and season["capacity"] >= 1:
        per_matchday = min(season["capacity"], len(fields) * len(time_slots))
        saturdays = count_saturdays(season["start_date"], season["end_date"],
                                    config.get("blackout_ranges"))
        estimated = len(teams) * (len(teams) - 1) // 2 * legs
        available = saturdays * per_matchday
        if estimated > available:
            warnings.append(
                f"Estimated {estimated} matches exceed the {available} slots "
                f"available in the season window"
            )
    return warnings


def schedule(config: dict) -> SeasonResult:
    """Generate pairings and the dated calendar for a loaded season config."""
    season = config["season"]
    teams = config["teams"]
    blackout_ranges = config.get("blackout_ranges", [])

    if season["start_date"] >= season["end_date"]:
        return SeasonResult(error=SchedulingError(
            ErrorKind.INVALID_DATE_RANGE,
            f"Start date {season['start_date']} must be before end date "
            f"{season['end_date']}",
        ))

    warnings = season_warnings(config)

    pairing = generate_pairings(teams, season["legs"],
                                season["alternate_home_away"])
    if not pairing.ok:
        return SeasonResult(error=pairing.error, warnings=warnings)

    check = verify_pairings(pairing.rounds, teams, season["legs"])
    assert check["valid"], f"Round-robin generator defect: {check['errors']}"
    warnings.extend(check["warnings"])

    calendar = assign_calendar(
        pairing.rounds, season["start_date"], season["end_date"],
        season["capacity"], config["fields"], config["time_slots"],
        blackout_ranges=blackout_ranges,
        flex_every=season.get("flex_every", 0),
        flex_dates=config.get("flex_dates"),
    )
    if not calendar.ok:
        return SeasonResult(rounds=pairing.rounds, error=calendar.error,
                            warnings=warnings)
    warnings.extend(calendar.warnings)

    return SeasonResult(
        rounds=pairing.rounds,
        matchdays=calendar.matchdays,
        warnings=warnings,
        summary={"pairings": pairing.summary, "calendar": calendar.summary},
    )
