"""Constraint validation for generated calendars.

Can validate either an in-memory calendar or one re-imported from CSV.
"""

from collections import defaultdict

from seasoncal.models import Field, Matchday, Team, TimeSlot


def validate_calendar(matchdays: list[Matchday], teams: list[Team], legs: int,
                      capacity: int | None = None,
                      fields: list[Field] | None = None,
                      time_slots: list[TimeSlot] | None = None) -> dict:
    """Validate a calendar against all constraints.

    `capacity` overrides each matchday's own capacity when given. When
    `fields` or `time_slots` are given, matches placed on ids outside them
    are errors.

    Returns dict with:
    - valid: bool (True if no hard constraint violations)
    - errors: list of hard constraint violations
    - warnings: list of soft constraint issues
    """
    errors = []
    warnings = []
    team_ids = {t.id for t in teams}
    field_ids = {f.id for f in fields} if fields is not None else None
    slot_ids = {s.id for s in time_slots} if time_slots is not None else None
    matchup_counts: dict[tuple[str, str], int] = defaultdict(int)

    prev_date = None
    prev_leg = 0
    for expected_number, md in enumerate(matchdays, 1):
        label = f"Matchday {md.number} ({md.date})"

        if md.number != expected_number:
            errors.append(f"{label}: numbered out of order (expected {expected_number})")
        if prev_date is not None and md.date <= prev_date:
            errors.append(f"{label}: not after previous matchday {prev_date}")
        if md.leg_number < prev_leg:
            errors.append(
                f"{label}: leg {md.leg_number} scheduled after leg {prev_leg}"
            )
        prev_date = md.date
        prev_leg = max(prev_leg, md.leg_number)

        limit = capacity if capacity is not None else md.capacity
        if len(md.scheduled_matches) > limit:
            errors.append(
                f"{label}: {len(md.scheduled_matches)} matches exceed capacity {limit}"
            )

        playing: set[str] = set()
        used_slots: set[tuple[str, str]] = set()
        for expected_seq, sm in enumerate(md.scheduled_matches, 1):
            if sm.sequence_number != expected_seq:
                errors.append(
                    f"{label}: sequence number {sm.sequence_number} "
                    f"(expected {expected_seq})"
                )

            m = sm.match
            if m.is_bye or m.away_team is None:
                errors.append(f"{label}: bye scheduled as a match")
                continue

            h, a = m.home_team.id, m.away_team.id
            for t in (h, a):
                if t not in team_ids:
                    errors.append(f"{label}: unknown team {t}")
                if t in playing:
                    errors.append(f"{label}: {t} plays twice")
                playing.add(t)
            matchup_counts[tuple(sorted([h, a]))] += 1

            if field_ids is not None and sm.field.id not in field_ids:
                errors.append(f"{label}: unknown field {sm.field.id}")
            if slot_ids is not None and sm.time_slot.id not in slot_ids:
                errors.append(f"{label}: unknown time slot {sm.time_slot.id}")

            slot_key = (sm.field.id, sm.time_slot.id)
            if slot_key in used_slots:
                warnings.append(
                    f"{label}: field {sm.field.id} at {sm.time_slot.id} "
                    f"used more than once"
                )
            used_slots.add(slot_key)

    ordered_ids = sorted(team_ids)
    for i, t1 in enumerate(ordered_ids):
        for t2 in ordered_ids[i + 1:]:
            count = matchup_counts.get((t1, t2), 0)
            if count != legs:
                errors.append(
                    f"{t1} vs {t2}: played {count} times (expected {legs})"
                )

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


def format_validation_report(result: dict) -> str:
    """Format validation result as human-readable text."""
    lines = []
    lines.append("=" * 70)
    lines.append("CALENDAR VALIDATION REPORT")
    lines.append("=" * 70)

    if result["valid"]:
        lines.append("\nAll hard constraints satisfied.")
    else:
        lines.append(f"\n{len(result['errors'])} CONSTRAINT VIOLATIONS:")
        for e in result["errors"]:
            lines.append(f"  ERROR: {e}")

    if result["warnings"]:
        lines.append(f"\n{len(result['warnings'])} warnings:")
        for w in result["warnings"]:
            lines.append(f"  WARN: {w}")

    return "\n".join(lines)
