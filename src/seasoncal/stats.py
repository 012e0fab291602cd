"""Statistics and balance reporting for generated calendars."""

from collections import defaultdict

from seasoncal.models import Field, Matchday, Round, Team, TimeSlot


def compute_stats(matchdays: list[Matchday], teams: list[Team],
                  fields: list[Field], time_slots: list[TimeSlot],
                  rounds: list[Round] | None = None) -> dict:
    """Compute per-team and per-resource statistics for a calendar.

    Bye counts come from `rounds` when given, otherwise from the byes
    attached to each matchday.
    """
    team_ids = [t.id for t in teams]

    home_counts = defaultdict(int)
    away_counts = defaultdict(int)
    total_games = defaultdict(int)
    bye_counts = defaultdict(int)
    matchup_counts = defaultdict(lambda: defaultdict(int))  # team -> opponent -> count
    field_usage = {f.id: 0 for f in fields}
    time_slot_usage = {s.id: 0 for s in time_slots}
    resting_teams: dict[int, list[str]] = {}

    total_matches = 0
    for md in matchdays:
        playing = set()
        for sm in md.scheduled_matches:
            h = sm.match.home_team.id
            a = sm.match.away_team.id
            home_counts[h] += 1
            away_counts[a] += 1
            total_games[h] += 1
            total_games[a] += 1
            matchup_counts[h][a] += 1
            matchup_counts[a][h] += 1
            field_usage[sm.field.id] = field_usage.get(sm.field.id, 0) + 1
            time_slot_usage[sm.time_slot.id] = (
                time_slot_usage.get(sm.time_slot.id, 0) + 1
            )
            playing.update((h, a))
            total_matches += 1

        resting = [t for t in team_ids if t not in playing]
        if resting:
            resting_teams[md.number] = resting

    if rounds is not None:
        bye_sources = [m for rnd in rounds for m in rnd.matches if m.is_bye]
    else:
        bye_sources = [m for md in matchdays for m in md.byes]
    for m in bye_sources:
        bye_counts[m.home_team.id] += 1

    return {
        "all_teams": team_ids,
        "home_counts": dict(home_counts),
        "away_counts": dict(away_counts),
        "total_games": dict(total_games),
        "bye_counts": dict(bye_counts),
        "matchup_counts": {k: dict(v) for k, v in matchup_counts.items()},
        "field_usage": field_usage,
        "time_slot_usage": time_slot_usage,
        "resting_teams": resting_teams,
        "matchday_count": len(matchdays),
        "average_matches_per_matchday": (
            total_matches / len(matchdays) if matchdays else 0.0
        ),
    }


def format_stats_report(stats: dict, teams: list[Team]) -> str:
    """Format statistics into a human-readable report."""
    lines = []
    lines.append("=" * 70)
    lines.append("CALENDAR STATISTICS")
    lines.append("=" * 70)

    all_teams = stats["all_teams"]
    names = {t.id: t.display_name for t in teams}
    width = max([len(t) for t in all_teams] + [6]) + 2

    lines.append("\n--- SEASON BALANCE ---")
    lines.append(f"{'Team':<{width}} {'Name':<20} {'Home':>5} {'Away':>5} "
                 f"{'Total':>5} {'Diff':>5} {'BYE':>4}")
    lines.append("-" * (width + 49))
    for t in all_teams:
        h = stats["home_counts"].get(t, 0)
        a = stats["away_counts"].get(t, 0)
        tot = stats["total_games"].get(t, 0)
        diff = h - a
        bye = stats["bye_counts"].get(t, 0)
        flag = " ***" if abs(diff) > 1 else ""
        lines.append(f"{t:<{width}} {names.get(t, t)[:20]:<20} {h:>5} {a:>5} "
                     f"{tot:>5} {diff:>+5} {bye:>4}{flag}")

    # Matchup Matrix
    lines.append("\n--- MATCHUP MATRIX ---")
    header = f"{'':>{width}}"
    for t in all_teams:
        header += f" {t[:5]:>5}"
    lines.append(header)
    lines.append("-" * (width + 6 * len(all_teams)))
    for t1 in all_teams:
        row = f"{t1:>{width}}"
        for t2 in all_teams:
            if t1 == t2:
                row += "     -"
            else:
                c = stats["matchup_counts"].get(t1, {}).get(t2, 0)
                row += f" {c:>5}"
        lines.append(row)

    lines.append("\n--- FIELD USAGE ---")
    for fid, count in stats["field_usage"].items():
        lines.append(f"  {fid:<20} {count:>5}")

    lines.append("\n--- TIME SLOT USAGE ---")
    for sid, count in stats["time_slot_usage"].items():
        lines.append(f"  {sid:<20} {count:>5}")

    lines.append(
        f"\n{stats['matchday_count']} matchdays, "
        f"{stats['average_matches_per_matchday']:.1f} matches per matchday"
    )

    return "\n".join(lines)
