"""Round-robin pairing generation for the season calendar."""

from collections import defaultdict
from typing import Optional

from seasoncal.models import (
    ErrorKind, Match, PairingResult, Round, SchedulingError, Team,
)


def rotated_index(position: int, round_offset: int, size: int) -> int:
    """Return the buffer index sitting at `position` after `round_offset` rotations.

    Circle method rotation: position 0 stays fixed, and each rotation moves
    the last element to position 1, shifting the others right by one.
    """
    if position == 0:
        return 0
    span = size - 1
    return 1 + (position - 1 - round_offset) % span


def _make_match(first: Optional[Team], second: Optional[Team],
                leg: int, round_number: int, swap: bool) -> Match:
    # None is the bye placeholder; the other side rests this round
    if first is None or second is None:
        resting = second if first is None else first
        return Match(home_team=resting, away_team=None, is_bye=True,
                     leg=leg, round=round_number)
    if swap:
        first, second = second, first
    return Match(home_team=first, away_team=second, is_bye=False,
                 leg=leg, round=round_number)


def _validate_teams(teams: list[Team], legs: int) -> Optional[SchedulingError]:
    if len(teams) < 2:
        return SchedulingError(
            ErrorKind.INSUFFICIENT_TEAMS,
            f"At least 2 teams are needed to build a calendar (got {len(teams)})",
        )
    if legs < 1:
        return SchedulingError(
            ErrorKind.INVALID_LEG_COUNT,
            f"Leg count must be at least 1 (got {legs})",
        )
    seen: set[str] = set()
    for team in teams:
        if team.id in seen:
            return SchedulingError(
                ErrorKind.DUPLICATE_TEAM,
                f"Team {team.id} appears more than once",
            )
        seen.add(team.id)
    return None


def generate_pairings(teams: list[Team], legs: int,
                      alternate_home_away: bool = False) -> PairingResult:
    """Generate `legs` full round-robin passes using the circle method.

    For N teams: N-1 rounds per leg if even, N rounds per leg (one bye each)
    if odd. The caller's team order is the only tie-break, so the same input
    always yields the same rounds. On odd legs the lower position is home;
    with `alternate_home_away`, even legs swap home and away.

    Returns a PairingResult; invalid input is reported on `.error`.
    """
    error = _validate_teams(teams, legs)
    if error is not None:
        return PairingResult(error=error)

    slots: list[Optional[Team]] = list(teams)
    if len(slots) % 2 == 1:
        slots.append(None)
    size = len(slots)
    rounds_per_leg = size - 1

    rounds = []
    for leg in range(1, legs + 1):
        swap = alternate_home_away and leg % 2 == 0
        # Rotation restarts from the caller's order every leg
        for offset in range(rounds_per_leg):
            matches = []
            used = set()
            for i in range(size // 2):
                a = rotated_index(i, offset, size)
                b = rotated_index(size - 1 - i, offset, size)
                used.update((a, b))
                matches.append(_make_match(slots[a], slots[b], leg, offset + 1, swap))

            assert len(used) == size, (
                f"Leg {leg} round {offset + 1}: rotation covered {len(used)} "
                f"of {size} positions"
            )
            rounds.append(Round(leg_number=leg, round_number=offset + 1,
                                matches=matches))

    return PairingResult(rounds=rounds, summary=summarize_pairings(rounds))


def summarize_pairings(rounds: list[Round]) -> dict:
    """Counts of rounds, matches and byes for a list of rounds."""
    total_matches = 0
    total_byes = 0
    teams_with_bye: list[str] = []
    for rnd in rounds:
        for m in rnd.matches:
            if m.is_bye:
                total_byes += 1
                if m.home_team.id not in teams_with_bye:
                    teams_with_bye.append(m.home_team.id)
            else:
                total_matches += 1

    legs = {rnd.leg_number for rnd in rounds}
    return {
        "total_rounds": len(rounds),
        "rounds_per_leg": len(rounds) // len(legs) if legs else 0,
        "total_matches": total_matches,
        "total_byes": total_byes,
        "teams_with_bye": teams_with_bye,
    }


def verify_pairings(rounds: list[Round], teams: list[Team], legs: int) -> dict:
    """Verify a multi-leg round-robin is valid and complete.

    Returns dict with:
    - valid: bool
    - errors: list of error strings
    - warnings: list of soft issues (home/away imbalance)
    - matchup_counts: dict of (id_a, id_b) -> count, ids sorted
    - games_per_team, home_counts, away_counts, bye_counts: dict of id -> count
    """
    errors = []
    warnings = []
    team_ids = [t.id for t in teams]
    matchup_counts: dict[tuple[str, str], int] = defaultdict(int)
    games_per_team: dict[str, int] = {t: 0 for t in team_ids}
    home_counts: dict[str, int] = {t: 0 for t in team_ids}
    away_counts: dict[str, int] = {t: 0 for t in team_ids}
    bye_counts: dict[str, int] = {t: 0 for t in team_ids}
    fixtures_per_leg: dict[int, set[tuple[str, str]]] = defaultdict(set)

    for rnd in rounds:
        label = f"Leg {rnd.leg_number} round {rnd.round_number}"
        teams_in_round = set()
        byes_in_round = 0
        for m in rnd.matches:
            for t in m.teams:
                if t.id in teams_in_round:
                    errors.append(f"{label}: {t.id} appears twice")
                teams_in_round.add(t.id)

            if m.is_bye:
                byes_in_round += 1
                bye_counts[m.home_team.id] = bye_counts.get(m.home_team.id, 0) + 1
                continue

            h, a = m.home_team.id, m.away_team.id
            key = tuple(sorted([h, a]))
            if key in fixtures_per_leg[rnd.leg_number]:
                errors.append(f"{label}: {h} vs {a} already played in this leg")
            fixtures_per_leg[rnd.leg_number].add(key)
            matchup_counts[key] += 1
            games_per_team[h] = games_per_team.get(h, 0) + 1
            games_per_team[a] = games_per_team.get(a, 0) + 1
            home_counts[h] = home_counts.get(h, 0) + 1
            away_counts[a] = away_counts.get(a, 0) + 1

        if byes_in_round > 1:
            errors.append(f"{label}: {byes_in_round} byes (expected at most 1)")

    for i, t1 in enumerate(team_ids):
        for t2 in team_ids[i + 1:]:
            key = tuple(sorted([t1, t2]))
            count = matchup_counts.get(key, 0)
            if count != legs:
                errors.append(
                    f"{t1} vs {t2}: played {count} times (expected {legs})"
                )

    expected_games = (len(team_ids) - 1) * legs
    for t in team_ids:
        if games_per_team[t] != expected_games:
            errors.append(
                f"{t}: {games_per_team[t]} games (expected {expected_games})"
            )
        if abs(home_counts[t] - away_counts[t]) > 1:
            warnings.append(
                f"{t}: home/away imbalance ({home_counts[t]}/{away_counts[t]})"
            )

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "matchup_counts": dict(matchup_counts),
        "games_per_team": games_per_team,
        "home_counts": home_counts,
        "away_counts": away_counts,
        "bye_counts": bye_counts,
    }
