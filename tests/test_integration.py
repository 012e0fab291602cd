"""Integration test — full end-to-end calendar generation and validation."""

import csv
import sys
from datetime import date
from pathlib import Path

import pytest

from seasoncal import schedule as schedule_cli
from seasoncal import verify as verify_cli
from seasoncal.config import load_config
from seasoncal.constraints import validate_calendar
from seasoncal.output import format_calendar_csv
from seasoncal.scheduler import is_blacked_out, schedule
from seasoncal.stats import compute_stats, format_stats_report
from seasoncal.verify import parse_calendar_csv

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"

EXPECTED_DATES = [
    date(2026, 3, 7), date(2026, 3, 14), date(2026, 3, 21), date(2026, 3, 28),
    date(2026, 4, 11), date(2026, 4, 18), date(2026, 4, 25), date(2026, 5, 2),
    date(2026, 5, 23), date(2026, 5, 30),
]


def _replace_cell(path, row_index, column, value):
    """Overwrite one cell of a calendar CSV; row 0 is the header."""
    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    rows[row_index][rows[0].index(column)] = value
    with open(path, "w", newline="") as f:
        csv.writer(f).writerows(rows)


class TestEndToEnd:
    def test_generate_and_validate(self):
        config = load_config(CONFIG_PATH)
        result = schedule(config)
        assert result.ok, result.error
        assert result.warnings == []

        validation = validate_calendar(result.matchdays, config["teams"],
                                       config["season"]["legs"],
                                       capacity=config["season"]["capacity"])
        assert validation["valid"], f"Validation failed: {validation['errors']}"

    def test_matchday_dates(self):
        result = schedule(load_config(CONFIG_PATH))
        assert [md.date for md in result.matchdays] == EXPECTED_DATES
        assert all(md.date.weekday() == 5 for md in result.matchdays)

    def test_no_blackout_violations(self):
        config = load_config(CONFIG_PATH)
        result = schedule(config)
        for md in result.matchdays:
            assert not is_blacked_out(md.date, config["blackout_ranges"]), (
                f"Matchday {md.number} falls on blacked-out {md.date}"
            )

    def test_legs_in_order(self):
        result = schedule(load_config(CONFIG_PATH))
        assert [md.leg_number for md in result.matchdays] == [1] * 5 + [2] * 5

    def test_home_away_swapped_in_second_leg(self):
        result = schedule(load_config(CONFIG_PATH))
        first = {(sm.match.home_team.id, sm.match.away_team.id)
                 for md in result.matchdays if md.leg_number == 1
                 for sm in md.scheduled_matches}
        second = {(sm.match.away_team.id, sm.match.home_team.id)
                  for md in result.matchdays if md.leg_number == 2
                  for sm in md.scheduled_matches}
        assert first == second

    def test_summary(self):
        summary = schedule(load_config(CONFIG_PATH)).summary
        assert summary["pairings"]["total_rounds"] == 10
        assert summary["pairings"]["total_matches"] == 20
        assert summary["calendar"]["total_matchdays"] == 10
        assert summary["calendar"]["split_rounds"] == 0
        assert summary["calendar"]["first_date"] == date(2026, 3, 7)
        assert summary["calendar"]["last_date"] == date(2026, 5, 30)

    def test_stats_report_runs(self):
        config = load_config(CONFIG_PATH)
        result = schedule(config)
        stats = compute_stats(result.matchdays, config["teams"], config["fields"],
                              config["time_slots"], rounds=result.rounds)
        assert all(n == 8 for n in stats["total_games"].values())
        assert all(n == 2 for n in stats["bye_counts"].values())
        text = format_stats_report(stats, config["teams"])
        assert "SEASON BALANCE" in text

    def test_deterministic(self):
        config = load_config(CONFIG_PATH)
        a = format_calendar_csv(schedule(config).matchdays, include_byes=True)
        b = format_calendar_csv(schedule(config).matchdays, include_byes=True)
        assert a == b


class TestCsvRoundTrip:
    def _write_csv(self, tmp_path, include_byes):
        config = load_config(CONFIG_PATH)
        result = schedule(config)
        path = tmp_path / "calendar.csv"
        path.write_text(format_calendar_csv(result.matchdays,
                                            include_byes=include_byes))
        return config, path

    def test_reimported_calendar_is_valid(self, tmp_path):
        config, path = self._write_csv(tmp_path, include_byes=False)
        matchdays = parse_calendar_csv(path, config)
        assert len(matchdays) == 10
        result = validate_calendar(matchdays, config["teams"],
                                   config["season"]["legs"],
                                   capacity=config["season"]["capacity"])
        assert result["valid"], result["errors"]

    def test_byes_reimported(self, tmp_path):
        config, path = self._write_csv(tmp_path, include_byes=True)
        matchdays = parse_calendar_csv(path, config)
        assert all(len(md.byes) == 1 for md in matchdays)
        assert all(len(md.scheduled_matches) == 2 for md in matchdays)
        result = validate_calendar(matchdays, config["teams"],
                                   config["season"]["legs"])
        assert result["valid"], result["errors"]

    def test_tampered_calendar_fails(self, tmp_path):
        config, path = self._write_csv(tmp_path, include_byes=False)
        lines = path.read_text().splitlines()
        # Drop one match: a pair now meets once instead of twice
        path.write_text("\n".join(lines[:1] + lines[2:]) + "\n")
        matchdays = parse_calendar_csv(path, config)
        result = validate_calendar(matchdays, config["teams"],
                                   config["season"]["legs"])
        assert not result["valid"]

    def test_unknown_time_slot_reported(self, tmp_path):
        config, path = self._write_csv(tmp_path, include_byes=False)
        _replace_cell(path, 1, "time_slot_id", "t9")
        matchdays = parse_calendar_csv(path, config)
        assert matchdays[0].scheduled_matches[0].time_slot.id == "t9"
        result = validate_calendar(matchdays, config["teams"],
                                   config["season"]["legs"],
                                   fields=config["fields"],
                                   time_slots=config["time_slots"])
        assert any("unknown time slot t9" in e for e in result["errors"])

    def test_unknown_field_reported(self, tmp_path):
        config, path = self._write_csv(tmp_path, include_byes=False)
        _replace_cell(path, 1, "field_id", "campo-9")
        matchdays = parse_calendar_csv(path, config)
        result = validate_calendar(matchdays, config["teams"],
                                   config["season"]["legs"],
                                   fields=config["fields"],
                                   time_slots=config["time_slots"])
        assert any("unknown field campo-9" in e for e in result["errors"])

    def test_malformed_number_names_line(self, tmp_path):
        config, path = self._write_csv(tmp_path, include_byes=False)
        _replace_cell(path, 2, "leg_number", "one")
        with pytest.raises(ValueError, match="line 3"):
            parse_calendar_csv(path, config)

    def test_bad_date_names_line(self, tmp_path):
        config, path = self._write_csv(tmp_path, include_byes=False)
        _replace_cell(path, 1, "date", "2026-03")
        with pytest.raises(ValueError, match="line 2"):
            parse_calendar_csv(path, config)

    def test_missing_column(self, tmp_path):
        config = load_config(CONFIG_PATH)
        path = tmp_path / "calendar.csv"
        path.write_text("matchday_number,date\n1,2026-03-07\n")
        with pytest.raises(ValueError, match="missing columns"):
            parse_calendar_csv(path, config)


class TestCommandLine:
    def test_generate(self, tmp_path, monkeypatch, capsys):
        out = tmp_path / "out"
        monkeypatch.setattr(sys, "argv", [
            "seasoncal", str(CONFIG_PATH), "-o", str(out), "--include-byes",
        ])
        schedule_cli.main()
        for name in ("calendar.txt", "calendar.csv", "pairings.txt", "stats.txt"):
            assert (out / name).exists(), name
        assert "Calendar generated successfully!" in capsys.readouterr().out

    def test_generate_then_verify(self, tmp_path, monkeypatch):
        out = tmp_path / "out"
        monkeypatch.setattr(sys, "argv", [
            "seasoncal", str(CONFIG_PATH), "-o", str(out),
        ])
        schedule_cli.main()

        monkeypatch.setattr(sys, "argv", [
            "seasoncal-verify", str(out / "calendar.csv"), str(CONFIG_PATH),
        ])
        with pytest.raises(SystemExit) as exc:
            verify_cli.main()
        assert exc.value.code == 0

    def test_verify_flag(self, tmp_path, monkeypatch):
        out = tmp_path / "out"
        monkeypatch.setattr(sys, "argv", [
            "seasoncal", str(CONFIG_PATH), "-o", str(out),
        ])
        schedule_cli.main()

        monkeypatch.setattr(sys, "argv", [
            "seasoncal", str(CONFIG_PATH), "--verify", str(out / "calendar.csv"),
        ])
        with pytest.raises(SystemExit) as exc:
            schedule_cli.main()
        assert exc.value.code == 0

    def test_verify_flag_reports_unknown_time_slot(self, tmp_path, monkeypatch, capsys):
        out = tmp_path / "out"
        monkeypatch.setattr(sys, "argv", [
            "seasoncal", str(CONFIG_PATH), "-o", str(out),
        ])
        schedule_cli.main()
        _replace_cell(out / "calendar.csv", 1, "time_slot_id", "t9")
        capsys.readouterr()

        monkeypatch.setattr(sys, "argv", [
            "seasoncal", str(CONFIG_PATH), "--verify", str(out / "calendar.csv"),
        ])
        with pytest.raises(SystemExit) as exc:
            schedule_cli.main()
        assert exc.value.code == 1
        output = capsys.readouterr().out
        assert "CALENDAR VALIDATION REPORT" in output
        assert "unknown time slot t9" in output

    def test_verify_malformed_row_exits(self, tmp_path, monkeypatch, capsys):
        out = tmp_path / "out"
        monkeypatch.setattr(sys, "argv", [
            "seasoncal", str(CONFIG_PATH), "-o", str(out),
        ])
        schedule_cli.main()
        _replace_cell(out / "calendar.csv", 1, "sequence_number", "x")
        capsys.readouterr()

        monkeypatch.setattr(sys, "argv", [
            "seasoncal-verify", str(out / "calendar.csv"), str(CONFIG_PATH),
        ])
        with pytest.raises(SystemExit) as exc:
            verify_cli.main()
        assert exc.value.code == 1
        assert "line 2" in capsys.readouterr().out

        monkeypatch.setattr(sys, "argv", [
            "seasoncal", str(CONFIG_PATH), "--verify", str(out / "calendar.csv"),
        ])
        with pytest.raises(SystemExit) as exc:
            schedule_cli.main()
        assert exc.value.code == 1

    def test_missing_config(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["seasoncal", str(tmp_path / "nope.yaml")])
        with pytest.raises(SystemExit) as exc:
            schedule_cli.main()
        assert exc.value.code == 1

    def test_generation_error_exits(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "season.yaml"
        path.write_text("""\
season:
  start_date: 2026-06-01
  end_date: 2026-03-01
teams:
  - id: a
  - id: b
fields:
  - id: f1
time_slots:
  - id: s1
    start: 9am
    end: 11am
""")
        monkeypatch.setattr(sys, "argv", ["seasoncal", str(path), "-o", str(tmp_path)])
        with pytest.raises(SystemExit) as exc:
            schedule_cli.main()
        assert exc.value.code == 1
        assert "INVALID_DATE_RANGE" in capsys.readouterr().out
