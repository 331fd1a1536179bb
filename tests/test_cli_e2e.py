"""End-to-end CLI tests using a sandbox directory and Typer CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from dit_cli.cli import app, main, parse_read_write
from tests.framework import snapshot, write_file

runner = CliRunner()


@pytest.fixture()
def roots(tmp_path: Path) -> dict[str, Path]:
    A = tmp_path / "A"
    B = tmp_path / "B"
    write_file(A / "docs" / "readme.txt", "hello")
    write_file(B / "docs" / "readme.txt", "hello")
    write_file(B / "only-b.txt", "b")
    return {"A": A, "B": B, "D1": tmp_path / "D1", "D2": tmp_path / "D2"}


def test_parse_read_write_keywords():
    reads, writes = parse_read_write(["read", "a/", "b", "write", "c", "read", "d"])
    assert reads == [Path("a"), Path("b"), Path("d")]
    assert writes == [Path("c")]


def test_copy_success(roots):
    res = runner.invoke(
        app,
        ["copy", "read", str(roots["A"]), str(roots["B"]), "write", str(roots["D1"]), str(roots["D2"])],
    )
    assert res.exit_code == 0, res.output
    assert "[OK] Copy completed successfully" in res.output
    for d in ("D1", "D2"):
        assert snapshot(roots[d]) == {"docs/readme.txt": b"hello", "only-b.txt": b"b"}


def test_copy_with_conflict_exits_2(roots):
    write_file(roots["A"] / "only-b.txt", "different")
    res = runner.invoke(app, ["copy", "read", str(roots["A"]), str(roots["B"]), "write", str(roots["D1"])])
    assert res.exit_code == 2, res.output
    assert "[WARN]" in res.output
    assert (roots["D1"] / "only-b.__READ_MERGE_CONFLICT__01.txt").exists()


def test_missing_write_paths_exit_1(roots):
    res = runner.invoke(app, ["copy", "read", str(roots["A"])])
    assert res.exit_code == 1


def test_path_before_keyword_exit_1(roots):
    res = runner.invoke(app, ["copy", str(roots["A"]), "write", str(roots["D1"])])
    assert res.exit_code == 1


def test_missing_read_root_exit_1(roots, tmp_path):
    res = runner.invoke(app, ["copy", "read", str(tmp_path / "nope"), "write", str(roots["D1"])])
    assert res.exit_code == 1
    assert not roots["D1"].exists()


def test_root_refused(roots):
    res = runner.invoke(app, ["copy", "read", "/", "write", str(roots["D1"])])
    assert res.exit_code == 1


def test_dry_run_shows_plan_and_writes_nothing(roots):
    res = runner.invoke(
        app, ["copy", "--dry-run", "read", str(roots["A"]), str(roots["B"]), "write", str(roots["D1"])]
    )
    assert res.exit_code == 0, res.output
    assert "Execution Plan" in res.output
    assert snapshot(roots["D1"]) == {}


def test_plan_command(roots):
    res = runner.invoke(app, ["plan", "read", str(roots["A"]), "write", str(roots["D1"])])
    assert res.exit_code == 0, res.output
    assert "Execution Plan" in res.output
    assert snapshot(roots["D1"]) == {}


def test_config_file_and_env(roots, tmp_path):
    cfg = write_file(
        tmp_path / "dit.yaml",
        f"read:\n  - {roots['A']}\n  - {roots['B']}\nwrite:\n  - {roots['D1']}\nworkers: 2\n",
    )
    res = runner.invoke(app, ["copy", "--config", str(cfg)])
    assert res.exit_code == 0, res.output
    assert (roots["D1"] / "only-b.txt").exists()

    res = runner.invoke(app, ["copy", "write", str(roots["D2"])], env={"DIT_CONFIG": str(cfg)})
    assert res.exit_code == 0, res.output
    assert (roots["D2"] / "only-b.txt").exists()


def test_bad_config_exit_1(tmp_path, roots):
    cfg = write_file(tmp_path / "dit.yaml", "workers: 0\n")
    res = runner.invoke(app, ["copy", "-c", str(cfg), "read", str(roots["A"]), "write", str(roots["D1"])])
    assert res.exit_code == 1


def test_events_file_records_conflicts(roots, tmp_path):
    write_file(roots["A"] / "only-b.txt", "longer content")
    events = tmp_path / "logs" / "events.jsonl"
    res = runner.invoke(
        app,
        [
            "copy",
            "--events",
            str(events),
            "read",
            str(roots["A"]),
            str(roots["B"]),
            "write",
            str(roots["D1"]),
        ],
    )
    assert res.exit_code == 2, res.output
    lines = [json.loads(line) for line in events.read_text(encoding="utf-8").splitlines()]
    assert [e["event"] for e in lines] == ["read_merge_conflict"]
    assert lines[0]["path"] == "only-b.txt"
    assert len(lines[0]["participants"]) == 2


def test_check_reports_without_creating(roots):
    res = runner.invoke(app, ["check", "read", str(roots["A"]), "write", str(roots["D1"])])
    assert res.exit_code == 0, res.output
    assert "Configuration looks good" in res.output
    assert not roots["D1"].exists()


def test_check_reports_issues(roots):
    res = runner.invoke(app, ["check", "read", str(roots["A"]), "write", str(roots["A"] / "docs")])
    assert res.exit_code == 1
    assert "Issues found" in res.output


def _main_exit_code(args: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main(args)
    return exc.value.code


def test_out_of_range_option_exits_1(roots):
    code = _main_exit_code(["copy", "--workers", "0", "read", str(roots["A"]), "write", str(roots["D1"])])
    assert code == 1
    assert not roots["D1"].exists()


def test_unknown_option_exits_1(roots, capsys):
    code = _main_exit_code(["copy", "--bogus", "read", str(roots["A"]), "write", str(roots["D1"])])
    assert code == 1
    assert "--bogus" in capsys.readouterr().err


def test_entry_point_keeps_run_exit_codes(roots):
    args = ["copy", "read", str(roots["A"]), str(roots["B"]), "write", str(roots["D1"])]
    assert _main_exit_code(args) == 0
    write_file(roots["A"] / "only-b.txt", "different")
    assert _main_exit_code(args) == 2
