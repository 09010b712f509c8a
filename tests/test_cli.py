"""Tests for the command line entry point."""

import sys

import pytest

from sideline.__main__ import main


def run_cli(monkeypatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["sideline", *args])
    main()


class TestCli:
    """Tests for argument handling and the demo."""

    def test_demo_plays_weeks(self, config, monkeypatch, capsys):
        run_cli(monkeypatch, "--demo", "--weeks", "2", "--seed", "4")
        out = capsys.readouterr().out

        assert "Week 1:" in out
        assert "Week 2:" in out
        assert "Final: Philadelphia Eagles" in out

    def test_unknown_team(self, config, monkeypatch):
        with pytest.raises(SystemExit) as exc:
            run_cli(monkeypatch, "--demo", "--team", "XYZ")
        assert exc.value.code == 2

    def test_invalid_config(self, config, monkeypatch):
        monkeypatch.setenv("SIDELINE_DEFAULT_SPEED", "warp")
        with pytest.raises(SystemExit) as exc:
            run_cli(monkeypatch, "--demo")
        assert exc.value.code == 2

    def test_no_arguments_prints_help(self, config, monkeypatch, capsys):
        run_cli(monkeypatch)
        assert "usage: sideline" in capsys.readouterr().out
