"""Tests for the play-by-play GameRunner."""

import random

import pytest

from sideline.simulation.runner import (
    KICKOFF_YARD_LINE,
    OVERTIME_SECONDS,
    QUARTER_SECONDS,
    GameRunner,
    setup_game,
)


@pytest.fixture
def setup(week_one_game, game_state):
    return setup_game(week_one_game, game_state)


def play_out(runner: GameRunner) -> int:
    plays = 0
    while not runner.is_complete:
        runner.run_next_play()
        plays += 1
        assert plays < 1000
    return plays


class TestSetupGame:
    """Tests for setup_game."""

    def test_teams(self, setup):
        assert setup.home_team.id == "PHI"
        assert setup.away_team.id == "DAL"
        assert setup.week == 1
        assert not setup.is_playoff

    def test_injured_players_sit(self, setup):
        """Players with weeks remaining on an injury are left out."""
        home_ids = {p.id for p in setup.home_roster}
        away_ids = {p.id for p in setup.away_roster}

        assert "PHI-RB" not in home_ids
        assert "DAL-QB" not in away_ids
        assert len(home_ids) == 7

    def test_playoff_flag(self, week_one_game, game_state):
        assert setup_game(week_one_game, game_state, is_playoff=True).is_playoff


class TestGameRunner:
    """Tests for running a full game."""

    def test_starts_at_kickoff(self, setup):
        runner = GameRunner(setup, rng=random.Random(1))
        state = runner.state

        assert state.quarter == 1
        assert state.time_remaining == QUARTER_SECONDS
        assert state.yard_line == KICKOFF_YARD_LINE
        assert (state.down, state.yards_to_go) == (1, 10)
        assert runner.get_result() is None

    def test_plays_to_completion(self, setup):
        """A game ends with a result matching the final state."""
        runner = GameRunner(setup, rng=random.Random(3))
        plays = play_out(runner)
        result = runner.get_result()

        assert result is not None
        assert result.home_score == runner.state.home_score
        assert result.away_score == runner.state.away_score
        assert result.total_plays == plays == runner.total_plays
        assert result.home_team_id == "PHI"

    def test_same_seed_same_game(self, setup):
        """Runs are reproducible from the random source."""
        first = GameRunner(setup, rng=random.Random(11))
        second = GameRunner(setup, rng=random.Random(11))
        play_out(first)
        play_out(second)

        assert first.get_result().score_string == second.get_result().score_string
        assert first.total_plays == second.total_plays

    def test_run_after_final_raises(self, setup):
        runner = GameRunner(setup, rng=random.Random(5))
        play_out(runner)

        with pytest.raises(RuntimeError):
            runner.run_next_play()

    def test_force_complete(self, setup):
        """force_complete ends the game with the current score."""
        runner = GameRunner(setup, rng=random.Random(5))
        for _ in range(10):
            runner.run_next_play()

        result = runner.force_complete()

        assert runner.is_complete
        assert result.total_plays == 10
        assert result is runner.get_result()
        assert runner.force_complete() is result

    def test_box_score_totals(self, setup):
        """Team totals add up and passers get a stat line."""
        runner = GameRunner(setup, rng=random.Random(8))
        play_out(runner)
        box = runner.get_result().box_score

        for stats in (box.home_stats, box.away_stats):
            assert stats.total_yards == stats.passing_yards + stats.rushing_yards
        assert box.home_stats.plays + box.away_stats.plays == runner.total_plays
        for leader in box.passing_leaders:
            assert " YDS, " in leader.stat_line
            assert leader.stat_line.endswith("INT")

    def test_injuries_only_for_rostered_players(self, setup):
        runner = GameRunner(setup, rng=random.Random(21))
        play_out(runner)
        rostered = {p.id for p in setup.home_roster + setup.away_roster}

        for injury in runner.get_result().injuries:
            assert injury.player_id in rostered
            assert 1 <= injury.weeks_out <= 6


class TestPeriods:
    """Tests for quarter and overtime transitions."""

    def end_of(self, runner: GameRunner, quarter: int, home: int, away: int) -> None:
        runner.state.quarter = quarter
        runner.state.home_score = home
        runner.state.away_score = away
        runner.state.time_remaining = 0
        runner._end_period()

    def test_halftime_resets_timeouts(self, setup):
        runner = GameRunner(setup, rng=random.Random(2))
        runner.state.home.timeouts_remaining = 0
        self.end_of(runner, 2, 7, 3)

        assert runner.state.quarter == 3
        assert runner.state.time_remaining == QUARTER_SECONDS
        assert runner.state.home.timeouts_remaining == 3
        assert runner.state.yard_line == KICKOFF_YARD_LINE

    def test_decided_game_ends_after_fourth(self, setup):
        runner = GameRunner(setup, rng=random.Random(2))
        self.end_of(runner, 4, 24, 17)

        assert runner.is_complete
        assert not runner.get_result().went_to_overtime

    def test_tie_goes_to_overtime(self, setup):
        runner = GameRunner(setup, rng=random.Random(2))
        self.end_of(runner, 4, 17, 17)

        assert not runner.is_complete
        assert runner.state.quarter == 5
        assert runner.state.time_remaining == OVERTIME_SECONDS

    def test_regular_season_overtime_can_end_tied(self, setup):
        runner = GameRunner(setup, rng=random.Random(2))
        self.end_of(runner, 5, 20, 20)

        result = runner.get_result()
        assert result.is_tie
        assert result.went_to_overtime

    def test_playoff_overtime_continues(self, week_one_game, game_state):
        """Playoff games keep playing overtime periods until decided."""
        runner = GameRunner(setup_game(week_one_game, game_state, is_playoff=True), rng=random.Random(2))
        self.end_of(runner, 5, 20, 20)

        assert not runner.is_complete
        assert runner.state.quarter == 6

    def test_playoff_games_never_tie(self, week_one_game, game_state):
        setup = setup_game(week_one_game, game_state, is_playoff=True)
        for seed in range(5):
            runner = GameRunner(setup, rng=random.Random(seed))
            play_out(runner)
            assert not runner.get_result().is_tie
