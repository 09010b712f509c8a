"""Tests for WeekProgressionService."""

from dataclasses import replace

import pytest

from conftest import USER_TEAM, make_result

from sideline.core.league.schedule import ScheduledGame
from sideline.core.models.player import InjurySeverity
from sideline.core.models.team import TeamRecord
from sideline.errors import InvalidWeekFlowState
from sideline.events.types import EventType
from sideline.gameflow.types import (
    HeadlineImportance,
    InjuryUpdateType,
    PlayoffImplicationType,
    SeasonPhase,
    WeekFlowPhase,
    WeekFlowState,
    WeekGates,
)
from sideline.gameflow.week_progression import (
    BASE_SCORE,
    SCORE_OFFSET_MAX,
    SCORE_OFFSET_MIN,
    WeekProgressionConfig,
    WeekProgressionService,
)


@pytest.fixture
def service(event_bus, rng) -> WeekProgressionService:
    return WeekProgressionService(WeekProgressionConfig(), event_bus=event_bus, rng=rng)


@pytest.fixture
def week_one(service, schedule) -> WeekFlowState:
    return service.create_week_flow_state(1, SeasonPhase.REGULAR_SEASON, USER_TEAM, schedule)


def with_records(game_state, **records: TeamRecord):
    teams = dict(game_state.teams)
    for team_id, record in records.items():
        teams[team_id] = teams[team_id].with_record(record)
    return game_state.with_teams(teams)


def completed(game: ScheduledGame, home: int, away: int) -> ScheduledGame:
    return game.completed(home, away)


class TestCreateWeekFlowState:
    """Tests for building a week's flow state."""

    def test_game_week(self, week_one):
        """A game week has the user game and the rest of the slate."""
        assert week_one.phase == WeekFlowPhase.WEEK_START
        assert week_one.week_number == 1
        assert not week_one.is_user_on_bye
        assert week_one.user_game.game_id == "2025-W01-DAL@PHI"
        assert len(week_one.other_games) == 2
        assert week_one.other_games_completed == 0
        assert week_one.gates == WeekGates()
        assert week_one.user_game_result is None

    def test_bye_week(self, service, schedule):
        """On a bye there is no user game and every game is an other game."""
        state = service.create_week_flow_state(5, SeasonPhase.REGULAR_SEASON, USER_TEAM, schedule)

        assert state.is_user_on_bye
        assert state.user_game is None
        assert len(state.other_games) == 2

    def test_accepts_string_phase(self, service, schedule):
        state = service.create_week_flow_state(2, "regularSeason", USER_TEAM, schedule)
        assert state.season_phase == SeasonPhase.REGULAR_SEASON

    def test_user_game_lookup(self, service, schedule):
        assert service.get_user_game(schedule, 2, USER_TEAM).home_team_id == "NYG"
        assert service.get_user_game(schedule, 5, USER_TEAM) is None
        assert all(not g.involves(USER_TEAM) for g in service.get_other_games(schedule, 2, USER_TEAM))


class TestWeekFlowInvariants:
    """WeekFlowState rejects inconsistent snapshots."""

    def test_completed_count_bounded(self, week_one):
        with pytest.raises(InvalidWeekFlowState):
            replace(week_one, other_games_completed=3)

    def test_result_iff_completed(self, week_one, user_win):
        with pytest.raises(InvalidWeekFlowState):
            replace(week_one, user_game_completed=True)
        with pytest.raises(InvalidWeekFlowState):
            replace(week_one, user_game_result=user_win)

    def test_bye_without_user_game(self, week_one):
        with pytest.raises(InvalidWeekFlowState):
            replace(week_one, is_user_on_bye=True)


class TestRecordUserGameResult:
    """Tests for record_user_game_result."""

    def test_win_against_winning_team(self, service, week_one, user_win, game_state, event_bus):
        """A 28-21 win over a 3-2 team updates both records and emits GAME_END."""
        game_state = with_records(game_state, PHI=TeamRecord(2, 3), DAL=TeamRecord(3, 2))

        recorded = service.record_user_game_result(week_one, user_win, game_state, USER_TEAM)
        teams = recorded.updated_game_state.teams

        assert teams["PHI"].current_record.record_string == "3-3"
        assert teams["DAL"].current_record.record_string == "3-3"
        assert teams["PHI"].current_record.points_for == 28
        assert recorded.updated_week_flow.phase == WeekFlowPhase.POST_GAME
        assert recorded.updated_week_flow.user_game_completed
        assert recorded.updated_week_flow.user_game_result is user_win

        events = event_bus.get_events_by_type(EventType.GAME_END)
        assert len(events) == 1
        assert events[0].payload is user_win

    def test_inputs_untouched(self, service, week_one, user_win, game_state):
        """The caller's GameState and WeekFlowState are not mutated."""
        service.record_user_game_result(week_one, user_win, game_state, USER_TEAM)

        assert game_state.teams["PHI"].current_record.games_played == 0
        assert not week_one.user_game_completed

    def test_other_games_untouched(self, service, week_one, user_win, game_state):
        recorded = service.record_user_game_result(week_one, user_win, game_state, USER_TEAM)

        assert recorded.updated_week_flow.other_games == week_one.other_games
        assert recorded.updated_week_flow.other_games_completed == 0

    def test_injuries_applied(self, service, week_one, user_win, game_state):
        """Game injuries become player injury statuses."""
        recorded = service.record_user_game_result(week_one, user_win, game_state, USER_TEAM)
        status = recorded.updated_game_state.players["DAL-TE"].injury_status

        assert status.weeks_remaining == 2
        assert status.severity == InjurySeverity.OUT
        assert status.injury_type == "knee"

    def test_emit_events_disabled(self, event_bus, rng, week_one, user_win, game_state):
        service = WeekProgressionService(
            WeekProgressionConfig(emit_events=False), event_bus=event_bus, rng=rng
        )
        service.record_user_game_result(week_one, user_win, game_state, USER_TEAM)
        assert event_bus.get_history() == []


class TestSimulateOtherGames:
    """Tests for simulate_other_games."""

    def test_completes_every_other_game(self, service, week_one, game_state, event_bus):
        outcome = service.simulate_other_games(week_one, game_state, USER_TEAM)
        flow = outcome.updated_week_flow

        assert flow.phase == WeekFlowPhase.WEEK_SUMMARY
        assert flow.other_games_completed == len(flow.other_games) == 2
        assert all(g.is_complete for g in flow.other_games)
        assert len(outcome.results.results) == 2

        events = event_bus.get_events_by_type(EventType.OTHER_GAMES_COMPLETE)
        assert events[0].payload.completed_games == 2
        assert events[0].payload.total_games == 2

    def test_scores_in_range(self, service, week_one, game_state):
        low = BASE_SCORE + SCORE_OFFSET_MIN
        high = BASE_SCORE + SCORE_OFFSET_MAX
        for _ in range(20):
            outcome = service.simulate_other_games(week_one, game_state, USER_TEAM)
            for result in outcome.results.results:
                assert low <= result.home_score <= high
                assert low <= result.away_score <= high

    def test_records_updated_for_other_teams_only(self, service, week_one, game_state):
        outcome = service.simulate_other_games(week_one, game_state, USER_TEAM)
        teams = outcome.updated_game_state.teams

        for team_id in ("NYG", "WAS", "BUF", "KC"):
            assert teams[team_id].current_record.games_played == 1
        assert teams["PHI"].current_record.games_played == 0
        assert teams["DAL"].current_record.games_played == 0

    def test_user_result_preserved(self, service, week_one, user_win, game_state):
        """Simulating other games keeps the recorded user result."""
        recorded = service.record_user_game_result(week_one, user_win, game_state, USER_TEAM)
        outcome = service.simulate_other_games(
            recorded.updated_week_flow, recorded.updated_game_state, USER_TEAM
        )

        assert outcome.updated_week_flow.user_game_result is user_win
        assert outcome.updated_game_state.teams["PHI"].current_record.wins == 1

    def test_already_completed_games_skipped(self, service, week_one, game_state):
        first = service.simulate_other_games(week_one, game_state, USER_TEAM)
        second = service.simulate_other_games(
            first.updated_week_flow, first.updated_game_state, USER_TEAM
        )

        assert second.results.results == []
        assert second.updated_week_flow.other_games == first.updated_week_flow.other_games


class TestAdvanceWeek:
    """Tests for advance_week."""

    def test_injury_recovery(self, service, game_state, event_bus):
        """Injuries heal one week; players reaching zero are recovered."""
        advancement = service.advance_week(1, SeasonPhase.REGULAR_SEASON, game_state)
        players = advancement.updated_game_state.players

        assert players["PHI-RB"].injury_status.weeks_remaining == 0
        assert players["PHI-RB"].injury_status.severity == InjurySeverity.NONE
        assert players["DAL-QB"].injury_status.weeks_remaining == 2
        assert players["DAL-QB"].injury_status.severity == InjurySeverity.OUT

        recovered = advancement.result.recovered_players
        assert [p.player_id for p in recovered] == ["PHI-RB"]
        assert recovered[0].team_id == "PHI"
        assert recovered[0].injury_type == "hamstring"
        assert len(event_bus.get_events_by_type(EventType.PLAYER_RECOVERED)) == 1

    def test_fatigue_reset(self, service, game_state):
        advancement = service.advance_week(1, SeasonPhase.REGULAR_SEASON, game_state)

        assert advancement.result.fatigue_reset
        assert all(p.fatigue == 0 for p in advancement.updated_game_state.players.values())
        assert game_state.players["PHI-QB"].fatigue == 40

    def test_week_start_event(self, service, game_state, schedule, event_bus):
        """WEEK_START carries the new week and the user's bye status."""
        service.advance_week(4, SeasonPhase.REGULAR_SEASON, game_state, schedule, USER_TEAM)

        event = event_bus.get_events_by_type(EventType.WEEK_START)[-1]
        assert event.payload.week_number == 5
        assert event.payload.is_user_on_bye

    def test_current_week_updated(self, service, game_state):
        advancement = service.advance_week(1, SeasonPhase.REGULAR_SEASON, game_state)
        assert advancement.updated_game_state.current_week == 2
        assert advancement.result.new_week == 2

    @pytest.mark.parametrize("week,phase,new_phase,playoffs_start,season_ended", [
        (5, SeasonPhase.REGULAR_SEASON, SeasonPhase.REGULAR_SEASON, False, False),
        (17, SeasonPhase.REGULAR_SEASON, SeasonPhase.REGULAR_SEASON, False, False),
        (18, SeasonPhase.REGULAR_SEASON, SeasonPhase.PLAYOFFS, True, False),
        (21, SeasonPhase.PLAYOFFS, SeasonPhase.PLAYOFFS, False, False),
        (22, SeasonPhase.PLAYOFFS, SeasonPhase.OFFSEASON, False, True),
    ])
    def test_phase_boundaries(
        self, service, game_state, event_bus, week, phase, new_phase, playoffs_start, season_ended
    ):
        advancement = service.advance_week(week, phase, game_state)
        result = advancement.result

        assert result.new_week == week + 1
        assert result.season_phase == new_phase
        assert result.playoffs_start == playoffs_start
        assert result.season_ended == season_ended

        changes = event_bus.get_events_by_type(EventType.SEASON_PHASE_CHANGE)
        assert len(changes) == (1 if new_phase != phase else 0)

    def test_shorter_season(self, event_bus, rng, game_state):
        """Phase boundaries follow the configured season length."""
        service = WeekProgressionService(
            WeekProgressionConfig(regular_season_weeks=17, playoff_weeks=3), event_bus, rng
        )
        assert service.advance_week(17, SeasonPhase.REGULAR_SEASON, game_state).result.playoffs_start
        assert service.advance_week(20, SeasonPhase.PLAYOFFS, game_state).result.season_ended


class TestCanAdvanceWeek:
    """Gate ordering for advancing the week."""

    def test_game_week_gate_order(self, service, week_one, user_win, game_state):
        """Each condition is reported in order until all are met."""
        assert service.can_advance_week(week_one).reason == "Play your game"

        recorded = service.record_user_game_result(week_one, user_win, game_state, USER_TEAM)
        flow = recorded.updated_week_flow
        assert service.can_advance_week(flow).reason == "View game result"

        flow = replace(flow, gates=replace(flow.gates, game_result_viewed=True))
        assert service.can_advance_week(flow).reason == "Simulate remaining games"

        flow = service.simulate_other_games(flow, recorded.updated_game_state, USER_TEAM).updated_week_flow
        assert service.can_advance_week(flow).reason == "View week summary"

        flow = replace(flow, gates=replace(flow.gates, week_summary_viewed=True))
        check = service.can_advance_week(flow)
        assert check.can_advance
        assert check.reason is None

    def test_bye_week_skips_game_gates(self, service, schedule, game_state):
        state = service.create_week_flow_state(5, SeasonPhase.REGULAR_SEASON, USER_TEAM, schedule)
        assert service.can_advance_week(state).reason == "Simulate remaining games"

        state = service.simulate_other_games(state, game_state, USER_TEAM).updated_week_flow
        assert service.can_advance_week(state).reason == "View week summary"

        state = replace(state, gates=WeekGates(week_summary_viewed=True))
        assert service.can_advance_week(state).can_advance

    def test_summary_gate_alone_is_not_enough(self, service, week_one):
        state = replace(week_one, gates=WeekGates(game_result_viewed=True, week_summary_viewed=True))
        assert not service.can_advance_week(state).can_advance


class TestWeekSummary:
    """Tests for generate_week_summary."""

    def test_user_result(self, service, week_one, user_win, game_state):
        recorded = service.record_user_game_result(week_one, user_win, game_state, USER_TEAM)
        summary = service.generate_week_summary(
            recorded.updated_week_flow, recorded.updated_game_state, USER_TEAM
        )

        assert summary.week == 1
        assert summary.user_result.won
        assert summary.user_result.score == "28-21"
        assert summary.user_result.opponent == "Cowboys"
        assert summary.user_result.new_record == "1-0"
        assert summary.game_results[0].is_user_game
        assert summary.game_results[0].home_team_abbr == "PHI"

    def test_away_loss_scored_from_user_side(self, service, schedule, game_state):
        """The score string reads user score first."""
        state = service.create_week_flow_state(2, SeasonPhase.REGULAR_SEASON, USER_TEAM, schedule)
        result = make_result(state.user_game, 24, 10)
        recorded = service.record_user_game_result(state, result, game_state, USER_TEAM)
        summary = service.generate_week_summary(
            recorded.updated_week_flow, recorded.updated_game_state, USER_TEAM
        )

        assert not summary.user_result.won
        assert summary.user_result.score == "10-24"
        assert summary.user_result.new_record == "0-1"

    def test_bye_summary(self, service, schedule, game_state):
        state = service.create_week_flow_state(5, SeasonPhase.REGULAR_SEASON, USER_TEAM, schedule)
        outcome = service.simulate_other_games(state, game_state, USER_TEAM)
        summary = service.generate_week_summary(
            outcome.updated_week_flow, outcome.updated_game_state, USER_TEAM
        )

        assert summary.user_result is None
        assert len(summary.game_results) == 2
        assert not any(g.is_user_game for g in summary.game_results)

    def test_standings(self, service, week_one, game_state):
        summary = service.generate_week_summary(week_one, game_state, USER_TEAM)

        assert len(summary.standings) == 8
        east = next(s for s in summary.standings if s.conference == "NFC" and s.division == "East")
        assert len(east.teams) == 4
        assert [row.is_user_team for row in east.teams].count(True) == 1

    def test_injury_updates(self, service, week_one, user_win, game_state):
        recorded = service.record_user_game_result(week_one, user_win, game_state, USER_TEAM)
        summary = service.generate_week_summary(
            recorded.updated_week_flow, recorded.updated_game_state, USER_TEAM
        )

        update = summary.injury_updates[0]
        assert update.type == InjuryUpdateType.NEW_INJURY
        assert update.team_abbr == "DAL"
        assert update.description == "knee - Out 2 weeks"

    def test_summary_has_no_side_effects(self, service, week_one, game_state, event_bus):
        service.generate_week_summary(week_one, game_state, USER_TEAM)
        assert event_bus.get_history() == []


class TestHeadlines:
    """Headlines generated from completed other games."""

    def summary_for(self, service, week_one, game_state, scores):
        games = tuple(
            completed(game, home, away)
            for game, (home, away) in zip(week_one.other_games, scores)
        )
        state = replace(week_one, other_games=games, other_games_completed=len(games))
        return service.generate_week_summary(state, game_state, USER_TEAM)

    def test_shootout_and_shutout(self, service, week_one, game_state):
        # NYG @ WAS, then BUF @ KC
        summary = self.summary_for(service, week_one, game_state, [(40, 35), (24, 0)])
        texts = [h.text for h in summary.headlines]

        assert texts == [
            "Shootout! Commanders and Giants combine for 75 points",
            "Chiefs defense shuts out Bills",
        ]
        assert all(h.importance == HeadlineImportance.MAJOR for h in summary.headlines)

    def test_thriller_and_draw(self, service, week_one, game_state):
        summary = self.summary_for(service, week_one, game_state, [(17, 20), (13, 13)])
        texts = [h.text for h in summary.headlines]

        assert texts == [
            "Giants win thriller",
            "Chiefs and Bills battle to a 13-13 draw",
        ]
        assert summary.headlines[0].importance == HeadlineImportance.NOTABLE
        assert summary.headlines[0].team_ids == ("WAS", "NYG")

    def test_scoreless_tie(self, service, week_one, game_state):
        """A 0-0 game is both a shutout and a thriller."""
        summary = self.summary_for(service, week_one, game_state, [(0, 0), (27, 10)])

        assert [h.text for h in summary.headlines] == [
            "Commanders and Giants play to a scoreless tie",
            "Commanders and Giants battle to a 0-0 draw",
        ]
        assert [h.importance for h in summary.headlines] == [
            HeadlineImportance.MAJOR,
            HeadlineImportance.NOTABLE,
        ]

    def test_capped(self, service, schedule, game_state):
        """At most five headlines are produced."""
        games = tuple(
            ScheduledGame(f"g{i}", 9, home, away).completed(50, 49)
            for i, (home, away) in enumerate([("PHI", "DAL"), ("NYG", "WAS"), ("KC", "BUF")] * 2)
        )
        state = WeekFlowState(
            phase=WeekFlowPhase.WEEK_SUMMARY,
            week_number=9,
            season_phase=SeasonPhase.REGULAR_SEASON,
            is_user_on_bye=True,
            other_games=games,
            other_games_completed=len(games),
        )
        summary = service.generate_week_summary(state, game_state, USER_TEAM)
        assert len(summary.headlines) == 5


class TestPlayoffImplications:
    """Division leaders late in the season."""

    def implications(self, service, week, game_state):
        state = WeekFlowState(
            phase=WeekFlowPhase.WEEK_SUMMARY,
            week_number=week,
            season_phase=SeasonPhase.REGULAR_SEASON,
            is_user_on_bye=True,
        )
        return service.generate_week_summary(state, game_state, USER_TEAM).playoff_implications

    def test_clean_leader_with_ten_wins(self, service, game_state):
        game_state = with_records(game_state, PHI=TeamRecord(10, 3), DAL=TeamRecord(8, 5))
        implications = self.implications(service, 14, game_state)

        assert len(implications) == 1
        implication = implications[0]
        assert implication.team_id == "PHI"
        assert implication.team_name == "Philadelphia Eagles"
        assert implication.type == PlayoffImplicationType.CONTROLS_DESTINY
        assert implication.description == "NFC East in driver's seat"

    def test_none_before_week_fourteen(self, service, game_state):
        game_state = with_records(game_state, PHI=TeamRecord(10, 2))
        assert self.implications(service, 13, game_state) == []

    def test_shared_lead_not_flagged(self, service, game_state):
        game_state = with_records(game_state, PHI=TeamRecord(10, 4), DAL=TeamRecord(10, 4))
        assert self.implications(service, 15, game_state) == []

    def test_under_ten_wins_not_flagged(self, service, game_state):
        game_state = with_records(game_state, PHI=TeamRecord(9, 5))
        assert self.implications(service, 15, game_state) == []
