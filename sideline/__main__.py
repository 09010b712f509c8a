"""Entry point for sideline package."""

import argparse
import asyncio
import logging

from sideline.config import FlowConfig
from sideline.core.league.league_data import get_franchise
from sideline.gameflow.manager import GameFlowManager
from sideline.gameflow.types import GameFlowCallbacks, GamePrediction, SeasonPhase, WeekSummary
from sideline.generators import generate_league

logger = logging.getLogger(__name__)


async def run_demo(team: str, weeks: int, seed: int | None, config: FlowConfig) -> None:
    """Drive a franchise through ``weeks`` weeks, skipping straight to each final."""
    league = generate_league(seed=seed)
    manager = GameFlowManager(config)

    def print_summary(summary: WeekSummary) -> None:
        if summary.user_result is not None:
            result = summary.user_result
            outcome = "W" if result.won else "L"
            print(f"Week {summary.week}: {outcome} {result.score} vs {result.opponent} ({result.new_record})")
        else:
            print(f"Week {summary.week}: bye")
        for headline in summary.headlines:
            print(f"    {headline.text}")

    manager.set_callbacks(GameFlowCallbacks(on_week_complete=print_summary))
    manager.initialize(league.game_state, league.schedule, team, 1, SeasonPhase.REGULAR_SEASON)

    for _ in range(weeks):
        week_flow = manager.get_week_flow_state()
        if week_flow.season_phase == SeasonPhase.OFFSEASON:
            break

        if not week_flow.is_user_on_bye:
            manager.view_pre_game()
            manager.set_prediction(GamePrediction.WIN)
            manager.start_game_simulation()
            await manager.skip_to_end()
            manager.mark_game_result_viewed()

        manager.simulate_other_games()
        manager.view_week_summary()
        manager.mark_week_summary_viewed()
        if manager.advance_week() is None:
            print(f"Cannot advance: {manager.get_state().error}")
            break

    game_state = manager.get_game_state()
    if game_state is not None:
        print()
        print(f"Final: {game_state.teams[team]}")


def main() -> None:
    """Main entry point for the Sideline application."""
    parser = argparse.ArgumentParser(
        description="Sideline - GM mode week and game flow",
        prog="sideline",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Run a season demo in the terminal",
    )
    parser.add_argument(
        "--team",
        type=str,
        default="PHI",
        help="User team abbreviation (default: PHI)",
    )
    parser.add_argument(
        "--weeks",
        type=int,
        default=18,
        help="Number of weeks to play in the demo (default: 18)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the generated league",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="API port (default: 8000)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = FlowConfig.from_env()
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise SystemExit(2)

    if args.serve:
        from sideline.api.main import run_api

        run_api(port=args.port)
        return

    if args.demo:
        if get_franchise(args.team) is None:
            parser.error(f"unknown team: {args.team}")
        print("Sideline - GM Mode (Demo)")
        print("=" * 50)
        asyncio.run(run_demo(args.team.upper(), args.weeks, args.seed, config))
        return

    parser.print_help()


if __name__ == "__main__":
    main()
