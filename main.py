from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional, Sequence

from loguru import logger

from santa.core.config import load_settings
from santa.core.logging import setup_logging
from santa.db import get_session, init_engine
from santa.db import repo
from santa.services import InvalidInput, NoSolution, Participant, solve
from santa.services.draw import DrawError, draw_game, format_participant_label

EXIT_NO_SOLUTION = 1
EXIT_INVALID_INPUT = 2

NO_SOLUTION_HINT = "No valid draw exists. Add more participants or relax exclusions."


def load_roster(path: str) -> List[Participant]:
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidInput(f"Cannot read roster {path}: {exc}") from exc
    if not isinstance(data, list):
        raise InvalidInput("Roster must be a JSON list of {id, exclusion} objects.")
    try:
        return [Participant(id=item["id"], exclusion=item.get("exclusion")) for item in data]
    except (KeyError, TypeError, AttributeError) as exc:
        raise InvalidInput(f"Malformed roster entry: {exc}") from exc


def run_solve(args: argparse.Namespace) -> int:
    try:
        pairs = solve(load_roster(args.roster), seed=args.seed)
    except NoSolution:
        print(NO_SOLUTION_HINT, file=sys.stderr)
        return EXIT_NO_SOLUTION
    except InvalidInput as exc:
        print(f"Invalid roster: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    for pair in pairs:
        print(f"{pair.giver} -> {pair.receiver}")
    return 0


def run_draw(args: argparse.Namespace, database_url: str) -> int:
    init_engine(database_url)
    try:
        with get_session() as session:
            game = repo.get_game(session, args.game_id)
            if game is None:
                print(f"Game {args.game_id} not found.", file=sys.stderr)
                return EXIT_INVALID_INPUT
            result = draw_game(session, game, seed=args.seed)
            for giver in result.participants:
                receiver = result.receiver_of(giver)
                print(f"{format_participant_label(giver)} -> {format_participant_label(receiver)}")
    except NoSolution:
        print(NO_SOLUTION_HINT, file=sys.stderr)
        return EXIT_NO_SOLUTION
    except DrawError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INVALID_INPUT
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="santa", description="Secret Santa draws.")
    commands = parser.add_subparsers(dest="command", required=True)

    solve_cmd = commands.add_parser("solve", help="draw names for a JSON roster")
    solve_cmd.add_argument("roster", help='path to [{"id": "...", "exclusion": "..."}]')
    solve_cmd.add_argument("--seed", type=int, default=None)

    draw_cmd = commands.add_parser("draw", help="draw names for a stored game")
    draw_cmd.add_argument("game_id", type=int)
    draw_cmd.add_argument("--seed", type=int, default=None)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_path)
    logger.bind(command=args.command).debug("santa starting")

    if args.command == "solve":
        return run_solve(args)
    return run_draw(args, settings.database_url)


if __name__ == "__main__":
    sys.exit(main())
