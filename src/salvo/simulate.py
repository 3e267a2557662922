"""Bot-vs-bot match runner.

Plays one or more complete matches between two bot sides and reports the
winners, exercising the whole engine without any human I/O layer.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from . import config as _cfg
from .bot_logic import DIFFICULTIES, difficulty
from .session import GameSession

logger = logging.getLogger(__name__)


def run_matches(
    games: int,
    difficulty1: str,
    difficulty2: Optional[str] = None,
    *,
    seed: Optional[int] = None,
) -> List[GameSession]:
    """Play *games* matches; match *i* is seeded with ``seed + i`` when a seed is given."""
    cfg1 = difficulty(difficulty1)
    cfg2 = difficulty(difficulty2) if difficulty2 else cfg1
    sessions = []
    for i in range(games):
        sess = GameSession.bot_vs_bot(cfg1, cfg2, seed=None if seed is None else seed + i)
        sess.run()
        sessions.append(sess)
    return sessions


def main() -> None:  # pragma: no cover – CLI entry
    parser = argparse.ArgumentParser(description="Salvo bot-vs-bot simulator")
    parser.add_argument("--difficulty", choices=sorted(DIFFICULTIES), default=_cfg.DIFFICULTY)
    parser.add_argument("--opponent-difficulty", choices=sorted(DIFFICULTIES), default=None)
    parser.add_argument("--games", type=int, default=1)
    parser.add_argument("--seed", type=int, default=_cfg.SEED)
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all log output.",
    )
    args = parser.parse_args()

    # Set the SALVO_DEBUG environment variable based on the --debug flag
    if args.debug:
        os.environ["SALVO_DEBUG"] = "1"

    # Determine log level from CLI flags:
    if args.quiet:
        level = logging.ERROR
    elif args.debug or _cfg.DEBUG:
        level = logging.DEBUG
    elif args.verbose >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    sessions = run_matches(args.games, args.difficulty, args.opponent_difficulty, seed=args.seed)
    for i, sess in enumerate(sessions, 1):
        winner = sess.players[sess.winner].name if sess.winner else "nobody"
        print(f"Game {i}: {winner} wins in {sess.turns} turns")
    if sessions:
        avg = sum(s.turns for s in sessions) / len(sessions)
        print(f"Average match length: {avg:.1f} turns")


if __name__ == "__main__":
    main()
