"""Turn driver for a single two-player match.

One side is always driven by :class:`~salvo.bot_logic.BotLogic`; the other is
either another bot or a human whose actions arrive through an
``action_provider`` callable ``(me, opponent) -> Action | None``.  A provider
returning ``None`` or raising :class:`~salvo.commands.CommandParseError`
forfeits the turn, as does any action the engine rejects.

Turn state machine:
    promote pending weapons -> choose action -> resolve -> update bot memory
    -> check win -> swap sides
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional, Union

from . import config as _cfg
from .bot_logic import BotLogic, DifficultyConfig, difficulty
from .commands import Action, CommandParseError
from .engine import ActionResult, check_win, resolve_action
from .events import Category, Event
from .player import Player

logger = logging.getLogger(__name__)

ActionProvider = Callable[[Player, Player], Optional[Action]]
Controller = Union[BotLogic, ActionProvider]


class GameSession:
    """A match between two sides, played synchronously turn by turn."""

    def __init__(
        self,
        p1: Player,
        p2: Player,
        *,
        controller1: Controller,
        controller2: Controller,
        rng: Optional[random.Random] = None,
        first: Optional[int] = None,
    ):
        """Create a match.

        Args:
            p1/p2: Both sides, ships already placed.
            controller1/controller2: A BotLogic bound to that side, or an
                action provider for a human side.
            rng: Random source used to pick the first side when *first*
                is not given.
        """
        self.players: Dict[int, Player] = {1: p1, 2: p2}
        self.controllers: Dict[int, Controller] = {1: controller1, 2: controller2}
        for slot, ctl in self.controllers.items():
            if isinstance(ctl, BotLogic) and ctl.player is not self.players[slot]:
                raise ValueError(f"Bot for slot {slot} is bound to a different player")
        self.rng = rng or random.Random(_cfg.SEED)
        # Keeps track of whose turn it is (1 or 2)
        self.current: int = first if first in (1, 2) else self.rng.choice((1, 2))
        self.turns: int = 0
        self.winner: Optional[int] = None
        self.history: List[ActionResult] = []
        self._subs: List[Callable[[Event], None]] = []

    # -------------------- construction helpers --------------------
    @classmethod
    def human_vs_bot(
        cls,
        name: str,
        action_provider: ActionProvider,
        *,
        bot_config: Optional[DifficultyConfig] = None,
        hard_mode: bool = _cfg.HARD_MODE,
        seed: Optional[int] = _cfg.SEED,
    ) -> "GameSession":
        """Human is slot 1; the bot is slot 2 and places its fleet randomly."""
        rng = random.Random(seed)
        human = Player.create(name, reveal_misses_to_self=not hard_mode, rng=rng)
        bot = Player.create("Bot", is_bot=True, rng=rng)
        ai = BotLogic(bot, bot_config or difficulty(_cfg.DIFFICULTY), rng=rng)
        return cls(human, bot, controller1=action_provider, controller2=ai, rng=rng)

    @classmethod
    def bot_vs_bot(
        cls,
        config1: Optional[DifficultyConfig] = None,
        config2: Optional[DifficultyConfig] = None,
        *,
        seed: Optional[int] = _cfg.SEED,
    ) -> "GameSession":
        rng = random.Random(seed)
        cfg1 = config1 or difficulty(_cfg.DIFFICULTY)
        cfg2 = config2 or cfg1
        p1 = Player.create(f"Bot-1 ({cfg1.name})", is_bot=True, rng=rng)
        p2 = Player.create(f"Bot-2 ({cfg2.name})", is_bot=True, rng=rng)
        return cls(
            p1,
            p2,
            controller1=BotLogic(p1, cfg1, rng=rng),
            controller2=BotLogic(p2, cfg2, rng=rng),
            rng=rng,
        )

    # -------------------- event bus --------------------
    def subscribe(self, cb: Callable[[Event], None]) -> None:
        """Allow external components (renderer/logger) to receive game events."""
        self._subs.append(cb)

    def _emit(self, ev: Event) -> None:
        for cb in tuple(self._subs):
            try:
                cb(ev)
            except Exception:
                # Don't let a misbehaving subscriber stop the match
                logger.exception(f"Event subscriber failed on {ev.type}")

    # -------------------- gameplay --------------------
    @property
    def finished(self) -> bool:
        return self.winner is not None

    def opponent_of(self, slot: int) -> int:
        return 2 if slot == 1 else 1

    def _next_action(self, slot: int) -> Optional[Action]:
        ctl = self.controllers[slot]
        if isinstance(ctl, BotLogic):
            return ctl.choose_action()
        me, opp = self.players[slot], self.players[self.opponent_of(slot)]
        try:
            return ctl(me, opp)
        except CommandParseError as e:
            logger.info(f"{me.name}: {e} – turn forfeited")
            return None

    def play_turn(self) -> Optional[ActionResult]:
        """Play one turn for the current side; return its result (None if forfeited before resolving)."""
        if self.finished:
            raise RuntimeError("Match already finished")
        slot = self.current
        me = self.players[slot]
        opp = self.players[self.opponent_of(slot)]

        # 1) Pending weapons become usable
        promoted = me.weapons.start_turn()
        self._emit(Event(Category.TURN, "start", {"player": slot, "turn": self.turns, "unlocked": promoted}))

        # 2) Choose
        action = self._next_action(slot)
        result: Optional[ActionResult] = None
        if action is None:
            self._emit(Event(Category.TURN, "forfeit", {"player": slot, "reason": "invalid input"}))
        else:
            # 3) Resolve and remember
            result = resolve_action(me, opp, action)
            self.history.append(result)
            ctl = self.controllers[slot]
            if isinstance(ctl, BotLogic):
                ctl.register_result(result)
            self._emit(Event(Category.TURN, "action", {"player": slot, "result": result}))
            if result.rejected:
                self._emit(Event(Category.TURN, "forfeit", {"player": slot, "reason": result.reason}))

        self.turns += 1

        # 4) Victory?
        if check_win(opp.fleet):
            self.winner = slot
            logger.info(f"{me.name} wins after {self.turns} turns")
            self._emit(Event(Category.MATCH, "end", {"winner": slot, "name": me.name, "turns": self.turns}))
            return result

        # 5) Swap turns
        self.current = self.opponent_of(slot)
        return result

    def run(self, max_turns: Optional[int] = None) -> Optional[int]:
        """Play until a fleet is destroyed (or *max_turns* elapse); return the winning slot."""
        self._emit(Event(Category.MATCH, "start", {"first": self.current, "name": self.players[self.current].name}))
        logger.info(f"{self.players[self.current].name} will play first")
        while not self.finished:
            if max_turns is not None and self.turns >= max_turns:
                logger.warning(f"Match stopped after {max_turns} turns without a winner")
                break
            self.play_turn()
        return self.winner
