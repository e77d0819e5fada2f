"""The running game: one explicit owner for the state, the map and the clock."""

from __future__ import annotations

import asyncio
import contextlib
import random
import time
from typing import Awaitable, Callable, List, Optional

from .commands import CommandInterpreter, CommandResult, describe_location
from .scoring import FinalStats, compute_final_stats, format_report
from .settings import Settings
from .state import GameState, Outcome
from .timekeeping import apply_elapsed, format_clock
from .world import VAULT, LocationGraph, generate

Listener = Callable[["GameSession"], None]

TIME_UP_MESSAGE = "TIME'S UP! The temporal connection was lost."


class GameSession:
    """Holds one game. Commands and clock ticks are the only things that mutate it."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
        interpreter: Optional[CommandInterpreter] = None,
    ) -> None:
        self.settings = (settings or Settings()).copy()
        self.rng = rng or random.Random()
        self.clock = clock
        self.interpreter = interpreter or CommandInterpreter()
        self.final_stats: Optional[FinalStats] = None
        self._listeners: List[Listener] = []
        self.graph, self.state = self._new_game()

    @property
    def active(self) -> bool:
        return self.state.active

    def now(self) -> float:
        return float(self.clock())

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _new_game(self) -> tuple[LocationGraph, GameState]:
        graph = generate(self.rng, shuffle_effects=self.settings.shuffle_time_effects)
        state = GameState.fresh(self.now())
        state.ensure_consistency(graph)
        return graph, state

    # ---------- Clock ----------
    def _advance_clock(self, now: float) -> List[str]:
        if not self.state.active:
            return []
        expired = apply_elapsed(self.state, self.graph, now - self.state.last_tick_timestamp)
        self.state.last_tick_timestamp = now
        if not expired:
            return []
        return [TIME_UP_MESSAGE, *self.finish(Outcome.TIME_EXPIRED)]

    def tick(self, now: Optional[float] = None) -> List[str]:
        """Advance the clock to *now*. Used for live ticks and for resume catch-up."""
        if not self.state.active:
            return []
        messages = self._advance_clock(self.now() if now is None else float(now))
        self._notify()
        return messages

    # ---------- Commands ----------
    def submit(self, raw: str) -> CommandResult:
        was_active = self.state.active
        clock_messages = self._advance_clock(self.now())
        result = self.interpreter.execute(self, raw)
        if clock_messages:
            result.messages = clock_messages + result.messages
        if was_active:
            self._notify()
        return result

    def finish(self, outcome: Outcome) -> List[str]:
        if self.final_stats is not None:
            return []
        self.state.active = False
        self.state.outcome = outcome
        self.state.awaiting_answer = False
        self.state.current_question = None
        self.final_stats = compute_final_stats(self.state, self.graph)
        return format_report(self.final_stats)

    # ---------- Lifecycle ----------
    def reset(self) -> List[str]:
        self.graph, self.state = self._new_game()
        self.final_stats = None
        self._notify()
        return ["Game has been reset. A new adventure begins!", *self.opening_lines()]

    def restore(self, state: GameState, graph: LocationGraph) -> None:
        state.ensure_consistency(graph)
        self.state = state
        self.graph = graph
        self.final_stats = None
        if state.active and state.location == VAULT:
            self.finish(Outcome.WON)
        elif not state.active:
            if state.outcome is None:
                state.outcome = Outcome.WON if state.location == VAULT else Outcome.TIME_EXPIRED
            self.final_stats = compute_final_stats(state, graph)

    def opening_lines(self) -> List[str]:
        if not self.state.active and self.final_stats is not None:
            return format_report(self.final_stats)
        return describe_location(self.state, self.graph.get(self.state.location))

    def status_lines(self) -> List[str]:
        state = self.state
        place = self.graph.get(state.location)
        timer = format_clock(state.location_timer) if place.timed else "--:--:--"
        return [
            f"Location: {state.location} ({place.time_effect.value.upper()})",
            f"Game Time: {format_clock(state.game_time)} | Location Timer: {timer}",
            f"Health: {state.health}/100 | Score: {state.score:,}",
            f"Keys: {', '.join(state.keys) or 'None'}",
        ]


class Ticker:
    """Periodic clock driver; exits on its own once the session is over."""

    def __init__(
        self,
        session: GameSession,
        *,
        interval: Optional[float] = None,
        on_messages: Optional[Callable[[List[str]], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.session = session
        self.interval = interval if interval is not None else session.settings.tick_interval
        self.on_messages = on_messages
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
        return self._task

    def stop(self) -> Optional[asyncio.Task]:
        """Cancel the loop and hand back the task so the caller can await it."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        return task

    async def aclose(self) -> None:
        task = self.stop()
        if task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while self.session.active:
            await self._sleep(self.interval)
            messages = self.session.tick()
            if messages and self.on_messages is not None:
                self.on_messages(messages)
