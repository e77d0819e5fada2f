"""Command interpreter: the player-driven half of the game state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List

from .scoring import KEY_POINTS, RIDDLE_POINTS, VAULT_BONUS, WRONG_ANSWER_PENALTY
from .state import GameState, Outcome
from .timekeeping import LOCATION_TIME_LIMIT
from .world import (
    MOVEMENT_DIRECTIONS,
    REQUIRED_KEYS,
    TREASURE_EXIT,
    VAULT,
    Location,
)

if TYPE_CHECKING:
    from .session import GameSession

HELP_LINES = (
    "COMMANDS:",
    "  north/south/east/west - Move between locations",
    "  treasure - Go to the treasure vault (requires ALL 3 keys!)",
    "  collect - Pick up keys",
    "  answer <response> - Answer questions",
    "  help - Show this help",
    "",
    "TIME EFFECTS:",
    "  ACCELERATED: game time runs faster than your clock",
    "  DECELERATED: game time drags behind your clock",
    "  REVERSE: game time runs backward",
    "  Every portal location gives you 2 minutes before the connection is lost.",
)

GAME_OVER_MESSAGE = "The game is over. Reset to play again."


class CommandRejected(Exception):
    """A command that cannot run in the current state. Never mutates state."""

    def __init__(self, *messages: str) -> None:
        super().__init__(messages[0] if messages else "")
        self.messages = list(messages)


@dataclass
class CommandResult:
    accepted: bool
    messages: List[str] = field(default_factory=list)
    changed: bool = False


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def describe_location(state: GameState, place: Location) -> List[str]:
    lines = [place.welcome, place.description]
    if place.exits:
        lines.append(f"Available directions: {', '.join(place.exits)}")
    if TREASURE_EXIT in place.exits:
        if state.has_all_keys():
            lines.append("TREASURE VAULT UNLOCKED! Type 'treasure' to enter!")
        else:
            needed = len(REQUIRED_KEYS) - len(state.keys)
            lines.append(f"Treasure Vault: LOCKED (need {_plural(needed, 'more key')})")
    if place.key_item and place.key_item not in state.keys:
        lines.append(f"You see a {place.key_item} glinting nearby! Type 'collect' to take it.")
    if place.timed:
        lines.append(
            f"Time effect here: {place.time_effect.value.upper()}. "
            f"The portal holds for {int(LOCATION_TIME_LIMIT)} seconds."
        )
    if state.awaiting_answer and state.current_question:
        lines.append(state.current_question)
        lines.append("Type 'answer <your response>' to respond.")
    return lines


class CommandInterpreter:
    """Parse one command line and apply it to a session."""

    def __init__(self) -> None:
        self._handlers: Dict[str, Callable[["GameSession", str, str], CommandResult]] = {
            "help": self._help,
            "collect": self._collect,
            "answer": self._answer,
        }
        for direction in MOVEMENT_DIRECTIONS:
            self._handlers[direction] = self._move

    def execute(self, session: "GameSession", raw: str) -> CommandResult:
        value = (raw or "").strip()
        if not session.state.active:
            return CommandResult(False, [GAME_OVER_MESSAGE])
        if not value:
            return CommandResult(False, ["Type a command, or 'help' for a list of commands."])

        command, _, argument = value.partition(" ")
        command = command.lower()
        handler = self._handlers.get(command)
        try:
            if handler is None:
                raise CommandRejected("Unknown command. Type 'help' for a list of commands.")
            return handler(session, command, argument.strip())
        except CommandRejected as exc:
            return CommandResult(False, exc.messages)

    # ---------- Handlers ----------
    def _help(self, session: "GameSession", command: str, argument: str) -> CommandResult:
        return CommandResult(True, list(HELP_LINES))

    def _move(self, session: "GameSession", direction: str, argument: str) -> CommandResult:
        state = session.state
        here = session.graph.get(state.location)
        target = here.exits.get(direction)
        if target is None:
            raise CommandRejected(f"You can't go {direction} from here.")
        if direction == TREASURE_EXIT and not state.has_all_keys():
            needed = len(REQUIRED_KEYS) - len(state.keys)
            raise CommandRejected(
                f"The treasure vault is sealed! You need {_plural(needed, 'more key')}.",
                f"Current keys: {', '.join(state.keys) or 'None'} "
                f"({len(state.keys)}/{len(REQUIRED_KEYS)})",
            )
        if here.has_open_riddle:
            raise CommandRejected(
                "You must answer the question before leaving!",
                here.riddle.question,  # type: ignore[union-attr]
                "Type 'answer <your response>' to respond.",
            )

        messages = [f"Moving {direction}..."]
        messages.extend(self.enter(session, target))
        return CommandResult(True, messages, changed=True)

    def _collect(self, session: "GameSession", command: str, argument: str) -> CommandResult:
        state = session.state
        key = session.graph.get(state.location).key_item
        if not key or key in state.keys:
            raise CommandRejected("There's no key to collect here or you already have it.")

        state.keys.append(key)
        state.score += KEY_POINTS
        messages = [f"You collected the {key}! (+{KEY_POINTS:,} points)"]
        if state.has_all_keys():
            messages.append("ALL KEYS COLLECTED! The treasure vault is now accessible from Central Hub!")
        else:
            remaining = len(REQUIRED_KEYS) - len(state.keys)
            messages.append(f"{_plural(remaining, 'more key')} needed for the treasure vault!")
        return CommandResult(True, messages, changed=True)

    def _answer(self, session: "GameSession", command: str, argument: str) -> CommandResult:
        state = session.state
        place = session.graph.get(state.location)
        if not state.awaiting_answer or not place.has_open_riddle:
            raise CommandRejected("There's no question to answer right now.")

        riddle = place.riddle
        assert riddle is not None
        if riddle.matches(argument):
            session.graph.mark_answered(place.name)
            state.awaiting_answer = False
            state.current_question = None
            state.score += RIDDLE_POINTS
            return CommandResult(
                True,
                [f"Correct! Well done! (+{RIDDLE_POINTS:,} points)", "The way out is open."],
                changed=True,
            )

        state.health = max(0, state.health - WRONG_ANSWER_PENALTY)
        return CommandResult(
            True,
            [
                f"Incorrect answer. Try again! (Health -{WRONG_ANSWER_PENALTY} -> {state.health})",
                riddle.question,
            ],
            changed=True,
        )

    # ---------- Location entry ----------
    def enter(self, session: "GameSession", name: str) -> List[str]:
        state = session.state
        place = session.graph.get(name)
        state.location = name
        if place.timed:
            state.location_timer = LOCATION_TIME_LIMIT
            state.time_effect_start = session.now()
        else:
            state.time_effect_start = None
        state.visit(name)

        if place.has_open_riddle:
            state.awaiting_answer = True
            state.current_question = place.riddle.question  # type: ignore[union-attr]
        else:
            state.awaiting_answer = False
            state.current_question = None

        if name == VAULT:
            state.score += VAULT_BONUS
            lines = [place.welcome, place.description, "CONGRATULATIONS! YOU WON!"]
            lines.append(f"VICTORY! Treasure bonus +{VAULT_BONUS:,} points.")
            lines.extend(session.finish(Outcome.WON))
            return lines
        return describe_location(state, place)
