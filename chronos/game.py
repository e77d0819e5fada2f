#!/usr/bin/env python3
"""
Chronos: The Dawn - console edition.
- Three portals off the Central Hub, each bending time its own way.
- Every portal location gives you two minutes before the connection is lost.
- Answer the riddle, grab the key, collect all three to open the vault.
Usage: python3 -m chronos.game [--save-dir saves] [--login] [--mirror]
"""

from __future__ import annotations

import argparse
import asyncio
import random
import sys
import textwrap
from pathlib import Path
from typing import List

if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
    from chronos.accounts import AccountRegistry, sign_in
    from chronos.remote import InMemoryRemoteStore
    from chronos.save_manager import SaveError, SaveManager
    from chronos.session import GameSession, Ticker
    from chronos.settings import SETTINGS_PATH, Settings, load_settings
else:
    from .accounts import AccountRegistry, sign_in
    from .remote import InMemoryRemoteStore
    from .save_manager import SaveError, SaveManager
    from .session import GameSession, Ticker
    from .settings import SETTINGS_PATH, Settings, load_settings

TITLE = "CHRONOS: THE DAWN"
META_COMMANDS = "Console: status, save, reset, quit"


def emit_print(*args, **kwargs) -> None:
    print(*args, **kwargs)


async def read_input(prompt: str = "") -> str:
    return await asyncio.to_thread(input, prompt)


def emit_lines(lines: List[str], settings: Settings) -> None:
    width = settings.line_width
    for line in lines:
        if not line:
            emit_print("")
            continue
        emit_print(textwrap.fill(line, width=width, subsequent_indent="  "))


def intro_lines() -> List[str]:
    bar = "=" * 40
    return [
        bar,
        f"WELCOME TO {TITLE}!",
        bar,
        "YOUR MISSION: Collect all 3 keys from different time-distorted locations!",
        "WARNING: Each location has unique time effects that will challenge you!",
        "",
        "TIPS:",
        "  Use 'help' to see all available commands",
        "  Watch your location timer - you have 2 minutes per special location!",
        "  Answer questions correctly to progress",
        "  Collect keys to unlock the treasure vault",
        "",
    ]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Chronos: The Dawn in the terminal.")
    parser.add_argument("--save-dir", default="saves", help="Directory holding the save blob.")
    parser.add_argument("--settings", default=str(SETTINGS_PATH), help="Settings JSON path.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for portal layout.")
    parser.add_argument("--fresh", action="store_true", help="Ignore any existing save.")
    parser.add_argument("--login", action="store_true", help="Sign in before playing.")
    parser.add_argument(
        "--mirror", action="store_true", help="Mirror every save into an in-process remote store."
    )
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_settings(args.settings)
    save_root = Path(args.save_dir)
    player_name = None

    if args.login:
        registry = AccountRegistry(save_root)
        account = await sign_in(registry, input_func=read_input, print_func=emit_print)
        if account is None:
            emit_print("Goodbye!")
            return 0
        save_root = account.save_root
        player_name = account.username

    rng = random.Random(args.seed) if args.seed is not None else None
    session = GameSession(settings, rng=rng)
    mirror = InMemoryRemoteStore({"username": player_name}) if args.mirror else None
    save_manager = SaveManager(
        session, save_root, mirror=mirror, player_name=player_name, print_func=emit_print
    )

    emit_lines(intro_lines(), settings)
    if args.fresh:
        save_manager.clear()
    elif save_manager.load():
        emit_lines(session.status_lines(), settings)
    save_manager.attach()
    emit_lines(session.opening_lines(), settings)

    ticker = Ticker(session, on_messages=lambda lines: emit_lines(lines, settings))
    if session.active:
        ticker.start()

    try:
        while True:
            raw = (await read_input("> ")).strip()
            command = raw.lower()
            if command in {"quit", "q"}:
                break
            if command == "status":
                emit_lines(session.status_lines(), settings)
                continue
            if command == "save":
                try:
                    save_manager.save()
                except SaveError as exc:
                    emit_print(f"[!] {exc}")
                continue
            if command == "reset":
                await ticker.aclose()
                emit_lines(session.reset(), settings)
                ticker.start()
                continue
            if not session.active:
                emit_print("The game is over. Type 'reset' to play again or 'quit' to leave.")
                continue

            result = session.submit(raw)
            emit_lines(result.messages, settings)
            if command == "help":
                emit_print(META_COMMANDS)
    finally:
        await ticker.aclose()
    if mirror is not None:
        emit_print(f"[Remote] Mirrored {mirror.merge_count} saves this session.")
    emit_print("Thanks for playing Chronos: The Dawn!")
    return 0


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        emit_print("\n[Interrupted] Bye.")


if __name__ == "__main__":
    run()
