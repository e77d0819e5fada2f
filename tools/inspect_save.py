#!/usr/bin/env python3
"""Check a Chronos save blob and print what it contains."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SAVE = REPO_ROOT / "saves" / "chronos_save.json"

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from chronos.save_manager import SaveError, decode_payload
from chronos.save_migrations import SaveMigrationError
from chronos.timekeeping import format_clock
from chronos.world import HUB


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate a Chronos save file.")
    parser.add_argument(
        "save_path",
        nargs="?",
        default=str(DEFAULT_SAVE),
        help="Path to the save JSON file.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str]) -> None:
    args = parse_args(argv[1:])
    save_path = Path(args.save_path).resolve()
    try:
        raw = save_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        print("Save is corrupted: file is not valid UTF-8.")
        sys.exit(1)
    except OSError as exc:
        print(f"Failed to read {save_path}: {exc}")
        sys.exit(1)

    try:
        payload, state, graph = decode_payload(raw)
    except (SaveError, SaveMigrationError) as exc:
        print(f"Save is corrupted: {exc}")
        sys.exit(1)

    metadata = payload.get("metadata") or {}
    if metadata.get("migrated_from") is not None:
        print(f"Note: migrated from schema {metadata['migrated_from']}.")
    if "world" not in payload:
        print("Note: no world layout stored; portals will be re-rolled on load.")

    portals = graph.get(HUB).exits
    print(f"Player: {metadata.get('player') or '-'} | Saved at: {metadata.get('saved_at') or '-'}")
    print(f"Location: {state.location} | Active: {state.active} | Outcome: {state.outcome.value if state.outcome else '-'}")
    print(f"Game time: {format_clock(state.game_time)} | Location timer: {state.location_timer:.1f}s")
    print(f"Health: {state.health} | Score: {state.score} | Keys: {', '.join(state.keys) or 'None'}")
    print("Portals: " + ", ".join(f"{d} -> {t}" for d, t in portals.items()))
    print(f"Save check passed for {save_path}.")


if __name__ == "__main__":
    main(sys.argv)
