"""Save management for Chronos: one state blob, one backup, resume reconciliation."""

from __future__ import annotations

import json
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from .remote import RemoteStateStore, RemoteStoreError
from .save_migrations import SaveMigrationError, migrate_save_payload
from .session import GameSession
from .state import GameState
from .storage import default_storage
from .world import LocationGraph, generate

SCHEMA_VERSION = 1
SCHEMA_NAME = "chronos_save_v1"


class SaveError(Exception):
    """Base class for save related failures."""


class SaveCorruptError(SaveError):
    """Raised when a save file cannot be parsed or validated."""


def _validate_payload(payload: Dict) -> None:
    if not isinstance(payload, dict):
        raise SaveCorruptError("Payload was not an object.")
    version = payload.get("version")
    if version != SCHEMA_VERSION:
        raise SaveCorruptError(f"Unsupported schema version: {version!r}")
    if not isinstance(payload.get("state"), dict):
        raise SaveCorruptError("State block missing.")
    world = payload.get("world")
    if world is not None and not isinstance(world, dict):
        raise SaveCorruptError("World block malformed.")


def decode_payload(
    raw: str,
    *,
    rng: Optional[random.Random] = None,
    shuffle_effects: bool = False,
) -> Tuple[Dict, GameState, LocationGraph]:
    """Parse, migrate and validate a save blob into a state and its graph.

    A save without a ``world`` block (the legacy browser format) gets a
    freshly generated map.
    """
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SaveCorruptError(f"Invalid JSON: {exc}") from exc
    payload = migrate_save_payload(payload, SCHEMA_VERSION)
    _validate_payload(payload)

    try:
        state = GameState.from_dict(payload["state"])
    except (TypeError, ValueError) as exc:
        raise SaveCorruptError(str(exc)) from exc

    world = payload.get("world")
    try:
        if world:
            graph = LocationGraph.from_layout(world)
        else:
            graph = generate(rng, shuffle_effects=shuffle_effects)
        state.ensure_consistency(graph)
    except (TypeError, ValueError) as exc:
        raise SaveCorruptError(str(exc)) from exc
    return payload, state, graph


class SaveManager:
    """Persist the session after every change and restore it on startup."""

    SAVE_FILENAME = "chronos_save.json"
    BACKUP_FILENAME = "chronos_save.bak"

    def __init__(
        self,
        session: GameSession,
        base_path: Path | str = "saves",
        *,
        storage=None,
        mirror: Optional[RemoteStateStore] = None,
        player_name: Optional[str] = None,
        print_func: Callable[[str], None] = print,
    ) -> None:
        self.session = session
        self.print = print_func
        self.storage = storage if storage is not None else default_storage(base_path, print_func=print_func)
        self.mirror = mirror
        self.player_name = player_name
        self._attached = False

    # ---------- Public API ----------
    def attach(self) -> None:
        if self._attached or not self.session.settings.autosave:
            return
        self.session.subscribe(self._autosave)
        self._attached = True

    def save(self, *, quiet: bool = False) -> None:
        payload = self._build_payload()
        self._write_payload(payload, make_backup=True)
        if not quiet:
            self.print(f"[Saved] Game written to {self.storage.describe(self.SAVE_FILENAME)}.")
        self._mirror_state(payload["state"])

    def load(self, *, now: Optional[float] = None) -> bool:
        """Replace the session with the stored game, then catch its clock up.

        Returns False when there was nothing usable to load; an unreadable
        save is discarded and the session is reset.
        """
        candidates = [
            name
            for name in (self.SAVE_FILENAME, self.BACKUP_FILENAME)
            if self.storage.exists(name)
        ]
        if not candidates:
            return False

        for name in candidates:
            try:
                payload, state, graph = self._read(name)
            except (SaveError, SaveMigrationError) as err:
                self.print(f"[!] Save '{self.storage.describe(name)}' could not be loaded: {err}")
                continue

            self.session.restore(state, graph)
            if name == self.BACKUP_FILENAME:
                self._write_payload(payload, make_backup=False)
                self.print("[Restore] Backup save applied.")
            self.session.tick(now)
            self.print(f"[Loaded] Resumed at {state.location}.")
            return True

        self.print("[!] Discarding unreadable save; starting a fresh session.")
        self.session.reset()
        return False

    def clear(self) -> None:
        self.storage.delete(self.SAVE_FILENAME)
        self.storage.delete(self.BACKUP_FILENAME)

    # ---------- Internal helpers ----------
    def _autosave(self, session: GameSession) -> None:
        try:
            self.save(quiet=True)
        except SaveError as exc:
            self.print(f"[!] Autosave failed: {exc}")

    def _build_payload(self) -> Dict:
        return {
            "version": SCHEMA_VERSION,
            "metadata": {
                "schema": SCHEMA_NAME,
                "saved_at": datetime.now(timezone.utc).isoformat(),
                "player": self.player_name,
            },
            "state": self.session.state.to_dict(),
            "world": self.session.graph.layout(),
        }

    def _write_payload(self, payload: Dict, *, make_backup: bool) -> None:
        text = json.dumps(payload, indent=2)
        backup = self.BACKUP_FILENAME if make_backup else None
        try:
            self.storage.write(self.SAVE_FILENAME, text, backup_name=backup)
        except OSError as exc:
            raise SaveError(f"Could not write save: {exc}") from exc

    def _read(self, name: str) -> Tuple[Dict, GameState, LocationGraph]:
        try:
            raw = self.storage.read(name)
        except UnicodeDecodeError as exc:
            raise SaveCorruptError(f"Save is not valid UTF-8: {exc}") from exc
        if raw is None:
            raise SaveError("Save file missing.")
        return decode_payload(
            raw,
            rng=self.session.rng,
            shuffle_effects=self.session.settings.shuffle_time_effects,
        )

    def _mirror_state(self, state_blob: Dict) -> None:
        if self.mirror is None:
            return
        try:
            self.mirror.merge_state(state_blob)
        except RemoteStoreError as exc:
            self.print(f"[Remote] Sync failed: {exc}")
