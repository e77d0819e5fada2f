"""Save migration registry for Chronos."""

from __future__ import annotations

import copy
from typing import Callable, Dict


class SaveMigrationError(Exception):
    """Raised when a save cannot be migrated to the latest schema."""


Migration = Callable[[Dict], Dict]

# Version 0 is the bare browser blob: no envelope, millisecond timestamps.
_LEGACY_RENAMES = {
    "gameActive": "active",
    "constantGameTime": "realTime",
}
_LEGACY_DROPPED = ("timeEffect",)


def _migrate_v0_to_v1(payload: Dict) -> Dict:
    if isinstance(payload.get("state"), dict):
        state = dict(payload["state"])
    else:
        state = {key: value for key, value in payload.items() if key != "version"}
    if not state:
        raise SaveMigrationError("Missing state block for legacy save.")

    for old, new in _LEGACY_RENAMES.items():
        if old in state:
            state.setdefault(new, state.pop(old))
    for key in _LEGACY_DROPPED:
        state.pop(key, None)

    if "lastTickTimestamp" not in state and "lastTickTime" in state:
        raw = state.pop("lastTickTime")
        try:
            state["lastTickTimestamp"] = float(raw) / 1000.0
        except (TypeError, ValueError) as exc:
            raise SaveMigrationError(f"Legacy tick timestamp invalid: {raw!r}") from exc
    state.setdefault("timeEffectStart", None)

    return {
        "version": 1,
        "metadata": {
            "schema": "chronos_save_v1",
            "saved_at": None,
            "player": None,
            "migrated_from": 0,
        },
        "state": state,
    }


MIGRATIONS: Dict[int, Migration] = {
    0: _migrate_v0_to_v1,
}


def migrate_save_payload(payload: Dict, target_version: int) -> Dict:
    if not isinstance(payload, dict):
        raise SaveMigrationError("Save payload was not an object.")

    version = payload.get("version", 0)
    if version is None:
        version = 0
    if isinstance(version, bool) or not isinstance(version, int):
        raise SaveMigrationError("Save version missing or invalid.")
    if version > target_version:
        raise SaveMigrationError(
            f"Save schema {version} is newer than supported {target_version}."
        )

    current = copy.deepcopy(payload)
    while version < target_version:
        migrator = MIGRATIONS.get(version)
        if migrator is None:
            raise SaveMigrationError(
                f"No migration available for save schema {version}."
            )
        current = migrator(current)
        version = current.get("version", version + 1)
        if not isinstance(version, int):
            raise SaveMigrationError("Migration produced an invalid schema version.")

    return current
