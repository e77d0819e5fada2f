"""Player settings for Chronos, stored as a small JSON file."""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .storage import FileStorage

SETTINGS_PATH = Path("settings.json")

BASE_LINE_WIDTH = 80
MIN_LINE_WIDTH = 50
MAX_LINE_WIDTH = 120

# name -> (minimum, maximum)
_RANGES = {
    "tick_interval": (0.1, 5.0),
    "ui_scale": (0.5, 2.0),
}
_TRUTHY = {"true", "1", "yes", "on"}
_FALSY = {"false", "0", "no", "off"}


def _coerce_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        return default
    if value is None:
        return default
    return bool(value)


@dataclass
class Settings:
    """Runtime configuration toggles that persist between sessions."""

    tick_interval: float = 1.0
    autosave: bool = True
    shuffle_time_effects: bool = False
    ui_scale: float = 1.0

    def clamp(self) -> "Settings":
        for name, (low, high) in _RANGES.items():
            setattr(self, name, max(low, min(high, float(getattr(self, name)))))
        self.autosave = bool(self.autosave)
        self.shuffle_time_effects = bool(self.shuffle_time_effects)
        return self

    @property
    def line_width(self) -> int:
        width = int(round(BASE_LINE_WIDTH * self.ui_scale))
        return max(MIN_LINE_WIDTH, min(MAX_LINE_WIDTH, width))

    def copy(self) -> "Settings":
        return Settings.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Settings":
        defaults = cls()
        if not isinstance(data, Mapping):
            return defaults
        return cls(
            tick_interval=_coerce_float(data.get("tick_interval"), defaults.tick_interval),
            autosave=_coerce_bool(data.get("autosave"), defaults.autosave),
            shuffle_time_effects=_coerce_bool(
                data.get("shuffle_time_effects"), defaults.shuffle_time_effects
            ),
            ui_scale=_coerce_float(data.get("ui_scale"), defaults.ui_scale),
        ).clamp()


def load_settings(path: Path | str = SETTINGS_PATH) -> Settings:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Settings()
    except (OSError, ValueError) as exc:
        print(f"[Settings] Could not read {path} ({exc}); using defaults.", file=sys.stderr)
        return Settings()
    return Settings.from_dict(data)


def save_settings(settings: Settings, path: Path | str = SETTINGS_PATH) -> Settings:
    path = Path(path)
    sanitized = settings.copy()
    try:
        FileStorage(path.parent).write(path.name, json.dumps(sanitized.to_dict(), indent=2))
    except OSError as exc:
        print(f"[Settings] Failed to save settings: {exc}", file=sys.stderr)
    return sanitized
