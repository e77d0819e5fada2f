import json
from pathlib import Path

from chronos.settings import Settings, load_settings, save_settings


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "settings.json")
    assert settings == Settings()


def test_values_are_clamped_and_coerced(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"tick_interval": 99, "autosave": "off", "shuffle_time_effects": "yes", "ui_scale": "x"})
    )
    settings = load_settings(path)
    assert settings.tick_interval == 5.0
    assert settings.autosave is False
    assert settings.shuffle_time_effects is True
    assert settings.ui_scale == 1.0


def test_broken_json_falls_back_to_defaults(tmp_path: Path, capsys) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{")
    assert load_settings(path) == Settings()
    assert "[Settings]" in capsys.readouterr().err


def test_save_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    saved = save_settings(Settings(tick_interval=0.01, ui_scale=1.5), path)
    assert saved.tick_interval == 0.1
    assert load_settings(path) == saved
    assert saved.line_width == 120
