import asyncio
import json
from pathlib import Path

from chronos import game


def script(monkeypatch, commands):
    pending = list(commands)
    printed = []

    async def fake_read_input(prompt: str = "") -> str:
        return pending.pop(0) if pending else "quit"

    monkeypatch.setattr(game, "read_input", fake_read_input)
    monkeypatch.setattr(game, "emit_print", lambda *args, **_kw: printed.append(" ".join(map(str, args))))
    return printed


def run_main(tmp_path: Path, *extra: str) -> int:
    argv = ["--save-dir", str(tmp_path / "saves"), "--settings", str(tmp_path / "settings.json"), "--seed", "1"]
    return asyncio.run(game.main(argv + list(extra)))


def test_console_session_autosaves_and_quits(tmp_path: Path, monkeypatch) -> None:
    printed = script(monkeypatch, ["help", "status", "north", "quit"])

    assert run_main(tmp_path) == 0

    assert any("WELCOME TO CHRONOS: THE DAWN!" in line for line in printed)
    assert any(line.startswith("Console: status, save") for line in printed)
    assert any(line.startswith("Location: Central Hub") for line in printed)
    assert printed[-1] == "Thanks for playing Chronos: The Dawn!"
    blob = json.loads((tmp_path / "saves" / "chronos_save.json").read_text())
    assert blob["state"]["location"] != "Central Hub"


def test_console_resumes_saved_game(tmp_path: Path, monkeypatch) -> None:
    script(monkeypatch, ["north", "quit"])
    run_main(tmp_path)
    saved = json.loads((tmp_path / "saves" / "chronos_save.json").read_text())["state"]["location"]

    printed = script(monkeypatch, ["status", "quit"])
    run_main(tmp_path)

    assert f"[Loaded] Resumed at {saved}." in printed
    assert any(line.startswith(f"Location: {saved}") for line in printed)


def test_console_fresh_flag_discards_save(tmp_path: Path, monkeypatch) -> None:
    script(monkeypatch, ["north", "quit"])
    run_main(tmp_path)

    printed = script(monkeypatch, ["quit"])
    run_main(tmp_path, "--fresh")

    assert not any(line.startswith("[Loaded]") for line in printed)


def test_login_quit_exits_before_playing(tmp_path: Path, monkeypatch) -> None:
    printed = script(monkeypatch, ["q"])
    assert run_main(tmp_path, "--login") == 0
    assert printed[-1] == "Goodbye!"
    assert not (tmp_path / "saves" / "chronos_save.json").exists()


def test_mirror_flag_pushes_saves_to_remote_store(tmp_path: Path, monkeypatch) -> None:
    printed = script(monkeypatch, ["north", "save", "quit"])
    assert run_main(tmp_path, "--mirror") == 0

    mirrored = [line for line in printed if line.startswith("[Remote] Mirrored")]
    assert mirrored and mirrored[0] != "[Remote] Mirrored 0 saves this session."
    assert printed[-1] == "Thanks for playing Chronos: The Dawn!"
