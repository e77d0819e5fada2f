import asyncio
from pathlib import Path

import pytest

from chronos.accounts import AccountError, AccountRegistry, sign_in


def test_register_and_authenticate(tmp_path: Path) -> None:
    registry = AccountRegistry(tmp_path)
    registry.register("ada@example.com", "Ada", "hunter2")

    first = registry.authenticate("ada", "hunter2")
    second = registry.authenticate("ADA", "hunter2")

    assert first.username == "ada"
    assert first.save_root == tmp_path / "ada"
    assert first.token and first.token != second.token


@pytest.mark.parametrize(
    ("email", "username", "secret", "match"),
    [
        ("", "bob", "pw", "Please provide"),
        ("bob@example.com", "ada", "pw", "Username already exists"),
        ("ADA@example.com", "bob", "pw", "Email is already in use"),
        ("bob@example.com", "!!!", "pw", "letters or numbers"),
    ],
)
def test_register_rejects(email: str, username: str, secret: str, match: str) -> None:
    registry = AccountRegistry()
    registry.register("ada@example.com", "ada", "hunter2")
    with pytest.raises(AccountError, match=match):
        registry.register(email, username, secret)
    assert len(registry) == 1


@pytest.mark.parametrize(("username", "secret"), [("ada", "wrong"), ("nobody", "hunter2"), ("???", "x")])
def test_authenticate_rejects_bad_credentials(username: str, secret: str) -> None:
    registry = AccountRegistry()
    registry.register("ada@example.com", "ada", "hunter2")
    with pytest.raises(AccountError, match="Invalid credentials"):
        registry.authenticate(username, secret)


def test_sign_in_prompt_registers_then_logs_in(tmp_path: Path) -> None:
    answers = iter(["r", "ada@example.com", "ada", "pw", "l", "ada", "bad", "l", "ada", "pw"])
    printed = []
    registry = AccountRegistry(tmp_path)

    account = asyncio.run(
        sign_in(registry, input_func=lambda _prompt: next(answers), print_func=printed.append)
    )

    assert account is not None
    assert account.username == "ada"
    assert "[!] Invalid credentials." in printed


def test_sign_in_quit_returns_none() -> None:
    assert asyncio.run(sign_in(AccountRegistry(), input_func=lambda _p: "q", print_func=lambda _m: None)) is None
