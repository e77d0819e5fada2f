"""Player accounts for the console build.

Accounts live only as long as the process. Secrets are compared as given;
nothing here is meant to protect them.
"""

from __future__ import annotations

import inspect
import secrets
import string
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional


class AccountError(Exception):
    """Raised when an account cannot be registered or authenticated."""


DEFAULT_SAVE_ROOT = Path("saves")
_VALID_NAME_CHARS = set(string.ascii_lowercase + string.digits + "-_")


@dataclass(frozen=True)
class AccountSession:
    username: str
    token: str
    save_root: Path


@dataclass
class _Account:
    id: int
    email: str
    username: str
    secret: str


def normalize_username(name: str) -> str:
    cleaned = "".join(ch for ch in (name or "").strip().lower() if ch in _VALID_NAME_CHARS)
    if not cleaned:
        raise AccountError("Usernames must contain letters or numbers.")
    return cleaned


class AccountRegistry:
    def __init__(self, save_root: Path | str = DEFAULT_SAVE_ROOT) -> None:
        self.save_root = Path(save_root)
        self._accounts: Dict[str, _Account] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._accounts)

    def register(self, email: str, username: str, secret: str) -> None:
        if not email or not username or not secret:
            raise AccountError("Please provide email, username, and password.")
        name = normalize_username(username)
        email = email.strip().lower()
        if name in self._accounts:
            raise AccountError("Username already exists.")
        if any(account.email == email for account in self._accounts.values()):
            raise AccountError("Email is already in use.")
        self._accounts[name] = _Account(self._next_id, email, name, secret)
        self._next_id += 1

    def authenticate(self, username: str, secret: str) -> AccountSession:
        if not username or not secret:
            raise AccountError("Please provide username and password.")
        try:
            name = normalize_username(username)
        except AccountError:
            raise AccountError("Invalid credentials.") from None
        account = self._accounts.get(name)
        if account is None or account.secret != secret:
            raise AccountError("Invalid credentials.")
        return AccountSession(
            username=name,
            token=secrets.token_hex(16),
            save_root=self.save_root / name,
        )


async def sign_in(
    registry: AccountRegistry,
    *,
    input_func: Callable[[str], str | Awaitable[str]] = input,
    print_func: Callable[[str], None] = print,
) -> Optional[AccountSession]:
    """Prompt until the player logs in, or returns None if they quit."""
    while True:
        print_func("  L. Log in")
        print_func("  R. Register")
        print_func("  Q. Quit")
        choice = (await _resolve_input(input_func, "> ")).strip().lower()
        if choice in {"q", "quit"}:
            return None
        if choice in {"r", "register"}:
            email = await _resolve_input(input_func, "Email: ")
            username = await _resolve_input(input_func, "Username: ")
            secret = await _resolve_input(input_func, "Password: ")
            try:
                registry.register(email, username, secret)
            except AccountError as exc:
                print_func(f"[!] {exc}")
                continue
            print_func("[Account] Registered. You can log in now.")
            continue
        if choice in {"l", "login"}:
            username = await _resolve_input(input_func, "Username: ")
            secret = await _resolve_input(input_func, "Password: ")
            try:
                account = registry.authenticate(username, secret)
            except AccountError as exc:
                print_func(f"[!] {exc}")
                continue
            print_func(f"[Account] Welcome back, {account.username}.")
            return account
        print_func("Pick L, R, or Q.")


async def _resolve_input(
    input_func: Callable[[str], str | Awaitable[str]],
    prompt: str,
) -> str:
    result = input_func(prompt)
    if inspect.isawaitable(result):
        return await result
    return result
