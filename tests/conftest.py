# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from ghctx.errors import CredentialUnavailable
from ghctx.session import Session
from ghctx.store import ContextStore


class FakeCredentials:
    """Stands in for gh: fixed logins per host and tokens per (host, user)."""

    def __init__(self):
        self.identities: dict[str, str] = {}
        self.tokens: dict[tuple[str, str], str] = {}
        self.calls: list[tuple] = []

    def login(self, host: str, user: str, token: str | None = None) -> None:
        self.identities[host] = user
        self.tokens[(host, user)] = token or f"tok-{user}"

    def resolve_current_identity(self, host: str) -> str:
        self.calls.append(("identity", host))
        try:
            return self.identities[host]
        except KeyError:
            raise CredentialUnavailable(f"Failed to get current user for {host}", host=host)

    def resolve_token(self, host: str, user: str) -> str:
        self.calls.append(("token", host, user))
        try:
            return self.tokens[(host, user)]
        except KeyError:
            raise CredentialUnavailable(
                f"Cannot get token for {user}@{host}. Try: gh auth login --hostname {host}",
                host=host,
                user=user,
            )

    def token_calls(self) -> int:
        return sum(1 for call in self.calls if call[0] == "token")


class FakeRepos:
    """Repository locator treating registered directories as git roots."""

    def __init__(self):
        self.roots: list[Path] = []

    def add(self, root: Path) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        self.roots.append(root.resolve())
        return root.resolve()

    def __call__(self, cwd: Path) -> Path | None:
        cwd = Path(cwd).resolve()
        for root in self.roots:
            if cwd == root or root in cwd.parents:
                return root
        return None


@pytest.fixture()
def creds() -> FakeCredentials:
    fake = FakeCredentials()
    fake.login("github.com", "alice")
    fake.login("git.example.com", "alice-corp")
    return fake


@pytest.fixture()
def store(tmp_path, creds) -> ContextStore:
    return ContextStore(tmp_path / "contexts", creds)


@pytest.fixture()
def repos() -> FakeRepos:
    return FakeRepos()


@pytest.fixture()
def repo(tmp_path, repos) -> Path:
    return repos.add(tmp_path / "project")


@pytest.fixture()
def session(store, repo, repos) -> Session:
    return Session(store, env={}, cwd=repo, repo_locator=repos)
