"""Credential tool adapter: asks the GitHub CLI for identities and tokens."""

import os
import subprocess
from typing import List, Mapping, Optional, Protocol

from .errors import CredentialUnavailable
from .logger import get_logger

logger = get_logger("credentials")

# Variables that make gh answer from the environment instead of its keyring
TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN", "GH_ENTERPRISE_TOKEN", "GITHUB_ENTERPRISE_TOKEN")


class CredentialTool(Protocol):
    """What ghctx needs from the system holding the actual secrets."""

    def resolve_current_identity(self, host: str) -> str:
        """Return the login currently authenticated against ``host``."""
        ...

    def resolve_token(self, host: str, user: str) -> str:
        """Return a token for ``user`` on ``host``."""
        ...


class GhCli:
    """Credential tool backed by the ``gh`` executable.

    Tokens only ever live in the return value of :meth:`resolve_token`; nothing
    here writes them anywhere or logs them.
    """

    def __init__(
        self,
        executable: str = "gh",
        timeout: float = 30.0,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.executable = executable
        self.timeout = timeout
        self.environ = environ

    def resolve_current_identity(self, host: str) -> str:
        try:
            login = self._run(["api", "user", "--hostname", host, "--jq", ".login"])
        except CredentialUnavailable as e:
            raise CredentialUnavailable(
                f"Failed to get current user for {host}. Are you logged in? "
                f"(gh auth login --hostname {host})",
                host=host,
            ) from e
        if not login:
            raise CredentialUnavailable(
                f"gh returned no login for {host}. Try: gh auth login --hostname {host}",
                host=host,
            )
        return login

    def resolve_token(self, host: str, user: str) -> str:
        try:
            token = self._run(
                ["auth", "token", "--hostname", host, "--user", user],
                keyring_only=True,
            )
        except CredentialUnavailable as e:
            raise CredentialUnavailable(
                f"Cannot get token for {user}@{host}. Try: gh auth login --hostname {host}",
                host=host,
                user=user,
            ) from e
        if not token:
            raise CredentialUnavailable(
                f"gh returned an empty token for {user}@{host}. Try: gh auth login --hostname {host}",
                host=host,
                user=user,
            )
        return token

    def _environment(self, keyring_only: bool) -> dict:
        env = dict(os.environ if self.environ is None else self.environ)
        if keyring_only:
            for var in TOKEN_ENV_VARS:
                env.pop(var, None)
        return env

    def _run(self, args: List[str], keyring_only: bool = False) -> str:
        cmd = [self.executable] + list(args)
        logger.debug(f"[gh] {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=self._environment(keyring_only),
            )
        except FileNotFoundError as e:
            logger.error(f"Credential tool not found: {self.executable}")
            raise CredentialUnavailable(
                f"'{self.executable}' not found. Install the GitHub CLI first."
            ) from e
        except subprocess.TimeoutExpired as e:
            logger.warning(f"[gh] {args[0]} timed out after {self.timeout:g}s")
            raise CredentialUnavailable(
                f"'{self.executable} {args[0]}' timed out after {self.timeout:g} seconds"
            ) from e

        if result.returncode != 0:
            err = result.stderr.strip()
            logger.info(f"[gh] {args[0]} exited {result.returncode}: {err}")
            raise CredentialUnavailable(err or f"gh exited with code {result.returncode}")
        return result.stdout.strip()
