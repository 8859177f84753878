"""Profile management for ghctx storage and configuration."""

import os
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_HOST = "github.com"
DEFAULT_GH_TIMEOUT = 30.0


class Profile:
    """Resolves where ghctx keeps its contexts and logs.

    Everything is driven by environment variables so a shell (or a test) can
    point ghctx somewhere else without touching any file:

    - ``GHCTX_DIR``: contexts directory, defaults to
      ``$XDG_CONFIG_HOME/gh/contexts`` (``~/.config/gh/contexts``).
    - ``GHCTX_STATE_DIR``: log root, defaults to ``$XDG_STATE_HOME/ghctx``.
    - ``GHCTX_GH``: executable used as the credential tool.
    - ``GHCTX_GH_TIMEOUT``: seconds before a credential tool call is abandoned.
    - ``GHCTX_LOG_LEVEL``: level of the file log.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """Initialize the profile from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ
        home = Path(env.get("HOME") or Path.home())

        config_home = Path(env.get("XDG_CONFIG_HOME") or home / ".config")
        state_home = Path(env.get("XDG_STATE_HOME") or home / ".local" / "state")

        self._contexts_dir = Path(env.get("GHCTX_DIR") or config_home / "gh" / "contexts")
        self._state_root = Path(env.get("GHCTX_STATE_DIR") or state_home / "ghctx")
        self.gh_executable = env.get("GHCTX_GH") or "gh"
        self.gh_timeout = self._parse_timeout(env.get("GHCTX_GH_TIMEOUT"))
        self.log_level = (env.get("GHCTX_LOG_LEVEL") or "DEBUG").upper()

    @staticmethod
    def _parse_timeout(raw: Optional[str]) -> float:
        if not raw:
            return DEFAULT_GH_TIMEOUT
        try:
            value = float(raw)
        except ValueError:
            return DEFAULT_GH_TIMEOUT
        return value if value > 0 else DEFAULT_GH_TIMEOUT

    @property
    def contexts_dir(self) -> Path:
        """Directory holding one ``<name>.ctx`` file per context."""
        return self._contexts_dir

    @property
    def state_root(self) -> Path:
        return self._state_root

    @property
    def logs_dir(self) -> Path:
        """Directory for log files."""
        return self._state_root / "logs"

    @property
    def log_file(self) -> Path:
        return self.logs_dir / "ghctx.log"

    def ensure_directories(self) -> None:
        """Create the contexts and logs directories if they don't exist."""
        self.contexts_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def current(cls) -> "Profile":
        """Get the profile for the current process environment."""
        return cls()

    def __str__(self) -> str:
        return f"Profile({self._contexts_dir})"

    def __repr__(self) -> str:
        return f"Profile(contexts_dir={self._contexts_dir!s}, state_root={self._state_root!s})"
