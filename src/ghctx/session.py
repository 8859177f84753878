"""Per-session context state.

A :class:`Session` owns the active context name and the environment in which
``GH_TOKEN``/``GH_HOST`` are exported. Nothing here is process-global: two
sessions in one process, or two shells on one machine, never see each other's
active context. The only shared resource is the context store directory.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, MutableMapping, Optional, Tuple, Union

from .binding import find_repo_root, marker_path, read_binding, remove_binding, write_binding
from .credentials import CredentialTool
from .errors import ContextError, NotInRepo
from .logger import get_logger
from .store import ContextRecord, ContextStore

logger = get_logger("session")

TOKEN_VAR = "GH_TOKEN"
HOST_VAR = "GH_HOST"
ACTIVE_VAR = "GHCTX_CURRENT"
EXPORTED_VARS = (TOKEN_VAR, HOST_VAR, ACTIVE_VAR)

RepoLocator = Callable[[Path], Optional[Path]]


@dataclass(frozen=True)
class Binding:
    root: Path
    name: str

    @property
    def path(self) -> Path:
        return marker_path(self.root)


@dataclass(frozen=True)
class CurrentStatus:
    """Snapshot reported by ``ghctx current``."""

    active: Optional[str]
    record: Optional[ContextRecord]
    token_from_elsewhere: bool
    binding: Optional[Binding]


@dataclass(frozen=True)
class AutoApplyResult:
    name: str
    record: Optional[ContextRecord] = None
    error: Optional[ContextError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Session:
    """One interactive session's view of ghctx."""

    def __init__(
        self,
        store: ContextStore,
        credentials: Optional[CredentialTool] = None,
        env: Optional[MutableMapping[str, str]] = None,
        active: Optional[str] = None,
        cwd: Optional[Union[str, Path]] = None,
        repo_locator: RepoLocator = find_repo_root,
    ):
        self.store = store
        self.credentials = credentials or store.credentials
        # A copy, never os.environ itself: exports stay inside this session
        self.env: MutableMapping[str, str] = dict(os.environ) if env is None else env
        self.active: Optional[str] = active or None
        self._cwd = Path(cwd) if cwd is not None else None
        self._locate_repo = repo_locator
        self.session_id = str(uuid.uuid4())[:8]

    @classmethod
    def from_environment(
        cls,
        store: ContextStore,
        env: MutableMapping[str, str],
        **kwargs,
    ) -> "Session":
        """Resume the session whose state a shell carries in ``env``."""
        return cls(store, env=env, active=env.get(ACTIVE_VAR) or None, **kwargs)

    @property
    def cwd(self) -> Path:
        return self._cwd if self._cwd is not None else Path.cwd()

    def chdir(self, path: Union[str, Path]) -> Path:
        """Move this session (not the process) to ``path``."""
        target = (self.cwd / Path(path).expanduser()).resolve()
        if not target.is_dir():
            raise NotADirectoryError(f"No such directory: {path}")
        self._cwd = target
        return target

    def repo_root(self) -> Optional[Path]:
        return self._locate_repo(self.cwd)

    # Context store operations seen through this session

    def list_contexts(self) -> List[Tuple[ContextRecord, bool]]:
        return [(record, record.name == self.active) for record in self.store.list()]

    def new(self, name: str) -> ContextRecord:
        """Create ``name`` from the identity gh is logged in with on this session's host."""
        return self.store.create(name, host=self.env.get(HOST_VAR) or None)

    def delete(self, name: str) -> Optional[ContextRecord]:
        record = self.store.delete(name)
        if name == self.active:
            self.clear()
        return record

    # Session state

    def use(self, name: str) -> ContextRecord:
        """Export a freshly resolved token for ``name`` into this session."""
        record = self.store.get(name)
        if self.credentials is None:
            raise RuntimeError("Session.use needs a credential tool")
        token = self.credentials.resolve_token(record.host, record.user)

        self.env[TOKEN_VAR] = token
        self.env[HOST_VAR] = record.host
        self.env[ACTIVE_VAR] = name
        self.active = name
        logger.info(f"Session {self.session_id} switched to {name} ({record.label})")
        return record

    def clear(self) -> None:
        for var in EXPORTED_VARS:
            self.env.pop(var, None)
        if self.active:
            logger.info(f"Session {self.session_id} cleared {self.active}")
        self.active = None

    def current(self) -> CurrentStatus:
        record = None
        if self.active:
            try:
                record = self.store.get(self.active)
            except ContextError as e:
                # Deleted (or mangled) from another shell while still active here
                logger.debug(f"Active context {self.active} unavailable: {e}")
                record = None
        return CurrentStatus(
            active=self.active,
            record=record,
            token_from_elsewhere=not self.active and bool(self.env.get(TOKEN_VAR)),
            binding=self.repo_binding(),
        )

    def prompt_segment(self) -> str:
        return f"[gh:{self.active}] " if self.active else ""

    # Directory bindings

    def repo_binding(self) -> Optional[Binding]:
        root = self.repo_root()
        name = read_binding(root)
        if root is None or name is None:
            return None
        return Binding(root=root, name=name)

    def bind(self, name: str) -> Binding:
        root = self.repo_root()
        if root is None:
            raise NotInRepo()
        self.store.get(name)
        write_binding(root, name)
        return Binding(root=root, name=name)

    def unbind(self) -> bool:
        return remove_binding(self.repo_root())

    def auto_apply(self) -> Optional[AutoApplyResult]:
        """Apply the working tree's binding if it names another context.

        Returns None when there was nothing to do. Failures are returned, not
        raised, so the caller can still draw its prompt.
        """
        try:
            binding = self.repo_binding()
        except OSError as e:
            logger.warning(f"Could not read repository binding: {e}")
            return None

        if binding is None or binding.name == self.active:
            return None

        try:
            record = self.use(binding.name)
        except ContextError as e:
            logger.warning(f"Auto-apply of {binding.name} from {binding.path} failed: {e}")
            return AutoApplyResult(name=binding.name, error=e)
        return AutoApplyResult(name=binding.name, record=record)
