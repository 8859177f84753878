"""The ghctx command set, shared by the command line and the console.

Each command prints human-readable lines through ``echo`` and returns an exit
status: 0 on success, 1 on any :class:`~ghctx.errors.ContextError`.
"""

from typing import Callable, Dict, List, Optional

from .errors import ContextError
from .logger import get_logger
from .session import TOKEN_VAR, Session

logger = get_logger("commands")

Echo = Callable[..., None]

COMMAND_HELP: Dict[str, str] = {
    "list": "List all contexts",
    "new": "Create context from current gh auth",
    "use": "Switch this shell to context (sets GH_TOKEN/GH_HOST)",
    "delete": "Remove a context",
    "bind": "Create .ghcontext in repo root",
    "unbind": "Remove .ghcontext from repo root",
    "current": "Show this shell's active context",
    "clear": "Unset context (use default gh auth)",
}

# Commands taking a context name, for completion
NAME_COMMANDS = ("use", "delete", "bind")


class ContextCommands:
    """Runs commands against one :class:`Session` and reports the outcome."""

    def __init__(self, session: Session, echo: Echo):
        self.session = session
        self.echo = echo

    def _fail(self, error: ContextError) -> int:
        logger.debug(f"{type(error).__name__}: {error}")
        self.echo(str(error), err=True)
        return 1

    def list(self) -> int:
        entries = self.session.list_contexts()
        if not entries:
            self.echo("No contexts found. Create one with: ghctx new <name>")
            return 0

        self.echo("Contexts:")
        for record, active in entries:
            marker = " *" if active else ""
            self.echo(f"  {record.name}{marker} ({record.label})")

        if self.session.active:
            self.echo("\n* = active in this shell")
        return 0

    def new(self, name: str) -> int:
        try:
            record = self.session.new(name)
        except ContextError as e:
            return self._fail(e)
        self.echo(f"Created context '{name}' ({record.label})")
        return 0

    def use(self, name: str) -> int:
        try:
            record = self.session.use(name)
        except ContextError as e:
            return self._fail(e)
        self.echo(f"Switched to '{name}' ({record.label}) [this shell only]")
        return 0

    def delete(self, name: str) -> int:
        was_active = name == self.session.active
        try:
            self.session.delete(name)
        except ContextError as e:
            return self._fail(e)
        if was_active:
            self.echo("Cleared context (using default gh auth)")
        self.echo(f"Deleted context '{name}'")
        return 0

    def bind(self, name: str) -> int:
        try:
            binding = self.session.bind(name)
        except ContextError as e:
            return self._fail(e)
        self.echo(f"Bound repo to '{name}' ({binding.path})")
        self.echo("Tip: Add .ghcontext to .gitignore")
        return 0

    def unbind(self) -> int:
        try:
            removed = self.session.unbind()
        except ContextError as e:
            return self._fail(e)
        self.echo("Removed repo binding" if removed else "No binding found")
        return 0

    def current(self) -> int:
        status = self.session.current()
        if not status.active:
            self.echo("No context active in this shell (using default gh auth)")
            if status.token_from_elsewhere:
                self.echo(f"Note: {TOKEN_VAR} is set from elsewhere")
        elif status.record is None:
            self.echo(f"Active: {status.active} (context file no longer exists)")
        else:
            self.echo(f"Active: {status.active} ({status.record.label})")

        if status.binding is not None:
            self.echo(f"Repo binding: {status.binding.name} (in {status.binding.path})")
        return 0

    def clear(self) -> int:
        self.session.clear()
        self.echo("Cleared context (using default gh auth)")
        return 0

    def auto(self) -> int:
        """Prompt hook: apply the repository binding, never failing the prompt."""
        result = self.session.auto_apply()
        if result is None:
            return 0
        if result.ok:
            self.echo(f"Switched to '{result.name}' ({result.record.label}) [this shell only]")
        else:
            self.echo(str(result.error), err=True)
        return 0

    def names(self) -> int:
        for name in self.session.store.names():
            self.echo(name)
        return 0

    def prompt(self) -> int:
        segment = self.session.prompt_segment()
        if segment:
            self.echo(segment, nl=False)
        return 0

    def dispatch(self, argv: List[str]) -> Optional[int]:
        """Run ``argv`` as a command line; None when the command is unknown."""
        if not argv:
            return None
        cmd, args = argv[0], argv[1:]

        if cmd in ("new", "use", "delete", "bind"):
            if len(args) != 1:
                self.echo(f"Usage: ghctx {cmd} <name>", err=True)
                return 1
            return getattr(self, cmd)(args[0])
        if cmd in ("list", "unbind", "current", "clear", "auto", "names", "prompt"):
            if args:
                self.echo(f"Usage: ghctx {cmd}", err=True)
                return 1
            return getattr(self, cmd)()
        return None
