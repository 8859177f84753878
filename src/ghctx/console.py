"""Interactive console: a session that owns its own GH_TOKEN/GH_HOST."""

import shlex
import subprocess
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from .commands import COMMAND_HELP, NAME_COMMANDS, ContextCommands
from .logger import get_logger, set_session_id
from .session import Session

logger = get_logger("console")
console = Console()

CONSOLE_HELP = {
    "cd <dir>": "Change this session's working directory",
    "pwd": "Show this session's working directory",
    "!<command>": "Run a shell command with this session's GH_TOKEN/GH_HOST",
    "help": "Show this help message",
    "exit": "Leave the console",
}


class InteractiveConsole:
    """Read-eval loop over the ghctx commands for a single :class:`Session`.

    Before every prompt the repository binding of the session's working
    directory is applied, the same way the shell prompt hook does it.
    """

    def __init__(self, session: Session, out: Optional[Console] = None):
        self.session = session
        self.out = out or console
        self.commands = ContextCommands(session, self.echo)

    def echo(self, message: str = "", err: bool = False, nl: bool = True) -> None:
        self.out.print(
            message,
            markup=False,
            highlight=False,
            style="red" if err else None,
            end="\n" if nl else "",
        )

    def show_help(self) -> None:
        lines = ["[bold]ghctx console[/bold]", "", "[cyan]Context commands:[/cyan]"]
        for name, text in COMMAND_HELP.items():
            arg = " <name>" if name in NAME_COMMANDS or name == "new" else ""
            lines.append(f"  {escape(name + arg):<16} - {escape(text)}")
        lines += ["", "[cyan]Console commands:[/cyan]"]
        for name, text in CONSOLE_HELP.items():
            lines.append(f"  {escape(name):<16} - {escape(text)}")
        self.out.print(Panel("\n".join(lines), border_style="blue"))

    def prompt_text(self) -> str:
        segment = escape(self.session.prompt_segment())
        return f"[dim]{segment}[/dim][bold blue]{escape(self.session.cwd.name or '/')}[/bold blue]"

    def before_prompt(self) -> None:
        """Auto-apply hook; any failure is shown and the prompt still renders."""
        try:
            self.commands.auto()
        except Exception as e:
            logger.error(f"Auto-apply hook failed: {e}", exc_info=True)
            self.echo(f"Auto-apply failed: {e}", err=True)

    def run_shell(self, command: str) -> int:
        if not command.strip():
            return 0
        logger.debug(f"Running shell command in {self.session.cwd}")
        try:
            result = subprocess.run(
                command,
                shell=True,
                cwd=str(self.session.cwd),
                env=dict(self.session.env),
            )
        except OSError as e:
            self.echo(f"Command failed: {e}", err=True)
            return 1
        return result.returncode

    def handle_line(self, line: str) -> bool:
        """Run one input line. Returns False when the console should exit."""
        line = line.strip()
        if not line:
            return True

        if line.startswith("!"):
            self.run_shell(line[1:])
            return True

        try:
            argv = shlex.split(line)
        except ValueError as e:
            self.echo(f"Parse error: {e}", err=True)
            return True

        # Allow "ghctx use work" as well as "use work"
        if argv and argv[0] == "ghctx":
            argv = argv[1:]
        if not argv:
            return True

        cmd = argv[0]
        if cmd in ("exit", "quit"):
            return False
        if cmd == "help":
            self.show_help()
            return True
        if cmd == "pwd":
            self.echo(str(self.session.cwd))
            return True
        if cmd == "cd":
            target = argv[1] if len(argv) > 1 else "~"
            try:
                self.session.chdir(target)
            except OSError as e:
                self.echo(str(e), err=True)
            return True

        status = self.commands.dispatch(argv)
        if status is None:
            self.echo(f"Unknown command: {cmd}", err=True)
            self.echo("Type 'help' for available commands", err=True)
        return True

    def _completions(self) -> List[str]:
        words = list(COMMAND_HELP) + ["cd", "pwd", "help", "exit"]
        try:
            words += self.session.store.names()
        except OSError:
            pass
        return words

    def _read_line(self) -> str:
        try:
            import readline

            def completer(text, state):
                matches = [w for w in self._completions() if w.startswith(text)]
                return matches[state] if state < len(matches) else None

            readline.set_completer(completer)
            readline.parse_and_bind("tab: complete")
        except ImportError:
            pass
        return Prompt.ask(self.prompt_text(), console=self.out, default="", show_default=False)

    def run(self) -> int:
        if not sys.stdin.isatty():
            self.echo("Error: the interactive console requires a terminal", err=True)
            self.echo("Hint: use 'ghctx <command>' or 'eval \"$(ghctx init bash)\"'", err=True)
            return 1

        set_session_id(self.session.session_id)
        self.out.print(Panel.fit(
            "[bold cyan]ghctx console[/bold cyan]\n"
            "GH_TOKEN/GH_HOST set here stay in this console and its commands.\n\n"
            "Type 'help' for commands",
            border_style="cyan",
        ))

        while True:
            self.before_prompt()
            try:
                line = self._read_line()
            except (KeyboardInterrupt, EOFError):
                self.out.print()
                break

            try:
                if not self.handle_line(line):
                    break
            except KeyboardInterrupt:
                self.out.print("\n[yellow]Interrupted[/yellow]")
            except Exception as e:
                self.echo(f"Error: {e}", err=True)
                logger.error(f"Console error: {e}", exc_info=True)

        self.out.print("[dim]Session ended[/dim]")
        return 0
