"""ghctx command line."""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Annotated

import typer

from . import __version__
from .commands import ContextCommands
from .credentials import CredentialTool, GhCli
from .logger import configure_file_logging, get_logger, set_session_id
from .profile import Profile
from .session import EXPORTED_VARS, Session
from .shellenv import SUPPORTED_SHELLS, init_script, render_changes
from .store import ContextStore

logger = get_logger("cli")

APP_NAME = "ghctx"

# Commands that never touch the state directory
QUIET_COMMANDS = ("init", "version")

app = typer.Typer(
    help=f"{APP_NAME} - Shell-local GitHub context switching",
    epilog="Examples: ghctx new work | ghctx use work | ghctx bind work | eval \"$(ghctx init bash)\"",
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)


@dataclass
class CLIState:
    session: Session
    shell: Optional[str] = None
    before: Dict[str, str] = field(default_factory=dict)

    def echo(self, message: str = "", err: bool = False, nl: bool = True) -> None:
        # In shell mode stdout is eval'd by the wrapper, so everything human goes to stderr
        typer.echo(message, err=err or self.shell is not None, nl=nl)

    @property
    def commands(self) -> ContextCommands:
        return ContextCommands(self.session, self.echo)

    def finish(self, status: int) -> None:
        if self.shell is not None:
            for line in render_changes(self.before, self.session.env):
                typer.echo(line)
        raise typer.Exit(status)


def make_credentials(profile: Profile, env: Dict[str, str]) -> CredentialTool:
    return GhCli(profile.gh_executable, timeout=profile.gh_timeout, environ=env)


def build_session(env: Optional[Dict[str, str]] = None) -> Session:
    """Resume the calling shell's session from its environment."""
    env = dict(os.environ) if env is None else env
    profile = Profile(env)
    store = ContextStore(profile.contexts_dir, make_credentials(profile, env))
    return Session.from_environment(store, env)


def _state(ctx: typer.Context) -> CLIState:
    return ctx.obj


def _complete_names(incomplete: str) -> List[str]:
    try:
        names = build_session().store.names()
    except OSError:
        return []
    return [name for name in names if name.startswith(incomplete)]


NameArg = Annotated[str, typer.Argument(help="Context name", autocompletion=_complete_names)]


@app.callback()
def root(
    ctx: typer.Context,
    shell: Annotated[
        Optional[str],
        typer.Option("--shell", hidden=True, help="Print shell code for the calling shell on stdout"),
    ] = None,
):
    """Manage GitHub contexts per shell. Without a command, start the console."""
    if shell is not None and shell not in SUPPORTED_SHELLS:
        raise typer.BadParameter(f"choose from: {', '.join(SUPPORTED_SHELLS)}", param_hint="--shell")

    session = build_session()
    if ctx.invoked_subcommand not in QUIET_COMMANDS:
        configure_file_logging(Profile(session.env))
    set_session_id(session.session_id)
    ctx.obj = CLIState(
        session=session,
        shell=shell,
        before={var: session.env[var] for var in EXPORTED_VARS if var in session.env},
    )

    if ctx.invoked_subcommand is None:
        from .console import InteractiveConsole

        raise typer.Exit(InteractiveConsole(session).run())


@app.command("list")
def list_contexts(ctx: typer.Context):
    """List all contexts."""
    state = _state(ctx)
    state.finish(state.commands.list())


@app.command()
def new(ctx: typer.Context, name: NameArg):
    """Create context from current gh auth."""
    state = _state(ctx)
    state.finish(state.commands.new(name))


@app.command()
def use(ctx: typer.Context, name: NameArg):
    """Switch this shell to context (sets GH_TOKEN/GH_HOST)."""
    state = _state(ctx)
    status = state.commands.use(name)
    if status == 0 and state.shell is None:
        state.echo("Note: without shell integration this only lasts for this command.", err=True)
        state.echo(f"Run: eval \"$({APP_NAME} init bash)\"", err=True)
    state.finish(status)


@app.command()
def delete(ctx: typer.Context, name: NameArg):
    """Remove a context."""
    state = _state(ctx)
    state.finish(state.commands.delete(name))


@app.command()
def bind(ctx: typer.Context, name: NameArg):
    """Create .ghcontext in repo root."""
    state = _state(ctx)
    state.finish(state.commands.bind(name))


@app.command()
def unbind(ctx: typer.Context):
    """Remove .ghcontext from repo root."""
    state = _state(ctx)
    state.finish(state.commands.unbind())


@app.command()
def current(ctx: typer.Context):
    """Show this shell's active context."""
    state = _state(ctx)
    state.finish(state.commands.current())


@app.command()
def clear(ctx: typer.Context):
    """Unset context (use default gh auth)."""
    state = _state(ctx)
    state.finish(state.commands.clear())


@app.command(hidden=True)
def auto(ctx: typer.Context):
    """Apply the repository binding (prompt hook)."""
    state = _state(ctx)
    state.finish(state.commands.auto())


@app.command(hidden=True)
def names(ctx: typer.Context):
    """Print context names, one per line."""
    state = _state(ctx)
    state.finish(state.commands.names())


@app.command()
def prompt(ctx: typer.Context):
    """Print '[gh:<name>] ' for the active context, for use in PS1."""
    state = _state(ctx)
    state.finish(state.commands.prompt())


@app.command()
def console(ctx: typer.Context):
    """Start an interactive console with its own context."""
    from .console import InteractiveConsole

    raise typer.Exit(InteractiveConsole(_state(ctx).session).run())


@app.command()
def init(
    shell: Annotated[str, typer.Argument(help=f"Shell to integrate with ({', '.join(SUPPORTED_SHELLS)})")],
    auto_switch: Annotated[
        bool, typer.Option("--auto/--no-auto", help="Apply .ghcontext bindings before each prompt")
    ] = True,
):
    """Print shell integration code: eval "$(ghctx init bash)"."""
    try:
        script = init_script(shell, prog=APP_NAME, auto=auto_switch)
    except ValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    typer.echo(script, nl=False)


@app.command()
def version():
    """Show version."""
    typer.echo(f"{APP_NAME} {__version__}")


def main():
    """Entry point for the ghctx CLI."""
    app(prog_name=APP_NAME)


if __name__ == "__main__":
    main()
