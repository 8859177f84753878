"""Shell integration.

A child process cannot change its parent shell's environment, so in shell
mode the command line prints ``export``/``unset`` statements that a small
wrapper function evals. The wrapper, prompt hook and completions come from
``ghctx init <shell>``.
"""

import shlex
from typing import List, Mapping

from .commands import COMMAND_HELP, NAME_COMMANDS
from .session import ACTIVE_VAR, EXPORTED_VARS

SUPPORTED_SHELLS = ("bash", "zsh")

# Commands whose effect has to land in the calling shell
STATEFUL_COMMANDS = ("use", "clear", "delete", "auto")


def render_changes(before: Mapping[str, str], after: Mapping[str, str]) -> List[str]:
    """Statements turning ``before`` into ``after`` for the exported variables."""
    lines = []
    for var in EXPORTED_VARS:
        if var in after:
            if before.get(var) != after[var]:
                lines.append(f"export {var}={shlex.quote(after[var])}")
        elif var in before:
            lines.append(f"unset {var}")
    return lines


_COMMON = r'''
{prog}() {{
  case "${{1:-}}" in
    {stateful})
      local __ghctx_code __ghctx_rc
      __ghctx_code="$(command {prog} --shell {shell} "$@")"
      __ghctx_rc=$?
      eval "$__ghctx_code"
      return $__ghctx_rc
      ;;
    *)
      command {prog} "$@"
      ;;
  esac
}}

_ghctx_auto() {{
  eval "$(command {prog} --shell {shell} auto)"
}}

ghctx_prompt() {{
  [[ -n "${{{active}:-}}" ]] && printf '[gh:%s] ' "${active}"
}}
'''

_BASH = r'''
_ghctx_completions() {{
  local cur="${{COMP_WORDS[COMP_CWORD]}}"
  local prev="${{COMP_WORDS[COMP_CWORD-1]}}"
  case "$prev" in
    {prog})
      COMPREPLY=($(compgen -W "{commands}" -- "$cur"))
      ;;
    {name_commands})
      COMPREPLY=($(compgen -W "$(command {prog} names 2>/dev/null)" -- "$cur"))
      ;;
  esac
}}
complete -F _ghctx_completions {prog}
'''

_BASH_AUTO = r'''
if [[ ";${{PROMPT_COMMAND:-}};" != *";_ghctx_auto;"* ]]; then
  PROMPT_COMMAND="_ghctx_auto${{PROMPT_COMMAND:+;$PROMPT_COMMAND}}"
fi
'''

_ZSH = r'''
_ghctx() {{
  local -a subcmds contexts
  subcmds=(
{descriptions}
  )
  if (( CURRENT == 2 )); then
    _describe 'command' subcmds
  elif (( CURRENT == 3 )); then
    case "${{words[2]}}" in
      {name_commands})
        contexts=(${{(f)"$(command {prog} names 2>/dev/null)"}})
        _describe 'context' contexts
        ;;
    esac
  fi
}}
(( $+functions[compdef] )) && compdef _ghctx {prog}
'''

_ZSH_AUTO = r'''
if (( ! ${{precmd_functions[(Ie)_ghctx_auto]}} )); then
  precmd_functions+=(_ghctx_auto)
fi
'''


def init_script(shell: str, prog: str = "ghctx", auto: bool = True) -> str:
    """Source-able integration code for ``shell``."""
    if shell not in SUPPORTED_SHELLS:
        raise ValueError(f"Unsupported shell '{shell}' (choose from: {', '.join(SUPPORTED_SHELLS)})")

    values = {
        "prog": prog,
        "shell": shell,
        "active": ACTIVE_VAR,
        "stateful": "|".join(STATEFUL_COMMANDS),
        "commands": " ".join(COMMAND_HELP),
        "name_commands": "|".join(NAME_COMMANDS),
    }
    parts = [f"# ghctx shell integration ({shell})", _COMMON.format(**values)]
    if shell == "bash":
        parts.append(_BASH.format(**values))
        if auto:
            parts.append(_BASH_AUTO.format(**values))
    else:
        descriptions = "\n".join(
            "    " + shlex.quote(f"{name}:{text}") for name, text in COMMAND_HELP.items()
        )
        parts.append(_ZSH.format(descriptions=descriptions, **values))
        if auto:
            parts.append(_ZSH_AUTO.format(**values))
    return "".join(parts)
