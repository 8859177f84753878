"""Repository bindings: a ``.ghcontext`` file at a git root naming a context."""

import subprocess
from pathlib import Path
from typing import Optional, Union

from .errors import NotInRepo
from .logger import get_logger

logger = get_logger("binding")

MARKER_FILE = ".ghcontext"


def find_repo_root(cwd: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Return the top level of the git work tree containing ``cwd``, if any."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (FileNotFoundError, NotADirectoryError, subprocess.TimeoutExpired) as e:
        logger.debug(f"git rev-parse unavailable in {cwd}: {e}")
        return None

    root = result.stdout.strip()
    if result.returncode != 0 or not root:
        return None
    return Path(root)


def marker_path(root: Path) -> Path:
    return Path(root) / MARKER_FILE


def read_binding(root: Optional[Path]) -> Optional[str]:
    """Name bound at ``root``, or None when there is no (or an empty) marker."""
    if root is None:
        return None
    try:
        name = marker_path(root).read_text(encoding="utf-8").strip()
    except (FileNotFoundError, IsADirectoryError):
        return None
    except UnicodeDecodeError as e:
        logger.warning(f"Ignoring {marker_path(root)}: not valid UTF-8 ({e})")
        return None
    return name or None


def write_binding(root: Optional[Path], name: str) -> Path:
    if root is None:
        raise NotInRepo()
    path = marker_path(root)
    path.write_text(f"{name}\n", encoding="utf-8")
    logger.info(f"Bound {root} to {name}")
    return path


def remove_binding(root: Optional[Path]) -> bool:
    """Delete the marker at ``root``; False when there was nothing to delete."""
    if root is None:
        raise NotInRepo()
    path = marker_path(root)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    logger.info(f"Removed binding at {root}")
    return True
