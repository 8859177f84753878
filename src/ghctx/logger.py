"""Logging setup shared by every ghctx component."""

import sys
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import Optional
from loguru import logger as _logger

from .profile import Profile

session_id_context: ContextVar[Optional[str]] = ContextVar('session_id_context', default=None)
_logger_configured: bool = False
_file_sink_id: Optional[int] = None


def get_logger(component: Optional[str] = None):
    """Get the loguru logger bound to ``component``."""
    global _logger_configured

    if not _logger_configured:
        _logger.remove()

        # Stderr handler - only ERROR and above, command output owns the terminal
        _logger.add(
            sys.stderr,
            level="ERROR",
            format="<red>{time:HH:mm:ss}</red> | <level>{level: <8}</level> | <cyan>{extra[component]}</cyan> | <level>{message}</level>",
            colorize=True,
        )

        _logger.configure(patcher=_add_context)
        _logger_configured = True

    return _logger.bind(component=component or "ghctx")


def configure_file_logging(profile: Optional[Profile] = None) -> Optional[Path]:
    """Add the rotating file sink. Called by the command line, not on import."""
    global _file_sink_id

    get_logger()
    if _file_sink_id is not None:
        return None

    profile = profile or Profile.current()
    try:
        profile.logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        _logger.bind(component="logger").error(f"Cannot create log directory {profile.logs_dir}: {e}")
        return None

    _file_sink_id = _logger.add(
        profile.log_file,
        level=profile.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]} | {extra[session]} | {message}",
        rotation="10 MB",
        retention="14 days",
        compression="zip",
        enqueue=True,
    )
    return profile.log_file


def _add_context(record):
    """Add context variables to log record."""
    record["extra"].setdefault("component", "ghctx")
    record["extra"]["session"] = session_id_context.get() or "-"


def set_session_id(session_id: Optional[str] = None) -> str:
    """Tag log records from this context with a session id. Generates one if not provided."""
    if session_id is None:
        session_id = str(uuid.uuid4())[:8]
    session_id_context.set(session_id)
    return session_id


def clear_session_id() -> None:
    session_id_context.set(None)


logger = get_logger()

__all__ = [
    "logger",
    "get_logger",
    "configure_file_logging",
    "set_session_id",
    "clear_session_id",
]
