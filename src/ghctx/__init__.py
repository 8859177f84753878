"""ghctx - Shell-local GitHub context switching."""

__version__ = "0.1.0"

from .credentials import CredentialTool, GhCli
from .errors import (
    AlreadyExists,
    ContextError,
    CredentialUnavailable,
    InvalidName,
    NotFound,
    NotInRepo,
    UnreadableContext,
)
from .profile import Profile
from .session import AutoApplyResult, Binding, CurrentStatus, Session
from .store import ContextRecord, ContextStore

__all__ = [
    # Storage and sessions
    "ContextRecord",
    "ContextStore",
    "Session",
    "CurrentStatus",
    "Binding",
    "AutoApplyResult",

    # Credential tool
    "CredentialTool",
    "GhCli",

    # Configuration
    "Profile",

    # Errors
    "ContextError",
    "NotFound",
    "AlreadyExists",
    "NotInRepo",
    "CredentialUnavailable",
    "InvalidName",
    "UnreadableContext",
]
