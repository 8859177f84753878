"""Errors raised by ghctx operations.

Every error carries a one-line message meant to be shown to the user as-is.
"""


class ContextError(Exception):
    """Base class for failures the command layer reports and exits non-zero on."""


class NotFound(ContextError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Context '{name}' not found")


class AlreadyExists(ContextError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Context '{name}' already exists")


class InvalidName(ContextError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Invalid context name '{name}' (use letters, digits, '.', '_' or '-')"
        )


class NotInRepo(ContextError):
    def __init__(self, message: str = "Not in a git repository"):
        super().__init__(message)


class CredentialUnavailable(ContextError):
    """The credential tool could not produce a user or token for a host."""

    def __init__(self, message: str, host: str = "", user: str = ""):
        self.host = host
        self.user = user
        super().__init__(message)


class UnreadableContext(ContextError):
    def __init__(self, name: str, path=None):
        self.name = name
        self.path = path
        super().__init__(
            f"Context '{name}' is unreadable (not UTF-8); recreate it with: ghctx delete {name} && ghctx new {name}"
        )
