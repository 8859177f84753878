"""Context storage: one small key=value file per named context."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .credentials import CredentialTool
from .errors import AlreadyExists, InvalidName, NotFound, UnreadableContext
from .logger import get_logger
from .profile import DEFAULT_HOST

logger = get_logger("store")

CONTEXT_SUFFIX = ".ctx"
NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


@dataclass(frozen=True)
class ContextRecord:
    """A named (host, user) pair. Tokens are never part of a record."""

    name: str
    host: str
    user: str

    @property
    def label(self) -> str:
        return f"{self.user}@{self.host}"


def validate_name(name: str) -> str:
    if not name or not NAME_PATTERN.match(name) or name.endswith(CONTEXT_SUFFIX):
        raise InvalidName(name)
    return name


def parse_record(name: str, text: str) -> ContextRecord:
    """Parse ``HOST=``/``USER=`` lines; other lines are ignored."""
    fields: Dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            fields.setdefault(key.strip(), value.strip())
    return ContextRecord(name=name, host=fields.get("HOST", ""), user=fields.get("USER", ""))


def format_record(record: ContextRecord) -> str:
    return f"HOST={record.host}\nUSER={record.user}\n"


class ContextStore:
    """Directory of ``<name>.ctx`` files.

    The directory is shared by every shell on the machine and has no locking:
    distinct names are distinct files, and two creates of the same name simply
    race to the last write.
    """

    def __init__(self, root: Path, credentials: Optional[CredentialTool] = None):
        self.root = Path(root)
        self.credentials = credentials

    def _path(self, name: str) -> Path:
        return self.root / f"{validate_name(name)}{CONTEXT_SUFFIX}"

    def _existing_path(self, name: str) -> Path:
        # A name that could never have been created cannot exist
        try:
            return self._path(name)
        except InvalidName:
            raise NotFound(name)

    def exists(self, name: str) -> bool:
        try:
            return self._existing_path(name).is_file()
        except NotFound:
            return False

    def get(self, name: str) -> ContextRecord:
        path = self._existing_path(name)
        try:
            text = path.read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError):
            raise NotFound(name)
        except UnicodeDecodeError as e:
            logger.warning(f"Context file {path} is not valid UTF-8: {e}")
            raise UnreadableContext(name, path)
        return parse_record(name, text)

    def list(self) -> List[ContextRecord]:
        """All stored contexts in directory enumeration order."""
        if not self.root.is_dir():
            return []
        records = []
        for path in sorted(self.root.glob(f"*{CONTEXT_SUFFIX}")):
            if not path.is_file():
                continue
            try:
                records.append(parse_record(path.stem, path.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError) as e:
                # Another shell may delete a context while we enumerate
                logger.warning(f"Skipping unreadable context file {path}: {e}")
        return records

    def names(self) -> List[str]:
        return [record.name for record in self.list()]

    def create(self, name: str, host: Optional[str] = None, user: Optional[str] = None) -> ContextRecord:
        """Persist a new context after checking a token can be resolved for it.

        ``host`` defaults to github.com and ``user`` to whoever the credential
        tool is currently logged in as on that host.
        """
        path = self._path(name)
        if path.exists():
            raise AlreadyExists(name)
        if self.credentials is None:
            raise RuntimeError("ContextStore.create needs a credential tool")

        host = host or DEFAULT_HOST
        if not user:
            user = self.credentials.resolve_current_identity(host)

        # Proves the keyring holds a credential for this pair; the token is discarded
        self.credentials.resolve_token(host, user)

        record = ContextRecord(name=name, host=host, user=user)
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_text(format_record(record), encoding="utf-8")
        logger.info(f"Created context {name} ({record.label})")
        return record

    def delete(self, name: str) -> Optional[ContextRecord]:
        """Remove ``name``. A file that cannot be parsed is still removed."""
        path = self._existing_path(name)
        try:
            record = self.get(name)
        except UnreadableContext:
            record = None
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFound(name)
        logger.info(f"Deleted context {name}")
        return record
