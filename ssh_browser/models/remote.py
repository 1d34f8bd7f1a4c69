"""
Remote filesystem domain models.
"""

import stat
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Self

import paramiko

ROOT_PATH = "/"
PARENT_NAME = ".."


@dataclass(frozen=True, kw_only=True)
class Endpoint:
    """Remote SSH endpoint."""

    username: str
    host: str
    port: int = 22

    @property
    def host_id(self) -> str:
        """Host name as spelled in known_hosts ("[host]:port" for non-default ports)."""
        if self.port == 22:
            return self.host
        return f"[{self.host}]:{self.port}"

    def __str__(self) -> str:
        return f"{self.username}@{self.host}:{self.port}"


@dataclass(frozen=True, kw_only=True)
class RemoteEntry:
    """
    One record of a remote directory listing.

    The synthetic ".." entry that leads to the parent directory has
    `is_parent` set and carries no attributes.
    """

    name: str
    is_directory: bool
    size: int = 0
    mod_time: datetime | None = None
    permissions: str = ""
    is_parent: bool = False

    @classmethod
    def from_attributes(cls, attrs: paramiko.SFTPAttributes) -> Self:
        """Project an SFTP listing record."""
        mode = attrs.st_mode or 0
        mod_time = (
            datetime.fromtimestamp(attrs.st_mtime, tz=UTC) if attrs.st_mtime is not None else None
        )
        return cls(
            name=attrs.filename,
            is_directory=stat.S_ISDIR(mode),
            size=attrs.st_size or 0,
            mod_time=mod_time,
            permissions=stat.filemode(mode) if mode else "",
        )


PARENT_ENTRY = RemoteEntry(name=PARENT_NAME, is_directory=True, is_parent=True)


@dataclass(frozen=True, kw_only=True)
class NavigationState:
    """
    Current remote directory and the items displayed for it.

    Recreated on every directory change, never patched in place.
    """

    current_path: str
    items: tuple[RemoteEntry, ...] = ()

    @classmethod
    def for_listing(cls, path: str, entries: list[RemoteEntry]) -> Self:
        """Build a state for `path`, prepending the parent marker below the root."""
        items = tuple(entries) if path == ROOT_PATH else (PARENT_ENTRY, *entries)
        return cls(current_path=path, items=items)

    @property
    def is_root(self) -> bool:
        return self.current_path == ROOT_PATH

    @property
    def entries(self) -> tuple[RemoteEntry, ...]:
        """Listing records without the parent marker."""
        return tuple(item for item in self.items if not item.is_parent)


@dataclass(kw_only=True)
class DownloadTask:
    """A single in-flight download."""

    source_path: str
    destination_path: Path
    bytes_transferred: int = 0
    total_bytes: int | None = None

    @property
    def fraction(self) -> float | None:
        """Completed share in [0, 1], or None when the size is unknown."""
        if not self.total_bytes:
            return None
        return min(1.0, self.bytes_transferred / self.total_bytes)


@dataclass(frozen=True, kw_only=True)
class Viewport:
    """Last terminal size reported through a resize event."""

    width: int = 0
    height: int = 0


@dataclass(frozen=True, kw_only=True)
class NavigationOutcome:
    """Result of one navigation event."""

    state: NavigationState
    status: str = ""
    bytes_downloaded: int | None = None
