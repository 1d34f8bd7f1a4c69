"""
Remote directory navigation.

State machine over `NavigationState` driven by UI events. Every directory
change lists the new directory first and only then replaces the state, so a
failed listing leaves the previous state in place.
"""

import posixpath
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import paramiko
import structlog

from ssh_browser.exceptions import InvalidSelectionError, ListingFailedError, NavigatorBusyError
from ssh_browser.models.remote import (
    PARENT_NAME,
    ROOT_PATH,
    NavigationOutcome,
    NavigationState,
    RemoteEntry,
    Viewport,
)
from ssh_browser.services.connector import Session
from ssh_browser.services.download import DownloadCoordinator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EnterParent:
    """Go to the parent of the current directory."""


@dataclass(frozen=True)
class SelectEntry:
    """Activate the item at `index` of the displayed list."""

    index: int


@dataclass(frozen=True)
class Resize:
    """Terminal was resized."""

    width: int
    height: int


NavigationEvent = EnterParent | SelectEntry | Resize


def _sort_key(entry: RemoteEntry) -> tuple[bool, str]:
    return (not entry.is_directory, entry.name.lower())


class DirectoryNavigator:
    """
    Navigation model bound to one session.

    Events are handled one at a time; an event delivered while another is
    still running raises NavigatorBusyError.

    Example:
        navigator = DirectoryNavigator(session, downloader)
        navigator.open("/home/user")
        outcome = navigator.handle(SelectEntry(1))
        print(outcome.status)
    """

    def __init__(self, session: Session, downloader: DownloadCoordinator) -> None:
        self._session = session
        self._downloader = downloader
        self._state = NavigationState(current_path=ROOT_PATH)
        self._viewport = Viewport()
        self._busy = False

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def open(self, path: str | None = None) -> NavigationOutcome:
        """
        Perform the initial listing.

        Args:
            path: Remote directory to start in. None starts in the login directory.

        Returns:
            Outcome carrying the new state.

        Raises:
            ListingFailedError: If the directory cannot be resolved or listed.
        """
        with self._guard():
            self._state = self._list(self._resolve(path or "."))
            return NavigationOutcome(state=self._state)

    def handle(self, event: NavigationEvent) -> NavigationOutcome:
        """
        Apply one event.

        Raises:
            NavigatorBusyError: If another event is still being handled.
            ListingFailedError: If a directory change cannot list its target.
            InvalidSelectionError: If a selection index is out of range.
            DownloadError: If a selected file cannot be downloaded.
        """
        with self._guard():
            match event:
                case EnterParent():
                    return self._enter_parent()
                case SelectEntry(index=index):
                    return self._select(index)
                case Resize(width=width, height=height):
                    self._viewport = Viewport(width=width, height=height)
                    return NavigationOutcome(state=self._state)
                case _:
                    msg = f"Unknown navigation event: {event!r}"
                    raise TypeError(msg)

    def enter_parent(self) -> NavigationOutcome:
        return self.handle(EnterParent())

    def select_entry(self, index: int) -> NavigationOutcome:
        return self.handle(SelectEntry(index))

    def resize(self, width: int, height: int) -> NavigationOutcome:
        return self.handle(Resize(width, height))

    def _enter_parent(self) -> NavigationOutcome:
        if self._state.is_root:
            return NavigationOutcome(state=self._state)
        parent = self._resolve(posixpath.join(self._state.current_path, PARENT_NAME))
        self._state = self._list(parent)
        return NavigationOutcome(state=self._state, status=f"Entered {PARENT_NAME}")

    def _select(self, index: int) -> NavigationOutcome:
        items = self._state.items
        if not 0 <= index < len(items):
            msg = f"No item at index {index}"
            raise InvalidSelectionError(msg, index=index)

        entry = items[index]
        if entry.is_parent:
            return self._enter_parent()

        if entry.is_directory:
            target = self._resolve(posixpath.join(self._state.current_path, entry.name))
            self._state = self._list(target)
            return NavigationOutcome(state=self._state, status=f"Entered {entry.name}")

        written = self._downloader.download(self._state.current_path, entry.name)
        return NavigationOutcome(
            state=self._state,
            status=f"Downloading {entry.name}",
            bytes_downloaded=written,
        )

    def _resolve(self, path: str) -> str:
        with self._session.lock:
            try:
                return self._session.sftp.normalize(path)
            except (OSError, paramiko.SSHException, paramiko.SFTPError) as e:
                msg = f"Resolving remote path failed: {e}"
                raise ListingFailedError(msg, path=path) from e

    def _list(self, path: str) -> NavigationState:
        with self._session.lock:
            try:
                records = self._session.sftp.listdir_attr(path)
            except (OSError, paramiko.SSHException, paramiko.SFTPError) as e:
                logger.warning("Listing failed", path=path, error=str(e))
                msg = f"Listing remote directory failed: {e}"
                raise ListingFailedError(msg, path=path) from e

        entries = sorted((RemoteEntry.from_attributes(attrs) for attrs in records), key=_sort_key)
        logger.debug("Listed directory", path=path, entries=len(entries))
        return NavigationState.for_listing(path, entries)

    @contextmanager
    def _guard(self) -> Iterator[None]:
        if self._busy:
            raise NavigatorBusyError()
        self._busy = True
        try:
            yield
        finally:
            self._busy = False
