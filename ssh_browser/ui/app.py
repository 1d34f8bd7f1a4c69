"""
Terminal UI for browsing a remote directory tree.

The app only renders state and forwards key presses; every decision about
paths, listings and downloads is made by the DirectoryNavigator.
"""

from collections.abc import Callable

import structlog
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Label, ListItem, ListView, ProgressBar, Static

from ssh_browser.exceptions import DownloadError, NavigationError
from ssh_browser.models.remote import NavigationOutcome, NavigationState, RemoteEntry
from ssh_browser.services.download import DownloadCoordinator
from ssh_browser.services.navigation import DirectoryNavigator
from ssh_browser.ui.render import DEFAULT_STYLE, RenderStyle, describe_entry, format_entry

logger = structlog.get_logger(__name__)


class EntryItem(ListItem):
    """List row for one remote entry."""

    def __init__(self, entry: RemoteEntry, style: RenderStyle) -> None:
        super().__init__()
        self.entry = entry
        self._render_style = style

    def compose(self) -> ComposeResult:
        yield Label(format_entry(self.entry, self._render_style))
        if description := describe_entry(self.entry):
            yield Label(description, classes="description")


class RemoteBrowserApp(App):
    """Two-pane remote browser: item list and download progress."""

    TITLE = "ssh-browser"

    CSS = """
    #current-path {
        height: 1;
        text-style: bold;
    }

    #browser {
        height: 1fr;
    }

    #entries {
        width: 1fr;
    }

    #progress {
        width: auto;
        padding: 0 2;
    }

    #status {
        height: 1;
    }

    .description {
        text-style: dim;
    }
    """

    BINDINGS = [
        Binding("backspace", "parent", "Parent"),
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        navigator: DirectoryNavigator,
        downloader: DownloadCoordinator,
        *,
        style: RenderStyle = DEFAULT_STYLE,
        tick_interval: float = 0.1,
        start_path: str | None = None,
    ) -> None:
        """
        Args:
            navigator: Navigation model driving the listing.
            downloader: Polled on every tick for download progress.
            style: Colours and margins.
            tick_interval: Seconds between progress refreshes.
            start_path: Remote directory to open first; None is the login directory.
        """
        super().__init__()
        self._navigator = navigator
        self._downloader = downloader
        self._render_style = style
        self._tick_interval = tick_interval
        self._start_path = start_path
        self._shown_state: NavigationState | None = None
        self.status_message = ""

    def compose(self) -> ComposeResult:
        yield Static("", id="current-path")
        with Horizontal(id="browser"):
            yield ListView(id="entries")
            yield ProgressBar(total=100, show_eta=False, id="progress")
        yield Static("", id="status")
        yield Footer()

    async def on_mount(self) -> None:
        self.query_one("#browser").styles.margin = self._render_style.margin
        self.query_one("#status", Static).styles.color = self._render_style.status_color
        self.query_one("#entries", ListView).focus()

        await self._apply(lambda: self._navigator.open(self._start_path))
        self.set_interval(self._tick_interval, self._tick)

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is None:
            return
        item = event.item
        if isinstance(item, EntryItem) and not item.entry.is_directory:
            # Show the status before the blocking transfer starts.
            self.set_status(f"Downloading {item.entry.name}")
            self.call_after_refresh(self._select, index)
            return
        await self._select(index)

    async def action_parent(self) -> None:
        await self._apply(self._navigator.enter_parent)

    def on_resize(self, event: events.Resize) -> None:
        try:
            self._navigator.resize(event.size.width, event.size.height)
        except NavigationError as e:
            logger.debug("Resize ignored", error=str(e))

    def set_status(self, message: str) -> None:
        self.status_message = message
        self.query_one("#status", Static).update(message)

    async def _select(self, index: int) -> None:
        await self._apply(lambda: self._navigator.select_entry(index))

    async def _apply(self, action: Callable[[], NavigationOutcome]) -> None:
        try:
            outcome = action()
        except (NavigationError, DownloadError) as e:
            logger.warning("Navigation event failed", error=str(e))
            self.set_status(str(e))
            return

        if outcome.state != self._shown_state:
            await self._show(outcome.state)
        if outcome.status:
            self.set_status(outcome.status)
        self._tick()

    async def _show(self, state: NavigationState) -> None:
        list_view = self.query_one("#entries", ListView)
        await list_view.clear()
        await list_view.extend(EntryItem(item, self._render_style) for item in state.items)
        if state.items:
            list_view.index = 0
        self.query_one("#current-path", Static).update(state.current_path)
        self._shown_state = state

    def _tick(self) -> None:
        task = self._downloader.current_task or self._downloader.last_task
        if task is None:
            return
        progress = self.query_one("#progress", ProgressBar)
        if task.total_bytes:
            progress.update(total=task.total_bytes, progress=task.bytes_transferred)
        else:
            progress.update(total=None)
