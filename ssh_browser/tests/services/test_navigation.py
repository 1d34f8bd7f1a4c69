from unittest.mock import Mock

import paramiko
import pytest

from ssh_browser.exceptions import (
    DownloadError,
    InvalidSelectionError,
    ListingFailedError,
    NavigatorBusyError,
)
from ssh_browser.models.remote import PARENT_ENTRY, Viewport
from ssh_browser.services.download import DownloadCoordinator
from ssh_browser.services.navigation import DirectoryNavigator, EnterParent, Resize, SelectEntry
from ssh_browser.tests.constants import HOME


@pytest.fixture
def downloader() -> Mock:
    downloader = Mock(spec=DownloadCoordinator)
    downloader.download.return_value = 12
    return downloader


@pytest.fixture
def navigator(session, downloader) -> DirectoryNavigator:
    return DirectoryNavigator(session, downloader)


def _names(navigator: DirectoryNavigator) -> list[str]:
    return [item.name for item in navigator.state.items]


def test_open_without_path_starts_in_login_directory(navigator, mock_sftp) -> None:
    outcome = navigator.open()

    assert outcome.state.current_path == HOME
    assert outcome.state is navigator.state
    mock_sftp.normalize.assert_called_once_with(".")


def test_listing_sorts_directories_first(navigator) -> None:
    navigator.open(HOME)

    assert _names(navigator) == ["..", "Archive", "docs", "notes.txt"]
    assert navigator.state.items[0] is PARENT_ENTRY


def test_root_listing_has_no_parent_marker(navigator) -> None:
    navigator.open("/")

    assert _names(navigator) == ["etc", "home"]
    assert navigator.state.is_root


def test_enter_parent_at_root_is_idempotent(navigator, mock_sftp) -> None:
    navigator.open("/")
    before = navigator.state
    calls = mock_sftp.listdir_attr.call_count

    outcome = navigator.enter_parent()

    assert outcome.state is before
    assert outcome.status == ""
    assert navigator.state == before
    assert mock_sftp.listdir_attr.call_count == calls


def test_enter_parent_lists_canonical_parent(navigator) -> None:
    navigator.open(HOME)

    outcome = navigator.handle(EnterParent())

    assert outcome.state.current_path == "/home"
    assert outcome.status == "Entered .."
    assert _names(navigator) == ["..", "user"]


def test_select_directory_enters_it(navigator) -> None:
    navigator.open(HOME)

    outcome = navigator.select_entry(2)

    assert outcome.status == "Entered docs"
    assert outcome.state.current_path == f"{HOME}/docs"
    assert outcome.state.items[0].is_parent
    assert _names(navigator) == ["..", "report.pdf"]


def test_select_parent_marker_goes_up(navigator) -> None:
    navigator.open(f"{HOME}/docs")

    outcome = navigator.handle(SelectEntry(0))

    assert navigator.state.current_path == HOME
    assert outcome.status == "Entered .."


def test_failed_listing_keeps_state(navigator, mock_sftp) -> None:
    navigator.open(HOME)
    before = navigator.state
    mock_sftp.listdir_attr.side_effect = PermissionError(13, "Permission denied")

    with pytest.raises(ListingFailedError) as exc_info:
        navigator.select_entry(2)

    assert exc_info.value.path == f"{HOME}/docs"
    assert navigator.state == before


def test_failed_path_resolution_keeps_state(navigator, mock_sftp) -> None:
    navigator.open(HOME)
    before = navigator.state
    mock_sftp.normalize.side_effect = OSError("Socket is closed")

    with pytest.raises(ListingFailedError):
        navigator.enter_parent()

    assert navigator.state == before


def test_sftp_protocol_error_while_listing_keeps_state(navigator, mock_sftp) -> None:
    navigator.open(HOME)
    before = navigator.state
    mock_sftp.listdir_attr.side_effect = paramiko.SFTPError("Expected name response")

    with pytest.raises(ListingFailedError, match="Expected name response"):
        navigator.select_entry(2)

    assert navigator.state == before


def test_sftp_protocol_error_while_resolving_keeps_state(navigator, mock_sftp) -> None:
    navigator.open(HOME)
    before = navigator.state
    mock_sftp.normalize.side_effect = paramiko.SFTPError("Expected name response")

    with pytest.raises(ListingFailedError):
        navigator.enter_parent()

    assert navigator.state == before


def test_open_missing_directory_raises(navigator) -> None:
    with pytest.raises(ListingFailedError):
        navigator.open("/nope")


def test_select_file_delegates_to_downloader(navigator, downloader) -> None:
    navigator.open(HOME)
    before = navigator.state

    outcome = navigator.select_entry(3)

    downloader.download.assert_called_once_with(HOME, "notes.txt")
    assert outcome.status == "Downloading notes.txt"
    assert outcome.bytes_downloaded == 12
    assert outcome.state is before


def test_download_error_propagates(navigator, downloader) -> None:
    navigator.open(HOME)
    downloader.download.side_effect = DownloadError("Opening remote file failed", path="x")

    with pytest.raises(DownloadError):
        navigator.select_entry(3)


@pytest.mark.parametrize("index", [-1, 4, 100])
def test_select_out_of_range_raises(navigator, index: int) -> None:
    navigator.open(HOME)

    with pytest.raises(InvalidSelectionError) as exc_info:
        navigator.select_entry(index)

    assert exc_info.value.index == index


def test_resize_only_records_viewport(navigator, mock_sftp) -> None:
    navigator.open(HOME)
    before = navigator.state
    calls = mock_sftp.listdir_attr.call_count

    outcome = navigator.handle(Resize(120, 40))

    assert navigator.viewport == Viewport(width=120, height=40)
    assert outcome.state is before
    assert mock_sftp.listdir_attr.call_count == calls


def test_reentrant_event_is_refused(navigator, downloader) -> None:
    navigator.open(HOME)
    downloader.download.side_effect = lambda *_: navigator.enter_parent()

    with pytest.raises(NavigatorBusyError):
        navigator.select_entry(3)

    assert navigator.state.current_path == HOME
    navigator.enter_parent()
    assert navigator.state.current_path == "/home"


def test_unknown_event_raises_type_error(navigator) -> None:
    with pytest.raises(TypeError):
        navigator.handle("up")
