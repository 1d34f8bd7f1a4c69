"""
Remote session services for ssh-browser.
"""

from ssh_browser.services.command_runner import RemoteCommandRunner
from ssh_browser.services.connector import Session, SessionConnector
from ssh_browser.services.download import DownloadCoordinator
from ssh_browser.services.navigation import (
    DirectoryNavigator,
    EnterParent,
    Resize,
    SelectEntry,
)
from ssh_browser.services.trust import HostTrustVerifier

__all__ = [
    "DirectoryNavigator",
    "DownloadCoordinator",
    "EnterParent",
    "HostTrustVerifier",
    "RemoteCommandRunner",
    "Resize",
    "SelectEntry",
    "Session",
    "SessionConnector",
]
