"""
Domain models for ssh-browser.

These are mostly immutable (frozen) dataclasses representing the core domain concepts.
"""

from ssh_browser.models.keys import Credential, KeyEncryption, KeyMaterial, KeyType
from ssh_browser.models.remote import (
    PARENT_ENTRY,
    ROOT_PATH,
    DownloadTask,
    Endpoint,
    NavigationOutcome,
    NavigationState,
    RemoteEntry,
    Viewport,
)

__all__ = [
    # Keys
    "KeyType",
    "KeyEncryption",
    "KeyMaterial",
    "Credential",
    # Remote
    "Endpoint",
    "RemoteEntry",
    "NavigationState",
    "NavigationOutcome",
    "Viewport",
    "DownloadTask",
    "PARENT_ENTRY",
    "ROOT_PATH",
]
