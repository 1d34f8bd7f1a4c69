"""
ssh-browser: terminal remote file browser over SSH.

Example:
    ```python
    from ssh_browser import BrowserConfig, RemoteBrowserClient

    config = BrowserConfig(host="example.com", username="alice", passphrase="secret123")
    with RemoteBrowserClient(config) as client:
        print(client.runner.run("echo hi"))

        state = client.navigator.open("/var/log").state
        for item in state.items:
            print(item.name)

        client.downloader.download(state.current_path, "syslog")
    ```
"""

from ssh_browser.client import RemoteBrowserClient
from ssh_browser.config import BrowserConfig
from ssh_browser.exceptions import (
    AuthError,
    BrowserError,
    ChannelError,
    CommandError,
    ConnectError,
    CopyFailedError,
    CreateLocalError,
    DecryptionFailedError,
    DialError,
    DownloadError,
    HostKeyRejectedError,
    InvalidSelectionError,
    KeyDecodeError,
    KeyFileUnreadableError,
    KeyLoadError,
    ListingFailedError,
    MalformedEnvelopeError,
    NavigationError,
    NavigatorBusyError,
    NonZeroExitError,
    OpenRemoteError,
    RegistryUnreadableError,
    SignerConstructionError,
    SubsessionError,
    TrustError,
    UnsupportedKeyTypeError,
)
from ssh_browser.models.remote import Endpoint, NavigationState, RemoteEntry

__version__ = "0.1.0"

__all__ = [
    # Main client
    "RemoteBrowserClient",
    "BrowserConfig",
    # Models
    "Endpoint",
    "NavigationState",
    "RemoteEntry",
    # Exceptions
    "BrowserError",
    "KeyLoadError",
    "MalformedEnvelopeError",
    "DecryptionFailedError",
    "UnsupportedKeyTypeError",
    "KeyDecodeError",
    "SignerConstructionError",
    "KeyFileUnreadableError",
    "TrustError",
    "RegistryUnreadableError",
    "ConnectError",
    "DialError",
    "AuthError",
    "HostKeyRejectedError",
    "SubsessionError",
    "CommandError",
    "ChannelError",
    "NonZeroExitError",
    "NavigationError",
    "ListingFailedError",
    "InvalidSelectionError",
    "NavigatorBusyError",
    "DownloadError",
    "OpenRemoteError",
    "CreateLocalError",
    "CopyFailedError",
]
