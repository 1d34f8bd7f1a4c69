"""
ssh-browser client facade.

Wires key loading, host verification and session setup together and hands out
the navigator, downloader and command runner bound to the resulting session.
"""

from typing import Self

import structlog

from ssh_browser.config import BrowserConfig
from ssh_browser.crypto.key_loader import KeyCredentialLoader
from ssh_browser.services.command_runner import RemoteCommandRunner
from ssh_browser.services.connector import Session, SessionConnector
from ssh_browser.services.download import DownloadCoordinator
from ssh_browser.services.navigation import DirectoryNavigator
from ssh_browser.services.trust import HostTrustVerifier

logger = structlog.get_logger(__name__)


class RemoteBrowserClient:
    """
    Client for browsing one remote host.

    Example:
        ```python
        config = BrowserConfig(host="example.com", username="alice")
        with RemoteBrowserClient(config) as client:
            print(client.runner.run("uname -a"))
            client.navigator.open()
        ```

    Args:
        config: Connection and transfer settings.
        loader: Key loader, replaceable for testing.
        connector: Session connector, replaceable for testing.
    """

    def __init__(
        self,
        config: BrowserConfig,
        *,
        loader: KeyCredentialLoader | None = None,
        connector: SessionConnector | None = None,
    ) -> None:
        self._config = config
        self._loader = loader or KeyCredentialLoader()
        self._connector = connector or SessionConnector(timeout=config.connect_timeout)

        self._session: Session | None = None
        self._downloader: DownloadCoordinator | None = None
        self._navigator: DirectoryNavigator | None = None
        self._runner: RemoteCommandRunner | None = None

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def connect(self) -> Session:
        """
        Load the key and trusted hosts, then open the session.

        Calling it again on a connected client returns the existing session.

        Raises:
            KeyLoadError: If the key file cannot be turned into a credential.
            RegistryUnreadableError: If the known_hosts file cannot be loaded.
            ConnectError: If the session cannot be established.
        """
        if self._session is not None:
            return self._session

        config = self._config
        credential = self._loader.load_file(config.key_path, config.passphrase)
        verifier = HostTrustVerifier.load(config.known_hosts_path)
        session = self._connector.connect(config.endpoint, credential, verifier)

        self._session = session
        self._downloader = DownloadCoordinator(
            session,
            destination_dir=config.download_dir,
            chunk_size=config.chunk_size,
        )
        self._navigator = DirectoryNavigator(session, self._downloader)
        self._runner = RemoteCommandRunner(session)
        return session

    def close(self) -> None:
        """Close the session and drop the bound services."""
        if self._session is not None:
            self._session.close()
            logger.debug("Client closed", endpoint=str(self._config.endpoint))
        self._session = None
        self._downloader = None
        self._navigator = None
        self._runner = None

    @property
    def is_connected(self) -> bool:
        return self._session is not None and self._session.is_active

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Client not connected")
        return self._session

    @property
    def navigator(self) -> DirectoryNavigator:
        if self._navigator is None:
            raise RuntimeError("Client not connected")
        return self._navigator

    @property
    def downloader(self) -> DownloadCoordinator:
        if self._downloader is None:
            raise RuntimeError("Client not connected")
        return self._downloader

    @property
    def runner(self) -> RemoteCommandRunner:
        if self._runner is None:
            raise RuntimeError("Client not connected")
        return self._runner
