"""
ssh-browser configuration.
"""

from dataclasses import dataclass, field
from pathlib import Path

from ssh_browser.models.remote import Endpoint

DEFAULT_KNOWN_HOSTS = Path("~/.ssh/known_hosts")
DEFAULT_KEY_PATH = Path("~/.ssh/id_rsa")


@dataclass(frozen=True, kw_only=True)
class BrowserConfig:
    """
    Attributes:
        host: Remote host name or address.
        username: Login name on the remote host.
        port: SSH port.
        key_path: Private key file used for authentication.
        passphrase: Passphrase for an encrypted key. Empty for plaintext keys.
        known_hosts_path: Trusted hosts registry in OpenSSH known_hosts format.
        connect_timeout: TCP connect and SSH handshake timeout in seconds.
        start_path: Remote directory to open first. None means the login directory.
        download_dir: Local directory downloads are written to.
        chunk_size: Read size for remote file transfers in bytes.
        tick_interval: Seconds between UI progress refreshes.
    """

    host: str
    username: str
    port: int = 22
    key_path: Path = DEFAULT_KEY_PATH
    passphrase: str = field(default="", repr=False)
    known_hosts_path: Path = DEFAULT_KNOWN_HOSTS
    connect_timeout: float = 10.0
    start_path: str | None = None
    download_dir: Path = Path(".")
    chunk_size: int = 32768
    tick_interval: float = 0.1

    def __post_init__(self) -> None:
        if not self.host:
            msg = "host must not be empty"
            raise ValueError(msg)
        if not self.username:
            msg = "username must not be empty"
            raise ValueError(msg)
        if not 0 < self.port < 65536:
            msg = "port must be between 1 and 65535"
            raise ValueError(msg)
        if self.connect_timeout <= 0:
            msg = "connect_timeout must be positive"
            raise ValueError(msg)
        if self.chunk_size <= 0:
            msg = "chunk_size must be positive"
            raise ValueError(msg)
        if self.tick_interval <= 0:
            msg = "tick_interval must be positive"
            raise ValueError(msg)

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint(username=self.username, host=self.host, port=self.port)
