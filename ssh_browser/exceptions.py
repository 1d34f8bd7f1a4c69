"""
ssh-browser exception hierarchy.

All exceptions inherit from BrowserError for easy catching.
"""

from typing import Any


class BrowserError(Exception):
    """Base exception for all ssh_browser errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class KeyLoadError(BrowserError):
    """Private key could not be turned into a signing credential."""


class MalformedEnvelopeError(KeyLoadError):
    """No valid PEM envelope found in the key data."""


class DecryptionFailedError(KeyLoadError):
    """Wrong passphrase or corrupt encrypted key."""


class UnsupportedKeyTypeError(KeyLoadError):
    """Envelope label is not one of the supported private-key encodings."""

    def __init__(self, message: str, *, key_type: str) -> None:
        super().__init__(message, key_type=key_type)
        self.key_type = key_type


class KeyDecodeError(KeyLoadError):
    """Key body does not parse as the declared key type."""

    def __init__(self, message: str, *, key_type: str | None = None) -> None:
        super().__init__(message, key_type=key_type)
        self.key_type = key_type


class SignerConstructionError(KeyLoadError):
    """Parsed key cannot be used as an SSH signer."""


class KeyFileUnreadableError(KeyLoadError):
    """Key file could not be read from disk."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, path=path)
        self.path = path


class TrustError(BrowserError):
    """Trusted hosts registry problem."""


class RegistryUnreadableError(TrustError):
    """known_hosts file missing, unreadable or unparseable."""

    def __init__(self, message: str, *, path: str, line: int | None = None) -> None:
        super().__init__(message, path=path, line=line)
        self.path = path
        self.line = line


class ConnectError(BrowserError):
    """Establishing the SSH session failed."""


class DialError(ConnectError):
    """TCP connection or SSH handshake failed."""

    def __init__(self, message: str, *, address: str) -> None:
        super().__init__(message, address=address)
        self.address = address


class AuthError(ConnectError):
    """Server rejected public key authentication."""

    def __init__(self, message: str, *, username: str) -> None:
        super().__init__(message, username=username)
        self.username = username


class HostKeyRejectedError(ConnectError):
    """Server host key is not in the trusted hosts registry."""

    def __init__(self, message: str, *, host: str, fingerprint: str) -> None:
        super().__init__(message, host=host, fingerprint=fingerprint)
        self.host = host
        self.fingerprint = fingerprint


class SubsessionError(ConnectError):
    """SFTP sub-session could not be opened on the transport."""


class CommandError(BrowserError):
    """Remote command execution failed."""


class ChannelError(CommandError):
    """Command channel could not be opened or broke down."""


class NonZeroExitError(CommandError):
    """Remote command exited with a non-zero status."""

    def __init__(self, message: str, *, exit_code: int, output: str) -> None:
        super().__init__(message, exit_code=exit_code)
        self.exit_code = exit_code
        self.output = output


class NavigationError(BrowserError):
    """Navigation event could not be applied."""


class ListingFailedError(NavigationError):
    """Remote directory could not be resolved or listed."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, path=path)
        self.path = path


class InvalidSelectionError(NavigationError):
    """Selected index does not point at a displayed item."""

    def __init__(self, message: str, *, index: int) -> None:
        super().__init__(message, index=index)
        self.index = index


class NavigatorBusyError(NavigationError):
    """An event arrived while another one was still being handled."""

    def __init__(self, message: str = "Navigation event already in progress") -> None:
        super().__init__(message)


class DownloadError(BrowserError):
    """File download failed."""

    def __init__(self, message: str, *, path: str, **context: Any) -> None:
        super().__init__(message, path=path, **context)
        self.path = path


class OpenRemoteError(DownloadError):
    """Remote file could not be opened for reading."""


class CreateLocalError(DownloadError):
    """Local destination file could not be created."""


class CopyFailedError(DownloadError):
    """Transfer broke down mid-copy. The partial local file is left in place."""

    def __init__(self, message: str, *, path: str, bytes_written: int) -> None:
        super().__init__(message, path=path, bytes_written=bytes_written)
        self.bytes_written = bytes_written
