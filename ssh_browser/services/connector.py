"""
SSH session establishment.

Dials the endpoint, verifies the server host key, authenticates with a key
credential and opens the SFTP sub-session on the same transport.
"""

import socket
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Self

import paramiko
import structlog

from ssh_browser.crypto.fingerprint import fingerprint_sha256
from ssh_browser.exceptions import (
    AuthError,
    DialError,
    HostKeyRejectedError,
    SubsessionError,
)
from ssh_browser.models.keys import Credential
from ssh_browser.models.remote import Endpoint

logger = structlog.get_logger(__name__)

HostKeyVerifier = Callable[[str, paramiko.PKey], bool]


@dataclass(eq=False, kw_only=True)
class Session:
    """
    Authenticated transport plus its SFTP sub-session.

    Every list, download or command operation holds `lock` for its duration, so
    only one logical operation runs against the session at a time. A closed
    session cannot be reopened; connect again instead.
    """

    endpoint: Endpoint
    transport: paramiko.Transport
    sftp: paramiko.SFTPClient
    lock: threading.RLock = field(default_factory=threading.RLock)

    @property
    def is_active(self) -> bool:
        return self.transport.is_active()

    def close(self) -> None:
        """Close the SFTP client, then the transport. Idempotent."""
        with self.lock:
            try:
                self.sftp.close()
            finally:
                self.transport.close()
        logger.debug("Session closed", endpoint=str(self.endpoint))

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class SessionConnector:
    """Performs a single connection attempt per `connect` call; no retries."""

    def __init__(self, *, timeout: float = 10.0) -> None:
        """
        Args:
            timeout: TCP connect, handshake and authentication timeout in seconds.
        """
        self._timeout = timeout

    def connect(
        self,
        endpoint: Endpoint,
        credential: Credential,
        verifier: HostKeyVerifier,
    ) -> Session:
        """
        Establish an authenticated session.

        Args:
            endpoint: Remote user, host and port.
            credential: Signing credential for public key authentication.
            verifier: Host key check; returning False aborts the connection.

        Returns:
            Session with an open SFTP sub-session.

        Raises:
            DialError: If the TCP connection or SSH handshake fails.
            HostKeyRejectedError: If the verifier rejects the server key.
            AuthError: If the server rejects the credential.
            SubsessionError: If the SFTP sub-session cannot be opened.
        """
        address = f"{endpoint.host}:{endpoint.port}"
        logger.info("Connecting", address=address, username=endpoint.username)
        try:
            sock = socket.create_connection((endpoint.host, endpoint.port), timeout=self._timeout)
        except OSError as e:
            msg = f"Dial failed: {e}"
            raise DialError(msg, address=address) from e

        transport = paramiko.Transport(sock)
        try:
            self._handshake(transport, address)
            self._verify_host_key(transport, endpoint, verifier)
            self._authenticate(transport, endpoint, credential)
            sftp = self._open_sftp(transport)
        except BaseException:
            transport.close()
            raise

        logger.info("Connected", address=address, username=endpoint.username)
        return Session(endpoint=endpoint, transport=transport, sftp=sftp)

    def _handshake(self, transport: paramiko.Transport, address: str) -> None:
        try:
            transport.start_client(timeout=self._timeout)
        except (paramiko.SSHException, OSError, EOFError) as e:
            msg = f"SSH handshake failed: {e}"
            raise DialError(msg, address=address) from e

    @staticmethod
    def _verify_host_key(
        transport: paramiko.Transport, endpoint: Endpoint, verifier: HostKeyVerifier
    ) -> None:
        server_key = transport.get_remote_server_key()
        if not verifier(endpoint.host_id, server_key):
            msg = f"Host key for {endpoint.host_id} is not trusted"
            raise HostKeyRejectedError(
                msg, host=endpoint.host_id, fingerprint=fingerprint_sha256(server_key)
            )

    def _authenticate(
        self, transport: paramiko.Transport, endpoint: Endpoint, credential: Credential
    ) -> None:
        transport.auth_timeout = self._timeout
        try:
            transport.auth_publickey(endpoint.username, credential.signer)
        except paramiko.AuthenticationException as e:
            msg = f"Public key authentication failed: {e}"
            raise AuthError(msg, username=endpoint.username) from e
        except (paramiko.SSHException, OSError, EOFError) as e:
            msg = f"Authentication aborted: {e}"
            raise AuthError(msg, username=endpoint.username) from e

        if not transport.is_authenticated():
            msg = "Server requires further authentication"
            raise AuthError(msg, username=endpoint.username)
        logger.debug(
            "Authenticated", username=endpoint.username, fingerprint=credential.fingerprint
        )

    @staticmethod
    def _open_sftp(transport: paramiko.Transport) -> paramiko.SFTPClient:
        try:
            sftp = paramiko.SFTPClient.from_transport(transport)
        except (paramiko.SSHException, paramiko.SFTPError, OSError, EOFError) as e:
            msg = f"Opening SFTP sub-session failed: {e}"
            raise SubsessionError(msg) from e
        if sftp is None:
            msg = "Opening SFTP sub-session failed: no channel"
            raise SubsessionError(msg)
        return sftp
