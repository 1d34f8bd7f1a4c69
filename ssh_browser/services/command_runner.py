"""
Remote command execution over a short-lived SSH channel.
"""

import paramiko
import structlog

from ssh_browser.exceptions import ChannelError, NonZeroExitError
from ssh_browser.services.connector import Session

logger = structlog.get_logger(__name__)

_READ_SIZE = 32768


class RemoteCommandRunner:
    """
    Runs one command per call on its own channel.

    No pseudo-terminal is requested, so interactive prompts are not supported.
    Standard error is merged into the captured output.
    """

    def __init__(self, session: Session, *, timeout: float | None = None) -> None:
        """
        Args:
            session: Connected session.
            timeout: Channel open and read timeout in seconds. None waits forever.
        """
        self._session = session
        self._timeout = timeout

    def run(self, command: str) -> str:
        """
        Execute a command and capture its output.

        Args:
            command: Command line passed to the remote shell.

        Returns:
            Combined stdout/stderr decoded as UTF-8.

        Raises:
            ChannelError: If the channel cannot be opened, breaks down, or the
                server reports no exit status.
            NonZeroExitError: If the command exits non-zero; carries the output.
        """
        with self._session.lock:
            try:
                channel = self._session.transport.open_session(timeout=self._timeout)
            except (paramiko.SSHException, OSError, EOFError) as e:
                msg = f"Opening command channel failed: {e}"
                raise ChannelError(msg) from e

            try:
                channel.settimeout(self._timeout)
                channel.set_combine_stderr(True)
                channel.exec_command(command)
                output = _read_all(channel)
                exit_code = channel.recv_exit_status()
            except (paramiko.SSHException, OSError, EOFError) as e:
                msg = f"Command channel failed: {e}"
                raise ChannelError(msg) from e
            finally:
                channel.close()

        text = output.decode("utf-8", errors="replace")
        if exit_code == -1:
            msg = "Remote command ended without an exit status"
            raise ChannelError(msg)
        if exit_code != 0:
            logger.warning("Remote command failed", exit_code=exit_code)
            msg = f"Remote command exited with status {exit_code}"
            raise NonZeroExitError(msg, exit_code=exit_code, output=text)

        logger.debug("Remote command finished", output_bytes=len(output))
        return text


def _read_all(channel: paramiko.Channel) -> bytes:
    chunks = []
    while data := channel.recv(_READ_SIZE):
        chunks.append(data)
    return b"".join(chunks)
