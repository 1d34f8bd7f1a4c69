"""
File download service.

Streams a remote file over SFTP into a local file.
"""

import posixpath
from collections.abc import Callable
from pathlib import Path

import paramiko
import structlog

from ssh_browser.exceptions import CopyFailedError, CreateLocalError, OpenRemoteError
from ssh_browser.models.remote import DownloadTask
from ssh_browser.services.connector import Session

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[DownloadTask], None]


class DownloadCoordinator:
    """
    Downloads single remote files into a local directory.

    Existing local files are overwritten. A transfer that fails part way leaves
    the partially written file in place; callers that want it gone must remove it.
    """

    def __init__(
        self,
        session: Session,
        *,
        destination_dir: Path | str = ".",
        chunk_size: int = 32768,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """
        Args:
            session: Connected session.
            destination_dir: Default local directory for downloads.
            chunk_size: Bytes requested per remote read.
            on_progress: Called after every chunk with the running task.
        """
        self._session = session
        self._destination_dir = Path(destination_dir)
        self._chunk_size = chunk_size
        self._on_progress = on_progress
        self._current: DownloadTask | None = None
        self._last: DownloadTask | None = None

    @property
    def current_task(self) -> DownloadTask | None:
        """The download in progress, if any."""
        return self._current

    @property
    def last_task(self) -> DownloadTask | None:
        """The most recent download, finished or failed."""
        return self._last

    def download(
        self,
        remote_dir: str,
        file_name: str,
        destination_dir: Path | str | None = None,
    ) -> int:
        """
        Copy `remote_dir/file_name` to `destination_dir/<base name>`.

        Args:
            remote_dir: Remote directory holding the file.
            file_name: Name of the file inside `remote_dir`.
            destination_dir: Local directory; defaults to the coordinator's directory.

        Returns:
            Number of bytes written.

        Raises:
            OpenRemoteError: If the remote file cannot be opened.
            CreateLocalError: If the local file cannot be created.
            CopyFailedError: If reading or writing fails mid-transfer.
        """
        source = posixpath.join(remote_dir, file_name)
        target_dir = Path(destination_dir) if destination_dir is not None else self._destination_dir
        destination = target_dir / posixpath.basename(file_name)

        with self._session.lock:
            try:
                remote = self._session.sftp.open(source, "rb")
            except (OSError, paramiko.SSHException, paramiko.SFTPError) as e:
                msg = f"Opening remote file failed: {e}"
                raise OpenRemoteError(msg, path=source) from e

            with remote:
                try:
                    local = destination.open("wb")
                except OSError as e:
                    msg = f"Creating local file failed: {e}"
                    raise CreateLocalError(msg, path=str(destination)) from e

                with local:
                    task = DownloadTask(
                        source_path=source,
                        destination_path=destination,
                        total_bytes=self._remote_size(remote, source),
                    )
                    self._current = self._last = task
                    logger.info("Downloading", source=source, destination=str(destination))
                    try:
                        self._copy(remote, local, task)
                    finally:
                        self._current = None

        logger.info("Download finished", source=source, bytes=task.bytes_transferred)
        return task.bytes_transferred

    def _copy(self, remote: paramiko.SFTPFile, local, task: DownloadTask) -> None:
        if task.total_bytes:
            remote.prefetch(task.total_bytes)
        try:
            while chunk := remote.read(self._chunk_size):
                local.write(chunk)
                task.bytes_transferred += len(chunk)
                if self._on_progress is not None:
                    self._on_progress(task)
        except (OSError, paramiko.SSHException, paramiko.SFTPError) as e:
            logger.warning(
                "Download interrupted",
                source=task.source_path,
                bytes=task.bytes_transferred,
                exc_info=e,
            )
            msg = f"Copy failed: {e}"
            raise CopyFailedError(
                msg, path=task.source_path, bytes_written=task.bytes_transferred
            ) from e

    @staticmethod
    def _remote_size(remote: paramiko.SFTPFile, source: str) -> int | None:
        try:
            return remote.stat().st_size
        except (OSError, paramiko.SSHException, paramiko.SFTPError) as e:
            logger.debug("Remote size unavailable", source=source, exc_info=e)
            return None
