from collections.abc import Callable
from unittest.mock import Mock

import paramiko
import pytest

from ssh_browser.models.keys import Credential
from ssh_browser.models.remote import Endpoint
from ssh_browser.services.connector import Session
from ssh_browser.tests.constants import HOST, USERNAME
from ssh_browser.tests.services.fakes import listdir_attr, normalize


@pytest.fixture
def mock_transport() -> Mock:
    transport = Mock(spec=paramiko.Transport)
    transport.is_active.return_value = True
    return transport


@pytest.fixture
def mock_sftp() -> Mock:
    sftp = Mock(spec=paramiko.SFTPClient)
    sftp.normalize.side_effect = normalize
    sftp.listdir_attr.side_effect = listdir_attr
    return sftp


@pytest.fixture
def endpoint() -> Endpoint:
    return Endpoint(username=USERNAME, host=HOST)


@pytest.fixture
def session(endpoint, mock_transport, mock_sftp) -> Session:
    return Session(endpoint=endpoint, transport=mock_transport, sftp=mock_sftp)


@pytest.fixture
def credential() -> Credential:
    return Credential(signer=Mock(spec=paramiko.PKey), algorithm="ssh-rsa", fingerprint="SHA256:abc")


@pytest.fixture
def make_channel() -> Callable[..., Mock]:
    def _make(output: bytes = b"", exit_code: int = 0) -> Mock:
        channel = Mock(spec=paramiko.Channel)
        channel.recv.side_effect = [output, b""] if output else [b""]
        channel.recv_exit_status.return_value = exit_code
        return channel

    return _make
