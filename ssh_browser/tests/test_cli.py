from collections.abc import Iterator
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from ssh_browser.cli import PASSPHRASE_ENV, build_parser, config_from_args, main, split_destination
from ssh_browser.exceptions import AuthError, ChannelError, NonZeroExitError


@pytest.fixture
def client_class() -> Iterator[Mock]:
    with patch("ssh_browser.cli.RemoteBrowserClient") as client_class:
        yield client_class


@pytest.fixture
def app_class() -> Iterator[Mock]:
    with patch("ssh_browser.cli.RemoteBrowserApp") as app_class:
        yield app_class


def test_split_destination() -> None:
    assert split_destination("alice@example.com") == ("alice", "example.com")
    assert split_destination("first.last@corp@example.com") == ("first.last@corp", "example.com")


def test_split_destination_defaults_to_local_user() -> None:
    with patch("ssh_browser.cli.getpass.getuser", return_value="local"):
        assert split_destination("example.com") == ("local", "example.com")


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["alice@example.com"])

    assert args.port == 22
    assert args.identity == Path("~/.ssh/id_rsa")
    assert args.known_hosts == Path("~/.ssh/known_hosts")
    assert args.run is None
    assert args.verbose == 0


def test_parser_rejects_bad_port() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["alice@example.com", "-p", "70000"])


def test_config_from_args() -> None:
    args = build_parser().parse_args(
        ["alice@example.com", "-p", "2222", "-i", "/keys/id_ecdsa", "--path", "/var/log"]
    )

    config = config_from_args(args, "secret123")

    assert config.username == "alice"
    assert config.host == "example.com"
    assert config.port == 2222
    assert config.key_path == Path("/keys/id_ecdsa")
    assert config.passphrase == "secret123"
    assert config.start_path == "/var/log"


def test_passphrase_from_environment(monkeypatch, client_class, app_class) -> None:
    monkeypatch.setenv(PASSPHRASE_ENV, "from-env")

    assert main(["alice@example.com"]) == 0

    config = client_class.call_args.args[0]
    assert config.passphrase == "from-env"


def test_ask_passphrase_prompts(monkeypatch, client_class, app_class) -> None:
    monkeypatch.setenv(PASSPHRASE_ENV, "from-env")

    with patch("ssh_browser.cli.getpass.getpass", return_value="typed") as prompt:
        main(["alice@example.com", "--ask-passphrase"])

    prompt.assert_called_once()
    assert client_class.call_args.args[0].passphrase == "typed"


def test_startup_failure_exits_with_status_1(client_class, app_class, capsys) -> None:
    client_class.return_value.connect.side_effect = AuthError("denied", username="alice")

    assert main(["alice@example.com"]) == 1

    assert "denied" in capsys.readouterr().err
    app_class.assert_not_called()


def test_startup_failure_is_logged_to_file(client_class, app_class, tmp_path, capsys) -> None:
    client_class.return_value.connect.side_effect = AuthError("denied", username="alice")
    log_file = tmp_path / "browser.log"

    assert main(["alice@example.com", "--log-file", str(log_file), "-vv"]) == 1

    assert "Startup failed" in log_file.read_text()


def test_run_prints_command_output(client_class, app_class, capsys) -> None:
    client = client_class.return_value
    client.runner.run.return_value = "hi\n"

    assert main(["alice@example.com", "--run", "echo hi"]) == 0

    client.runner.run.assert_called_once_with("echo hi")
    assert capsys.readouterr().out == "hi\n"
    client.close.assert_called_once()
    app_class.assert_not_called()


def test_run_mirrors_non_zero_exit(client_class, app_class, capsys) -> None:
    client_class.return_value.runner.run.side_effect = NonZeroExitError(
        "exited 3", exit_code=3, output="partial\n"
    )

    assert main(["alice@example.com", "--run", "false"]) == 3

    captured = capsys.readouterr()
    assert captured.out == "partial\n"
    assert "exited 3" in captured.err


def test_run_channel_failure(client_class, app_class) -> None:
    client_class.return_value.runner.run.side_effect = ChannelError("closed")

    assert main(["alice@example.com", "--run", "uptime"]) == 1


def test_interactive_mode_runs_app(client_class, app_class) -> None:
    client = client_class.return_value

    assert main(["alice@example.com", "--path", "/srv"]) == 0

    app_class.assert_called_once_with(
        client.navigator, client.downloader, tick_interval=0.1, start_path="/srv"
    )
    app_class.return_value.run.assert_called_once_with()
    client.close.assert_called_once()
