"""
Command line entry point.

Parses arguments into a BrowserConfig, connects, then either runs a single
remote command or starts the terminal UI.
"""

import argparse
import getpass
import os
import sys
from contextlib import ExitStack
from pathlib import Path

import structlog

from ssh_browser.client import RemoteBrowserClient
from ssh_browser.config import DEFAULT_KEY_PATH, DEFAULT_KNOWN_HOSTS, BrowserConfig
from ssh_browser.exceptions import BrowserError, CommandError, NonZeroExitError
from ssh_browser.log_setup import configure_logging, silence_logging
from ssh_browser.ui.app import RemoteBrowserApp

logger = structlog.get_logger(__name__)

PASSPHRASE_ENV = "SSH_BROWSER_PASSPHRASE"


def _port(value: str) -> int:
    """argparse type for TCP ports."""
    try:
        port = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from exc
    if not 0 < port < 65536:
        raise argparse.ArgumentTypeError("port must be between 1 and 65535")
    return port


def split_destination(destination: str) -> tuple[str, str]:
    """Split "user@host" into (user, host). The local user name is used when "user@" is missing."""
    username, _, host = destination.rpartition("@")
    return username or getpass.getuser(), host


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssh-browser",
        description="Browse a remote file system over SSH and download files.",
    )
    parser.add_argument("destination", metavar="USER@HOST", help="Remote login and host.")
    parser.add_argument("-p", "--port", type=_port, default=22, help="SSH port (default: 22).")
    parser.add_argument(
        "-i",
        "--identity",
        type=Path,
        default=DEFAULT_KEY_PATH,
        help=f"Private key file (default: {DEFAULT_KEY_PATH}).",
    )
    parser.add_argument(
        "--known-hosts",
        type=Path,
        default=DEFAULT_KNOWN_HOSTS,
        help=f"Trusted hosts file (default: {DEFAULT_KNOWN_HOSTS}).",
    )
    parser.add_argument(
        "--ask-passphrase",
        action="store_true",
        help=f"Prompt for the key passphrase instead of reading ${PASSPHRASE_ENV}.",
    )
    parser.add_argument("--path", help="Remote directory to open first (default: login directory).")
    parser.add_argument("--run", metavar="CMD", help="Run CMD remotely, print its output and exit.")
    parser.add_argument("--log-file", type=Path, help="Write logs to this file.")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More log output (repeatable)."
    )
    return parser


def config_from_args(args: argparse.Namespace, passphrase: str) -> BrowserConfig:
    username, host = split_destination(args.destination)
    return BrowserConfig(
        host=host,
        username=username,
        port=args.port,
        key_path=args.identity,
        passphrase=passphrase,
        known_hosts_path=args.known_hosts,
        start_path=args.path,
    )


def run_command(client: RemoteBrowserClient, command: str) -> int:
    """Run one remote command and mirror its output and exit status."""
    try:
        output = client.runner.run(command)
    except NonZeroExitError as e:
        sys.stdout.write(e.output)
        print(f"ssh-browser: {e}", file=sys.stderr)
        return e.exit_code if 0 < e.exit_code < 256 else 1
    except CommandError as e:
        print(f"ssh-browser: {e}", file=sys.stderr)
        return 1
    sys.stdout.write(output)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.ask_passphrase:
        passphrase = getpass.getpass("Key passphrase: ")
    else:
        passphrase = os.environ.get(PASSPHRASE_ENV, "")

    try:
        config = config_from_args(args, passphrase)
    except ValueError as e:
        parser.error(str(e))

    with ExitStack() as stack:
        if args.log_file is not None:
            try:
                stream = stack.enter_context(args.log_file.open("a", encoding="utf-8"))
            except OSError as e:
                print(f"ssh-browser: cannot open log file: {e}", file=sys.stderr)
                return 1
        else:
            stream = sys.stderr
        configure_logging(stream, verbosity=args.verbose)

        client = RemoteBrowserClient(config)
        try:
            client.connect()
        except BrowserError as e:
            logger.debug("Startup failed", exc_info=e)
            print(f"ssh-browser: {e}", file=sys.stderr)
            return 1
        stack.callback(client.close)

        if args.run is not None:
            return run_command(client, args.run)

        if args.log_file is None:
            silence_logging()
        app = RemoteBrowserApp(
            client.navigator,
            client.downloader,
            tick_interval=config.tick_interval,
            start_path=config.start_path,
        )
        app.run()
    return 0
