"""
Trusted hosts registry.

Loads an OpenSSH known_hosts file and decides whether a host key presented
during the SSH handshake is trusted.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

import paramiko
import structlog
from paramiko.hostkeys import HostKeyEntry, InvalidHostKey

from ssh_browser.crypto.fingerprint import fingerprint_sha256
from ssh_browser.exceptions import RegistryUnreadableError

logger = structlog.get_logger(__name__)

_REVOKED = "@revoked"
_CERT_AUTHORITY = "@cert-authority"


@dataclass(frozen=True, kw_only=True)
class TrustedHostEntry:
    """One known_hosts line."""

    patterns: tuple[str, ...]
    key: paramiko.PKey = field(repr=False)
    revoked: bool = False

    def matches_host(self, host_id: str) -> bool:
        """Apply the comma separated patterns; a matching "!" pattern always wins."""
        matched = False
        for pattern in self.patterns:
            negated = pattern.startswith("!")
            if _pattern_matches(pattern[1:] if negated else pattern, host_id):
                if negated:
                    return False
                matched = True
        return matched

    def matches_key(self, key: paramiko.PKey) -> bool:
        return self.key.asbytes() == key.asbytes()


class HostTrustVerifier:
    """
    Immutable trusted hosts registry, callable as a host key check.

    Example:
        verifier = HostTrustVerifier.load("~/.ssh/known_hosts")
        if not verifier("example.com", transport.get_remote_server_key()):
            ...
    """

    def __init__(self, entries: Iterable[TrustedHostEntry], *, path: Path | None = None) -> None:
        self._entries = tuple(entries)
        self._path = path

    @classmethod
    def load(cls, registry_path: str | Path) -> Self:
        """
        Load a known_hosts file.

        Args:
            registry_path: Path to the file. "~" is expanded.

        Returns:
            Verifier over the file's entries.

        Raises:
            RegistryUnreadableError: If the file cannot be read or a line cannot be parsed.
        """
        path = Path(registry_path).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read known hosts file: {e}"
            raise RegistryUnreadableError(msg, path=str(path)) from e

        entries = []
        for lineno, raw_line in enumerate(text.splitlines(), 1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            entry = _parse_line(line, lineno, path)
            if entry is not None:
                entries.append(entry)

        logger.debug("Loaded trusted hosts", path=str(path), entries=len(entries))
        return cls(entries, path=path)

    @property
    def entries(self) -> tuple[TrustedHostEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __call__(self, host_id: str, key: paramiko.PKey) -> bool:
        """
        Check a presented host key.

        Args:
            host_id: Host as spelled in known_hosts ("host" or "[host]:port").
            key: Key presented by the server.

        Returns:
            True if an entry for the host holds this key and it is not revoked.
        """
        candidates = [entry for entry in self._entries if entry.matches_host(host_id)]
        fingerprint = fingerprint_sha256(key)

        if any(entry.revoked and entry.matches_key(key) for entry in candidates):
            logger.warning("Host key is revoked", host=host_id, fingerprint=fingerprint)
            return False
        if any(not entry.revoked and entry.matches_key(key) for entry in candidates):
            logger.debug("Host key trusted", host=host_id, fingerprint=fingerprint)
            return True

        logger.warning(
            "Host key not trusted",
            host=host_id,
            fingerprint=fingerprint,
            known_entries=len(candidates),
        )
        return False


def _parse_line(line: str, lineno: int, path: Path) -> TrustedHostEntry | None:
    revoked = False
    if line.startswith("@"):
        marker, _, line = line.partition(" ")
        line = line.strip()
        if marker == _CERT_AUTHORITY:
            logger.debug("Skipping certificate authority line", line=lineno)
            return None
        if marker != _REVOKED:
            msg = f"Unknown known_hosts marker {marker!r}"
            raise RegistryUnreadableError(msg, path=str(path), line=lineno)
        revoked = True

    fields = line.split()
    if len(fields) < 3:
        msg = "Malformed known_hosts line"
        raise RegistryUnreadableError(msg, path=str(path), line=lineno)

    try:
        entry = HostKeyEntry.from_line(" ".join(fields), lineno)
    except (InvalidHostKey, paramiko.SSHException, ValueError) as e:
        msg = f"Invalid host key in known_hosts: {e}"
        raise RegistryUnreadableError(msg, path=str(path), line=lineno) from e

    if entry is None or entry.key is None:
        logger.warning("Skipping unsupported host key type", key_type=fields[1], line=lineno)
        return None
    return TrustedHostEntry(patterns=tuple(entry.hostnames), key=entry.key, revoked=revoked)


def _pattern_matches(pattern: str, host_id: str) -> bool:
    if pattern.startswith("|1|"):
        return paramiko.HostKeys.hash_host(host_id, pattern) == pattern
    regex = re.escape(pattern.lower()).replace(r"\*", ".*").replace(r"\?", ".")
    return re.fullmatch(regex, host_id.lower()) is not None
