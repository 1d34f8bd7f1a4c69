"""
Key-related domain models.
"""

from dataclasses import dataclass, field
from enum import StrEnum

import paramiko


class KeyType(StrEnum):
    """Key types accepted in legacy encrypted PEM blocks, keyed by PEM label."""

    RSA = "RSA PRIVATE KEY"
    EC = "EC PRIVATE KEY"
    DSA = "DSA PRIVATE KEY"


class KeyEncryption(StrEnum):
    """How a key file protects its contents."""

    NONE = "none"
    LEGACY_PEM = "legacy-pem"  # Proc-Type: 4,ENCRYPTED + DEK-Info headers
    PKCS8 = "pkcs8"  # ENCRYPTED PRIVATE KEY
    OPENSSH = "openssh"  # openssh-key-v1 with a cipher other than "none"


@dataclass(frozen=True, kw_only=True)
class KeyMaterial:
    """
    Decoded PEM envelope of a private key file.

    Attributes:
        raw: The complete key file contents.
        block: The PEM block itself, headers included.
        label: Envelope label, e.g. "RSA PRIVATE KEY".
        headers: RFC 1421 headers preceding the body.
        body: Base64-decoded body.
        encryption: Protection scheme detected for the body.
    """

    raw: bytes = field(repr=False)
    block: bytes = field(default=b"", repr=False)
    label: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = field(default=b"", repr=False)
    encryption: KeyEncryption = KeyEncryption.NONE

    @property
    def is_encrypted(self) -> bool:
        return self.encryption != KeyEncryption.NONE

    @property
    def key_type(self) -> KeyType | None:
        """Declared key type, or None for labels outside the closed set."""
        try:
            return KeyType(self.label)
        except ValueError:
            return None


@dataclass(frozen=True, kw_only=True)
class Credential:
    """
    Signing capability used for public key authentication.

    Attributes:
        signer: paramiko key able to sign the authentication request.
        algorithm: SSH key algorithm name, e.g. "ssh-rsa".
        fingerprint: OpenSSH style SHA256 fingerprint.
    """

    signer: paramiko.PKey = field(repr=False)
    algorithm: str
    fingerprint: str
