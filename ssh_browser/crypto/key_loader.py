"""
Private key loading.

Turns the contents of a key file into a paramiko signer:

1. decode the PEM envelope;
2. legacy Proc-Type encrypted blocks are decrypted with the passphrase by
   `cryptography` and the result must match its label (RSA, EC or DSA);
3. every other block is parsed as a complete private key, using the passphrase
   only for self-describing encrypted formats (PKCS#8, OpenSSH);
4. the resulting key is wrapped in the matching paramiko key class.
"""

import io
from pathlib import Path

import paramiko
import structlog
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from ssh_browser.crypto.fingerprint import fingerprint_sha256
from ssh_browser.crypto.pem import OPENSSH_LABEL, PKCS8_ENCRYPTED_LABEL, decode_envelope
from ssh_browser.exceptions import (
    DecryptionFailedError,
    KeyDecodeError,
    KeyFileUnreadableError,
    SignerConstructionError,
    UnsupportedKeyTypeError,
)
from ssh_browser.models.keys import Credential, KeyEncryption, KeyMaterial, KeyType

logger = structlog.get_logger(__name__)

Passphrase = str | bytes | bytearray | None

_COMPLETE_KEY_LABELS = frozenset(
    {
        KeyType.RSA.value,
        KeyType.EC.value,
        KeyType.DSA.value,
        "PRIVATE KEY",
        PKCS8_ENCRYPTED_LABEL,
        OPENSSH_LABEL,
    }
)
_PARSE_ERRORS = (ValueError, TypeError, UnsupportedAlgorithm)


class KeyCredentialLoader:
    """
    Loads SSH private keys into signing credentials.

    Example:
        loader = KeyCredentialLoader()
        credential = loader.load_file("~/.ssh/id_rsa", "secret123")
    """

    def load(self, key_bytes: bytes, passphrase: Passphrase = None) -> Credential:
        """
        Load a credential from key file contents.

        Args:
            key_bytes: Complete key file contents.
            passphrase: Passphrase for encrypted keys. Ignored for plaintext keys;
                an empty passphrase is tried like any other.

        Returns:
            Credential wrapping a paramiko signer.

        Raises:
            MalformedEnvelopeError: If no PEM block is found.
            DecryptionFailedError: If the passphrase is wrong or the key is corrupt.
            UnsupportedKeyTypeError: If the block label is not a supported key type.
            KeyDecodeError: If the key body does not parse as its declared type.
            SignerConstructionError: If the key cannot be used for SSH signing.
        """
        material = decode_envelope(key_bytes)
        password = _passphrase_bytes(passphrase) if material.is_encrypted else None
        if material.encryption == KeyEncryption.LEGACY_PEM:
            key = _load_legacy(material, password or b"")
        else:
            key = _parse_complete_key(material, password)

        credential = _to_credential(key)
        logger.debug(
            "Loaded private key",
            label=material.label,
            encryption=material.encryption.value,
            algorithm=credential.algorithm,
            fingerprint=credential.fingerprint,
        )
        return credential

    def load_file(self, path: str | Path, passphrase: Passphrase = None) -> Credential:
        """
        Read a key file and load it.

        Raises:
            KeyFileUnreadableError: If the file cannot be read.
            KeyLoadError: Any error raised by `load`.
        """
        key_path = Path(path).expanduser()
        try:
            data = key_path.read_bytes()
        except OSError as e:
            msg = f"Cannot read key file: {e.strerror or e}"
            raise KeyFileUnreadableError(msg, path=str(key_path)) from e
        return self.load(data, passphrase)


def check_key_type(label: str, key: PrivateKeyTypes) -> PrivateKeyTypes:
    """
    Check that a decrypted legacy key is of the type its PEM label declares.

    Raises:
        UnsupportedKeyTypeError: If the label is not RSA, EC or DSA.
        KeyDecodeError: If the key is of another type than the label declares.
    """
    try:
        key_type = KeyType(label)
    except ValueError:
        key_type = None

    match key_type:
        case KeyType.RSA:
            expected = rsa.RSAPrivateKey
        case KeyType.EC:
            expected = ec.EllipticCurvePrivateKey
        case KeyType.DSA:
            expected = dsa.DSAPrivateKey
        case _:
            msg = f"Parsing private key failed, unsupported key type {label!r}"
            raise UnsupportedKeyTypeError(msg, key_type=label)

    if not isinstance(key, expected):
        msg = f"Parsing {key_type.name} private key failed, found {type(key).__name__}"
        raise KeyDecodeError(msg, key_type=label)
    return key


def _passphrase_bytes(passphrase: Passphrase) -> bytes:
    if passphrase is None:
        return b""
    if isinstance(passphrase, str):
        return passphrase.encode("utf-8")
    return bytes(passphrase)


def _load_legacy(material: KeyMaterial, password: bytes) -> PrivateKeyTypes:
    if material.key_type is None:
        msg = f"Parsing private key failed, unsupported key type {material.label!r}"
        raise UnsupportedKeyTypeError(msg, key_type=material.label)

    try:
        key = serialization.load_pem_private_key(material.block, password=password)
    except _PARSE_ERRORS as e:
        msg = "Decrypting PEM block failed: incorrect passphrase or corrupt key"
        raise DecryptionFailedError(msg, label=material.label) from e
    return check_key_type(material.label, key)


def _parse_complete_key(material: KeyMaterial, password: bytes | None) -> PrivateKeyTypes:
    if material.label not in _COMPLETE_KEY_LABELS:
        msg = f"Parsing private key failed, unsupported key type {material.label!r}"
        raise UnsupportedKeyTypeError(msg, key_type=material.label)

    try:
        if material.label == OPENSSH_LABEL:
            return serialization.load_ssh_private_key(material.block, password=password)
        return serialization.load_pem_private_key(material.block, password=password)
    except _PARSE_ERRORS as e:
        if material.is_encrypted:
            msg = "Decrypting private key failed: incorrect passphrase or corrupt key"
            raise DecryptionFailedError(msg, label=material.label) from e
        msg = f"Parsing plain private key failed: {e}"
        raise KeyDecodeError(msg, key_type=material.label) from e


def _to_credential(key: PrivateKeyTypes) -> Credential:
    if isinstance(key, rsa.RSAPrivateKey):
        key_class, key_format = paramiko.RSAKey, serialization.PrivateFormat.TraditionalOpenSSL
    elif isinstance(key, ec.EllipticCurvePrivateKey):
        key_class, key_format = paramiko.ECDSAKey, serialization.PrivateFormat.TraditionalOpenSSL
    elif isinstance(key, dsa.DSAPrivateKey):
        key_class, key_format = paramiko.DSSKey, serialization.PrivateFormat.TraditionalOpenSSL
    elif isinstance(key, ed25519.Ed25519PrivateKey):
        key_class, key_format = paramiko.Ed25519Key, serialization.PrivateFormat.OpenSSH
    else:
        msg = f"Creating signer failed, no SSH algorithm for {type(key).__name__}"
        raise SignerConstructionError(msg)

    try:
        encoded = key.private_bytes(
            serialization.Encoding.PEM, key_format, serialization.NoEncryption()
        )
        signer = key_class.from_private_key(io.StringIO(encoded.decode("ascii")))
    except (paramiko.SSHException, *_PARSE_ERRORS) as e:
        msg = f"Creating signer failed: {e}"
        raise SignerConstructionError(msg) from e

    return Credential(
        signer=signer,
        algorithm=signer.get_name(),
        fingerprint=fingerprint_sha256(signer),
    )
