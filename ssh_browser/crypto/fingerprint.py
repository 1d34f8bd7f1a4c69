"""OpenSSH style key fingerprints."""

import base64
import hashlib

import paramiko


def fingerprint_sha256(key: paramiko.PKey) -> str:
    """Return the "SHA256:<base64>" fingerprint of a public key blob."""
    digest = hashlib.sha256(key.asbytes()).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")
