"""
Key handling for ssh-browser.

This module provides:
- PEM envelope decoding and encryption detection
- Private key loading into paramiko signers (RSA, EC, DSA, Ed25519)
"""

from ssh_browser.crypto.fingerprint import fingerprint_sha256
from ssh_browser.crypto.key_loader import KeyCredentialLoader, check_key_type
from ssh_browser.crypto.pem import decode_envelope

__all__ = [
    "KeyCredentialLoader",
    "check_key_type",
    "decode_envelope",
    "fingerprint_sha256",
]
