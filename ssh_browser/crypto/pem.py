"""
PEM envelope decoding.

Finds the key block in a key file, splits off its RFC 1421 headers and works
out how the block is protected:

    Proc-Type: 4,ENCRYPTED
    DEK-Info: AES-128-CBC,<hex IV>

marks a legacy OpenSSL encrypted block, "ENCRYPTED PRIVATE KEY" is PKCS#8 and
"OPENSSH PRIVATE KEY" names its cipher inside the body. Decryption itself is
left to `cryptography`.
"""

import base64
import binascii
import re

from ssh_browser.exceptions import MalformedEnvelopeError
from ssh_browser.models.keys import KeyEncryption, KeyMaterial

OPENSSH_LABEL = "OPENSSH PRIVATE KEY"
PKCS8_ENCRYPTED_LABEL = "ENCRYPTED PRIVATE KEY"

_OPENSSH_MAGIC = b"openssh-key-v1\x00"
_PEM_BLOCK = re.compile(
    rb"-----BEGIN (?P<label>[^-\r\n]+)-----[ \t]*\r?\n(?P<content>.*?)-----END (?P=label)-----",
    re.DOTALL,
)


def decode_envelope(data: bytes) -> KeyMaterial:
    """
    Find the first PEM block in `data` and decode it.

    Args:
        data: Key file contents.

    Returns:
        KeyMaterial describing the block.

    Raises:
        MalformedEnvelopeError: If no well-formed PEM block is present.
    """
    match = _PEM_BLOCK.search(data)
    if match is None:
        msg = "PEM decode failed, no key found"
        raise MalformedEnvelopeError(msg)

    label = match.group("label").decode("ascii", errors="replace").strip()
    headers, body_lines = _split_headers(match.group("content").decode("ascii", errors="replace"))
    try:
        body = base64.b64decode("".join(body_lines), validate=True)
    except (binascii.Error, ValueError) as e:
        msg = "PEM body is not valid base64"
        raise MalformedEnvelopeError(msg, label=label) from e
    if not body:
        msg = "PEM block has an empty body"
        raise MalformedEnvelopeError(msg, label=label)

    return KeyMaterial(
        raw=data,
        block=match.group(0) + b"\n",
        label=label,
        headers=headers,
        body=body,
        encryption=_detect_encryption(label, headers, body),
    )


def _split_headers(content: str) -> tuple[dict[str, str], list[str]]:
    lines = [line.strip() for line in content.splitlines()]
    headers: dict[str, str] = {}
    if not lines or ":" not in lines[0]:
        return headers, [line for line in lines if line]

    last_key: str | None = None
    for index, line in enumerate(content.splitlines()):
        if not line.strip():
            return headers, [body for body in lines[index + 1 :] if body]
        if line[0] in " \t" and last_key is not None:
            headers[last_key] += line.strip()
            continue
        key, sep, value = line.partition(":")
        if not sep:
            # Header section ended without the mandatory blank line.
            return headers, [body for body in lines[index:] if body]
        last_key = key.strip()
        headers[last_key] = value.strip()
    return headers, []


def _detect_encryption(label: str, headers: dict[str, str], body: bytes) -> KeyEncryption:
    if "ENCRYPTED" in headers.get("Proc-Type", "").upper() or "DEK-Info" in headers:
        return KeyEncryption.LEGACY_PEM
    if label == PKCS8_ENCRYPTED_LABEL:
        return KeyEncryption.PKCS8
    if label == OPENSSH_LABEL:
        cipher = _openssh_cipher(body)
        if cipher is None:
            msg = "Not an openssh-key-v1 body"
            raise MalformedEnvelopeError(msg, label=label)
        return KeyEncryption.NONE if cipher == "none" else KeyEncryption.OPENSSH
    return KeyEncryption.NONE


def _openssh_cipher(body: bytes) -> str | None:
    if not body.startswith(_OPENSSH_MAGIC):
        return None
    offset = len(_OPENSSH_MAGIC)
    if len(body) < offset + 4:
        return None
    length = int.from_bytes(body[offset : offset + 4], "big")
    name = body[offset + 4 : offset + 4 + length]
    if len(name) != length:
        return None
    return name.decode("ascii", errors="replace")
