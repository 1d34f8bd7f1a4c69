import base64
import textwrap
from collections.abc import Callable

import pytest


@pytest.fixture
def make_block() -> Callable[..., bytes]:
    """Header-less PEM block around an arbitrary body."""

    def _make(label: str, body: bytes, *, width: int = 64) -> bytes:
        lines = "\n".join(textwrap.wrap(base64.b64encode(body).decode(), width))
        return f"-----BEGIN {label}-----\n{lines}\n-----END {label}-----\n".encode()

    return _make
