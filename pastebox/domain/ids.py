from __future__ import annotations

import secrets
import string


PASTE_ID_ALPHABET = string.ascii_letters + string.digits + "_-"
PASTE_ID_LENGTH = 10


def generate_paste_id(length: int = PASTE_ID_LENGTH) -> str:
    """Return a random URL-safe public identifier for a new paste."""
    return "".join(secrets.choice(PASTE_ID_ALPHABET) for _ in range(length))
