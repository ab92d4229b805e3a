"""
ids.py

opaque entity identifiers, nanoid-style: 21 symbols from a url-safe alphabet.
"""

from __future__ import annotations

import secrets

ALPHABET = "_-0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def new_id(size: int = 21) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(size))
