"""
codec.py

json text <-> CallistoConfig.

decode is strict: a field of the wrong shape is an error, never coerced.
missing optional sequences fall back to empty lists via the model defaults.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from .errors import DecodeError, EncodeError
from .models import CallistoConfig


def decode(text: str | bytes) -> CallistoConfig:
    try:
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        return CallistoConfig.model_validate_json(text, strict=True)
    except (UnicodeDecodeError, ValidationError) as e:
        raise DecodeError(f"Invalid JSON in config file: {e}") from e


def encode(config: CallistoConfig) -> str:
    try:
        return json.dumps(config.model_dump(mode="json"), indent=2)
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Failed to serialize config: {e}") from e
