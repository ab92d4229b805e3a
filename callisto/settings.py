from __future__ import annotations

import os
from pathlib import Path


DATA_DIR = Path(os.environ.get("CALLISTO_DATA_DIR", str(Path.home() / ".callisto"))).expanduser()
CONFIG_PATH = Path(os.environ.get("CALLISTO_CONFIG_PATH", str(DATA_DIR / ".callisto.json"))).expanduser()

CONFIG_VERSION = "1.0"
CONFIG_EVENT = "callisto-config"

HTTP_TIMEOUT_S = float(os.environ.get("CALLISTO_HTTP_TIMEOUT", "30"))
SERIALIZE_WRITES = os.environ.get("CALLISTO_SERIALIZE_WRITES", "").lower() in ("1", "true", "yes")
LOG_LEVEL = os.environ.get("CALLISTO_LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get("CALLISTO_CORS_ORIGINS", "http://localhost:1420,http://127.0.0.1:1420").split(",")
    if o.strip()
]
