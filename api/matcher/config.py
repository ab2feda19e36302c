import json
import os
from typing import Any

ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SIGNUP_IDEMPOTENT = os.getenv("SIGNUP_IDEMPOTENT", "true").lower() == "true"
TRIGGER_LOCK_TIMEOUT_SECONDS = float(os.getenv("TRIGGER_LOCK_TIMEOUT_SECONDS", "30"))

DEFAULT_MATCHING_CONFIG: dict[str, Any] = {
    "EDGE_WEIGHT_INCREMENT": int(os.getenv("EDGE_WEIGHT_INCREMENT", "1")),
    "MATCHING_TIMEOUT_SECONDS": float(os.getenv("MATCHING_TIMEOUT_SECONDS", "60")),
}

if os.getenv("MATCHING_CONFIG_JSON"):
    try:
        DEFAULT_MATCHING_CONFIG.update(json.loads(os.getenv("MATCHING_CONFIG_JSON", "{}")))
    except json.JSONDecodeError:
        pass

EDGE_WEIGHT_INCREMENT = int(DEFAULT_MATCHING_CONFIG["EDGE_WEIGHT_INCREMENT"])
MATCHING_TIMEOUT_SECONDS = float(DEFAULT_MATCHING_CONFIG["MATCHING_TIMEOUT_SECONDS"])
