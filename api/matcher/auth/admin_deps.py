from __future__ import annotations

from typing import Any

from fastapi import Header, HTTPException

from .. import config

DEV_ADMIN_TOKEN = "dev-admin-token"


def get_current_admin(
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
) -> dict[str, Any]:
    runtime_admin_token = str(getattr(config, "ADMIN_TOKEN", "") or "")

    if runtime_admin_token and x_admin_token and x_admin_token == runtime_admin_token:
        return {"email": "admin-token", "role": "admin", "auth_mode": "token"}

    # Local/dev token when no explicit ADMIN_TOKEN is configured.
    if not runtime_admin_token and x_admin_token and x_admin_token == DEV_ADMIN_TOKEN:
        return {"email": DEV_ADMIN_TOKEN, "role": "admin", "auth_mode": "token"}

    raise HTTPException(status_code=401, detail="Admin authentication required")
