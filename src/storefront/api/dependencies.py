"""Request-scoped identity for the API.

Customers are identified by the ``X-User-Id`` header set by the session layer
in front of this service. Admin routes require ``X-Admin-Key``.
"""

import hmac

from fastapi import Header, HTTPException

from storefront import config


def require_admin(x_admin_key: str = Header(default="")) -> None:
    expected = config.admin_api_key()
    if not expected or not hmac.compare_digest(x_admin_key.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Admin credentials required")


def is_admin(x_admin_key: str = Header(default="")) -> bool:
    expected = config.admin_api_key()
    return bool(expected) and hmac.compare_digest(x_admin_key.encode("utf-8"), expected.encode("utf-8"))


def session_user(x_user_id: str | None = Header(default=None)) -> str | None:
    return x_user_id or None


def require_session_user(x_user_id: str | None = Header(default=None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Sign in required")
    return x_user_id
