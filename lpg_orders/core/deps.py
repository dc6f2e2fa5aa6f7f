from __future__ import annotations

import secrets

from fastapi import Header, HTTPException, status

from lpg_orders.core.config import settings


def require_admin(x_admin_key: str | None = Header(default=None)) -> None:
    expected = settings.ADMIN_ACCESS_KEY
    # Fail closed: no configured key means nobody gets in
    if not expected or not expected.strip():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server misconfigured: ADMIN_ACCESS_KEY not set",
        )

    if not x_admin_key:
        raise HTTPException(status_code=401, detail="Missing admin access key")

    if not secrets.compare_digest(x_admin_key.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=403, detail="Admin only")
