import hmac
import os
from typing import FrozenSet, List, Optional

from fastapi import FastAPI, Header, HTTPException, Request, status

PUBLIC_TAG = "Health"


def get_api_keys() -> List[str]:
    keys = os.getenv("API_KEYS", "")
    return [k.strip() for k in keys.split(",") if k.strip()]


def public_paths(app: FastAPI) -> FrozenSet[str]:
    """Routes tagged as health checks plus the app's own documentation URLs."""
    paths = {getattr(route, "path", None) for route in app.routes if PUBLIC_TAG in (getattr(route, "tags", None) or [])}
    paths.update({app.docs_url, app.redoc_url, app.openapi_url, app.swagger_ui_oauth2_redirect_url})
    return frozenset(p for p in paths if p)


async def api_key_protection(
    request: Request,
    x_api_key: Optional[str] = Header(default=None, alias="X-API-KEY"),
):
    if request.url.path in public_paths(request.app):
        return

    candidate = (x_api_key or "").strip()
    if not candidate or not any(hmac.compare_digest(candidate, k) for k in get_api_keys()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key",
        )
