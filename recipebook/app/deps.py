# recipebook/app/deps.py

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from supabase import Client, create_client

from recipebook.app.config import Settings, get_settings
from recipebook.services.telemetry import LoggingTelemetrySink, SupabaseTelemetrySink, TelemetrySink

log = logging.getLogger("deps")

_client: Client | None = None


def _get_client(settings: Settings) -> Client | None:
    global _client
    if _client is None and settings.storage_configured:
        _client = create_client(str(settings.SUPABASE_URL), settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


def get_supabase(settings: Settings = Depends(get_settings)) -> Client:
    client = _get_client(settings)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Recipe storage is not configured",
        )
    return client


def get_telemetry_sink(settings: Settings = Depends(get_settings)) -> TelemetrySink:
    client = _get_client(settings)
    if client is None or not settings.TELEMETRY_TABLE:
        return LoggingTelemetrySink()
    return SupabaseTelemetrySink(client, settings.TELEMETRY_TABLE)


auth_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    id: str
    email: str | None = None


async def get_optional_user(
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
    settings: Settings = Depends(get_settings),
) -> CurrentUser | None:
    """
    Resolve Authorization: Bearer <access_token> against Supabase auth.
    Missing or invalid tokens mean an anonymous visitor.
    """
    if cred is None or cred.scheme.lower() != "bearer":
        return None

    client = _get_client(settings)
    if client is None:
        return None

    try:
        res = client.auth.get_user(cred.credentials)
    except Exception as exc:
        log.info("auth.invalid_token error=%s", exc)
        return None

    user = getattr(res, "user", None)
    if not user:
        return None
    return CurrentUser(id=str(user.id), email=user.email)


async def get_current_user(user: CurrentUser | None = Depends(get_optional_user)) -> CurrentUser:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing or invalid token")
    return user
