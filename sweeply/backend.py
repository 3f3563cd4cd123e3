# sweeply/backend.py
"""Thin adapter over the hosted Supabase project (auth + ``user_profiles`` table).

Every call either returns plain data or raises ``BackendError`` carrying a
message fit to show the user; the session manager never sees SDK exceptions.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from supabase import AsyncClient, acreate_client

from .config import Settings

log = logging.getLogger(__name__)

PROFILES_TABLE = "user_profiles"


class BackendError(Exception):
    """A remote auth or profile call failed."""


@dataclass
class BackendUser:
    id: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None


def _to_user(user: Any) -> BackendUser:
    return BackendUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        created_at=getattr(user, "created_at", None),
        last_sign_in_at=getattr(user, "last_sign_in_at", None),
    )


class SupabaseBackend:
    def __init__(self, client: AsyncClient):
        self._client = client

    async def sign_up(self, email: str, password: str) -> BackendUser:
        try:
            resp = await self._client.auth.sign_up({"email": email, "password": password})
        except Exception as e:
            raise BackendError(str(e)) from e
        if resp.user is None:
            raise BackendError("Sign up did not return a user")
        return _to_user(resp.user)

    async def sign_in(self, email: str, password: str) -> BackendUser:
        try:
            resp = await self._client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            raise BackendError(str(e)) from e
        if resp.user is None:
            raise BackendError("Invalid login credentials")
        return _to_user(resp.user)

    async def sign_out(self) -> None:
        try:
            await self._client.auth.sign_out()
        except Exception as e:
            raise BackendError(str(e)) from e

    async def reset_password(self, email: str) -> None:
        try:
            await self._client.auth.reset_password_for_email(email)
        except Exception as e:
            raise BackendError(str(e)) from e

    async def current_user(self) -> Optional[BackendUser]:
        """The user of a still-valid stored session, or None."""
        try:
            session = await self._client.auth.get_session()
        except Exception as e:
            raise BackendError(str(e)) from e
        if session is None or session.user is None:
            return None
        return _to_user(session.user)

    async def fetch_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            resp = await (
                self._client.table(PROFILES_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise BackendError(str(e)) from e
        rows = resp.data or []
        return rows[0] if rows else None

    async def insert_profile(self, row: Dict[str, Any]) -> None:
        try:
            await self._client.table(PROFILES_TABLE).insert(row).execute()
        except Exception as e:
            raise BackendError(str(e)) from e

    async def update_profile(self, user_id: str, row: Dict[str, Any]) -> None:
        try:
            await self._client.table(PROFILES_TABLE).update(row).eq("user_id", user_id).execute()
        except Exception as e:
            raise BackendError(str(e)) from e


async def create_backend(settings: Settings) -> SupabaseBackend:
    url = settings.supabase_url
    key = settings.supabase_anon_key
    if not url or not key:
        raise RuntimeError("Missing SUPABASE_URL or SUPABASE_ANON_KEY")
    log.info("connecting to Supabase at %s", url)
    return SupabaseBackend(await acreate_client(url, key))
