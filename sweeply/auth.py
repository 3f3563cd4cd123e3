# sweeply/auth.py
"""Session manager for the hosted auth backend.

One ``AuthManager`` is built by the app factory and handed to whatever needs
it; nothing here is a module global. Each operation ends in exactly one of
success (published state updated) or failure (``error_message`` set), and the
same outcome is returned as an ``OperationResult``.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from pydantic import BaseModel, ValidationError

from .backend import BackendError, BackendUser

log = logging.getLogger(__name__)

PREMIUM_TIERS = ("pro", "enterprise")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AppUser(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime
    last_sign_in: Optional[datetime] = None


class UserProfile(BaseModel):
    id: str
    user_id: str
    business_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    profile_image_url: Optional[str] = None
    subscription_tier: str = "free"  # "free", "pro", "enterprise"
    created_at: datetime
    updated_at: datetime


class OperationResult(BaseModel):
    ok: bool
    error: Optional[str] = None


class SessionState(BaseModel):
    is_authenticated: bool
    is_loading: bool
    error_message: Optional[str] = None
    current_user: Optional[AppUser] = None
    user_profile: Optional[UserProfile] = None
    display_name: str
    subscription_tier: str
    is_premium: bool
    root_screen: str


StateListener = Callable[[SessionState], None]


class AuthManager:
    def __init__(self, backend):
        self._backend = backend
        self.current_user: Optional[AppUser] = None
        self.user_profile: Optional[UserProfile] = None
        self.is_authenticated = False
        self.is_loading = False
        self.error_message: Optional[str] = None
        self._listeners: List[StateListener] = []

    # ── observation ──────────────────────────────────────────────────────────
    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        state = self.state()
        for listener in list(self._listeners):
            listener(state)

    def state(self) -> SessionState:
        return SessionState(
            is_authenticated=self.is_authenticated,
            is_loading=self.is_loading,
            error_message=self.error_message,
            current_user=self.current_user,
            user_profile=self.user_profile,
            display_name=self.display_name,
            subscription_tier=self.subscription_tier,
            is_premium=self.is_premium,
            root_screen="main" if self.is_signed_in else "authentication",
        )

    # ── derived ──────────────────────────────────────────────────────────────
    @property
    def is_signed_in(self) -> bool:
        return self.is_authenticated and self.current_user is not None

    @property
    def display_name(self) -> str:
        if self.current_user and self.current_user.name:
            return self.current_user.name
        if self.user_profile and self.user_profile.business_name:
            return self.user_profile.business_name
        if self.current_user and self.current_user.email:
            return self.current_user.email
        return "User"

    @property
    def subscription_tier(self) -> str:
        return self.user_profile.subscription_tier if self.user_profile else "free"

    @property
    def is_premium(self) -> bool:
        return self.subscription_tier in PREMIUM_TIERS

    # ── operations ───────────────────────────────────────────────────────────
    def _begin(self) -> None:
        self.is_loading = True
        self.error_message = None
        self._publish()

    def _fail(self, e: Exception) -> OperationResult:
        self.error_message = str(e) or "Something went wrong. Please try again."
        self.is_loading = False
        log.warning("auth operation failed: %s", self.error_message)
        self._publish()
        return OperationResult(ok=False, error=self.error_message)

    def _succeed(self) -> OperationResult:
        self.is_loading = False
        self._publish()
        return OperationResult(ok=True)

    async def sign_up(
        self, email: str, password: str, name: str, business_name: Optional[str] = None
    ) -> OperationResult:
        self._begin()
        try:
            user = await self._backend.sign_up(email, password)
            now = _utcnow()
            profile = UserProfile(
                id=str(uuid.uuid4()),
                user_id=user.id,
                business_name=business_name,
                subscription_tier="free",
                created_at=now,
                updated_at=now,
            )
            await self._backend.insert_profile(profile.model_dump(mode="json"))
        except BackendError as e:
            return self._fail(e)

        self.current_user = AppUser(
            id=user.id,
            email=user.email or email,
            name=name,
            created_at=user.created_at or now,
        )
        self.user_profile = profile
        self.is_authenticated = True
        return self._succeed()

    async def sign_in(self, email: str, password: str) -> OperationResult:
        self._begin()
        try:
            user = await self._backend.sign_in(email, password)
        except BackendError as e:
            return self._fail(e)

        await self._load_profile(user.id)
        self.current_user = self._app_user(user, fallback_email=email)
        self.is_authenticated = True
        return self._succeed()

    async def sign_out(self) -> OperationResult:
        self.error_message = None
        try:
            await self._backend.sign_out()
        except BackendError as e:
            return self._fail(e)

        self.current_user = None
        self.user_profile = None
        self.is_authenticated = False
        return self._succeed()

    async def reset_password(self, email: str) -> OperationResult:
        """Ask the backend to email a reset link; success means the request was accepted."""
        self._begin()
        try:
            await self._backend.reset_password(email)
        except BackendError as e:
            return self._fail(e)
        return self._succeed()

    async def update_profile(self, profile: UserProfile) -> OperationResult:
        self.error_message = None
        updated = profile.model_copy(update={"updated_at": _utcnow()})
        try:
            await self._backend.update_profile(updated.user_id, updated.model_dump(mode="json"))
        except BackendError as e:
            return self._fail(e)
        self.user_profile = updated
        return self._succeed()

    async def check_auth_status(self) -> None:
        """Restore a stored session at startup; stay signed out quietly otherwise."""
        try:
            user = await self._backend.current_user()
        except BackendError as e:
            log.info("no session restored: %s", e)
            user = None

        if user is None:
            self.is_authenticated = False
            self._publish()
            return

        await self._load_profile(user.id)
        self.current_user = self._app_user(user, fallback_email="")
        self.is_authenticated = True
        self._publish()

    def clear_error(self) -> None:
        self.error_message = None
        self._publish()

    # ── helpers ──────────────────────────────────────────────────────────────
    async def _load_profile(self, user_id: str) -> None:
        # never carry a previous user's profile into this session
        self.user_profile = None
        try:
            row = await self._backend.fetch_profile(user_id)
        except BackendError as e:
            log.warning("profile fetch for %s failed: %s", user_id, e)
            return
        if not row:
            return
        try:
            self.user_profile = UserProfile.model_validate(row)
        except ValidationError as e:
            log.warning("profile row for %s is malformed: %s", user_id, e)

    def _app_user(self, user: BackendUser, fallback_email: str) -> AppUser:
        return AppUser(
            id=user.id,
            email=user.email or fallback_email,
            name=self.user_profile.business_name if self.user_profile else None,
            created_at=user.created_at or _utcnow(),
            last_sign_in=user.last_sign_in_at or _utcnow(),
        )
