# tests/fakes.py
from datetime import datetime, timezone

from sweeply.backend import BackendError, BackendUser


class FakeBackend:
    """In-memory stand-in for the Supabase project."""

    def __init__(self):
        self.accounts = {}  # email -> (password, BackendUser)
        self.profiles = {}  # user_id -> row
        self.session_user = None
        self.reset_requests = []
        self.fail_profile_fetch = False
        self.fail_sign_out = False

    def register(self, email, password, user_id="user-1"):
        user = BackendUser(id=user_id, email=email, created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        self.accounts[email] = (password, user)
        return user

    async def sign_up(self, email, password):
        if email in self.accounts:
            raise BackendError("User already registered")
        user = self.register(email, password, user_id=f"user-{len(self.accounts) + 1}")
        self.session_user = user
        return user

    async def sign_in(self, email, password):
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise BackendError("Invalid login credentials")
        self.session_user = account[1]
        return account[1]

    async def sign_out(self):
        if self.fail_sign_out:
            raise BackendError("network unreachable")
        self.session_user = None

    async def reset_password(self, email):
        self.reset_requests.append(email)

    async def current_user(self):
        return self.session_user

    async def fetch_profile(self, user_id):
        if self.fail_profile_fetch:
            raise BackendError("profiles unavailable")
        return self.profiles.get(user_id)

    async def insert_profile(self, row):
        self.profiles[row["user_id"]] = row

    async def update_profile(self, user_id, row):
        self.profiles[user_id] = row


class FakeGmaps:
    """Duck-typed ``googlemaps.Client``."""

    def __init__(self, locations=None, gas_results=None):
        self.locations = locations or {}
        self.gas_results = gas_results or []
        self.geocode_calls = []

    def geocode(self, address):
        self.geocode_calls.append(address)
        if address not in self.locations:
            return []
        lat, lng = self.locations[address]
        return [{"geometry": {"location": {"lat": lat, "lng": lng}}}]

    def places_nearby(self, location, radius, type):
        return {"results": self.gas_results}


