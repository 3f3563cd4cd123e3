# sweeply/config.py
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///sweeply.db"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(name)
    return value if value else default


@dataclass
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    google_maps_api_key: Optional[str] = None
    openchargemap_api_key: Optional[str] = None
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the process environment (set them in the deploy dashboard or shell)."""
        return cls(
            database_url=_env("SWEEPLY_DATABASE_URL", DEFAULT_DATABASE_URL),
            supabase_url=_env("SUPABASE_URL"),
            supabase_anon_key=_env("SUPABASE_ANON_KEY"),
            google_maps_api_key=_env("GOOGLE_MAPS_API_KEY"),
            openchargemap_api_key=_env("OPENCHARGEMAP_API_KEY"),
            port=int(_env("PORT", "8000")),
        )
