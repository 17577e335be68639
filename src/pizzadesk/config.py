"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PIZZADESK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Pizzadesk Delivery API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for archived closing exports.")

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    # Mapping provider
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps web services key. Overridden by the `config` table when present.",
    )
    google_maps_base_url: str = Field(default="https://maps.googleapis.com/maps/api")
    pizzeria_address: str = Field(
        default="Rua Principal, 123, Centro",
        description="Origin address used for every distance lookup.",
    )
    maps_language: str = "pt-BR"
    maps_region: str = "br"
    maps_timeout_seconds: float = Field(default=10.0, gt=0.0)
    maps_max_retries: int = Field(default=2, ge=0)
    maps_backoff_seconds: float = Field(default=0.5, ge=0.0)

    # Operational day
    timezone: str = Field(default="America/Sao_Paulo", description="IANA zone used to resolve shift windows.")
    shift_policy: Literal["calendar", "calendar_grace", "night_shift"] = Field(
        default="night_shift",
        description="Which operational-day rule buckets deliveries into reporting dates.",
    )
    shift_start: str = Field(default="18:00", description="Night shift opening time (HH:MM).")
    shift_end: str = Field(default="02:30", description="Night shift closing time on the following day (HH:MM).")
    grace_cutoff: str = Field(default="02:30", description="Calendar-day grace cutoff on the following day (HH:MM).")
    refetch_debounce_seconds: float = Field(default=0.5, ge=0.0)

    # Access
    restaurant_username: str = "admin"
    restaurant_password_hash: Optional[str] = Field(
        default=None,
        description="werkzeug password hash for the restaurant login. Login is disabled when unset.",
    )
    default_courier_password: str = "123"

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("shift_start", "shift_end", "grace_cutoff")
    @classmethod
    def _validate_clock_time(cls, value: str) -> str:
        hours, _, minutes = value.strip().partition(":")
        if not hours.isdigit() or not minutes.isdigit() or int(hours) > 23 or int(minutes) > 59:
            raise ValueError(f"Expected HH:MM, got '{value}'")
        return f"{int(hours):02d}:{int(minutes):02d}"

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
