"""Application configuration and settings management."""

from typing import Annotated, Any, Literal, Optional

import json
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SIM_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Transport Loop Simulator"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level used by start_server.py.")

    directions_provider: Literal["osrm", "google"] = Field(
        default="osrm",
        description="Route geometry backend used to build the loop and detours.",
    )
    osrm_base_url: Optional[str] = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile to use when requesting route geometry.",
    )
    osrm_max_retries: int = Field(default=3, ge=0)
    osrm_backoff_seconds: float = Field(default=1.0, ge=0.0)
    request_timeout_seconds: float = Field(default=30.0, gt=0.0)
    google_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Google Directions backend.",
    )
    google_directions_url: str = "https://maps.googleapis.com/maps/api/directions/json"

    loop_waypoints: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        description="Ordered loop waypoints as 'lat,lng' strings or addresses (Google backend only).",
    )

    # Movement tuning. arrival_epsilon must be at least movement_delta so that an
    # action target is detected on the tick the vehicle reaches it.
    movement_delta: float = Field(default=0.002, gt=0.0, description="Distance travelled per tick (degrees).")
    arrival_epsilon: float = Field(default=0.004, gt=0.0, description="Arrival threshold (degrees).")
    tick_interval_seconds: float = Field(default=2.0, gt=0.0)
    autostart: bool = Field(default=True, description="Build the simulation and start ticking on app startup.")
    wait_for_route: bool = Field(default=True, description="Hold at the loop start until the fleet sends a first route.")

    fleet_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the fleet management API. Location updates are disabled when unset.",
    )
    fleet_api_token: Optional[str] = None
    transport_mpg: int = Field(default=30, ge=0)
    transport_capacity: int = Field(default=4, ge=0)

    @field_validator("loop_waypoints", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (JSON array or '|'-separated)."""
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
            # Commas appear inside "lat,lng" and addresses, so '|' separates waypoints
            if "|" in value:
                return tuple(item.strip() for item in value.split("|") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @model_validator(mode="after")
    def _check_arrival_ratio(self) -> "Settings":
        if self.arrival_epsilon < self.movement_delta:
            raise ValueError(
                f"arrival_epsilon ({self.arrival_epsilon}) must be >= movement_delta ({self.movement_delta})."
            )
        return self


settings = Settings()
