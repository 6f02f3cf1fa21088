"""Application configuration using pydantic-settings.

Everything the bridge needs to reach the relay, talk to the authorized
NWC client and call the Strike API is read from environment variables
(or a local .env file).
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Relay
    # ======================
    relay_uri: str = Field(
        default="wss://relay.getalby.com/v1", description="Nostr relay websocket URI"
    )
    reconnect_delay: float = Field(
        default=10.0, ge=0, description="Seconds to wait before resubscribing after a relay drop"
    )
    publish_info_event: bool = Field(
        default=True, description="Announce supported methods (kind 13194) on startup"
    )

    # ======================
    # NWC connection
    # ======================
    nwc_connection_pubkey: str = Field(
        default="", description="Pubkey of the only client allowed to send requests"
    )
    nwc_connection_secret: str = Field(
        default="", description="Hex secret used for NIP-04 and for signing responses"
    )
    nwc_service_pubkey: str = Field(
        default="", description="Remote pubkey the NIP-04 shared secret is derived with"
    )
    authorized_pubkey: str = Field(
        default="", description="Pubkey tagged as recipient of every response"
    )

    # ======================
    # Spending quota
    # ======================
    total_max_send_amount_in_sats: int = Field(
        default=0, ge=0, description="Maximum sats this process may send in total"
    )
    quota_state_file: Optional[Path] = Field(
        default=None, description="Persist the sent total here (unset = reset on restart)"
    )

    # ======================
    # Strike
    # ======================
    provider: str = Field(default="strike", description="Payment provider (strike, dryrun)")
    strike_api_key: str = Field(default="", description="Strike API bearer token")
    strike_api_url: str = Field(
        default="https://api.strike.me/v1", description="Strike API base URL"
    )
    strike_source_currency: str = Field(
        default="USD", description="Currency payments are funded from"
    )
    strike_timeout: float = Field(default=30.0, gt=0, description="Strike HTTP timeout")

    # ======================
    # Logging
    # ======================
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING or ERROR")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"

    @property
    def has_connection(self) -> bool:
        """Check if the NWC connection keys are configured."""
        return bool(
            self.nwc_connection_pubkey
            and self.nwc_connection_secret
            and self.nwc_service_pubkey
        )

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "relay_uri": self.relay_uri,
            "log_level": self.log_level,
            "provider": self.provider,
            "nwc": {
                "connection_pubkey": self.nwc_connection_pubkey or "(not set)",
                "connection_secret": "***" if self.nwc_connection_secret else "(not set)",
                "service_pubkey": self.nwc_service_pubkey or "(not set)",
                "authorized_pubkey": self.authorized_pubkey or "(not set)",
            },
            "quota": {
                "max_send_sats": self.total_max_send_amount_in_sats,
                "state_file": str(self.quota_state_file) if self.quota_state_file else "(memory)",
            },
            "strike": {
                "api_url": self.strike_api_url,
                "api_key": "***" if self.strike_api_key else "(not set)",
                "source_currency": self.strike_source_currency,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
