"""
Configuration management for the Loyalty Registry service.

Loads settings from .env via pydantic-settings.

Security notes:
    - validate_production_settings() enforces an administrator wallet,
      a JWT secret and strict CORS in production
    - DEMO_MODE skips wallet signature checks at /auth/verify
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Registry ────────────────────────────────────────────────────
    # Wallet that holds administrator rights when the registry is created
    administrator_wallet: str = ""

    # ── Database (audit log + auth challenges) ──────────────────────
    database_url: str = "sqlite:///./data/loyalty_registry.db"

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    demo_mode: bool = True  # accept /auth/verify without checking the signature

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "loyalty-registry"
    jwt_access_ttl_minutes: int = 15
    auth_challenge_ttl_minutes: int = 5

    # ── Rate limits (requests per minute, per client and route) ─────
    mint_rate_limit: int = 60
    transfer_rate_limit: int = 30
    auth_rate_limit: int = 20

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    def validate_production_settings(self):
        """
        Validate settings for production safety. Called during app startup.
        """
        if self.environment == "production":
            if not self.administrator_wallet:
                raise ValueError(
                    "ADMINISTRATOR_WALLET must be set in production. "
                    "It is the only wallet allowed to mint and toggle transfers."
                )
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if self.demo_mode:
                raise ValueError(
                    "DEMO_MODE must be false in production. "
                    "Demo mode issues access tokens without signature checks."
                )
            if not self.jwt_secret:
                raise ValueError(
                    "JWT_SECRET must be set in production. "
                    "It is used to sign access tokens for wallet authentication."
                )
            logger.info("✅ Production settings validated")
        else:
            warnings = []
            if not self.administrator_wallet:
                warnings.append("ADMINISTRATOR_WALLET empty (registry will not start)")
            if self.demo_mode:
                warnings.append("DEMO_MODE=true (signature checks disabled)")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()
