"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str | None = "logs/affiliates.log"

    # Affiliate codes
    affiliate_code_prefix: str = Field(
        default="XEN",
        min_length=1,
        max_length=8,
        description="Prefix of generated affiliate codes (XEN-XXYY-NNNN)"
    )
    affiliate_code_max_attempts: int = Field(
        default=10,
        ge=1,
        description="How many codes to try before giving up on a collision"
    )

    # Monthly challenge
    monthly_challenge_reward_amount: Decimal = Field(
        default=Decimal("1000"),
        gt=0,
        description="Reward (USD) paid for completing a monthly challenge"
    )
    monthly_challenge_required_referrals: int = Field(
        default=3,
        ge=1,
        description="Qualified referrals needed in one month to claim"
    )
    monthly_challenge_deduplicate: bool = Field(
        default=True,
        description="Count each referred user at most once per month"
    )
    monthly_challenge_auto_claim: bool = Field(
        default=False,
        description="Claim the reward as soon as the threshold is reached"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            # DEBUG must be False in production
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if self.database_echo:
                logger.warning(
                    'DATABASE_ECHO is enabled in production. '
                    'SQL statements (including amounts) will be logged.'
                )

        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(('postgresql://', 'postgresql+asyncpg://')):
            raise ValueError(
                'DATABASE_URL must start with postgresql:// or postgresql+asyncpg://'
            )
        return v

    @field_validator('affiliate_code_prefix')
    @classmethod
    def validate_code_prefix(cls, v: str) -> str:
        """Affiliate code prefix must be alphanumeric."""
        if not v.isalnum():
            raise ValueError('AFFILIATE_CODE_PREFIX must be alphanumeric')
        return v.upper()

    @property
    def async_database_url(self) -> str:
        """Database URL with the asyncpg driver."""
        if self.database_url.startswith('postgresql://'):
            return self.database_url.replace(
                'postgresql://', 'postgresql+asyncpg://', 1
            )
        return self.database_url


# Global settings instance
settings = Settings()
