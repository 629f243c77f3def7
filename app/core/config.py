from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=4000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    gateway_token: str = Field(default="dev_gateway_token_change_me", alias="GATEWAY_TOKEN")

    database_url: str = Field(alias="DATABASE_URL")
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")

    celery_broker_url: str = Field(default="redis://localhost:6379/1", alias="CELERY_BROKER_URL")
    celery_result_backend: str = Field(
        default="redis://localhost:6379/2",
        alias="CELERY_RESULT_BACKEND",
    )

    wallet_default_currency: str = Field(default="THB", alias="WALLET_DEFAULT_CURRENCY")
    wallet_max_deposit: Decimal = Field(default=Decimal("1000000"), alias="WALLET_MAX_DEPOSIT")
    wallet_transactions_limit: int = Field(default=100, ge=1, alias="WALLET_TRANSACTIONS_LIMIT")

    rental_max_months: int = Field(default=24, ge=1, le=24, alias="RENTAL_MAX_MONTHS")
    rental_expiry_sweep_interval_sec: float = Field(
        default=300.0,
        gt=0,
        alias="RENTAL_EXPIRY_SWEEP_INTERVAL_SEC",
    )

    admin_recent_transactions_limit: int = Field(
        default=10,
        ge=1,
        alias="ADMIN_RECENT_TRANSACTIONS_LIMIT",
    )
    admin_top_wallets_limit: int = Field(default=5, ge=1, alias="ADMIN_TOP_WALLETS_LIMIT")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
