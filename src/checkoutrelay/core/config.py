from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    env: str = "local"
    log_level: str = "INFO"

    # Stripe
    stripe_webhook_secret: SecretStr | None = None
    webhook_tolerance_sec: int = 300

    # coupon id that marks a partner (phenom) checkout
    partner_coupon_code: str = "PHENOM100"

    # Sinks
    zapier_webhook_url: SecretStr | None = None
    airtable_api_key: SecretStr | None = None
    airtable_base_id: str | None = None
    airtable_table: str = "Payments"

    sink_timeout_sec: float = 10.0
    sink_max_attempts: int = 3
    sink_backoff_base_sec: float = 1.0
    sink_backoff_max_sec: float = 30.0

    # Ledger / event store backend
    store_backend: Literal["memory", "sql"] = "memory"
    events_recent_limit: int = 10

    # allow full URL override
    database_url_override: str | None = None

    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "checkoutrelay"
    db_user: str = "postgres"
    db_password: str | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def database_url(self) -> str:
        # 1) Prefer explicit DATABASE_URL
        if self.database_url_override:
            return self.database_url_override

        password = self.db_password or ""
        auth = f"{self.db_user}:{password}" if password else self.db_user

        # 2) Fallback to postgres assembled URL
        return (
            f"postgresql+psycopg://{auth}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}?connect_timeout=3"
        )

    @property
    def airtable_configured(self) -> bool:
        return bool(self.airtable_api_key and self.airtable_base_id)


settings = Settings()
