from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "json"  # "json" | "memory"
    DATA_DIR: str = "./data"
    STORE_TIMEOUT_SECONDS: float = 5.0
    STORE_READ_RETRIES: int = 3

    PAYMENT_DUE_HOURS: int = 24
    EXPIRY_SWEEP_ENABLED: bool = True
    EXPIRY_SWEEP_INTERVAL_SECONDS: float = 3600.0

    PAYMENT_ACCESS_TOKEN: str | None = None
    PAYMENT_API_BASE_URL: str = "https://api.mercadopago.com"
    PAYMENT_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_WEBHOOK_SECRET: str | None = None

    OPERATOR_API_KEY: str | None = None


settings = Settings()
