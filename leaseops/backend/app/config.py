from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    LEASEOPS_DB_URL: str = "sqlite+aiosqlite:///./leaseops.db"
    LOG_LEVEL: str = "INFO"

    # --- Minimal B2B Auth (API key) ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # --- Authoritative listing API (RapidAPI Zillow). Unset key => tier skipped ---
    RAPIDAPI_KEY: str | None = None
    RAPIDAPI_HOST: str = "zillow56.p.rapidapi.com"
    RAPIDAPI_BASE_URL: str = "https://zillow56.p.rapidapi.com"
    API_HTTP_TIMEOUT_S: float = 15.0

    # --- Public listing page fetch ---
    # The provider blocks non-browser clients, so this must look like a browser.
    LISTING_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )
    PAGE_HTTP_TIMEOUT_S: float = 20.0
    LISTING_VERIFY_SSL: bool = True
    # Optional: custom CA bundle path (rare on corp setups)
    LISTING_CA_BUNDLE: str | None = None

    # --- Provider URL shape ---
    LISTING_DOMAIN: str = "zillow.com"
    LISTING_PATH_SEGMENT: str = "homedetails"
    LISTING_ID_MARKER: str = "_zpid"
    LISTING_ID_PARAM: str = "zpid"

    # --- Deployment defaults ---
    DEFAULT_CITY: str = "Cleveland"
    MAX_LISTING_PHOTOS: int = 15

    # --- Audit delivery (outbox -> webhook). Quiet when no URL is set ---
    AUDIT_WEBHOOK_URL: str | None = None
    AUDIT_WEBHOOK_SECRET: str | None = None
    AUDIT_DISPATCH_ENABLED: bool = False
    AUDIT_DISPATCH_INTERVAL_MINUTES: int = 5
    AUDIT_DISPATCH_BATCH_SIZE: int = 50
    AUDIT_MAX_ATTEMPTS: int = 10


settings = Settings()
