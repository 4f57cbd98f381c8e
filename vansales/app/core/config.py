from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # The embedded store; any SQLAlchemy async URL works (postgresql+asyncpg://...)
    DATABASE_URL: str = "sqlite+aiosqlite:///./vansales.db"
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = ["http://localhost:8081"]

    # Document numbering prefixes
    INVOICE_PREFIX: str = "INV"
    RETURN_PREFIX: str = "RET"
    RECEIPT_PREFIX: str = "RCP"

    # Presentation
    CURRENCY_CODE: str = "BHD"
    COMPANY_NAME: str = "Van Sales Company"


settings = Settings()
