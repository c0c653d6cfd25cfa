from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/vatbook.db"

    # Auth
    secret_key: str = "dev-secret-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:5173"]

    # VIES registry
    vat_country_code: str = "BE"
    vies_api_url: str = "https://ec.europa.eu/taxation_customs/vies/rest-api/check-vat-number"
    vies_timeout_seconds: float = 10.0

    # Tax authority (submission is stubbed until the e-Services API is wired in)
    tax_authority_base_url: str = "https://api.eservices.minfin.fgov.be"

    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.database_url
