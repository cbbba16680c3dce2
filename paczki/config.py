"""
Konfiguracja aplikacji - centralne zarządzanie ustawieniami.
Używa pydantic-settings dla walidacji i typowania.
"""

from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Główna konfiguracja aplikacji."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase (PostgREST) - baza z listami życzeń i zamówieniami
    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_service_role_key: str = ""

    # Resend - wysyłka maili
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "System Pączki <onboarding@resend.dev>"
    lead_notification_to: str = "fundacjapwm@gmail.com"

    # Rejestry firm
    ceidg_api_url: str = "https://dane.biznes.gov.pl/api/ceidg/v1/firmy"
    ceidg_api_token: str = ""
    krs_api_url: str = "https://api-krs.ms.gov.pl/api/krs/OdpisAktualny"

    # HTTP
    http_timeout: float = 15.0

    # API Security
    api_key: str = ""

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @model_validator(mode="after")
    def resolve_aliases(self):
        """Rozwiązuje aliasy zmiennych po załadowaniu wszystkich wartości."""
        # Supabase: SUPABASE_SERVICE_ROLE_KEY to nazwa z edge functions
        if not self.supabase_service_key or self.supabase_service_key.startswith("your-"):
            self.supabase_service_key = self.supabase_service_role_key or ""

        if self.resend_api_key.startswith("your-"):
            self.resend_api_key = ""

        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_mocks(self) -> bool:
        """W development bez kluczy używamy mocków zamiast zewnętrznych API."""
        return self.environment == "development" and not (
            self.supabase_url and self.supabase_service_key
        )

    @property
    def rest_base_url(self) -> str:
        """Bazowy URL PostgREST dla projektu Supabase."""
        return f"{self.supabase_url.rstrip('/')}/rest/v1"


@lru_cache
def get_settings() -> Settings:
    """Singleton dla ustawień - cachowane przy pierwszym wywołaniu."""
    return Settings()
