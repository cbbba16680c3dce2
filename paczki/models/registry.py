"""
Modele danych z rejestrów firm (CEIDG, KRS).
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class RegistryCompany(BaseModel):
    """Dane organizacji pobrane z rejestru."""

    name: Optional[str] = Field(None, description="Nazwa z rejestru")
    nip: Optional[str] = Field(None, description="NIP - 10 cyfr")
    regon: Optional[str] = Field(None, description="Numer REGON")

    address: Optional[str] = Field(None, description="Ulica z numerem budynku/lokalu")
    city: Optional[str] = None
    postal_code: Optional[str] = None
    province: Optional[str] = Field(None, description="Województwo")

    source: Optional[Literal["ceidg", "krs"]] = Field(None, description="Rejestr źródłowy")


class RegistryLookupResult(BaseModel):
    """Wynik wyszukiwania NIP w rejestrach."""

    nip: str
    found: bool = Field(False, description="Czy znaleziono podmiot")
    data: Optional[RegistryCompany] = None

    # Błąd komunikacji (brak wyniku to nie błąd)
    error: Optional[str] = Field(None, description="Komunikat błędu")
