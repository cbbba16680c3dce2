"""
Klient rejestrów firm - pobieranie danych organizacji po NIP.
Najpierw CEIDG (działalności gospodarcze), potem KRS (fundacje, stowarzyszenia, spółki).
"""

import logging
from typing import Any, Optional

import httpx

from ..config import Settings, get_settings
from ..models.registry import RegistryCompany, RegistryLookupResult
from ..utils.validators import clean_nip, is_valid_nip

logger = logging.getLogger(__name__)


def _join_address(street: Optional[str], building: Optional[str], local: Optional[str]) -> Optional[str]:
    """Składa "ulica nr/lokal" - bez ulicy zwraca None."""
    if not street:
        return None
    address = f"{street} {building or ''}".rstrip()
    if local:
        address += f"/{local}"
    return address


class RegistryClient:
    """
    Klient do publicznych API rejestrów CEIDG i KRS.
    Zwraca pierwszy znaleziony wynik, błędy zamienia na RegistryLookupResult.error.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.http_timeout),
                headers={
                    "Accept": "application/json",
                    "User-Agent": "Paczki/1.0",
                },
            )
        return self._http_client

    async def close(self):
        """Zamknij klienta HTTP."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def _parse_ceidg(self, payload: dict[str, Any], nip: str) -> Optional[RegistryCompany]:
        """Parsuje odpowiedź CEIDG - pierwsza firma z listy."""
        firms = payload.get("firma") or []
        if not firms:
            return None

        firm = firms[0]
        adres = firm.get("adres") or {}

        return RegistryCompany(
            name=firm.get("nazwa") or None,
            nip=firm.get("nip") or nip,
            regon=firm.get("regon") or None,
            address=_join_address(adres.get("ulica"), adres.get("nrNieruchomosci"), adres.get("nrLokalu")),
            city=adres.get("miejscowosc") or None,
            postal_code=adres.get("kodPocztowy") or None,
            province=adres.get("wojewodztwo") or None,
            source="ceidg",
        )

    def _parse_krs(self, payload: dict[str, Any], nip: str) -> Optional[RegistryCompany]:
        """Parsuje odpis aktualny KRS - dział 1 (dane podmiotu i siedziba)."""
        odpis = payload.get("odpis")
        if not odpis:
            return None

        dzial1 = (odpis.get("dane") or {}).get("dzial1") or {}
        dane_podmiotu = dzial1.get("danePodmiotu") or {}
        identyfikatory = dane_podmiotu.get("identyfikatory") or {}
        adres = (dzial1.get("siedzibaIAdres") or dzial1.get("siedziba") or {}).get("adres") or {}

        return RegistryCompany(
            name=dane_podmiotu.get("nazwa") or None,
            nip=identyfikatory.get("nip") or nip,
            regon=identyfikatory.get("regon") or None,
            address=_join_address(adres.get("ulica"), adres.get("nrDomu"), adres.get("nrLokalu")),
            city=adres.get("miejscowosc") or None,
            postal_code=adres.get("kodPocztowy") or None,
            province=adres.get("wojewodztwo") or None,
            source="krs",
        )

    async def _get_json(self, url: str, **kwargs) -> Optional[dict]:
        """GET z JSON - None dla odpowiedzi innej niż 2xx."""
        response = await self.http_client.get(url, **kwargs)
        if not response.is_success:
            logger.debug("Rejestr: %s zwrócił HTTP %d", url, response.status_code)
            return None
        return response.json()

    async def lookup_ceidg(self, nip: str) -> Optional[RegistryCompany]:
        """Wyszukuje działalność gospodarczą w CEIDG."""
        headers = {}
        if self.settings.ceidg_api_token:
            headers["Authorization"] = f"Bearer {self.settings.ceidg_api_token}"

        payload = await self._get_json(
            self.settings.ceidg_api_url,
            params={"nip": nip},
            headers=headers,
        )
        return self._parse_ceidg(payload, nip) if payload else None

    async def lookup_krs(self, nip: str) -> Optional[RegistryCompany]:
        """Wyszukuje podmiot w rejestrze stowarzyszeń/fundacji KRS."""
        payload = await self._get_json(
            f"{self.settings.krs_api_url.rstrip('/')}/{nip}",
            params={"rejestr": "P", "format": "json"},
        )
        return self._parse_krs(payload, nip) if payload else None

    async def lookup_nip(self, nip: str) -> RegistryLookupResult:
        """
        Wyszukuje organizację po NIP - CEIDG, potem KRS.

        Args:
            nip: NIP (10 cyfr, może zawierać myślniki)

        Returns:
            RegistryLookupResult z danymi lub informacją o błędzie
        """
        cleaned = clean_nip(nip)

        if not is_valid_nip(cleaned):
            return RegistryLookupResult(nip=cleaned, found=False, error="Nieprawidłowa suma kontrolna NIP")

        logger.info("Rejestr: wyszukuję NIP=%s", cleaned)

        try:
            for source, lookup in (("CEIDG", self.lookup_ceidg), ("KRS", self.lookup_krs)):
                company = await lookup(cleaned)
                if company:
                    logger.info("Rejestr: znaleziono w %s: %s", source, company.name or "N/A")
                    return RegistryLookupResult(nip=cleaned, found=True, data=company)

            logger.info("Rejestr: NIP %s nie znaleziony", cleaned)
            return RegistryLookupResult(nip=cleaned, found=False)

        except httpx.TimeoutException:
            logger.error("Rejestr: Timeout podczas wyszukiwania NIP=%s", cleaned)
            return RegistryLookupResult(nip=cleaned, found=False, error="Timeout komunikacji z rejestrem")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Rejestr: Błąd wyszukiwania NIP=%s: %s", cleaned, e)
            return RegistryLookupResult(nip=cleaned, found=False, error=f"Błąd komunikacji z rejestrem: {e}")


class RegistryClientMock:
    """
    Mock klienta rejestrów do testów lokalnych.
    Zwraca przykładowe dane bez faktycznej komunikacji z API.
    """

    TEST_DATA = {
        "5260001246": {
            "name": "FUNDACJA TESTOWA PSIA ŁAPA",
            "regon": "012345678",
            "address": "ul. Schroniskowa 1",
            "city": "Warszawa",
            "postal_code": "00-001",
            "province": "MAZOWIECKIE",
            "source": "krs",
        }
    }

    async def lookup_nip(self, nip: str) -> RegistryLookupResult:
        """Mock wyszukiwania NIP."""
        cleaned = clean_nip(nip)

        if not is_valid_nip(cleaned):
            return RegistryLookupResult(nip=cleaned, found=False, error="Nieprawidłowa suma kontrolna NIP")

        data = self.TEST_DATA.get(cleaned)
        if not data:
            return RegistryLookupResult(nip=cleaned, found=False)

        return RegistryLookupResult(
            nip=cleaned,
            found=True,
            data=RegistryCompany(nip=cleaned, **data),
        )

    async def close(self):
        """Mock close - nic nie robi."""
        pass


def get_registry_client(settings: Optional[Settings] = None, use_mock: bool = False):
    """
    Factory function - zwraca odpowiedni klient rejestrów.

    Args:
        settings: Ustawienia aplikacji
        use_mock: Czy użyć mocka (do testów)

    Returns:
        RegistryClient lub RegistryClientMock
    """
    if use_mock:
        return RegistryClientMock()
    return RegistryClient(settings or get_settings())
