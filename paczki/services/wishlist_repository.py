"""
Dostęp do danych - zwierzęta, potrzeby, pozycje zamówień i wiadomości kontaktowe.

WishlistRepository to interfejs wstrzykiwany do serwisów.
Implementacje: w pamięci (testy, development) i PostgREST (Supabase REST API).
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

import httpx

from ..config import Settings, get_settings
from ..models.notifications import ContactFormRequest
from ..models.wishlist import Animal, FulfillmentRecord, OrderItem, WishlistItem

logger = logging.getLogger(__name__)

COMPLETED_PAYMENT_STATUS = "completed"
FULFILLED_STATUS = "fulfilled"
NEW_MESSAGE_STATUS = "new"

# Ile ID w jednym filtrze in.(...) - długość query stringu jest ograniczona
IN_FILTER_CHUNK = 100


class RepositoryError(Exception):
    """Błąd komunikacji z bazą danych."""


class WishlistRepository(ABC):
    """Źródło danych do wyliczania realizacji list życzeń."""

    @abstractmethod
    async def get_animal(self, animal_id: str) -> Optional[Animal]:
        """Aktywne zwierzę po ID lub None."""

    @abstractmethod
    async def list_animals(self, organization_id: Optional[str] = None) -> list[Animal]:
        """Aktywne zwierzęta, opcjonalnie tylko jednej organizacji."""

    @abstractmethod
    async def list_wishlist_items(self, animal_ids: Sequence[str]) -> list[WishlistItem]:
        """Pozycje list życzeń zwierząt (entity_id = animal_id)."""

    @abstractmethod
    async def list_completed_purchases(self, animal_ids: Sequence[str]) -> list[FulfillmentRecord]:
        """Pozycje z zamówień o statusie płatności completed."""

    @abstractmethod
    async def list_fulfilled_items(self, animal_ids: Sequence[str]) -> list[FulfillmentRecord]:
        """Pozycje zamówień już dostarczone (fulfillment_status = fulfilled)."""

    @abstractmethod
    async def save_contact_message(self, form: ContactFormRequest) -> None:
        """Zapisuje wiadomość z formularza kontaktowego (status new)."""

    async def close(self):
        pass


class InMemoryWishlistRepository(WishlistRepository):
    """Repozytorium w pamięci - dane przekazane w konstruktorze."""

    def __init__(
        self,
        animals: Iterable[Animal] = (),
        wishlist_items: Iterable[WishlistItem] = (),
        order_items: Iterable[OrderItem] = (),
        order_statuses: Optional[dict[str, str]] = None,
    ):
        self.animals = {animal.id: animal for animal in animals}
        self.wishlist_items = list(wishlist_items)
        self.order_items = list(order_items)
        # order_id -> payment_status
        self.order_statuses = dict(order_statuses or {})
        self.contact_messages: list[dict] = []

    async def get_animal(self, animal_id: str) -> Optional[Animal]:
        animal = self.animals.get(animal_id)
        return animal if animal and animal.active else None

    async def list_animals(self, organization_id: Optional[str] = None) -> list[Animal]:
        return [
            animal for animal in self.animals.values()
            if animal.active and (organization_id is None or animal.organization_id == organization_id)
        ]

    async def list_wishlist_items(self, animal_ids: Sequence[str]) -> list[WishlistItem]:
        wanted = set(animal_ids)
        return [item for item in self.wishlist_items if item.entity_id in wanted]

    async def list_completed_purchases(self, animal_ids: Sequence[str]) -> list[FulfillmentRecord]:
        wanted = set(animal_ids)
        return [
            item.to_record() for item in self.order_items
            if item.animal_id in wanted
            and item.product_id
            and self.order_statuses.get(item.order_id) == COMPLETED_PAYMENT_STATUS
        ]

    async def list_fulfilled_items(self, animal_ids: Sequence[str]) -> list[FulfillmentRecord]:
        wanted = set(animal_ids)
        return [
            item.to_record() for item in self.order_items
            if item.animal_id in wanted and item.fulfillment_status == FULFILLED_STATUS
        ]

    async def save_contact_message(self, form: ContactFormRequest) -> None:
        self.contact_messages.append({**form.model_dump(), "status": NEW_MESSAGE_STATUS})


def _in_filter(values: Iterable[str]) -> str:
    """Filtr PostgREST in.(a,b,c) - wartości w cudzysłowach."""
    quoted = ",".join('"{}"'.format(str(v).replace('"', '\\"')) for v in values)
    return f"in.({quoted})"


class PostgrestWishlistRepository(WishlistRepository):
    """
    Repozytorium na REST API Supabase (PostgREST).
    Używa klucza service role - omija RLS, więc filtruje active=true samo.
    """

    ANIMAL_COLUMNS = "id,name,species,organization_id,created_at,active"

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
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(self.settings.http_timeout))
        return self._http_client

    async def close(self):
        """Zamknij klienta HTTP."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def _get_headers(self) -> dict:
        """Nagłówki do PostgREST."""
        key = self.settings.supabase_service_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/json",
        }

    async def _select(self, table: str, params: dict) -> list[dict]:
        """GET /rest/v1/<table> - błędy zamieniane na RepositoryError."""
        url = f"{self.settings.rest_base_url}/{table}"
        try:
            response = await self.http_client.get(url, params=params, headers=self._get_headers())
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("PostgREST %s: HTTP %d: %s", table, e.response.status_code, e.response.text[:200])
            raise RepositoryError(f"Błąd zapytania do tabeli {table}") from e
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error("PostgREST %s: %s", table, e)
            raise RepositoryError(f"Błąd komunikacji z bazą danych: {e}") from e

    async def _select_in(self, table: str, params: dict, column: str, values: Sequence[str]) -> list[dict]:
        """_select z filtrem in.(...) dzielonym na paczki po IN_FILTER_CHUNK wartości."""
        rows: list[dict] = []
        values = list(values)
        for start in range(0, len(values), IN_FILTER_CHUNK):
            chunk = values[start:start + IN_FILTER_CHUNK]
            rows.extend(await self._select(table, {**params, column: _in_filter(chunk)}))
        return rows

    async def _insert(self, table: str, row: dict) -> None:
        """POST /rest/v1/<table> bez zwracania rekordu."""
        url = f"{self.settings.rest_base_url}/{table}"
        headers = {**self._get_headers(), "Prefer": "return=minimal"}
        try:
            response = await self.http_client.post(url, json=row, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("PostgREST insert %s: HTTP %d: %s", table, e.response.status_code, e.response.text[:200])
            raise RepositoryError("Błąd zapisu do bazy danych") from e
        except httpx.HTTPError as e:
            logger.error("PostgREST insert %s: %s", table, e)
            raise RepositoryError(f"Błąd komunikacji z bazą danych: {e}") from e

    async def get_animal(self, animal_id: str) -> Optional[Animal]:
        rows = await self._select(
            "animals",
            {"select": self.ANIMAL_COLUMNS, "id": f"eq.{animal_id}", "active": "eq.true", "limit": "1"},
        )
        return Animal(**rows[0]) if rows else None

    async def list_animals(self, organization_id: Optional[str] = None) -> list[Animal]:
        params = {"select": self.ANIMAL_COLUMNS, "active": "eq.true", "order": "created_at.desc"}
        if organization_id:
            params["organization_id"] = f"eq.{organization_id}"
        rows = await self._select("animals", params)
        return [Animal(**row) for row in rows]

    async def list_wishlist_items(self, animal_ids: Sequence[str]) -> list[WishlistItem]:
        if not animal_ids:
            return []

        rows = await self._select_in(
            "animal_wishlists",
            {"select": "id,animal_id,priority,quantity,products(id,name,price)"},
            "animal_id",
            animal_ids,
        )

        items = []
        for row in rows:
            product = row.get("products") or {}
            if not product.get("id"):
                continue
            items.append(
                WishlistItem(
                    wishlist_id=row.get("id"),
                    entity_id=row.get("animal_id"),
                    product_id=product["id"],
                    name=product.get("name"),
                    price=product.get("price"),
                    quantity=row.get("quantity") or 1,
                    urgent=row.get("priority") == 1,
                )
            )
        return items

    async def list_completed_purchases(self, animal_ids: Sequence[str]) -> list[FulfillmentRecord]:
        if not animal_ids:
            return []

        # Inner join z orders - filtr po statusie płatności po stronie bazy
        rows = await self._select_in(
            "order_items",
            {
                "select": "animal_id,product_id,quantity,orders!inner(payment_status)",
                "orders.payment_status": f"eq.{COMPLETED_PAYMENT_STATUS}",
                "product_id": "not.is.null",
            },
            "animal_id",
            animal_ids,
        )
        return [_to_record(row) for row in rows]

    async def list_fulfilled_items(self, animal_ids: Sequence[str]) -> list[FulfillmentRecord]:
        if not animal_ids:
            return []

        rows = await self._select_in(
            "order_items",
            {
                "select": "animal_id,product_id,quantity",
                "fulfillment_status": f"eq.{FULFILLED_STATUS}",
            },
            "animal_id",
            animal_ids,
        )
        return [_to_record(row) for row in rows]

    async def save_contact_message(self, form: ContactFormRequest) -> None:
        await self._insert(
            "contact_messages",
            {
                "name": form.name,
                "email": form.email,
                "phone": form.phone,
                "message": form.message,
                "status": NEW_MESSAGE_STATUS,
            },
        )


def _to_record(row: dict) -> FulfillmentRecord:
    return FulfillmentRecord(
        entity_id=row.get("animal_id"),
        product_id=row.get("product_id"),
        quantity=row.get("quantity") or 0,
    )


def get_wishlist_repository(settings: Optional[Settings] = None) -> WishlistRepository:
    """
    Factory - PostgREST gdy skonfigurowano Supabase, inaczej puste repozytorium w pamięci.
    """
    settings = settings or get_settings()
    if settings.use_mocks:
        logger.warning("Brak SUPABASE_URL/SUPABASE_SERVICE_KEY - używam repozytorium w pamięci")
        return InMemoryWishlistRepository()
    return PostgrestWishlistRepository(settings)
