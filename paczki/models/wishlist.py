"""
Modele listy życzeń - potrzeby zwierząt/organizacji i ich realizacja.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WishlistItem(BaseModel):
    """Pojedyncza potrzeba (produkt + ilość) przypisana do zwierzęcia lub organizacji."""

    product_id: str = Field(..., description="ID produktu")
    quantity: int = Field(1, ge=1, description="Potrzebna ilość")

    # Właściciel potrzeby - zwierzę lub organizacja
    entity_id: Optional[str] = Field(None, description="ID zwierzęcia/organizacji")

    # Dane do wyświetlenia
    wishlist_id: Optional[str] = Field(None, description="ID wpisu na liście życzeń")
    name: Optional[str] = None
    price: Optional[float] = None
    urgent: bool = Field(False, description="Priorytet 1 = pilne")


class FulfillmentRecord(BaseModel):
    """Zakupiona ilość produktu - pozycja z opłaconego zamówienia."""

    product_id: Optional[str] = Field(None, description="ID produktu (może być pusty)")
    quantity: Optional[int] = Field(0, description="Zakupiona ilość")
    entity_id: Optional[str] = Field(None, description="ID zwierzęcia/organizacji")


class FulfillmentResult(BaseModel):
    """Postęp realizacji listy życzeń - wyliczany, nigdy nie zapisywany."""

    total_needed: int = Field(0, ge=0, description="Liczba pozycji na liście")
    fulfilled: int = Field(0, ge=0, description="Liczba pozycji w pełni zrealizowanych")
    progress: int = Field(0, ge=0, le=100, description="Procent realizacji (0-100)")


class WishlistItemStatus(BaseModel):
    """Stan pojedynczej pozycji listy życzeń."""

    item: WishlistItem
    bought: bool = Field(False, description="Czy zakupiono potrzebną ilość")
    purchased_quantity: int = Field(0, ge=0, description="Zakupiona ilość (max potrzebna)")


class QuantityProgress(BaseModel):
    """Statystyki ilościowe do panelu organizacji (suma sztuk, nie pozycji)."""

    total_needed: int = Field(0, ge=0, description="Suma potrzebnych sztuk")
    fulfilled: int = Field(0, ge=0, description="Zrealizowane sztuki (max total_needed)")
    progress: int = Field(0, ge=0, le=100, description="Procent realizacji (0-100)")


class OrderItem(BaseModel):
    """Pozycja zamówienia - źródło rekordów realizacji."""

    order_id: str
    product_id: Optional[str] = None
    animal_id: Optional[str] = None
    quantity: Optional[int] = 0
    fulfillment_status: Optional[str] = Field(None, description="np. pending, fulfilled")

    def to_record(self) -> FulfillmentRecord:
        return FulfillmentRecord(
            product_id=self.product_id,
            quantity=self.quantity,
            entity_id=self.animal_id,
        )


class Animal(BaseModel):
    """Zwierzę w schronisku organizacji."""

    id: str
    name: str
    species: Optional[str] = None
    organization_id: Optional[str] = None
    created_at: Optional[datetime] = None
    active: bool = True


class AnimalSummary(Animal):
    """Zwierzę z wyliczonym stanem listy życzeń."""

    wishlist: list[WishlistItemStatus] = Field(default_factory=list)
    fulfillment: FulfillmentResult = Field(default_factory=FulfillmentResult)
    quantity_progress: Optional[QuantityProgress] = None
