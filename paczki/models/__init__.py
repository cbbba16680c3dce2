"""Modele danych - Pydantic schemas."""

from .notifications import (
    ContactFormRequest,
    EmailResult,
    LeadEmailRequest,
    OrderConfirmationItem,
    OrderConfirmationRequest,
    WelcomeEmailRequest,
)
from .registry import RegistryCompany, RegistryLookupResult
from .wishlist import (
    Animal,
    AnimalSummary,
    FulfillmentRecord,
    FulfillmentResult,
    OrderItem,
    QuantityProgress,
    WishlistItem,
    WishlistItemStatus,
)

__all__ = [
    # Lista życzeń
    "WishlistItem",
    "FulfillmentRecord",
    "FulfillmentResult",
    "WishlistItemStatus",
    "QuantityProgress",
    "Animal",
    "AnimalSummary",
    "OrderItem",
    # Rejestry
    "RegistryCompany",
    "RegistryLookupResult",
    # Formularze
    "LeadEmailRequest",
    "ContactFormRequest",
    "WelcomeEmailRequest",
    "OrderConfirmationItem",
    "OrderConfirmationRequest",
    "EmailResult",
]
