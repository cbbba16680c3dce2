"""Serwisy biznesowe."""

from .email_service import EmailService
from .fulfillment_service import FulfillmentService
from .registry_client import RegistryClient
from .wishlist_repository import (
    InMemoryWishlistRepository,
    PostgrestWishlistRepository,
    RepositoryError,
    WishlistRepository,
)

__all__ = [
    "EmailService",
    "FulfillmentService",
    "RegistryClient",
    "WishlistRepository",
    "InMemoryWishlistRepository",
    "PostgrestWishlistRepository",
    "RepositoryError",
]
