"""Narzędzia pomocnicze."""

from .fulfillment import (
    aggregate_purchases,
    compute_fulfillment,
    compute_quantity_progress,
    sort_by_need,
    wishlist_status,
)
from .validators import (
    clean_nip,
    format_nip,
    format_postal_code,
    is_valid_email,
    is_valid_nip,
    is_valid_phone,
    is_valid_postal_code,
)

__all__ = [
    "clean_nip",
    "is_valid_nip",
    "format_nip",
    "format_postal_code",
    "is_valid_postal_code",
    "is_valid_phone",
    "is_valid_email",
    "aggregate_purchases",
    "compute_fulfillment",
    "compute_quantity_progress",
    "wishlist_status",
    "sort_by_need",
]
