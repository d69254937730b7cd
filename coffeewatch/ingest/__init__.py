"""Storefront ingestion."""

from __future__ import annotations

from coffeewatch.ingest.models import Coffee, Listing, Snapshot
from coffeewatch.ingest.shopify import (
    ListingSchemaError,
    ShopifyClient,
    UpstreamContractError,
    VariantCountError,
    build_snapshot,
)

__all__ = [
    "Coffee",
    "Listing",
    "ListingSchemaError",
    "ShopifyClient",
    "Snapshot",
    "UpstreamContractError",
    "VariantCountError",
    "build_snapshot",
]
