"""Shopify collection feed client and snapshot derivation."""

from __future__ import annotations

import json
import logging
from typing import Iterable

import httpx
import pendulum
from pydantic import ValidationError

from coffeewatch.config import Settings
from coffeewatch.ingest.models import Coffee, Listing, Product, Snapshot
from coffeewatch.utils.dates import parse_timestamp

logger = logging.getLogger(__name__)


class UpstreamContractError(RuntimeError):
    """The storefront returned data we do not know how to interpret."""


class ListingSchemaError(UpstreamContractError):
    pass


class VariantCountError(UpstreamContractError):
    def __init__(self, product: Product) -> None:
        self.handle = product.handle
        self.payload = product.model_dump_json()
        super().__init__(
            f"Expected exactly one variant per product, got {len(product.variants)} "
            f"for {product.handle}; response was {self.payload}"
        )


def parse_listing(raw: str | bytes) -> Listing:
    try:
        return Listing.model_validate_json(raw)
    except ValidationError as exc:
        raise ListingSchemaError(f"Unexpected products payload: {exc}") from exc


class ShopifyClient:
    def __init__(self, settings: Settings, *, session: httpx.AsyncClient) -> None:
        self.settings = settings
        self._session = session

    async def fetch_listing(self) -> Listing:
        url = self.settings.products_endpoint
        logger.info("Fetching %s", url)
        response = await self._session.get(url, headers={"User-Agent": self.settings.user_agent})
        response.raise_for_status()
        return parse_listing(response.content)


def build_snapshot(listing: Listing, *, timestamp_source: str = "published") -> Snapshot:
    """Derive the available coffees, their handles and the latest change time."""
    for product in listing.products:
        if len(product.variants) != 1:
            raise VariantCountError(product)

    coffees = [
        Coffee(
            title=product.title,
            handle=product.handle,
            price=variant.price,
            image_url=product.images[0].src if product.images else None,
        )
        for product in listing.products
        for variant in product.variants
        if variant.available
    ]
    coffees.sort(key=lambda coffee: coffee.title.casefold())
    try:
        updated_at = latest_change(listing.products, timestamp_source)
    except ValueError as exc:
        raise ListingSchemaError(f"Unparseable timestamp in products payload: {exc}") from exc
    return Snapshot(
        coffees=coffees,
        handles=tuple(coffee.handle for coffee in coffees),
        updated_at=updated_at,
        listing=listing,
    )


def latest_change(products: Iterable[Product], source: str) -> pendulum.DateTime | None:
    if source == "published":
        stamps = [product.published_at for product in products]
    elif source == "variant":
        stamps = [v.updated_at for product in products for v in product.variants if v.updated_at]
    else:
        raise ValueError(f"Unknown timestamp source {source!r}")
    if not stamps:
        return None
    return max(parse_timestamp(stamp) for stamp in stamps)


def listing_dump(listing: Listing) -> str:
    return json.dumps(listing.model_dump(mode="json")["products"])
