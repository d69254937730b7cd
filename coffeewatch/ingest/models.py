"""Storefront listing schema and derived models."""

from __future__ import annotations

from dataclasses import dataclass

import pendulum
from pydantic import BaseModel, ConfigDict, Field


class _Strict(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)


class ProductImage(_Strict):
    src: str


class Variant(_Strict):
    title: str
    available: bool
    price: str
    updated_at: str | None = None


class Product(_Strict):
    title: str
    handle: str
    published_at: str
    updated_at: str | None = None
    variants: list[Variant]
    images: list[ProductImage] = Field(default_factory=list)


class Listing(_Strict):
    products: list[Product]


@dataclass(frozen=True, slots=True)
class Coffee:
    title: str
    handle: str
    price: str
    image_url: str | None = None


@dataclass(frozen=True, slots=True)
class Snapshot:
    coffees: list[Coffee]
    handles: tuple[str, ...]
    updated_at: pendulum.DateTime | None
    listing: Listing
