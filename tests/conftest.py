import io
import json
from pathlib import Path

import pytest
from PIL import Image
from sqlalchemy import create_engine

from coffeewatch.config import Settings
from coffeewatch.ingest.models import Listing
from coffeewatch.store.cache import KeyValueStore

FIXTURES = Path(__file__).parent / "fixtures" / "http"

BASE_URL = "https://shop.example.com"
PRODUCTS_URL = f"{BASE_URL}/collections/specialty-instant-coffee/products.json"
WEBHOOK_URL = "https://discord.example.com/api/webhooks/1/main"
DIAGNOSTICS_URL = "https://discord.example.com/api/webhooks/2/heartbeat"


def load_fixture(path: str) -> str:
    return (FIXTURES / path).read_text()


def make_product(title, handle, *, available=True, price="10.00", published_at="2024-01-01T00:00:00Z", variants=None, images=()):
    if variants is None:
        variants = [{"title": "Default Title", "available": available, "price": price}]
    return {
        "title": title,
        "handle": handle,
        "published_at": published_at,
        "variants": variants,
        "images": [{"src": src} for src in images],
    }


def make_listing(*products) -> Listing:
    return Listing.model_validate_json(json.dumps({"products": list(products)}))


def png_bytes(size=(40, 20), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def settings():
    return Settings(
        base_url=BASE_URL,
        section="specialty-instant-coffee",
        cache_key="items-test",
        policy="nonempty-subset",
        webhook_url=WEBHOOK_URL,
        diagnostics_url=DIAGNOSTICS_URL,
        signing_secret="secret",
        tile_size=30,
        tile_spacing=5,
        pixel_ratio=1,
        image_format="PNG",
        database_url="sqlite:///:memory:",
    )


@pytest.fixture()
def engine():
    engine = create_engine("sqlite:///:memory:", future=True)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine):
    return KeyValueStore(engine)


@pytest.fixture()
def products_json():
    return load_fixture("shopify/products.json")
