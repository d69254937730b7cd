"""Chat message rendering."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from coffeewatch.config import Settings
from coffeewatch.ingest.models import Coffee
from coffeewatch.utils.dates import format_long_date

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent
TEMPLATE_NAME = "message.md.j2"
# Discord rejects message content longer than this.
MAX_MESSAGE_LENGTH = 2000


def _strip_suffix(title: str, suffix: str) -> str:
    return title.removesuffix(suffix) if suffix else title


ENV = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(enabled_extensions=("html",)),
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)
ENV.filters["strip_suffix"] = _strip_suffix


def render_message(
    coffees: Sequence[Coffee],
    updated_at: datetime | None,
    settings: Settings,
    *,
    preview_link: Callable[[Sequence[Coffee]], str | None] | None = None,
) -> str:
    """Render the chat message.

    ``preview_link`` receives the products that made it into the message and
    returns the link to hide behind the final period, if any.
    """
    shown = list(coffees)
    message = _render(shown, 0, updated_at, settings, preview_link)
    while len(message) > MAX_MESSAGE_LENGTH and len(shown) > 1:
        shown.pop()
        message = _render(shown, len(coffees) - len(shown), updated_at, settings, preview_link)
    if len(shown) < len(coffees):
        logger.warning("Message too long; listed %s of %s products", len(shown), len(coffees))
    if len(message) > MAX_MESSAGE_LENGTH:
        logger.warning("Message still %s characters long; cutting it off", len(message))
        message = message[: MAX_MESSAGE_LENGTH - 1] + "…"
    return message


def _render(
    coffees: Sequence[Coffee],
    more: int,
    updated_at: datetime | None,
    settings: Settings,
    preview_link: Callable[[Sequence[Coffee]], str | None] | None,
) -> str:
    template = ENV.get_template(TEMPLATE_NAME)
    text = template.render(
        coffees=coffees,
        more=more,
        store_name=settings.store_name,
        product_noun=settings.product_noun,
        emoji=settings.emoji,
        currency_symbol=settings.currency_symbol,
        title_suffix=settings.title_suffix,
        collection_url=settings.collection_url,
        updated_on=format_long_date(updated_at, settings.timezone) if updated_at else None,
        preview_link=preview_link(coffees) if preview_link and coffees else None,
    )
    return text.strip("\n")
