"""Availability monitor job: one scheduled tick."""

from __future__ import annotations

import asyncio
import logging
import os
import traceback
from dataclasses import dataclass
from typing import Sequence

import httpx
from dotenv import load_dotenv

from coffeewatch.config import Settings, load_settings
from coffeewatch.db.session import create_engine_from_env
from coffeewatch.ingest.models import Coffee
from coffeewatch.ingest.shopify import ShopifyClient, build_snapshot, listing_dump
from coffeewatch.logic.policies import decide, get_policy
from coffeewatch.notify.render import render_message
from coffeewatch.notify.webhook import Diagnostics, WebhookClient
from coffeewatch.store.cache import KeyValueStore, load_handles, save_handles
from coffeewatch.utils.urls import preview_link

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MonitorResult:
    notified: bool
    persisted: bool
    reason: str
    message: str | None = None


async def run_monitor(
    settings: Settings,
    *,
    session: httpx.AsyncClient | None = None,
    store: KeyValueStore | None = None,
    dry_run: bool = False,
) -> MonitorResult:
    owns_session = session is None
    session = session or httpx.AsyncClient()
    diagnostics = Diagnostics(WebhookClient(settings.diagnostics_url, session=session))
    try:
        await diagnostics.send("Bot started")
        store = store or KeyValueStore(create_engine_from_env(settings.database_url))
        result = await _tick(settings, session, store, diagnostics, dry_run=dry_run)
        await diagnostics.send("Bot finished successfully")
        return result
    except Exception as exc:
        await diagnostics.send(f"Bot failed:\n```\n{exc}\n{traceback.format_exc()}\n```")
        raise
    finally:
        if owns_session:
            await session.aclose()


async def _tick(
    settings: Settings,
    session: httpx.AsyncClient,
    store: KeyValueStore,
    diagnostics: Diagnostics,
    *,
    dry_run: bool,
) -> MonitorResult:
    policy = get_policy(settings.policy)
    client = ShopifyClient(settings, session=session)

    listing = await client.fetch_listing()
    await diagnostics.send(f"Received response from Shopify:\n```json\n{listing_dump(listing)}\n```")
    snapshot = build_snapshot(listing, timestamp_source=settings.timestamp_source)
    logger.info("Available handles: %s", ", ".join(snapshot.handles) or "(none)")

    stored = load_handles(store, settings.cache_key, policy.codec)
    decision = decide(policy, snapshot.handles, stored)

    if dry_run:
        message = render_message(snapshot.coffees, snapshot.updated_at, settings) if decision.notify else None
        return MonitorResult(notified=False, persisted=False, reason=decision.reason, message=message)

    persisted = False
    if policy.persist_before_send:
        save_handles(store, settings.cache_key, snapshot.handles, policy.codec)
        persisted = True

    if not decision.notify:
        if decision.persist and not persisted:
            save_handles(store, settings.cache_key, snapshot.handles, policy.codec)
            persisted = True
        await diagnostics.send(decision.reason)
        return MonitorResult(notified=False, persisted=persisted, reason=decision.reason)

    message = render_message(
        snapshot.coffees,
        snapshot.updated_at,
        settings,
        preview_link=lambda shown: _preview_link(settings, shown),
    )
    await WebhookClient(settings.webhook_url, session=session).send(message)
    logger.info("Sent availability update for %s products", len(snapshot.coffees))

    # Only reached after a successful send, so a failed webhook keeps the old state.
    if decision.persist and not persisted:
        save_handles(store, settings.cache_key, snapshot.handles, policy.codec)
        persisted = True
    return MonitorResult(notified=True, persisted=persisted, reason=decision.reason, message=message)


def _preview_link(settings: Settings, coffees: Sequence[Coffee]) -> str | None:
    images = [coffee.image_url for coffee in coffees if coffee.image_url]
    if not settings.preview_url or not images:
        return None
    return preview_link(settings.preview_url, images, settings.signing_secret)


def main(profile: str | None = None) -> MonitorResult:
    load_dotenv()
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    return asyncio.run(run_monitor(load_settings(profile)))


if __name__ == "__main__":
    main()
