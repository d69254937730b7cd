import dataclasses

import pendulum

from coffeewatch.ingest.models import Coffee
from coffeewatch.ingest.shopify import build_snapshot
from coffeewatch.notify.render import MAX_MESSAGE_LENGTH, render_message
from coffeewatch.utils.dates import format_long_date

from conftest import BASE_URL, make_listing, make_product

COLLECTION = f"{BASE_URL}/collections/specialty-instant-coffee"


def test_message_lists_sorted_without_suffix(settings):
    listing = make_listing(
        make_product("Bravo - Instant Coffee", "bravo", price="12.00"),
        make_product("Alpha - Instant Coffee", "alpha", price="9.50"),
    )
    snapshot = build_snapshot(listing)
    message = render_message(snapshot.coffees, None, settings)
    assert message == "\n".join([
        "Black & White has a new selection of instant coffees:",
        "- ☕️ Alpha ($9.50)",
        "- ☕️ Bravo ($12.00)",
        f"→ [View the collection]({COLLECTION})",
    ])


def test_empty_message_with_timestamp(settings):
    updated = pendulum.parse("2024-03-05T22:30:00-05:00")
    message = render_message([], updated, settings)
    assert message == "\n".join([
        "Black & White no longer has any instant coffees available.",
        "-# Black & White's instant coffee inventory last changed on March 6, 2024 UTC.",
    ])


def test_preview_link_hidden_in_period(settings):
    coffees = [Coffee("Alpha - Instant Coffee", "alpha", "9.50", "https://cdn.example.com/a.png")]
    message = render_message(
        coffees,
        pendulum.datetime(2024, 1, 2),
        settings,
        preview_link=lambda shown: "https://preview.example.com/?payload=abc",
    )
    assert message.endswith("last changed on January 2, 2024 UTC[.](https://preview.example.com/?payload=abc)")


def test_timezone_abbreviation(settings):
    local = dataclasses.replace(settings, timezone="America/New_York")
    message = render_message([], pendulum.datetime(2024, 1, 2, 3), local)
    assert message.endswith("last changed on January 1, 2024 EST.")
    assert format_long_date(pendulum.datetime(2024, 7, 4, 12), "America/New_York") == "July 4, 2024 EDT"


def test_long_message_is_truncated(settings):
    coffees = [Coffee(f"Coffee {i:03d} " + "x" * 40, f"c{i}", "10.00", f"https://cdn.example.com/{i}.png") for i in range(100)]
    linked = []

    def link(shown):
        linked.append([coffee.handle for coffee in shown])
        return "https://preview.example.com/?payload=abc"

    message = render_message(coffees, None, settings, preview_link=link)
    assert len(message) <= MAX_MESSAGE_LENGTH
    assert "more" in message.splitlines()[-2]
    assert message.splitlines()[-1].startswith("→ [View the collection]")

    listed = [line for line in message.splitlines() if line.startswith("- ☕️ ")]
    assert linked[-1] == [coffee.handle for coffee in coffees[: len(listed)]]
    assert len(listed) < len(coffees)


def test_single_long_title_is_cut(settings):
    coffees = [Coffee("Alpha " + "x" * 3000, "alpha", "9.50")]
    message = render_message(coffees, None, settings)
    assert len(message) == MAX_MESSAGE_LENGTH
    assert message.endswith("…")
    assert message.startswith("Black & White has a new selection")
