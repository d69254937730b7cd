"""Notification suppression policies.

Each policy compares the handles of the currently available products with the
handles stored after the last notification and answers two questions: should
this tick stay quiet, and should the current handles be stored afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from coffeewatch.config import ConfigError

JOIN_SEPARATOR = ","


@dataclass(frozen=True, slots=True)
class Decision:
    notify: bool
    persist: bool
    reason: str


class SuppressionPolicy:
    name: str = ""
    codec: str = "json"
    # Write the current handles as soon as they are computed, before any send.
    persist_before_send: bool = False

    def should_suppress(self, current: Sequence[str], stored: Sequence[str] | None) -> bool:
        raise NotImplementedError

    def should_persist(self, did_notify: bool) -> bool:
        raise NotImplementedError

    def reason(self, current: Sequence[str], stored: Sequence[str] | None) -> str:
        if stored is not None and list(current) == list(stored):
            return "Products have not changed, skipping"
        return "No new products, skipping"


class StrictPolicy(SuppressionPolicy):
    """Quiet only when the joined handle string is unchanged."""

    name = "strict"
    codec = "joined"

    def should_suppress(self, current, stored):
        if stored is None:
            return False
        return JOIN_SEPARATOR.join(current) == JOIN_SEPARATOR.join(stored)

    def should_persist(self, did_notify):
        return True

    def reason(self, current, stored):
        return "Products have not changed, skipping"


class SubsetPolicy(SuppressionPolicy):
    """Quiet unless a handle appeared that was not stored.

    An empty current set is a subset of anything, so "everything sold out"
    stays quiet under this policy.
    """

    name = "subset"
    persist_before_send = True

    def should_suppress(self, current, stored):
        if stored is None:
            return False
        return set(current) <= set(stored)

    def should_persist(self, did_notify):
        return True


class NonEmptySubsetPolicy(SuppressionPolicy):
    """Quiet when unchanged or when a non-empty set only shrank."""

    name = "nonempty-subset"

    def should_suppress(self, current, stored):
        if stored is None:
            return False
        if list(current) == list(stored):
            return True
        return len(current) > 0 and set(current) <= set(stored)

    def should_persist(self, did_notify):
        return did_notify


POLICIES: dict[str, type[SuppressionPolicy]] = {
    policy.name: policy for policy in (StrictPolicy, SubsetPolicy, NonEmptySubsetPolicy)
}


def get_policy(name: str) -> SuppressionPolicy:
    try:
        return POLICIES[name]()
    except KeyError as exc:
        raise ConfigError(f"Unknown change policy {name!r}; expected one of {sorted(POLICIES)}") from exc


def decide(policy: SuppressionPolicy, current: Sequence[str], stored: Sequence[str] | None) -> Decision:
    suppress = policy.should_suppress(current, stored)
    notify = not suppress
    reason = policy.reason(current, stored) if suppress else "Available products changed"
    return Decision(notify=notify, persist=policy.should_persist(notify), reason=reason)
