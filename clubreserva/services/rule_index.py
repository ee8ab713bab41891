"""Rule availability index.

Rules are sparse: a tariff does not necessarily configure every supported
duration. For one request we load, per candidate calendar day (previous,
current and, when the interval runs past midnight, next), which durations
exist and the rules for them. Everything downstream works on this snapshot.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from clubreserva.models.pricing import Segment
from clubreserva.services.errors import MissingCanonicalDuration
from clubreserva.services.store import PricingStore
from clubreserva.services.windows import CANONICAL_DURATION, SUPPORTED_DURATIONS, day_of_week


@dataclass
class DayScope:
    """Rules of one calendar day, bucketed by duration."""

    on_date: date
    dow: int
    available: frozenset[int]
    rules: dict[int, list] = field(default_factory=dict)

    def rules_for(self, duration: int) -> list:
        return self.rules.get(duration, [])


@dataclass
class RuleIndex:
    previous: DayScope
    current: DayScope
    following: DayScope | None
    available: frozenset[int]

    @property
    def pieces(self) -> list[int]:
        return sorted(self.available)


def supported_subset(durations: Iterable[int]) -> frozenset[int]:
    """Keep only the durations the engine can price."""
    found = {int(d) for d in durations}
    return frozenset(d for d in SUPPORTED_DURATIONS if d in found)


def bucket_rules(rules: Iterable, durations: Iterable[int]) -> dict[int, list]:
    buckets: dict[int, list] = {d: [] for d in durations}
    for rule in rules:
        d = int(rule.duration_minutes)
        if d in buckets:
            buckets[d].append(rule)
    return buckets


async def load_rule_index(
    store: PricingStore,
    tariff_id: int,
    segment: Segment,
    on_date: date,
    needs_next_day: bool,
) -> RuleIndex:
    """Build the per-day availability and rule buckets for one price request.

    Raises MissingCanonicalDuration when none of the candidate days has a rule
    at the canonical duration, since window detection cannot work without it.
    """
    dates = [on_date - timedelta(days=1), on_date]
    if needs_next_day:
        dates.append(on_date + timedelta(days=1))

    per_day = {}
    for d in dates:
        per_day[d] = supported_subset(await store.list_available_durations(tariff_id, segment, d))

    available = frozenset().union(*per_day.values())
    if CANONICAL_DURATION not in available:
        raise MissingCanonicalDuration(segment.value, tariff_id, CANONICAL_DURATION)

    pieces = sorted(available)
    scopes = []
    for d in dates:
        rules = await store.list_rules(tariff_id, segment, d, pieces)
        scopes.append(DayScope(on_date=d, dow=day_of_week(d), available=per_day[d], rules=bucket_rules(rules, pieces)))

    return RuleIndex(
        previous=scopes[0],
        current=scopes[1],
        following=scopes[2] if needs_next_day else None,
        available=available,
    )
