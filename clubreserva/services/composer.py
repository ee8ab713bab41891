"""Price composer: prices each group either by a direct rule or by decomposition.

A request that forms a single group is only ever priced by a direct rule;
decomposition applies to the groups of a prorated request.

Decomposition is a shortest path over 30-minute units: node i means "i units
priced so far", and each available duration d is an edge advancing d/30 units
at the price of the rule for d at the group's start.
"""

from dataclasses import dataclass
from decimal import Decimal

from clubreserva.services.errors import NoDirectRule, UndecomposableInterval
from clubreserva.services.segmenter import Group, RuleLocator
from clubreserva.services.windows import STEP_MINUTES


@dataclass(frozen=True)
class Decomposition:
    cost: Decimal
    composition: tuple[int, ...]  # piece durations, in order


@dataclass(frozen=True)
class GroupPrice:
    group: Group
    subtotal: Decimal
    rule_id: int | None  # None when decomposed
    duration_used: int
    composition: tuple[int, ...] | None = None


def to_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def cheapest_decomposition(minutes: int, prices: dict[int, Decimal]) -> Decomposition | None:
    """Minimum-cost way to write minutes as a sum of priced durations, or None."""
    if minutes <= 0 or minutes % STEP_MINUTES:
        return None

    steps = minutes // STEP_MINUTES
    pieces = [(d // STEP_MINUTES, price, d) for d, price in sorted(prices.items()) if d % STEP_MINUTES == 0]

    best: list[Decimal | None] = [None] * (steps + 1)
    came_from: list[tuple[int, int] | None] = [None] * (steps + 1)
    best[0] = Decimal(0)

    for i in range(steps + 1):
        if best[i] is None:
            continue
        for take, price, d in pieces:
            j = i + take
            if j > steps:
                continue
            cost = best[i] + price
            if best[j] is None or cost < best[j]:
                best[j] = cost
                came_from[j] = (i, d)

    if best[steps] is None:
        return None

    composition = []
    cur = steps
    while cur > 0:
        i, d = came_from[cur]
        composition.append(d)
        cur = i
    composition.reverse()
    return Decomposition(cost=best[steps], composition=tuple(composition))


def price_direct(locator: RuleLocator, group: Group, segment: str) -> GroupPrice:
    """Price a request that is a single group. Only a rule for its exact length may price it."""
    rule = locator.rule_at(group.start, group.minutes)
    if rule is None:
        raise NoDirectRule(segment, group.minutes)
    return GroupPrice(
        group=group,
        subtotal=to_decimal(rule.price),
        rule_id=rule.id,
        duration_used=group.minutes,
    )


def price_group(locator: RuleLocator, group: Group, segment: str) -> GroupPrice:
    """Price one group of a prorated request: exact rule when its length is a configured duration, else decomposition."""
    scope, _ = locator.scope_at(group.start)
    available = scope.available if scope is not None else frozenset()

    if group.minutes in available:
        rule = locator.rule_at(group.start, group.minutes)
        if rule is not None:
            return GroupPrice(
                group=group,
                subtotal=to_decimal(rule.price),
                rule_id=rule.id,
                duration_used=group.minutes,
            )

    prices = {}
    for d in locator.index.pieces:
        rule = locator.rule_at(group.start, d)
        if rule is not None:
            prices[d] = to_decimal(rule.price)

    decomposition = cheapest_decomposition(group.minutes, prices)
    if decomposition is None:
        raise UndecomposableInterval(segment, group.start, group.end, locator.index.pieces)

    return GroupPrice(
        group=group,
        subtotal=decomposition.cost,
        rule_id=None,
        duration_used=group.minutes,
        composition=decomposition.composition,
    )
