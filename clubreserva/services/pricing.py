"""Pricing service: the price of a court reservation.

Resolves the caller's segment and the court's tariff sheet, loads the rules
of the candidate days, splits the requested interval into pricing-window
groups and prices each group. Either a complete price comes out or a
PricingError is raised; there is no partial result.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from clubreserva.models.pricing import Segment
from clubreserva.services.composer import GroupPrice, price_direct, price_group
from clubreserva.services.rule_index import load_rule_index
from clubreserva.services.segmenter import RuleLocator, build_groups, find_previous_day_carry
from clubreserva.services.segments import resolve_segment, resolve_tariff_id
from clubreserva.services.store import PricingStore
from clubreserva.services.windows import CANONICAL_DURATION, MINUTES_PER_DAY, format_hhmm, request_bounds

logger = logging.getLogger(__name__)

MODE_DIRECT = "direct"
MODE_HYBRID = "hybrid"


@dataclass
class BreakdownLine:
    from_time: str
    to_time: str
    minutes: int
    day_offset: int
    rule_id_applied: int | None
    duration_used: int
    subtotal: Decimal
    composition: list[int] | None = None


@dataclass
class PriceQuote:
    club_id: int
    court_id: int
    tariff_id: int
    user_id: int | None
    segment: Segment
    booking_date: date
    start_time: str
    end_time: str
    duration_minutes: int
    price_total: int
    prorated: bool
    mode: str
    rule_id: int | None
    breakdown: list[BreakdownLine] = field(default_factory=list)
    debug: dict | None = None

    @property
    def has_breakdown(self) -> bool:
        return self.mode == MODE_HYBRID


def round_total(amount: Decimal) -> int:
    """Round half-up to the integer currency unit."""
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _label(minute_abs: int, closing: bool = False) -> str:
    """Wall-clock label for an absolute minute, '01:30 (+1)' once past midnight.

    A closing minute exactly at midnight belongs to the day it closes: '24:00'.
    """
    if minute_abs > MINUTES_PER_DAY or (minute_abs == MINUTES_PER_DAY and not closing):
        return f"{format_hhmm(minute_abs - MINUTES_PER_DAY)} (+1)"
    return format_hhmm(minute_abs)


def breakdown_line(price: GroupPrice) -> BreakdownLine:
    group = price.group
    return BreakdownLine(
        from_time=_label(group.start),
        to_time=_label(group.end, closing=True),
        minutes=group.minutes,
        day_offset=group.day_offset,
        rule_id_applied=price.rule_id,
        duration_used=price.duration_used,
        subtotal=price.subtotal,
        composition=list(price.composition) if price.composition is not None else None,
    )


async def calculate_price(
    store: PricingStore,
    club_id: int,
    court_id: int,
    booking_date: date,
    start_time: str,
    end_time: str,
    user_id: int | None = None,
    segment_override: Segment | None = None,
) -> PriceQuote:
    """Price a reservation of court_id from start_time to end_time on booking_date.

    end_time <= start_time means the reservation ends on the next day. The
    duration is assumed already validated against the supported set.
    """
    start, end = request_bounds(start_time, end_time)
    duration = end - start

    segment = await resolve_segment(store, user_id, club_id, segment_override)
    tariff_id = await resolve_tariff_id(store, club_id, court_id)

    index = await load_rule_index(store, tariff_id, segment, booking_date, needs_next_day=end > MINUTES_PER_DAY)
    carry = find_previous_day_carry(start, index.previous)
    locator = RuleLocator(index, carry)

    groups = build_groups(locator, start, end, segment.value)
    prorated = len(groups) > 1
    if prorated:
        prices = [price_group(locator, g, segment.value) for g in groups]
    else:
        prices = [price_direct(locator, groups[0], segment.value)]
    total = round_total(sum((p.subtotal for p in prices), Decimal(0)))

    quote = PriceQuote(
        club_id=club_id,
        court_id=court_id,
        tariff_id=tariff_id,
        user_id=user_id,
        segment=segment,
        booking_date=booking_date,
        start_time=start_time,
        end_time=end_time,
        duration_minutes=duration,
        price_total=total,
        prorated=prorated,
        mode=MODE_HYBRID if prorated else MODE_DIRECT,
        rule_id=None if prorated else prices[0].rule_id,
    )

    if prorated:
        quote.breakdown = [breakdown_line(p) for p in prices]
        following = index.following
        quote.debug = {
            "available_pieces": index.pieces,
            "prev_carry": (
                {
                    "date_previous": index.previous.on_date.isoformat(),
                    "dow_previous": index.previous.dow,
                    "cutoff_end": carry.cutoff,
                    "rule_id": carry.rule.id,
                }
                if carry
                else None
            ),
            "date_current": index.current.on_date.isoformat(),
            "dow_current": index.current.dow,
            "date_next": following.on_date.isoformat() if following else None,
            "dow_next": following.dow if following else None,
            "groups_count": len(groups),
            "canonical_duration": CANONICAL_DURATION,
        }

    logger.info(
        "Priced court %s club %s %s %s-%s (%s, tariff %s): %s [%s, %d group(s)]",
        court_id,
        club_id,
        booking_date,
        start_time,
        end_time,
        segment.value,
        tariff_id,
        total,
        quote.mode,
        len(groups),
    )
    return quote
