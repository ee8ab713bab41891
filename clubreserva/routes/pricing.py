"""Reservation pricing route."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from clubreserva.core.dependencies import get_optional_user_id, get_pricing_store
from clubreserva.schemas import PriceBreakdownOut, PriceQuery, PriceQuoteOut
from clubreserva.services.errors import PricingError
from clubreserva.services.pricing import PriceQuote, calculate_price
from clubreserva.services.store import PricingStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["pricing"])


def _build_quote_out(quote: PriceQuote) -> PriceQuoteOut:
    out = PriceQuoteOut(
        ok=True,
        club_id=quote.club_id,
        court_id=quote.court_id,
        tariff_id=quote.tariff_id,
        user_id=quote.user_id,
        segment=quote.segment.value,
        booking_date=quote.booking_date,
        start_time=quote.start_time,
        end_time=quote.end_time,
        duration_minutes=quote.duration_minutes,
        price_total=quote.price_total,
        prorated=quote.prorated,
        mode=quote.mode,
        rule_id=quote.rule_id,
    )
    if quote.has_breakdown:
        lines = []
        for line in quote.breakdown:
            item = PriceBreakdownOut(
                from_time=line.from_time,
                to_time=line.to_time,
                minutes=line.minutes,
                day_offset=line.day_offset,
                rule_id_applied=line.rule_id_applied,
                duration_used=line.duration_used,
                subtotal=line.subtotal,
            )
            if line.composition is not None:
                item.composition = line.composition
            lines.append(item)
        out.breakdown = lines
        out.debug = quote.debug
    return out


@router.post("/price", response_model=PriceQuoteOut, response_model_exclude_unset=True)
async def price_booking(
    body: PriceQuery,
    user_id: int | None = Depends(get_optional_user_id),
    store: PricingStore = Depends(get_pricing_store),
):
    """Price a reservation. Breakdown and debug are only returned for prorated (multi-group) prices."""
    try:
        quote = await calculate_price(
            store,
            club_id=body.club_id,
            court_id=body.court_id,
            booking_date=body.booking_date,
            start_time=body.start_time,
            end_time=body.end_time,
            user_id=user_id,
            segment_override=body.segment_override,
        )
    except PricingError as exc:
        # Configuration gaps need an operator, not a retry
        logger.warning("Pricing failed for club %s court %s: %s", body.club_id, body.court_id, exc.as_detail())
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail())

    return _build_quote_out(quote)
