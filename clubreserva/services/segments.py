"""Segment and tariff resolution: who is asking, and which tariff sheet prices the court."""

import logging

from sqlalchemy.exc import SQLAlchemyError

from clubreserva.models.member import ClubRole
from clubreserva.models.pricing import Segment
from clubreserva.services.errors import CourtNotFound, NoTariffAssigned
from clubreserva.services.store import PricingStore

logger = logging.getLogger(__name__)


async def resolve_segment(
    store: PricingStore,
    user_id: int | None,
    club_id: int,
    override: Segment | None = None,
) -> Segment:
    """Map the caller to a pricing segment.

    An explicit override is trusted verbatim (admin tooling prices on behalf of
    someone else). Anonymous callers are public. A failing role lookup falls
    back to public so bookings are never blocked by it.
    """
    if override is not None:
        logger.info("Segment override %s used for club %s (caller %s)", override, club_id, user_id)
        return Segment(override)

    if user_id is None:
        return Segment.PUBLIC

    try:
        is_instructor = await store.has_club_role(user_id, club_id, ClubRole.INSTRUCTOR)
    except SQLAlchemyError:
        logger.exception("Instructor role lookup failed for user %s in club %s, assuming public", user_id, club_id)
        return Segment.PUBLIC

    return Segment.INSTRUCTOR if is_instructor else Segment.PUBLIC


async def resolve_tariff_id(store: PricingStore, club_id: int, court_id: int) -> int:
    """Direct court assignment first, then the club default for the court's type."""
    court = await store.get_court(club_id, court_id)
    if court is None:
        raise CourtNotFound(club_id, court_id)

    if court.tariff_id:
        return int(court.tariff_id)

    default_id = await store.get_default_tariff_id(club_id, court.court_type_id)
    if default_id:
        return int(default_id)

    raise NoTariffAssigned(club_id, court_id, court.court_type_id)
