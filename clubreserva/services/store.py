"""Read-only queries against the club / tariff / rule store.

The pricing engine talks to the store only through PricingStore so the whole
computation can run against an in-memory double in tests.
"""

from collections.abc import Iterable
from datetime import date

from sqlalchemy import distinct, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from clubreserva.models.club import ClubDefaultTariff, Court, TariffSheet
from clubreserva.models.member import ClubMembership, ClubRole
from clubreserva.models.pricing import PricingRule, Segment


def _valid_on(on_date: date):
    return (
        PricingRule.valid_from <= on_date,
        or_(PricingRule.valid_until.is_(None), PricingRule.valid_until >= on_date),
    )


class PricingStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_court(self, club_id: int, court_id: int) -> Court | None:
        result = await self.db.execute(select(Court).where(Court.id == court_id, Court.club_id == club_id))
        return result.scalar_one_or_none()

    async def get_default_tariff_id(self, club_id: int, court_type_id: int) -> int | None:
        result = await self.db.execute(
            select(ClubDefaultTariff.tariff_id).where(
                ClubDefaultTariff.club_id == club_id,
                ClubDefaultTariff.court_type_id == court_type_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_available_durations(self, tariff_id: int, segment: Segment, on_date: date) -> list[int]:
        """Distinct durations with at least one active rule valid on on_date."""
        result = await self.db.execute(
            select(distinct(PricingRule.duration_minutes)).where(
                PricingRule.tariff_id == tariff_id,
                PricingRule.segment == segment,
                PricingRule.active.is_(True),
                *_valid_on(on_date),
            )
        )
        return list(result.scalars().all())

    async def list_rules(
        self,
        tariff_id: int,
        segment: Segment,
        on_date: date,
        durations: Iterable[int],
    ) -> list[PricingRule]:
        """Active rules valid on on_date for the given durations, highest priority first."""
        durations = list(durations)
        if not durations:
            return []
        result = await self.db.execute(
            select(PricingRule)
            .where(
                PricingRule.tariff_id == tariff_id,
                PricingRule.segment == segment,
                PricingRule.duration_minutes.in_(durations),
                PricingRule.active.is_(True),
                *_valid_on(on_date),
            )
            .order_by(PricingRule.priority.desc(), PricingRule.id)
        )
        return list(result.scalars().all())

    async def has_club_role(self, user_id: int, club_id: int, role: ClubRole) -> bool:
        result = await self.db.execute(
            select(ClubMembership.id)
            .where(
                ClubMembership.user_id == user_id,
                ClubMembership.club_id == club_id,
                ClubMembership.role == role,
                ClubMembership.is_active.is_(True),
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    # ---------------------------------------------------------------------------
    # Operator tooling
    # ---------------------------------------------------------------------------

    async def get_tariff(self, club_id: int, tariff_id: int) -> TariffSheet | None:
        result = await self.db.execute(
            select(TariffSheet).where(TariffSheet.id == tariff_id, TariffSheet.club_id == club_id)
        )
        return result.scalar_one_or_none()

    async def list_tariff_rules(self, tariff_id: int) -> list[PricingRule]:
        result = await self.db.execute(
            select(PricingRule)
            .where(PricingRule.tariff_id == tariff_id)
            .order_by(
                PricingRule.segment,
                PricingRule.priority.desc(),
                PricingRule.day_of_week.asc().nulls_first(),
                PricingRule.start_time,
                PricingRule.duration_minutes,
            )
        )
        return list(result.scalars().all())
