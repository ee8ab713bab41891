"""Seed the database with a demo padel club and its price list.

Run with: python -m scripts.seed
Creates the club, court types, courts, a tariff sheet with day/night rules for
both segments, the club default tariff, and two test users (an admin and an
instructor).
"""

import asyncio
from datetime import date, time

from sqlalchemy import select

from clubreserva.core.database import async_session_factory, engine
from clubreserva.models import (
    Base,
    Club,
    ClubDefaultTariff,
    ClubMembership,
    ClubRole,
    Court,
    CourtType,
    PricingRule,
    Segment,
    TariffSheet,
    User,
)

COURT_TYPES = ["Padel (glass)", "Padel (wall)"]

# (name, court type index, pinned to the premium sheet)
COURTS = [
    ("Court 1", 0, True),
    ("Court 2", 0, False),
    ("Court 3", 1, False),
    ("Court 4", 1, False),
]

# Hourly price per window; shorter and longer durations are derived from it
WINDOWS = [
    # (start, end, segment, hourly price, day_of_week)
    ("08:00", "22:00", Segment.PUBLIC, 1000, None),
    ("22:00", "08:00", Segment.PUBLIC, 1500, None),
    ("18:00", "22:00", Segment.PUBLIC, 1200, 5),  # Friday evenings
    ("08:00", "22:00", Segment.INSTRUCTOR, 700, None),
    ("22:00", "08:00", Segment.INSTRUCTOR, 1000, None),
]

# duration -> multiplier of the hourly price
DURATIONS = {30: 0.4, 60: 1.0, 90: 1.4, 120: 1.8}


def _t(hhmm: str) -> time:
    h, m = map(int, hhmm.split(":"))
    return time(h, m)


def _rules_for(tariff_id: int, premium: float = 1.0) -> list[PricingRule]:
    rules = []
    for start, end, segment, hourly, dow in WINDOWS:
        start_t, end_t = _t(start), _t(end)
        for duration, factor in DURATIONS.items():
            rules.append(
                PricingRule(
                    tariff_id=tariff_id,
                    segment=segment,
                    day_of_week=dow,
                    valid_from=date(2025, 1, 1),
                    start_time=start_t,
                    end_time=end_t,
                    spans_midnight=end_t <= start_t,
                    duration_minutes=duration,
                    price=round(hourly * factor * premium),
                    priority=1 if dow is not None else 0,
                )
            )
    return rules


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        result = await db.execute(select(Club).where(Club.slug == "club-demo"))
        if result.scalar_one_or_none():
            print("Already seeded.")
            return

        club = Club(name="Club Demo Padel", slug="club-demo")
        db.add(club)
        await db.flush()

        types = [CourtType(name=name) for name in COURT_TYPES]
        db.add_all(types)

        standard = TariffSheet(club_id=club.id, name="Standard 2025")
        premium = TariffSheet(club_id=club.id, name="Premium 2025")
        db.add_all([standard, premium])
        await db.flush()

        db.add_all(_rules_for(standard.id))
        db.add_all(_rules_for(premium.id, premium=1.2))

        for court_type in types:
            db.add(ClubDefaultTariff(club_id=club.id, court_type_id=court_type.id, tariff_id=standard.id))

        for order, (name, type_idx, pinned) in enumerate(COURTS):
            db.add(
                Court(
                    club_id=club.id,
                    court_type_id=types[type_idx].id,
                    tariff_id=premium.id if pinned else None,
                    name=name,
                    sort_order=order,
                )
            )

        admin = User(email="admin@clubdemo.com", first_name="Admin", last_name="Demo")
        instructor = User(email="profe@clubdemo.com", first_name="Profe", last_name="Demo")
        db.add_all([admin, instructor])
        await db.flush()

        db.add(ClubMembership(user_id=admin.id, club_id=club.id, role=ClubRole.ADMIN))
        db.add(ClubMembership(user_id=instructor.id, club_id=club.id, role=ClubRole.INSTRUCTOR))

        await db.commit()

        print(f"Seeded: {club.name}")
        print(f"  {len(COURTS)} courts, {len(COURT_TYPES)} court types")
        print(f"  2 tariff sheets, {len(WINDOWS) * len(DURATIONS)} rules each")
        print(f"  users: {admin.email} (id {admin.id}), {instructor.email} (id {instructor.id})")


if __name__ == "__main__":
    asyncio.run(seed())
