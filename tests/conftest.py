"""Shared test fixtures.

Pricing tests never touch Postgres: an in-memory store answers the same
read-only queries PricingStore runs, so the whole engine runs end to end.
"""

import itertools
from datetime import date, time
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from clubreserva.core.dependencies import get_pricing_store
from clubreserva.main import app
from clubreserva.models.pricing import Segment

_rule_ids = itertools.count(1)


def _t(hhmm: str) -> time:
    h, m = map(int, hhmm.split(":"))
    return time(h, m)


def build_rule(start: str, end: str, duration: int = 60, price=1000, **overrides) -> SimpleNamespace:
    """A PricingRule-shaped row. spans_midnight is inferred from the window unless given."""
    start_t, end_t = _t(start), _t(end)
    defaults = {
        "id": next(_rule_ids),
        "tariff_id": 1,
        "segment": Segment.PUBLIC,
        "day_of_week": None,
        "valid_from": date(2020, 1, 1),
        "valid_until": None,
        "start_time": start_t,
        "end_time": end_t,
        "spans_midnight": end_t <= start_t,
        "duration_minutes": duration,
        "price": price,
        "priority": 0,
        "active": True,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


class InMemoryStore:
    """Dict-backed stand-in for PricingStore."""

    def __init__(self):
        self.courts: dict[tuple[int, int], SimpleNamespace] = {}
        self.defaults: dict[tuple[int, int], int] = {}
        self.tariffs: dict[int, SimpleNamespace] = {}
        self.rules: list[SimpleNamespace] = []
        self.roles: set[tuple[int, int, str]] = set()
        self.role_lookups = 0

    def add_court(self, club_id=1, court_id=1, court_type_id=1, tariff_id=None):
        self.courts[(club_id, court_id)] = SimpleNamespace(
            id=court_id, club_id=club_id, court_type_id=court_type_id, tariff_id=tariff_id
        )

    def add_rules(self, *rules):
        self.rules.extend(rules)

    def _valid(self, tariff_id, segment, on_date):
        return [
            r
            for r in self.rules
            if r.tariff_id == tariff_id
            and r.segment == segment
            and r.active
            and r.valid_from <= on_date
            and (r.valid_until is None or r.valid_until >= on_date)
        ]

    async def get_court(self, club_id, court_id):
        return self.courts.get((club_id, court_id))

    async def get_default_tariff_id(self, club_id, court_type_id):
        return self.defaults.get((club_id, court_type_id))

    async def list_available_durations(self, tariff_id, segment, on_date):
        return sorted({r.duration_minutes for r in self._valid(tariff_id, segment, on_date)})

    async def list_rules(self, tariff_id, segment, on_date, durations):
        durations = set(durations)
        rules = [r for r in self._valid(tariff_id, segment, on_date) if r.duration_minutes in durations]
        return sorted(rules, key=lambda r: (-r.priority, r.id))

    async def has_club_role(self, user_id, club_id, role):
        self.role_lookups += 1
        return (user_id, club_id, str(role)) in self.roles

    async def get_tariff(self, club_id, tariff_id):
        tariff = self.tariffs.get(tariff_id)
        if tariff is None or tariff.club_id != club_id:
            return None
        return tariff

    async def list_tariff_rules(self, tariff_id):
        return sorted((r for r in self.rules if r.tariff_id == tariff_id), key=lambda r: (str(r.segment), r.id))


@pytest.fixture
def store():
    """Club 1 with court 1 pinned to tariff 1. Tests add their own rules."""
    s = InMemoryStore()
    s.add_court(club_id=1, court_id=1, court_type_id=1, tariff_id=1)
    s.tariffs[1] = SimpleNamespace(id=1, club_id=1, name="Summer 2025")
    return s


@pytest.fixture
def rule():
    return build_rule


@pytest.fixture
async def client(store):
    app.dependency_overrides[get_pricing_store] = lambda: store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
