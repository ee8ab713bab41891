"""All models imported here so the mapper registry sees every table."""

from clubreserva.models.base import Base
from clubreserva.models.club import Club, ClubDefaultTariff, Court, CourtType, TariffSheet
from clubreserva.models.member import ClubMembership, ClubRole, User
from clubreserva.models.pricing import PricingRule, Segment

__all__ = [
    "Base",
    "Club",
    "CourtType",
    "Court",
    "TariffSheet",
    "ClubDefaultTariff",
    "PricingRule",
    "Segment",
    "User",
    "ClubMembership",
    "ClubRole",
]
