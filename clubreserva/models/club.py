"""Club, court and tariff-sheet models.

Club = a sports club (tenant) with its own courts and price lists.
CourtType = a kind of court (e.g. padel glass, football 5) used to pick a default tariff.
Court = an individual bookable court, optionally pinned to a tariff sheet.
TariffSheet = a named collection of pricing rules.
ClubDefaultTariff = the tariff sheet a club applies to every court of a type
that has no direct assignment.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clubreserva.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from clubreserva.models.pricing import PricingRule


class Club(TimestampMixin, Base):
    __tablename__ = "clubs"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    courts: Mapped[list["Court"]] = relationship(back_populates="club", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Club {self.slug}>"


class CourtType(TimestampMixin, Base):
    __tablename__ = "court_types"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<CourtType {self.name}>"


class TariffSheet(TimestampMixin, Base):
    __tablename__ = "tariff_sheets"

    id: Mapped[int] = mapped_column(primary_key=True)
    club_id: Mapped[int] = mapped_column(ForeignKey("clubs.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    rules: Mapped[list["PricingRule"]] = relationship(back_populates="tariff", lazy="raise")

    __table_args__ = (Index("ix_tariff_sheets_club", "club_id"),)

    def __repr__(self) -> str:
        return f"<TariffSheet {self.name} @ club {self.club_id}>"


class Court(TimestampMixin, Base):
    """A bookable court. tariff_id overrides the club default for its court type."""

    __tablename__ = "courts"

    id: Mapped[int] = mapped_column(primary_key=True)
    club_id: Mapped[int] = mapped_column(ForeignKey("clubs.id"), nullable=False)
    court_type_id: Mapped[int] = mapped_column(ForeignKey("court_types.id"), nullable=False)
    tariff_id: Mapped[int | None] = mapped_column(ForeignKey("tariff_sheets.id"))
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(default=0, nullable=False)

    # Relationships
    club: Mapped["Club"] = relationship(back_populates="courts")
    court_type: Mapped["CourtType"] = relationship()

    __table_args__ = (Index("ix_courts_club", "club_id", "id"),)

    def __repr__(self) -> str:
        return f"<Court {self.name} @ club {self.club_id}>"


class ClubDefaultTariff(TimestampMixin, Base):
    __tablename__ = "club_default_tariffs"

    id: Mapped[int] = mapped_column(primary_key=True)
    club_id: Mapped[int] = mapped_column(ForeignKey("clubs.id"), nullable=False)
    court_type_id: Mapped[int] = mapped_column(ForeignKey("court_types.id"), nullable=False)
    tariff_id: Mapped[int] = mapped_column(ForeignKey("tariff_sheets.id"), nullable=False)

    __table_args__ = (Index("ix_default_tariff_club_type", "club_id", "court_type_id", unique=True),)

    def __repr__(self) -> str:
        return f"<ClubDefaultTariff club={self.club_id} type={self.court_type_id} tariff={self.tariff_id}>"
