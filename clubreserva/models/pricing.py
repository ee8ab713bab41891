"""Pricing rule model.

One row per configured price point: the price of a reservation of exactly
duration_minutes whose start falls inside [start_time, end_time) on the days
the rule applies to.
"""

import enum
from datetime import date, time
from decimal import Decimal

from sqlalchemy import Boolean, Date, Enum, ForeignKey, Index, Numeric, SmallInteger, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clubreserva.models.base import Base, TimestampMixin


class Segment(enum.StrEnum):
    """Pricing tier a caller falls into."""

    PUBLIC = "public"
    INSTRUCTOR = "instructor"


class PricingRule(TimestampMixin, Base):
    __tablename__ = "pricing_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    tariff_id: Mapped[int] = mapped_column(ForeignKey("tariff_sheets.id"), nullable=False)
    segment: Mapped[Segment] = mapped_column(
        Enum(Segment, name="pricing_segment", values_callable=lambda e: [x.value for x in e]),
        default=Segment.PUBLIC,
        nullable=False,
    )
    day_of_week: Mapped[int | None] = mapped_column(SmallInteger)  # 0=Sunday..6=Saturday, NULL = every day

    # Validity (inclusive), open-ended when valid_until is NULL
    valid_from: Mapped[date] = mapped_column(Date, nullable=False)
    valid_until: Mapped[date | None] = mapped_column(Date)

    # Window the reservation start must fall in
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    spans_midnight: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    duration_minutes: Mapped[int] = mapped_column(nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    priority: Mapped[int] = mapped_column(default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    tariff: Mapped["TariffSheet"] = relationship(back_populates="rules")

    __table_args__ = (
        # The pricing lookup: tariff + segment + duration, filtered by validity
        Index("ix_rules_lookup", "tariff_id", "segment", "duration_minutes", "active"),
    )

    def __repr__(self) -> str:
        return (
            f"<PricingRule {self.id} {self.segment} {self.start_time:%H:%M}-{self.end_time:%H:%M} "
            f"{self.duration_minutes}min tariff={self.tariff_id}>"
        )


from clubreserva.models.club import TariffSheet  # noqa: E402
