"""Pydantic schemas for API serialisation."""

import re
from datetime import date, time
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from clubreserva.models.pricing import Segment
from clubreserva.services.windows import SUPPORTED_DURATIONS, request_bounds

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# --- Pricing ---


class PriceQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    club_id: int = Field(gt=0)
    court_id: int = Field(gt=0)
    booking_date: date = Field(alias="date")  # calendar day the reservation starts on
    start_time: str = Field(pattern=_HHMM_PATTERN)  # "HH:MM"
    end_time: str = Field(pattern=_HHMM_PATTERN)  # "HH:MM", <= start_time means overnight
    segment_override: Segment | None = None

    @field_validator("booking_date", mode="before")
    @classmethod
    def _strict_iso_date(cls, value):
        if isinstance(value, str) and not _DATE_RE.match(value):
            raise ValueError("date must be YYYY-MM-DD")
        return value

    @model_validator(mode="after")
    def _supported_duration(self):
        start, end = request_bounds(self.start_time, self.end_time)
        duration = end - start
        if duration not in SUPPORTED_DURATIONS:
            raise ValueError(
                f"Unsupported duration {duration} minutes. Choose from: {'/'.join(map(str, SUPPORTED_DURATIONS))}."
            )
        return self


class PriceBreakdownOut(BaseModel):
    from_time: str  # "HH:MM", suffixed " (+1)" on the next day
    # a group closing exactly at midnight ends at "24:00" of its own day
    to_time: str
    minutes: int
    day_offset: int
    rule_id_applied: int | None
    duration_used: int
    subtotal: float
    composition: list[int] | None = None


class PriceQuoteOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    club_id: int
    court_id: int
    tariff_id: int
    user_id: int | None
    segment: str
    booking_date: date = Field(alias="date")
    start_time: str
    end_time: str
    duration_minutes: int
    price_total: int
    prorated: bool
    mode: str
    rule_id: int | None
    breakdown: list[PriceBreakdownOut] | None = None
    debug: dict[str, Any] | None = None


# --- Tariff rules (operator tooling) ---


class PricingRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tariff_id: int
    segment: str
    day_of_week: int | None
    valid_from: date
    valid_until: date | None
    start_time: time
    end_time: time
    spans_midnight: bool
    duration_minutes: int
    price: Decimal
    priority: int
    active: bool


class TariffRulesOut(BaseModel):
    tariff_id: int
    tariff_name: str
    rules: list[PricingRuleOut]
