"""Pricing failures.

Every failure carries a machine code, a readable message, the HTTP status the
route should answer with and the diagnostics an operator needs to fix the
tariff configuration. There is no partial result: raising one of these aborts
the whole computation.
"""

from fastapi import status


class PricingError(Exception):
    """Base class for failures that end a price computation."""

    code = "pricing_error"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, **diagnostics):
        self.message = message
        self.diagnostics = diagnostics
        super().__init__(message)

    def as_detail(self) -> dict:
        return {"error": self.message, "code": self.code, **self.diagnostics}


class CourtNotFound(PricingError):
    code = "court_not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, club_id: int, court_id: int):
        super().__init__("Court not found for this club", club_id=club_id, court_id=court_id)


class NoTariffAssigned(PricingError):
    code = "no_tariff_assigned"

    def __init__(self, club_id: int, court_id: int, court_type_id: int):
        super().__init__(
            "No tariff assigned (neither on the court nor as club default for its type)",
            club_id=club_id,
            court_id=court_id,
            court_type_id=court_type_id,
        )


class MissingCanonicalDuration(PricingError):
    code = "missing_canonical_duration"

    def __init__(self, segment: str, tariff_id: int, canonical_duration: int):
        super().__init__(
            f"No {canonical_duration} min rules for segment={segment}. "
            "They are required to detect pricing window changes.",
            segment=segment,
            tariff_id=tariff_id,
            canonical_duration=canonical_duration,
        )


class UncoveredInterval(PricingError):
    code = "uncovered_interval"

    def __init__(self, segment: str, minute_abs: int, missing_duration: int):
        super().__init__(
            "No rule covers part of the requested interval",
            segment=segment,
            minute_abs=minute_abs,
            missing_duration=missing_duration,
        )


class UndecomposableInterval(PricingError):
    code = "undecomposable_interval"

    def __init__(self, segment: str, from_minute: int, to_minute: int, available_pieces: list[int]):
        super().__init__(
            "Could not compose the group price from the durations available for this segment",
            segment=segment,
            from_minute=from_minute,
            to_minute=to_minute,
            minutes=to_minute - from_minute,
            available_pieces=available_pieces,
            suggestion="Add rules for more durations (e.g. 30/90/120) or avoid window changes mid-reservation.",
        )


class NoDirectRule(PricingError):
    code = "no_direct_rule"

    def __init__(self, segment: str, duration_minutes: int):
        super().__init__(
            "No direct rule for this duration covers the start of the reservation",
            segment=segment,
            duration_minutes=duration_minutes,
        )
