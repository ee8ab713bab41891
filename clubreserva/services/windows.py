"""Time-of-day arithmetic and rule matching.

Pure calculation module: no database, no async, no FastAPI dependencies.
Times are handled as minutes into the day (0..1439); rule rows only need the
attributes of PricingRule, so tests can pass SimpleNamespace objects.
"""

from datetime import date, time

SUPPORTED_DURATIONS = (30, 60, 90, 120, 150, 180, 210, 240)

# The duration almost every tariff configures. Its rules are the probe used to
# detect pricing window boundaries and midnight carry.
CANONICAL_DURATION = 60

STEP_MINUTES = 30
MINUTES_PER_DAY = 1440


def parse_hhmm(value: str) -> int:
    """'21:30' -> 1290."""
    h, m = map(int, value[:5].split(":"))
    return h * 60 + m


def minute_of_day(t: time) -> int:
    return t.hour * 60 + t.minute


def format_hhmm(minute_in_day: int) -> str:
    return f"{minute_in_day // 60:02d}:{minute_in_day % 60:02d}"


def day_of_week(d: date) -> int:
    """Day of week with Sunday = 0 (date.weekday() has Monday = 0)."""
    return (d.weekday() + 1) % 7


def request_bounds(start_time: str, end_time: str) -> tuple[int, int]:
    """Absolute [start, end) minutes of a request; end <= start rolls into the next day."""
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if end <= start:
        end += MINUTES_PER_DAY
    return start, end


def rule_crosses_midnight(rule) -> bool:
    return bool(rule.spans_midnight) or minute_of_day(rule.end_time) <= minute_of_day(rule.start_time)


def start_in_window(start: int, window_from: int, window_to: int, crosses: bool) -> bool:
    """Whether a minute-of-day falls in [from, to), wrapping past 24:00 when crosses."""
    if not crosses:
        return window_from <= start < window_to
    return start >= window_from or start < window_to


def rule_matches(rule, minute: int, dow: int) -> bool:
    if rule.day_of_week is not None and int(rule.day_of_week) != dow:
        return False
    return start_in_window(
        minute,
        minute_of_day(rule.start_time),
        minute_of_day(rule.end_time),
        rule_crosses_midnight(rule),
    )


def rule_precedence(rule) -> tuple:
    # priority desc, then day-specific before every-day, then lowest id
    return (-int(rule.priority), rule.day_of_week is None, rule.id)


def pick_best_rule(rules, minute: int, dow: int):
    """Return the winning rule whose window contains minute on day dow, or None."""
    matches = [r for r in rules if rule_matches(r, minute, dow)]
    if not matches:
        return None
    return min(matches, key=rule_precedence)
