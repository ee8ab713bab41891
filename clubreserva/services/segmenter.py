"""Window segmenter.

A request is laid on one absolute-minute timeline anchored at midnight of the
requested date: 23:00 -> 01:30 runs from minute 1380 to 1530. Each absolute
minute is priced under one calendar day's rules:

- before the previous-day carry cutoff, the previous day's rules (its
  canonical window crosses midnight and still covers the request start);
- past minute 1440, the current day's rules while its canonical window still
  crosses into that minute, the next day's rules afterwards;
- the current day's rules otherwise.

The interval is then split into groups that share the same canonical rule.
"""

from dataclasses import dataclass

from clubreserva.services.errors import UncoveredInterval
from clubreserva.services.rule_index import DayScope, RuleIndex
from clubreserva.services.windows import (
    CANONICAL_DURATION,
    MINUTES_PER_DAY,
    STEP_MINUTES,
    minute_of_day,
    pick_best_rule,
    rule_crosses_midnight,
    rule_precedence,
    start_in_window,
)


@dataclass(frozen=True)
class CarryWindow:
    rule: object
    cutoff: int  # minute of day where the previous day's window ends


@dataclass(frozen=True)
class Group:
    start: int  # absolute minutes
    end: int
    key: int  # id of the canonical rule shared by the whole group

    @property
    def minutes(self) -> int:
        return self.end - self.start

    @property
    def day_offset(self) -> int:
        return 1 if self.start >= MINUTES_PER_DAY else 0


def find_previous_day_carry(start_minute: int, previous: DayScope) -> CarryWindow | None:
    """Return the previous day's crossing canonical window that still covers start_minute."""
    candidates = [
        r
        for r in previous.rules_for(CANONICAL_DURATION)
        if (r.day_of_week is None or int(r.day_of_week) == previous.dow)
        and rule_crosses_midnight(r)
        and start_in_window(start_minute, minute_of_day(r.start_time), minute_of_day(r.end_time), True)
    ]
    if not candidates:
        return None

    best = min(candidates, key=rule_precedence)
    cutoff = minute_of_day(best.end_time)
    if start_minute >= cutoff:
        # start sits in the evening half of that window, which is the current day's own evening
        return None
    return CarryWindow(rule=best, cutoff=cutoff)


class RuleLocator:
    """Picks the rule pricing an absolute minute for a duration.

    Results are memoized per (minute, duration) for the lifetime of one request.
    """

    def __init__(self, index: RuleIndex, carry: CarryWindow | None = None):
        self.index = index
        self.carry = carry
        self._cache: dict[tuple[int, int], object] = {}

    def scope_at(self, minute_abs: int) -> tuple[DayScope | None, int]:
        """Return the day whose rules apply at minute_abs, and the minute of that day."""
        minute = minute_abs % MINUTES_PER_DAY

        if minute_abs < MINUTES_PER_DAY:
            if self.carry is not None and minute < self.carry.cutoff:
                return self.index.previous, minute
            return self.index.current, minute

        if self.index.following is None:
            return None, minute
        if self._current_day_carries(minute):
            return self.index.current, minute
        return self.index.following, minute

    def _current_day_carries(self, minute: int) -> bool:
        current = self.index.current
        canon = pick_best_rule(current.rules_for(CANONICAL_DURATION), minute, current.dow)
        if canon is None or not rule_crosses_midnight(canon):
            return False
        return minute < minute_of_day(canon.end_time)

    def rule_at(self, minute_abs: int, duration: int):
        key = (minute_abs, duration)
        if key not in self._cache:
            scope, minute = self.scope_at(minute_abs)
            if scope is None:
                self._cache[key] = None
            else:
                self._cache[key] = pick_best_rule(scope.rules_for(duration), minute, scope.dow)
        return self._cache[key]


def build_groups(locator: RuleLocator, start: int, end: int, segment: str) -> list[Group]:
    """Split [start, end) into maximal runs sharing the same canonical rule.

    Walks in STEP_MINUTES steps; raises UncoveredInterval at the first step
    no canonical rule covers.
    """
    groups: list[Group] = []
    group_start = start
    group_key = None

    for t in range(start, end, STEP_MINUTES):
        rule = locator.rule_at(t, CANONICAL_DURATION)
        if rule is None:
            raise UncoveredInterval(segment, t, CANONICAL_DURATION)
        if group_key is not None and rule.id != group_key:
            groups.append(Group(start=group_start, end=t, key=group_key))
            group_start = t
        group_key = rule.id

    groups.append(Group(start=group_start, end=end, key=group_key))
    return groups
