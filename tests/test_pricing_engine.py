"""Unit tests for the pure pricing pieces: windows, segmenter, decomposition (no DB, no HTTP)."""

from datetime import date, time
from decimal import Decimal

import pytest

from clubreserva.services.composer import cheapest_decomposition, price_direct, price_group
from clubreserva.services.errors import NoDirectRule, UncoveredInterval, UndecomposableInterval
from clubreserva.services.pricing import _label, round_total
from clubreserva.services.rule_index import DayScope, RuleIndex, bucket_rules, supported_subset
from clubreserva.services.segmenter import Group, RuleLocator, build_groups, find_previous_day_carry
from clubreserva.services.windows import (
    day_of_week,
    format_hhmm,
    parse_hhmm,
    pick_best_rule,
    request_bounds,
    rule_crosses_midnight,
    start_in_window,
)

TUESDAY = date(2025, 6, 10)


def _scope(on_date, rules, available=None):
    durations = sorted({r.duration_minutes for r in rules})
    return DayScope(
        on_date=on_date,
        dow=day_of_week(on_date),
        available=frozenset(available if available is not None else durations),
        rules=bucket_rules(rules, durations),
    )


def _index(rules, previous_rules=None, next_rules=None, with_next=False):
    """Same rule list on every day unless previous/next days are given explicitly."""
    prev_day = date(2025, 6, 9)
    next_day = date(2025, 6, 11)
    previous = _scope(prev_day, rules if previous_rules is None else previous_rules)
    current = _scope(TUESDAY, rules)
    following = None
    if with_next:
        following = _scope(next_day, rules if next_rules is None else next_rules)
    available = previous.available | current.available | (following.available if following else frozenset())
    return RuleIndex(previous=previous, current=current, following=following, available=available)


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------


class TestTimeHelpers:
    def test_parse_and_format(self):
        assert parse_hhmm("21:30") == 1290
        assert parse_hhmm("00:00") == 0
        assert format_hhmm(1290) == "21:30"
        assert format_hhmm(0) == "00:00"

    def test_day_of_week_sunday_zero(self):
        assert day_of_week(date(2025, 6, 8)) == 0  # Sunday
        assert day_of_week(TUESDAY) == 2
        assert day_of_week(date(2025, 6, 14)) == 6  # Saturday

    def test_request_bounds_same_day(self):
        assert request_bounds("21:00", "22:30") == (1260, 1350)

    def test_request_bounds_overnight(self):
        assert request_bounds("23:00", "01:30") == (1380, 1530)

    def test_equal_times_mean_full_wrap(self):
        # end <= start always rolls to the next day
        assert request_bounds("10:00", "10:00") == (600, 2040)


class TestWindows:
    def test_plain_window_half_open(self):
        assert start_in_window(480, 480, 1320, False)
        assert start_in_window(1319, 480, 1320, False)
        assert not start_in_window(1320, 480, 1320, False)

    def test_crossing_window_wraps(self):
        assert start_in_window(1380, 1320, 480, True)
        assert start_in_window(0, 1320, 480, True)
        assert start_in_window(479, 1320, 480, True)
        assert not start_in_window(480, 1320, 480, True)
        assert not start_in_window(1000, 1320, 480, True)

    def test_crossing_inferred_from_times(self, rule):
        r = rule("22:00", "08:00", spans_midnight=False)
        assert rule_crosses_midnight(r)
        assert not rule_crosses_midnight(rule("08:00", "22:00"))


class TestPickBestRule:
    def test_no_match(self, rule):
        assert pick_best_rule([rule("08:00", "22:00")], 1380, 2) is None

    def test_priority_wins(self, rule):
        low = rule("08:00", "22:00", price=1000, priority=0)
        high = rule("08:00", "22:00", price=1300, priority=5)
        assert pick_best_rule([low, high], 600, 2) is high

    def test_day_specific_beats_generic_on_equal_priority(self, rule):
        generic = rule("08:00", "22:00", price=1000)
        tuesday = rule("08:00", "22:00", price=1200, day_of_week=2)
        assert pick_best_rule([generic, tuesday], 600, 2) is tuesday
        # On Wednesday only the generic one applies
        assert pick_best_rule([generic, tuesday], 600, 3) is generic

    def test_higher_priority_generic_beats_specific(self, rule):
        generic = rule("08:00", "22:00", price=1000, priority=3)
        tuesday = rule("08:00", "22:00", price=1200, day_of_week=2)
        assert pick_best_rule([generic, tuesday], 600, 2) is generic


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


class TestAvailability:
    def test_supported_subset_drops_unknown(self):
        assert supported_subset([60, 45, 30, 300, 60]) == frozenset({30, 60})

    def test_bucket_rules_by_duration(self, rule):
        r30 = rule("08:00", "22:00", duration=30)
        r60 = rule("08:00", "22:00", duration=60)
        buckets = bucket_rules([r30, r60], [30, 60, 90])
        assert buckets == {30: [r30], 60: [r60], 90: []}


# ---------------------------------------------------------------------------
# Segmenter
# ---------------------------------------------------------------------------


class TestPreviousDayCarry:
    def test_early_start_carries(self, rule):
        night = rule("22:00", "03:00")
        carry = find_previous_day_carry(60, _scope(date(2025, 6, 9), [night]))
        assert carry is not None
        assert carry.cutoff == 180
        assert carry.rule is night

    def test_start_at_cutoff_does_not_carry(self, rule):
        night = rule("22:00", "03:00")
        assert find_previous_day_carry(180, _scope(date(2025, 6, 9), [night])) is None

    def test_evening_start_does_not_carry(self, rule):
        night = rule("22:00", "03:00")
        assert find_previous_day_carry(1380, _scope(date(2025, 6, 9), [night])) is None

    def test_non_crossing_rule_ignored(self, rule):
        early = rule("00:00", "08:00")
        assert find_previous_day_carry(60, _scope(date(2025, 6, 9), [early])) is None

    def test_other_weekday_rule_ignored(self, rule):
        # Previous day is Monday (1); a Friday-only window must not carry
        night = rule("22:00", "03:00", day_of_week=5)
        assert find_previous_day_carry(60, _scope(date(2025, 6, 9), [night])) is None


class TestBuildGroups:
    def test_single_window_single_group(self, rule):
        day = rule("08:00", "22:00")
        locator = RuleLocator(_index([day]))
        groups = build_groups(locator, 600, 720, "public")
        assert groups == [Group(start=600, end=720, key=day.id)]

    def test_boundary_splits_groups(self, rule):
        day = rule("08:00", "22:00")
        night = rule("22:00", "08:00")
        locator = RuleLocator(_index([day, night]))
        groups = build_groups(locator, 1260, 1350, "public")
        assert [(g.start, g.end, g.key) for g in groups] == [(1260, 1320, day.id), (1320, 1350, night.id)]

    def test_groups_cover_interval_without_gaps(self, rule):
        rules = [rule("08:00", "18:00"), rule("18:00", "20:00"), rule("20:00", "08:00")]
        locator = RuleLocator(_index(rules, with_next=True))
        start, end = 1020, 1260
        groups = build_groups(locator, start, end, "public")
        assert groups[0].start == start
        assert groups[-1].end == end
        for a, b in zip(groups, groups[1:]):
            assert a.end == b.start
        assert sum(g.minutes for g in groups) == end - start

    def test_uncovered_minute_raises(self, rule):
        locator = RuleLocator(_index([rule("08:00", "22:00")]))
        with pytest.raises(UncoveredInterval) as exc_info:
            build_groups(locator, 1260, 1380, "public")
        assert exc_info.value.diagnostics["minute_abs"] == 1320
        assert exc_info.value.diagnostics["missing_duration"] == 60

    def test_current_day_window_carries_past_midnight(self, rule):
        # Tuesday-only night window; Wednesday has no night rule of its own
        night = rule("22:00", "02:00", day_of_week=2)
        early = rule("02:00", "08:00")
        locator = RuleLocator(_index([night, early], with_next=True))
        groups = build_groups(locator, 1380, 1560, "public")
        assert [(g.start, g.end, g.key) for g in groups] == [(1380, 1560, night.id)]
        scope, minute = locator.scope_at(1470)
        assert scope.on_date == TUESDAY
        assert minute == 30

    def test_next_day_rules_after_carry_ends(self, rule):
        night = rule("22:00", "01:00", day_of_week=2)
        early = rule("01:00", "08:00")
        locator = RuleLocator(_index([night, early], with_next=True))
        groups = build_groups(locator, 1380, 1560, "public")
        assert [(g.start, g.end, g.key) for g in groups] == [(1380, 1500, night.id), (1500, 1560, early.id)]
        scope, _ = locator.scope_at(1500)
        assert scope.on_date == date(2025, 6, 11)

    def test_previous_day_carry_scope(self, rule):
        night = rule("22:00", "01:00", day_of_week=1)  # Monday night
        early = rule("01:00", "08:00")
        index = _index([early], previous_rules=[night, early])
        carry = find_previous_day_carry(30, index.previous)
        locator = RuleLocator(index, carry)
        groups = build_groups(locator, 30, 90, "public")
        assert [(g.start, g.end, g.key) for g in groups] == [(30, 60, night.id), (60, 90, early.id)]
        assert locator.scope_at(30)[0].on_date == date(2025, 6, 9)
        assert locator.scope_at(60)[0].on_date == TUESDAY

    def test_rule_lookup_memoized(self, rule):
        day = rule("08:00", "22:00")
        index = _index([day])
        locator = RuleLocator(index)
        assert locator.rule_at(600, 60) is day
        index.current.rules[60] = []
        # Cached for this request even though the underlying rules changed
        assert locator.rule_at(600, 60) is day


# ---------------------------------------------------------------------------
# Decomposition
# ---------------------------------------------------------------------------


class TestDecomposition:
    def test_cheapest_combination(self):
        result = cheapest_decomposition(90, {30: Decimal(600), 60: Decimal(1000)})
        assert result.cost == Decimal(1600)
        assert result.composition == (30, 60)

    def test_many_small_pieces_when_cheaper(self):
        result = cheapest_decomposition(90, {30: Decimal(400), 60: Decimal(1000)})
        assert result.cost == Decimal(1200)
        assert result.composition == (30, 30, 30)

    def test_no_cheaper_combination_exists(self):
        prices = {30: Decimal(500), 60: Decimal(900), 90: Decimal(1500), 120: Decimal(1700)}
        result = cheapest_decomposition(150, prices)
        # 120+30 = 2200, 90+60 = 2400, 60+60+30 = 2300, 5x30 = 2500
        assert result.cost == Decimal(2200)
        assert sum(result.composition) == 150

    def test_impossible_sum(self):
        assert cheapest_decomposition(90, {60: Decimal(1000)}) is None

    def test_no_pieces(self):
        assert cheapest_decomposition(60, {}) is None

    def test_not_multiple_of_step(self):
        assert cheapest_decomposition(45, {30: Decimal(400)}) is None


class TestPriceGroup:
    def test_exact_duration_uses_rule(self, rule):
        r90 = rule("08:00", "22:00", duration=90, price=1400)
        index = _index([rule("08:00", "22:00"), r90])
        result = price_group(RuleLocator(index), Group(600, 690, 0), "public")
        assert result.subtotal == Decimal(1400)
        assert result.rule_id == r90.id
        assert result.composition is None

    def test_falls_back_to_decomposition(self, rule):
        index = _index([rule("08:00", "22:00", price=1000), rule("08:00", "22:00", duration=30, price=600)])
        result = price_group(RuleLocator(index), Group(600, 690, 0), "public")
        assert result.subtotal == Decimal(1600)
        assert result.rule_id is None
        assert result.composition == (30, 60)

    def test_undecomposable_reports_pieces(self, rule):
        index = _index([rule("08:00", "22:00")])
        with pytest.raises(UndecomposableInterval) as exc_info:
            price_group(RuleLocator(index), Group(600, 690, 0), "public")
        detail = exc_info.value.as_detail()
        assert detail["code"] == "undecomposable_interval"
        assert detail["minutes"] == 90
        assert detail["available_pieces"] == [60]

    def test_direct_uses_exact_rule(self, rule):
        r90 = rule("08:00", "22:00", duration=90, price=1400)
        index = _index([rule("08:00", "22:00"), r90])
        result = price_direct(RuleLocator(index), Group(600, 690, 0), "public")
        assert result.subtotal == Decimal(1400)
        assert result.rule_id == r90.id

    def test_direct_never_decomposes(self, rule):
        index = _index([rule("08:00", "22:00", price=1000), rule("08:00", "22:00", duration=30, price=600)])
        with pytest.raises(NoDirectRule) as exc_info:
            price_direct(RuleLocator(index), Group(600, 690, 0), "public")
        assert exc_info.value.diagnostics == {"segment": "public", "duration_minutes": 90}


class TestBreakdownLabels:
    def test_same_day(self):
        assert _label(630) == "10:30"

    def test_next_day_marker(self):
        assert _label(1530) == "01:30 (+1)"
        assert _label(1440) == "00:00 (+1)"

    def test_midnight_close_stays_on_its_day(self):
        assert _label(1440, closing=True) == "24:00"
        assert _label(1500, closing=True) == "01:00 (+1)"


class TestRounding:
    def test_half_up(self):
        assert round_total(Decimal("1400.5")) == 1401
        assert round_total(Decimal("1400.49")) == 1400
        assert round_total(Decimal("2500")) == 2500
