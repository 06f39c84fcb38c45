"""
Tests for salon_booking/business_hours.py

Row normalization across field-name variants and date resolution with the
built-in Tuesday–Saturday defaults.
"""

import unittest
from datetime import date, datetime, time
from types import SimpleNamespace

from salon_booking.business_hours import (
    BusinessHours,
    BusinessHoursResolver,
    BusinessHoursRule,
    normalize_business_hours,
    read_day_index,
    read_time,
)

MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)


class TestNormalization(unittest.TestCase):

    def test_day_index_variants(self):
        self.assertEqual(read_day_index({"day_of_week": 2}), 2)
        self.assertEqual(read_day_index({"weekday": "3"}), 3)
        self.assertEqual(read_day_index({"day": 7}), 0)
        self.assertEqual(read_day_index({"week_day": 0}), 0)
        self.assertIsNone(read_day_index({"day_index": 8}))
        self.assertIsNone(read_day_index({"day": "monday"}))
        self.assertIsNone(read_day_index({}))

    def test_float_day_index(self):
        self.assertEqual(read_day_index({"day_of_week": 2.0}), 2)
        self.assertEqual(read_day_index({"weekday": 7.0}), 0)
        self.assertEqual(read_day_index({"day": "4.0"}), 4)
        self.assertIsNone(read_day_index({"day": 2.5}))
        self.assertIsNone(read_day_index({"day": True}))

    def test_empty_time_field_falls_through_to_next_name(self):
        row = {"day_of_week": 2, "opens_at": "", "open_time": "09:00", "closes_at": "", "close_time": "11:00"}
        self.assertEqual(normalize_business_hours([row]), [BusinessHoursRule(2, "09:00", "11:00", False)])
        self.assertEqual(BusinessHoursResolver.from_rows([row]).resolve(TUESDAY), BusinessHours("09:00", "11:00"))

        row = {"day_of_week": 2, "opens_at": "late", "opens": "10:00", "closes_at": "18:00"}
        self.assertEqual(normalize_business_hours([row])[0].opens_at, "10:00")

    def test_time_variants(self):
        self.assertEqual(read_time("09:00"), "09:00")
        self.assertEqual(read_time("09:30:00"), "09:30")
        self.assertEqual(read_time("9:00"), "09:00")
        self.assertEqual(read_time("2024-01-02T10:15:00-03:00"), "10:15")
        self.assertEqual(read_time(time(18, 45)), "18:45")
        self.assertEqual(read_time(datetime(2024, 1, 2, 7, 5)), "07:05")
        self.assertIsNone(read_time("late"))
        self.assertIsNone(read_time(""))
        self.assertIsNone(read_time(None))
        self.assertIsNone(read_time(900))
        self.assertIsNone(read_time("25:00"))
        self.assertIsNone(read_time("10:75"))

    def test_normalize_heterogeneous_rows(self):
        rows = [
            {"day_of_week": 2, "opens_at": "09:00", "closes_at": "18:00"},
            {"weekday": 3, "open_time": "10:00:00", "close_time": "19:00:00"},
            SimpleNamespace(day=4, start_time="08:30", end_time="17:30", is_open=False),
            {"day_index": 5, "opens": "08:00", "closes": "12:00", "active": True},
            {"week_day": 6, "open": "08:00", "close": "14:00", "closed": True},
            {"opens_at": "08:00", "closes_at": "20:00"},  # no day: dropped
        ]
        rules = normalize_business_hours(rows)

        self.assertEqual(len(rules), 5)
        self.assertEqual(rules[0], BusinessHoursRule(2, "09:00", "18:00", False))
        self.assertEqual(rules[1], BusinessHoursRule(3, "10:00", "19:00", False))
        self.assertTrue(rules[2].is_closed)
        self.assertFalse(rules[3].is_closed)
        self.assertTrue(rules[4].is_closed)

    def test_normalize_empty(self):
        self.assertEqual(normalize_business_hours(None), [])
        self.assertEqual(normalize_business_hours([]), [])


class TestResolver(unittest.TestCase):

    def test_defaults_without_rules(self):
        resolver = BusinessHoursResolver([])
        self.assertEqual(resolver.resolve(TUESDAY), BusinessHours("08:00", "20:00"))
        self.assertEqual(resolver.resolve(SATURDAY), BusinessHours("08:00", "20:00"))
        self.assertIsNone(resolver.resolve(SUNDAY))
        self.assertIsNone(resolver.resolve(MONDAY))

    def test_rule_overrides_default(self):
        resolver = BusinessHoursResolver.from_rows([{"day_of_week": 1, "opens_at": "10:00", "closes_at": "16:00"}])
        self.assertEqual(resolver.resolve(MONDAY), BusinessHours("10:00", "16:00"))

    def test_closed_rule(self):
        resolver = BusinessHoursResolver.from_rows([{"day_of_week": 2, "is_closed": True}])
        self.assertIsNone(resolver.resolve(TUESDAY))

    def test_missing_times_fall_back_to_default(self):
        resolver = BusinessHoursResolver.from_rows([
            {"day_of_week": 2, "opens_at": "garbage"},
            {"day_of_week": 0, "opens_at": "09:00"},
        ])
        self.assertEqual(resolver.resolve(TUESDAY), BusinessHours("08:00", "20:00"))
        # Sunday has no default window
        self.assertIsNone(resolver.resolve(SUNDAY))

    def test_inverted_window_is_closed(self):
        resolver = BusinessHoursResolver.from_rows([{"day_of_week": 2, "opens_at": "18:00", "closes_at": "09:00"}])
        self.assertIsNone(resolver.resolve(TUESDAY))
        resolver = BusinessHoursResolver.from_rows([{"day_of_week": 2, "opens_at": "09:00", "closes_at": "09:00"}])
        self.assertIsNone(resolver.resolve(TUESDAY))

    def test_first_rule_for_a_day_wins(self):
        resolver = BusinessHoursResolver.from_rows([
            {"day_of_week": 2, "opens_at": "09:00", "closes_at": "12:00"},
            {"day_of_week": 2, "opens_at": "13:00", "closes_at": "18:00"},
        ])
        self.assertEqual(resolver.resolve(TUESDAY), BusinessHours("09:00", "12:00"))

    def test_seven_means_sunday(self):
        resolver = BusinessHoursResolver.from_rows([{"day": 7, "opens_at": "09:00", "closes_at": "13:00"}])
        self.assertEqual(resolver.resolve(SUNDAY), BusinessHours("09:00", "13:00"))

    def test_result_is_cached_per_date(self):
        resolver = BusinessHoursResolver([])
        first = resolver.resolve(TUESDAY)
        self.assertIs(resolver.resolve(TUESDAY), first)
