"""
Tests for salon_booking/schedule_builder.py and PackageScheduler

Back-to-back layout with the 10-minute gap, multi-professional slot
enumeration, and agreement between the scheduler and the builder.
"""

import unittest

from salon_booking.business_hours import BusinessHoursResolver
from salon_booking.busy_intervals import BusyIntervalIndex
from salon_booking.core import Interval, format_time, lunch_interval, to_local_datetime
from salon_booking.schedule_builder import PackageItem, ScheduleBuilder, total_package_minutes
from salon_booking.slots import PackageScheduler

TUESDAY = "2024-01-02"
SUNDAY = "2024-01-07"


def span(start, end, day=TUESDAY):
    return Interval(to_local_datetime(day, start), to_local_datetime(day, end))


class TestScheduleBuilder(unittest.TestCase):

    def test_package_determinism(self):
        items = [PackageItem("cut", "ana", 30), PackageItem("color", "bia", 45)]
        schedule = ScheduleBuilder(gap_minutes=10).build("2024-01-01", "09:00", items)

        first, second = schedule.steps
        self.assertEqual((format_time(first.starts_at), format_time(first.ends_at)), ("09:00", "09:30"))
        self.assertEqual((format_time(second.starts_at), format_time(second.ends_at)), ("09:40", "10:25"))
        self.assertEqual(format_time(schedule.starts_at), "09:00")
        self.assertEqual(format_time(schedule.ends_at), "10:25")
        self.assertEqual([step.order_index for step in schedule.steps], [0, 1])
        self.assertEqual(second.professional_id, "bia")

        self.assertEqual(ScheduleBuilder(gap_minutes=10).build("2024-01-01", "09:00", items), schedule)

    def test_steps_are_gap_apart(self):
        items = [PackageItem("a", "ana", 20), PackageItem("b", "bia", 15), PackageItem("c", "ana", 40)]
        schedule = ScheduleBuilder(gap_minutes=10).build(TUESDAY, "14:00", items)

        for current, following in zip(schedule.steps, schedule.steps[1:]):
            self.assertEqual((following.starts_at - current.ends_at).total_seconds(), 600)
        self.assertEqual(schedule.starts_at, schedule.steps[0].starts_at)
        self.assertEqual(schedule.ends_at, schedule.steps[-1].ends_at)

    def test_empty_items(self):
        schedule = ScheduleBuilder().build(TUESDAY, "09:00", [])
        self.assertEqual(schedule.steps, ())
        self.assertIsNone(schedule.starts_at)
        self.assertIsNone(schedule.ends_at)

    def test_total_minutes(self):
        items = [PackageItem("cut", "ana", 30), PackageItem("color", "bia", 45)]
        self.assertEqual(total_package_minutes(items, 10), 85)
        self.assertEqual(total_package_minutes([], 10), 0)


class TestPackageScheduler(unittest.TestCase):

    def setUp(self):
        self.resolver = BusinessHoursResolver([])
        self.busy = BusyIntervalIndex(TUESDAY)
        self.items = [PackageItem("cut", "ana", 30), PackageItem("color", "bia", 45)]

    def scheduler(self):
        return PackageScheduler(self.resolver, self.busy, builder=ScheduleBuilder(gap_minutes=10))

    def test_whole_package_must_fit_before_close(self):
        slots = self.scheduler().package_slots(TUESDAY, self.items)

        self.assertEqual(slots[0], "08:00")
        # 85 minutes total: last start 18:35 is off-grid, so 18:30
        self.assertEqual(slots[-1], "18:30")

    def test_lunch_applies_to_every_step(self):
        slots = self.scheduler().package_slots(TUESDAY, self.items)

        # 10:50 -> bia's step 11:30-12:15 hits lunch
        self.assertNotIn("10:50", slots)
        # 10:40 -> bia 11:20-12:05 hits lunch
        self.assertNotIn("10:40", slots)
        # 10:30 -> ana 10:30-11:00, bia 11:10-11:55
        self.assertIn("10:30", slots)
        # ana's step 12:50-13:20 hits lunch
        self.assertNotIn("12:50", slots)
        self.assertIn("13:00", slots)

    def test_each_step_checks_its_own_professional(self):
        # bia busy 09:40-10:25: kills a 09:00 start, ana is untouched
        self.busy.add_commitment("bia", span("09:40", "10:25"))
        slots = self.scheduler().package_slots(TUESDAY, self.items)

        self.assertNotIn("09:00", slots)
        # 08:10 -> bia 08:50-09:35 is clear
        self.assertIn("08:10", slots)
        # ana being free is not enough
        self.assertNotIn("09:30", slots)
        self.assertIn("10:30", slots)

    def test_first_professional_busy(self):
        self.busy.add_commitment("ana", span("08:00", "08:30"))
        slots = self.scheduler().package_slots(TUESDAY, self.items)

        self.assertNotIn("08:00", slots)
        self.assertNotIn("08:20", slots)
        self.assertIn("08:30", slots)

    def test_general_block_hits_all_steps(self):
        self.busy.add_block(None, span("09:00", "09:10"))
        slots = self.scheduler().package_slots(TUESDAY, self.items)

        self.assertNotIn("08:00", slots)  # bia 08:40-09:25
        self.assertNotIn("08:40", slots)  # ana 08:40-09:10
        self.assertIn("09:10", slots)

    def test_closed_day(self):
        self.assertEqual(self.scheduler().package_slots(SUNDAY, self.items), [])

    def test_empty_package(self):
        self.assertEqual(self.scheduler().package_slots(TUESDAY, []), [])
        self.assertEqual(self.scheduler().package_slots("", self.items), [])

    def test_single_item_matches_slot_generator(self):
        from salon_booking.slots import SlotGenerator

        self.busy.add_commitment("ana", span("15:00", "16:00"))
        package = self.scheduler().package_slots(TUESDAY, [PackageItem("cut", "ana", 40)])
        single = SlotGenerator(self.resolver, self.busy).slots("ana", 40, TUESDAY)
        self.assertEqual(package, single)

    def test_slots_and_builder_agree(self):
        self.busy.add_commitment("ana", span("09:00", "10:00"))
        self.busy.add_commitment("bia", span("14:00", "15:30"))
        self.busy.add_block(None, span("17:00", "17:20"))
        lunch = lunch_interval(TUESDAY)
        builder = ScheduleBuilder(gap_minutes=10)

        slots = self.scheduler().package_slots(TUESDAY, self.items)
        self.assertTrue(slots)
        for slot in slots:
            for step in builder.build(TUESDAY, slot, self.items).steps:
                self.assertFalse(lunch.overlaps(step.starts_at, step.ends_at), slot)
                for busy in self.busy.for_professional(step.professional_id):
                    self.assertFalse(busy.overlaps(step.starts_at, step.ends_at), slot)

    def test_longer_last_item_never_adds_slots(self):
        self.busy.add_commitment("bia", span("15:00", "16:00"))
        base = set(self.scheduler().package_slots(TUESDAY, self.items))

        for extra in (10, 25, 60):
            last = self.items[-1]
            longer = self.items[:-1] + [PackageItem(last.service_id, last.professional_id, last.duration_minutes + extra)]
            self.assertTrue(set(self.scheduler().package_slots(TUESDAY, longer)) <= base, extra)

    def test_longer_single_item_never_adds_slots(self):
        self.busy.add_commitment("ana", span("15:00", "16:00"))
        base = set(self.scheduler().package_slots(TUESDAY, [PackageItem("cut", "ana", 30)]))

        for extra in (10, 25, 60):
            longer = [PackageItem("cut", "ana", 30 + extra)]
            self.assertTrue(set(self.scheduler().package_slots(TUESDAY, longer)) <= base, extra)

    def test_longer_first_item_can_push_next_step_past_a_commitment(self):
        self.busy.add_commitment("bia", span("15:00", "16:00"))
        base = self.scheduler().package_slots(TUESDAY, self.items)
        # 15:10 -> bia 15:50-16:35 overlaps the 15:00-16:00 commitment
        self.assertNotIn("15:10", base)

        longer = [PackageItem("cut", "ana", 40), self.items[1]]
        # 15:10 -> ana 15:10-15:50, bia 16:00-16:45 is clear
        self.assertIn("15:10", self.scheduler().package_slots(TUESDAY, longer))
