"""Unit tests for property value normalization."""
from __future__ import annotations

import inspect
import json
import unittest
from datetime import date, datetime, time, timedelta, timezone
from typing import get_args

from tests._bootstrap import bootstrap_imports


bootstrap_imports()

from graphsync.indexing.values import Duration, GeoPoint, PropertyValue, normalize_value  # noqa: E402


class NormalizeValueTests(unittest.TestCase):
    def test_point_keeps_two_coordinates(self) -> None:
        self.assertEqual(normalize_value(GeoPoint(x=1.0, y=2.0)), [1.0, 2.0])

    def test_3d_point_drops_z(self) -> None:
        self.assertEqual(
            normalize_value(GeoPoint(x=1, y=2, z=3)),
            normalize_value(GeoPoint(x=1, y=2)),
        )

    def test_date(self) -> None:
        self.assertEqual(normalize_value(date(2020, 3, 7)), "2020-03-07")

    def test_zoned_datetime_renders_signed_offset(self) -> None:
        value = datetime(2020, 3, 7, 9, 5, 4, 123456, tzinfo=timezone(timedelta(hours=2)))

        self.assertEqual(normalize_value(value), "2020-03-07T09:05:04.123+0200")

    def test_negative_offset(self) -> None:
        value = datetime(2020, 3, 7, 9, 5, 4, tzinfo=timezone(-timedelta(hours=5, minutes=30)))

        self.assertEqual(normalize_value(value), "2020-03-07T09:05:04.000-0530")

    def test_utc_datetime(self) -> None:
        value = datetime(2021, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)

        self.assertEqual(normalize_value(value), "2021-12-31T23:59:59.999+0000")

    def test_local_datetime_uses_literal_z(self) -> None:
        self.assertEqual(normalize_value(datetime(2020, 1, 2, 3, 4, 5)), "2020-01-02T03:04:05.000Z")

    def test_time_with_offset_keeps_literal_z(self) -> None:
        value = time(10, 30, 15, tzinfo=timezone(timedelta(hours=1)))

        self.assertEqual(normalize_value(value), "103015Z")

    def test_local_time(self) -> None:
        self.assertEqual(normalize_value(time(7, 8, 9, 500)), "070809Z")

    def test_duration_expands_to_units(self) -> None:
        self.assertEqual(
            normalize_value(Duration(months=3, days=2)),
            {"months": 3, "days": 2, "seconds": 0, "nanos": 0},
        )

    def test_timedelta_expands_like_duration(self) -> None:
        self.assertEqual(
            normalize_value(timedelta(days=1, seconds=30, microseconds=5)),
            {"months": 0, "days": 1, "seconds": 30, "nanos": 5000},
        )

    def test_scalars_pass_through(self) -> None:
        for value in ("bar", 42, 4.2, True, False, None):
            with self.subTest(value=value):
                self.assertIs(normalize_value(value), value)

    def test_arrays_are_normalized_element_wise(self) -> None:
        self.assertEqual(
            normalize_value([date(2020, 1, 1), "x", GeoPoint(x=0.5, y=1.5, z=9)]),
            ["2020-01-01", "x", [0.5, 1.5]],
        )
        self.assertEqual(normalize_value(("a", "b")), ["a", "b"])

    def test_unknown_objects_pass_through(self) -> None:
        marker = object()

        self.assertIs(normalize_value(marker), marker)

    def test_normalized_values_are_json_serializable(self) -> None:
        values = [
            GeoPoint(x=1, y=2),
            date(2020, 1, 1),
            datetime(2020, 1, 1, tzinfo=timezone.utc),
            time(1, 2, 3),
            Duration(seconds=5),
        ]

        json.dumps([normalize_value(v) for v in values])

    def test_accepts_closed_value_set(self) -> None:
        annotation = inspect.signature(normalize_value).parameters["value"].annotation

        self.assertEqual(annotation, "PropertyValue")
        self.assertIn(Duration, get_args(PropertyValue))
        self.assertIn(GeoPoint, get_args(PropertyValue))


if __name__ == "__main__":
    unittest.main()
