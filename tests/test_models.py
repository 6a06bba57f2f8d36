import unittest

from walkcloak.models import ActivityRecord, InvalidPayloadError, StravaEvent


def _event_payload(**overrides):
    payload = {
        "aspect_type": "create",
        "event_time": 1_700_000_000,
        "object_id": 1360128428,
        "object_type": "activity",
        "owner_id": 134815,
        "subscription_id": 120475,
        "updates": {},
    }
    payload.update(overrides)
    return payload


class TestStravaEvent(unittest.TestCase):
    def test_decodes_activity_event(self) -> None:
        event = StravaEvent.from_payload(_event_payload())
        self.assertEqual(event.object_id, 1360128428)
        self.assertEqual(event.aspect_type, "create")
        self.assertTrue(event.is_activity)

    def test_updates_field_is_optional(self) -> None:
        payload = _event_payload()
        payload.pop("updates")
        event = StravaEvent.from_payload(payload)
        self.assertIsNone(event.updates)

    def test_athlete_event_is_not_activity(self) -> None:
        event = StravaEvent.from_payload(_event_payload(object_type="athlete", updates={"authorized": "false"}))
        self.assertFalse(event.is_activity)

    def test_missing_field_is_rejected(self) -> None:
        payload = _event_payload()
        payload.pop("owner_id")
        with self.assertRaises(InvalidPayloadError):
            StravaEvent.from_payload(payload)

    def test_wrong_types_are_rejected(self) -> None:
        for overrides in (
            {"object_id": "1360128428"},
            {"object_id": True},
            {"object_id": -1},
            {"event_time": 1.5},
            {"object_type": None},
        ):
            with self.subTest(overrides=overrides):
                with self.assertRaises(InvalidPayloadError):
                    StravaEvent.from_payload(_event_payload(**overrides))

    def test_non_object_body_is_rejected(self) -> None:
        for payload in (None, [], "activity", 42):
            with self.subTest(payload=payload):
                with self.assertRaises(InvalidPayloadError):
                    StravaEvent.from_payload(payload)


class TestActivityRecord(unittest.TestCase):
    def test_decodes_activity(self) -> None:
        record = ActivityRecord.from_payload(
            {
                "id": 99,
                "name": "Morning Walk",
                "type": "Walk",
                "start_date_local": "2024-01-17T07:30:00Z",
                "start_latlng": [40.5, -73.5],
                "distance": 2100.5,
            }
        )
        self.assertEqual(record.id, 99)
        self.assertEqual(record.activity_type, "Walk")
        self.assertEqual(record.start_latlng, (40.5, -73.5))

    def test_missing_or_empty_latlng_means_no_location(self) -> None:
        base = {"id": 1, "name": "n", "type": "Walk", "start_date_local": "2024-01-17T07:30:00Z"}
        self.assertIsNone(ActivityRecord.from_payload(base).start_latlng)
        self.assertIsNone(ActivityRecord.from_payload({**base, "start_latlng": None}).start_latlng)
        self.assertIsNone(ActivityRecord.from_payload({**base, "start_latlng": []}).start_latlng)

    def test_integer_coordinates_become_floats(self) -> None:
        record = ActivityRecord.from_payload(
            {"id": 1, "name": "n", "type": "Walk", "start_date_local": "x", "start_latlng": [40, -73]}
        )
        self.assertEqual(record.start_latlng, (40.0, -73.0))

    def test_non_numeric_coordinates_are_rejected(self) -> None:
        with self.assertRaises(InvalidPayloadError):
            ActivityRecord.from_payload(
                {"id": 1, "name": "n", "type": "Walk", "start_date_local": "x", "start_latlng": ["40", "-73"]}
            )

    def test_missing_type_is_rejected(self) -> None:
        with self.assertRaises(InvalidPayloadError):
            ActivityRecord.from_payload({"id": 1, "name": "n", "start_date_local": "x"})


if __name__ == "__main__":
    unittest.main()
