import threading
import unittest

from walkcloak.dispatch import EventDispatcher


class TestEventDispatcher(unittest.TestCase):
    def test_dispatch_returns_before_unit_finishes(self) -> None:
        release = threading.Event()
        finished = threading.Event()

        def _unit(value):
            release.wait(timeout=5)
            finished.set()
            return value

        dispatcher = EventDispatcher(max_workers=1)
        try:
            future = dispatcher.dispatch(_unit, 42)
            self.assertFalse(finished.is_set())
            release.set()
            self.assertEqual(future.result(timeout=5), 42)
        finally:
            dispatcher.shutdown()

    def test_failing_unit_is_logged_not_raised(self) -> None:
        def _unit():
            raise RuntimeError("boom")

        dispatcher = EventDispatcher(max_workers=1)
        try:
            with self.assertLogs("walkcloak.dispatch", level="ERROR") as logs:
                future = dispatcher.dispatch(_unit)
                future.exception(timeout=5)
                dispatcher.shutdown(wait=True)
            self.assertIn("Activity processing failed.", logs.output[0])
        finally:
            dispatcher.shutdown()

    def test_shutdown_drains_pending_units(self) -> None:
        seen = []
        dispatcher = EventDispatcher(max_workers=2)
        for value in range(5):
            dispatcher.dispatch(seen.append, value)
        dispatcher.shutdown(wait=True)
        self.assertEqual(sorted(seen), [0, 1, 2, 3, 4])


if __name__ == "__main__":
    unittest.main()
