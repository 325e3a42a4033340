import threading
import unittest

from scrumsync.services import ClockTicker


class ClockTickerTests(unittest.TestCase):
    def test_calls_callback_until_cancelled(self) -> None:
        ticked = threading.Event()
        calls = []

        def callback():
            calls.append(1)
            if len(calls) >= 3:
                ticked.set()

        ticker = ClockTicker(callback, interval=0.01)
        ticker.start()
        self.assertTrue(ticked.wait(2))
        ticker.cancel(timeout=2)

        self.assertFalse(ticker.is_running)
        count = len(calls)
        threading.Event().wait(0.05)
        self.assertEqual(len(calls), count)

    def test_start_twice_runs_one_thread(self) -> None:
        ticker = ClockTicker(lambda: None, interval=0.01)
        ticker.start()
        first = ticker._thread
        ticker.start()
        self.assertIs(ticker._thread, first)
        ticker.cancel()

    def test_cancel_from_inside_callback(self) -> None:
        done = threading.Event()
        holder = {}

        def callback():
            holder["ticker"].cancel()
            done.set()

        ticker = ClockTicker(callback, interval=0.01)
        holder["ticker"] = ticker
        ticker.start()
        self.assertTrue(done.wait(2))
        self.assertFalse(ticker.is_running)

    def test_failing_callback_stops_ticker(self) -> None:
        failed = threading.Event()

        def callback():
            failed.set()
            raise RuntimeError("boom")

        ticker = ClockTicker(callback, interval=0.01)
        with self.assertLogs("scrumsync.services.clock_ticker", level="ERROR"):
            ticker.start()
            self.assertTrue(failed.wait(2))
            ticker.cancel(timeout=2)
        self.assertFalse(ticker.is_running)

    def test_interval_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            ClockTicker(lambda: None, interval=0)

    def test_cancel_before_start_is_safe(self) -> None:
        ticker = ClockTicker(lambda: None, interval=0.01)
        ticker.cancel()
        self.assertFalse(ticker.is_running)
