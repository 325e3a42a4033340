import unittest

import pytest

from scrumsync.errors import PeriodBoundsExceeded
from scrumsync.models import ClockSignal, MatchClock
from scrumsync.services import TimerService


class TimerServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = MatchClock(period_length_seconds=2400, total_periods=2)
        self.service = TimerService(self.clock)

    def test_full_period_expires_exactly_once(self) -> None:
        self.service.start()
        signals = [self.service.tick() for _ in range(2400)]

        self.assertEqual(self.clock.seconds_remaining, 0)
        self.assertEqual(signals.count(ClockSignal.PERIOD_EXPIRED), 1)
        self.assertIs(signals[-1], ClockSignal.PERIOD_EXPIRED)
        self.assertFalse(self.clock.is_running)
        self.assertEqual(self.service.elapsed_seconds(), 2400)

        # Further ticks are ignored until the next period starts
        self.assertIs(self.service.tick(), ClockSignal.NONE)
        self.assertEqual(self.clock.seconds_remaining, 0)

    def test_tick_is_noop_when_not_running(self) -> None:
        self.assertIs(self.service.tick(), ClockSignal.NONE)
        self.assertEqual(self.clock.seconds_remaining, 2400)

        self.service.start()
        self.service.tick()
        self.service.pause()
        self.assertIs(self.service.tick(), ClockSignal.NONE)
        self.assertEqual(self.clock.seconds_remaining, 2399)

    def test_resume_continues_from_remaining(self) -> None:
        self.service.start()
        for _ in range(30):
            self.service.tick()
        self.service.pause()
        self.service.resume()
        self.assertIs(self.service.tick(), ClockSignal.TICKED)
        self.assertEqual(self.clock.seconds_remaining, 2400 - 31)

    def test_advance_period_resets_clock(self) -> None:
        self.service.start()
        for _ in range(100):
            self.service.tick()

        self.assertIs(self.service.advance_period(), ClockSignal.PERIOD_ADVANCED)
        self.assertEqual(self.clock.current_period, 2)
        self.assertEqual(self.clock.seconds_remaining, 2400)
        self.assertFalse(self.clock.is_running)
        self.assertEqual(self.service.elapsed_seconds(), 2400)
        self.assertEqual(self.service.period_label(), "Second Half")

    def test_advance_in_final_period_signals_match_complete(self) -> None:
        self.service.advance_period()
        self.service.start()
        self.service.tick()

        self.assertIs(self.service.advance_period(), ClockSignal.MATCH_COMPLETE)
        self.assertEqual(self.clock.current_period, 2)
        self.assertEqual(self.clock.seconds_remaining, 2399)
        self.assertTrue(self.clock.is_running)

    def test_expired_period_cannot_restart(self) -> None:
        self.service.start()
        signals = [self.service.tick() for _ in range(2400)]

        self.service.resume()
        self.assertFalse(self.clock.is_running)
        self.service.start()
        self.assertFalse(self.clock.is_running)
        signals.append(self.service.tick())
        self.assertEqual(signals.count(ClockSignal.PERIOD_EXPIRED), 1)

        self.service.advance_period()
        self.service.start()
        self.assertTrue(self.clock.is_running)

    def test_quarter_labels(self) -> None:
        service = TimerService(MatchClock(period_length_seconds=600, total_periods=4))
        self.assertEqual(service.period_label(3), "Third Quarter")
        self.assertEqual(service.period_label(5), "Period 5")

    def test_reset_returns_to_first_period(self) -> None:
        self.service.advance_period()
        self.service.start()
        self.service.tick()
        self.service.reset()
        self.assertEqual(self.clock.current_period, 1)
        self.assertEqual(self.clock.seconds_remaining, 2400)
        self.assertEqual(self.service.elapsed_seconds(), 0)

    def test_clock_state_for_display(self) -> None:
        self.service.start()
        for _ in range(65):
            self.service.tick()
        state = self.service.get_clock_state()
        self.assertEqual(state["display_time"], "38:55")
        self.assertEqual(state["elapsed_seconds"], 65)
        self.assertEqual(state["period_label"], "First Half")
        self.assertTrue(state["is_running"])


def test_elapsed_seconds_spans_quarters():
    clock = MatchClock(period_length_seconds=600, total_periods=4, current_period=3, seconds_remaining=450)
    assert clock.elapsed_seconds() == 2 * 600 + 150


@pytest.mark.parametrize("periods", [1, 3, 5])
def test_only_halves_or_quarters(periods):
    with pytest.raises(ValueError):
        MatchClock(period_length_seconds=600, total_periods=periods)


def test_current_period_out_of_bounds():
    with pytest.raises(PeriodBoundsExceeded):
        MatchClock(period_length_seconds=600, total_periods=2, current_period=3)


def test_restored_clock_is_stopped():
    clock = MatchClock(period_length_seconds=600, total_periods=2, current_period=2, seconds_remaining=10, is_running=True)
    restored = MatchClock.from_json(clock.to_json())
    assert restored.current_period == 2
    assert restored.seconds_remaining == 10
    assert restored.is_running is False
