"""Tests for the background sweep job."""

import asyncio
from unittest.mock import MagicMock

import pytest

from fittrack.services.periodic_sweep import PeriodicSweep

DAY = 24 * 60 * 60


class TestRunNow:
    def test_returns_removed_count(self):
        sweep = PeriodicSweep("test", MagicMock(return_value=3), interval_seconds=60)
        assert sweep.run_now() == 3

    def test_drives_csrf_store_cleanup(self, csrf_store, clock):
        token = csrf_store.issue_token()
        sweep = PeriodicSweep("csrf_tokens", csrf_store.cleanup_expired, interval_seconds=3600)

        assert sweep.run_now() == 0
        clock.advance(DAY + 1)
        assert sweep.run_now() == 1
        assert csrf_store.lookup(token) is None

    def test_drives_rate_limiter_cleanup(self, rate_limiter, clock):
        rate_limiter.check_and_increment("10.0.0.1", 900, 5)
        sweep = PeriodicSweep("counters", rate_limiter.cleanup_expired, interval_seconds=3600)

        clock.advance(901)
        assert sweep.run_now() == 1
        assert len(rate_limiter) == 0


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_runs_periodically_and_stop_cancels(self):
        callback = MagicMock(return_value=0)
        sweep = PeriodicSweep("test", callback, interval_seconds=0.01)

        sweep.start()
        assert sweep.running is True
        await asyncio.sleep(0.05)
        await sweep.stop()

        assert sweep.running is False
        assert callback.call_count >= 2
        calls = callback.call_count
        await asyncio.sleep(0.03)
        assert callback.call_count == calls

    @pytest.mark.asyncio
    async def test_errors_do_not_stop_loop(self):
        callback = MagicMock(side_effect=[RuntimeError("boom"), 0, 0, 0, 0, 0, 0, 0, 0, 0])
        sweep = PeriodicSweep("test", callback, interval_seconds=0.01)

        sweep.start()
        await asyncio.sleep(0.05)
        await sweep.stop()

        assert callback.call_count >= 2

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self):
        sweep = PeriodicSweep("test", MagicMock(return_value=0), interval_seconds=60)

        sweep.start()
        task = sweep._task
        sweep.start()
        assert sweep._task is task

        await sweep.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        sweep = PeriodicSweep("test", MagicMock(return_value=0), interval_seconds=60)
        await sweep.stop()
        assert sweep.running is False
