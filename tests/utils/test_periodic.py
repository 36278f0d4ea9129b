"""Tests for PeriodicTask."""

import threading

import pytest

from utils.periodic import PeriodicTask


class TestInit:

    @pytest.mark.parametrize("interval", [0, -1])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValueError):
            PeriodicTask(interval, lambda: None)


class TestRunOnce:

    def test_runs_callback(self):
        calls = []
        task = PeriodicTask(60, lambda: calls.append(1))

        assert task.run_once() is True
        assert calls == [1]

    def test_callback_error_is_logged_not_raised(self, caplog):
        def boom():
            raise RuntimeError("tick exploded")

        task = PeriodicTask(60, boom, name="dispatch")

        assert task.run_once() is True
        assert "tick exploded" in caplog.text

    def test_overlapping_tick_is_skipped(self):
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow():
            calls.append(1)
            started.set()
            release.wait(5)

        task = PeriodicTask(60, slow)
        worker = threading.Thread(target=task.run_once)
        worker.start()
        started.wait(5)

        assert task.run_once() is False

        release.set()
        worker.join(5)
        assert calls == [1]


class TestBackgroundLoop:

    def test_ticks_until_stopped(self):
        ticked = threading.Event()
        task = PeriodicTask(0.01, ticked.set, name="test")

        task.start()
        try:
            assert ticked.wait(5)
            assert task.running is True
        finally:
            task.stop(timeout=5)

        assert task.running is False

    def test_cannot_start_twice(self):
        task = PeriodicTask(60, lambda: None)
        task.start()
        try:
            with pytest.raises(RuntimeError, match="already running"):
                task.start()
        finally:
            task.stop(timeout=5)
