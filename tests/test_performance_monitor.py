#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Tests for the slow-operation monitor.
"""

import logging
import time

import pytest

from sftui_cache.performance_monitor import (
    SimplePerformanceMonitor,
    get_performance_log_threshold,
    perf_logger,
    set_performance_log_threshold,
)

LOGGER_NAME = "sftui_cache.performance"


@pytest.fixture(autouse=True)
def enable_perf_logging():
    previous = perf_logger.level
    perf_logger.setLevel(logging.DEBUG)
    yield
    perf_logger.setLevel(previous)


class TestSimplePerformanceMonitor:
    def test_default_threshold(self):
        assert SimplePerformanceMonitor().get_log_threshold() == 0.05

    def test_set_and_get_log_threshold(self):
        monitor = SimplePerformanceMonitor()

        monitor.set_log_threshold(0.2)
        assert monitor.get_log_threshold() == 0.2

    def test_decorator_preserves_function_metadata(self):
        monitor = SimplePerformanceMonitor()

        @monitor.monitor_operation(operation_name="disk")
        def scan_directory():
            """Scan docstring."""
            return "done"

        assert scan_directory() == "done"
        assert scan_directory.__name__ == "scan_directory"
        assert scan_directory.__doc__ == "Scan docstring."

    def test_slow_operation_is_logged(self, caplog):
        monitor = SimplePerformanceMonitor(log_threshold=0.01)

        @monitor.monitor_operation(operation_name="disk")
        def slow_scan():
            time.sleep(0.03)
            return "completed"

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            assert slow_scan() == "completed"

        assert any("disk: slow_scan completed" in r.message for r in caplog.records)

    def test_fast_operation_is_not_logged(self, caplog):
        monitor = SimplePerformanceMonitor(log_threshold=5.0)

        @monitor.monitor_operation()
        def fast():
            return 1

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            fast()

        assert not any("fast completed" in r.message for r in caplog.records)

    def test_failure_is_logged_and_propagated(self, caplog):
        monitor = SimplePerformanceMonitor()

        @monitor.monitor_operation(operation_name="pruning")
        def broken():
            raise RuntimeError("disk gone")

        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            with pytest.raises(RuntimeError, match="disk gone"):
                broken()

        assert any(
            "pruning: broken failed" in r.message and "disk gone" in r.message
            for r in caplog.records
        )

    def test_threshold_changes_apply_to_decorated_functions(self, caplog):
        monitor = SimplePerformanceMonitor(log_threshold=5.0)

        @monitor.monitor_operation()
        def nap():
            time.sleep(0.02)

        monitor.set_log_threshold(0.001)
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            nap()

        assert any("nap completed" in r.message for r in caplog.records)

    def test_measure_context_manager(self, caplog):
        monitor = SimplePerformanceMonitor(log_threshold=0.0)

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            with monitor.measure("scan"):
                time.sleep(0.005)

        assert any("scan completed" in r.message for r in caplog.records)


def test_module_level_threshold_helpers():
    original = get_performance_log_threshold()
    try:
        set_performance_log_threshold(0.5)
        assert get_performance_log_threshold() == 0.5
    finally:
        set_performance_log_threshold(original)
