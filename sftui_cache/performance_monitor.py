#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Slow-Operation Monitor

Logs cache operations (serialization, disk scans, pruning) that take longer
than a configurable threshold. Nothing is collected in memory.
"""

__author__ = "bibow"

import contextlib
import functools
import logging
from typing import Callable, Iterator, Optional

import pendulum

perf_logger = logging.getLogger("sftui_cache.performance")


class SimplePerformanceMonitor:
    """
    Threshold-based timing logger.

    Operations finishing under ``log_threshold`` seconds are silent; slower
    ones are logged at INFO, failures at WARNING with the elapsed time.
    """

    def __init__(self, log_threshold: float = 0.05):
        self.log_threshold = log_threshold

    @contextlib.contextmanager
    def measure(
        self, op_name: str, log_threshold: Optional[float] = None
    ) -> Iterator[None]:
        threshold_ms = (
            self.log_threshold if log_threshold is None else log_threshold
        ) * 1000
        start_time = pendulum.now("UTC")
        try:
            yield
        except Exception as e:
            elapsed_ms = (pendulum.now("UTC") - start_time).total_seconds() * 1000
            perf_logger.warning("%s failed after %.2fms: %s", op_name, elapsed_ms, e)
            raise

        elapsed_ms = (pendulum.now("UTC") - start_time).total_seconds() * 1000
        if elapsed_ms > threshold_ms:
            perf_logger.info("%s completed in %.2fms", op_name, elapsed_ms)

    def monitor_operation(
        self, log_threshold: Optional[float] = None, operation_name: Optional[str] = None
    ):
        """
        Decorator form of ``measure``.

        Args:
            log_threshold: Override threshold for this operation (in seconds)
            operation_name: Optional prefix for the logged operation name
        """

        def decorator(func: Callable) -> Callable:
            op_name = (
                f"{operation_name}: {func.__name__}"
                if operation_name is not None
                else func.__name__
            )

            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                # Read the threshold at call time so later set_log_threshold calls apply.
                with self.measure(op_name, log_threshold):
                    return func(*args, **kwargs)

            return wrapper

        return decorator

    def set_log_threshold(self, threshold: float):
        self.log_threshold = threshold

    def get_log_threshold(self) -> float:
        return self.log_threshold


# Shared monitor used by the cache modules
performance_monitor = SimplePerformanceMonitor()


def set_performance_log_threshold(threshold: float):
    performance_monitor.set_log_threshold(threshold)


def get_performance_log_threshold() -> float:
    return performance_monitor.get_log_threshold()
