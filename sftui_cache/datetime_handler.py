#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Clock helpers for cache timestamps.

Entry timestamps are integer epoch milliseconds in UTC. Pendulum supplies the
current time and the validation of stored timestamps.
"""

__author__ = "bibow"

from typing import Any, Callable, Optional

import pendulum

Clock = Callable[[], int]


class PendulumDateTimeHandler:
    """Epoch-millisecond clock and timestamp validation backed by Pendulum."""

    @staticmethod
    def now_millis() -> int:
        """Current UTC time as integer epoch milliseconds."""
        return int(pendulum.now("UTC").timestamp() * 1000)

    @staticmethod
    def is_valid_epoch_millis(value: Any) -> bool:
        """
        Check that a stored timestamp is a usable epoch-millisecond integer.

        Booleans are rejected even though they are ints, and so is anything
        Pendulum cannot turn back into a datetime.
        """
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return False

        try:
            pendulum.from_timestamp(value / 1000, tz="UTC")
        except (OverflowError, ValueError, OSError):
            return False
        return True

    @staticmethod
    def age_millis(created_at: int, now: Optional[int] = None) -> int:
        if now is None:
            now = PendulumDateTimeHandler.now_millis()
        return now - created_at

    @staticmethod
    def format_millis(value: int) -> str:
        """ISO-8601 rendering of an epoch-millisecond timestamp, for log lines."""
        return pendulum.from_timestamp(value / 1000, tz="UTC").isoformat()


def system_clock() -> int:
    return PendulumDateTimeHandler.now_millis()
