"""Domain enums."""

from enum import Enum


class MessageType(str, Enum):
    USER = "user"
    AGENT = "zara"
    SYSTEM = "system"


class TimeWindow(str, Enum):
    LAST_HOUR = "1h"
    LAST_DAY = "24h"
    LAST_WEEK = "7d"

    @property
    def seconds(self) -> int:
        return _WINDOW_SECONDS[self]


_WINDOW_SECONDS = {
    TimeWindow.LAST_HOUR: 60 * 60,
    TimeWindow.LAST_DAY: 24 * 60 * 60,
    TimeWindow.LAST_WEEK: 7 * 24 * 60 * 60,
}
