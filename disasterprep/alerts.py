"""Synthetic campus alert feed.

The feed is a pure function of the region and a reference "now", so the same
inputs always give the same list.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from .catalog import Region


class AlertLevel(str, Enum):
    INFO = "info"
    WARN = "warn"
    OK = "ok"
    ALERT = "alert"


@dataclass(frozen=True, slots=True)
class Alert:
    category: str
    level: AlertLevel
    issued_at: datetime
    message: str

    def when_label(self) -> str:
        return self.issued_at.strftime("%H:%M:%S")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.category,
            "level": self.level.value,
            "issued_at": self.issued_at.isoformat(),
            "text": self.message,
        }


# Minutes before "now" for each feed entry, newest first.
ALERT_OFFSETS_MIN = (2, 9, 21, 34)


def generate_alerts(region: Region, now: datetime) -> list[Alert]:
    def mins(m: int) -> datetime:
        return now - timedelta(minutes=m)

    weather = "rainfall" if "flood" in region.focus else "winds"
    d_drill, d_weather, d_safety, d_incident = ALERT_OFFSETS_MIN
    return [
        Alert(
            "Earthquake Drill",
            AlertLevel.INFO,
            mins(d_drill),
            f"Campus-wide drill scheduled at 11:00 AM in {region.city}.",
        ),
        Alert("Weather", AlertLevel.WARN, mins(d_weather), f"IMD advisory: Moderate {weather} expected."),
        Alert("Safety", AlertLevel.OK, mins(d_safety), "Evacuation route A updated near Block C."),
        Alert("Incident", AlertLevel.ALERT, mins(d_incident), "Mock fire reported in Lab 204 (Training)."),
    ]

