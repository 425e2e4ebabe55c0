"""Event builders and a controllable clock for tests.

Defaults describe the Capelle training session of 2025-10-16 and the
video recorded during it.
"""

from datetime import datetime, timedelta

from sessionlink.core import Activity, TrackingEvent, VideoEvent


class FakeClock:
    """Mutable clock returned as the engine's time source."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def tracking(
    id=184,
    team_name="Capelle 1",
    start="2025-10-16T17:30:13.300Z",
    end="2025-10-16T23:59:59.800Z",
    activities=(),
    name="Training Capelle 1",
) -> TrackingEvent:
    return TrackingEvent(
        id=id,
        name=name,
        team_name=team_name,
        start_time=start,
        end_time=end,
        activities=tuple(activities),
    )


def video(
    id="e5652e87-3409-4907-90d8-e95343014452",
    home="VV Capelle",
    away="VV Capelle",
    club="VV Capelle",
    start="2025-10-16T20:25:00+02:00",
    end="2025-10-16T20:59:00+02:00",
    timezone="Europe/Amsterdam",
) -> VideoEvent:
    return VideoEvent(
        id=id,
        club_name=club,
        home_name=home,
        away_name=away,
        start_time=start,
        end_time=end,
        timezone=timezone,
    )


WARMUP = Activity(id=396, name="Warming - up", start_time="00:40:01", end_time="00:52:25")
