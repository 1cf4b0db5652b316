from datetime import date, datetime
from zoneinfo import ZoneInfo


class SystemClock:
    """Wall clock pinned to the timezone daily quotas roll over in."""

    def __init__(self, timezone: ZoneInfo):
        self.timezone = timezone

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def today(self) -> date:
        return self.now().date()
