"""Current time and calendar date provider."""
from datetime import date, datetime, timezone


class Clock:
    """
    Source of "now" for the day-boundary logic.

    All dates are UTC calendar dates. Services receive a Clock instead of
    calling datetime.now() so tests can move across midnight at will.
    """

    def now(self) -> datetime:
        """Timezone-aware current UTC time."""
        return datetime.now(timezone.utc)

    def today(self) -> date:
        """Current UTC calendar date."""
        return self.now().date()


system_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return system_clock
