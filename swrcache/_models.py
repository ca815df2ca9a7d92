import enum
from dataclasses import dataclass

__all__ = ("SWRState", "SWRWindow")


class SWRState(enum.Enum):
    FRESH = "fresh"
    STALE = "stale"
    EXPIRED = "expired"


@dataclass(frozen=True)
class SWRWindow:
    """
    The period during which a cached response may be served.

    Fresh until `fresh_until`, then servable while being revalidated
    up to and including `stale_until`, expired afterwards.
    """

    fresh_until: int
    stale_until: int

    @classmethod
    def from_values(cls, received_at: int, max_age: int, swr_seconds: int) -> "SWRWindow":
        fresh_until = received_at + max(0, max_age)
        return cls(fresh_until=fresh_until, stale_until=fresh_until + max(0, swr_seconds))

    def classify(self, now: int) -> SWRState:
        if now < self.fresh_until:
            return SWRState.FRESH
        if now <= self.stale_until:
            return SWRState.STALE
        return SWRState.EXPIRED
