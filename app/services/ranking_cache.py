import time
from collections import OrderedDict
from typing import Callable, Hashable, Optional


class RankingCache:
    """Per-period result cache with a time-to-live and a capacity bound."""

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        maxsize: int = 128,
        clock: Callable[[], float] = time.monotonic,
    ):
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.maxsize = maxsize
        self._clock = clock
        self._entries: "OrderedDict[Hashable, tuple[float, list]]" = OrderedDict()

    def get(self, period: Hashable) -> Optional[list]:
        entry = self._entries.get(period)
        if entry is None:
            return None
        stored_at, data = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[period]
            return None
        return data

    def set(self, period: Hashable, data: list) -> None:
        self._entries.pop(period, None)
        while len(self._entries) >= self.maxsize:
            self._entries.popitem(last=False)
        self._entries[period] = (self._clock(), data)

    def invalidate(self, period: Optional[Hashable] = None) -> None:
        if period is None:
            self._entries.clear()
        else:
            self._entries.pop(period, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class NullRankingCache(RankingCache):
    """Never stores anything; every lookup is a miss."""

    def __init__(self):
        super().__init__(ttl_seconds=0.0, maxsize=1)

    def get(self, period):
        return None

    def set(self, period, data):
        return None
