from __future__ import annotations

from collections import defaultdict
from threading import Lock
from time import time


class MetricsStore:
    def __init__(self, prefix: str = "pixelfilter") -> None:
        self._prefix = prefix
        self._lock = Lock()
        self._counters: dict[str, int] = defaultdict(int)
        self._summaries: dict[str, list[float]] = {}
        self._last_update_ts: int = int(time())

    def incr(self, key: str, value: int = 1) -> None:
        with self._lock:
            self._counters[key] += value
            self._last_update_ts = int(time())

    def observe(self, key: str, seconds: float) -> None:
        with self._lock:
            total, count = self._summaries.get(key, [0.0, 0])
            self._summaries[key] = [total + seconds, count + 1]
            self._last_update_ts = int(time())

    def snapshot(self) -> dict[str, int | float]:
        with self._lock:
            merged: dict[str, int | float] = dict(self._counters)
            for key, (total, count) in self._summaries.items():
                merged[f"{key}_seconds_sum"] = round(total, 6)
                merged[f"{key}_seconds_count"] = int(count)
            merged["metrics_last_update_ts"] = self._last_update_ts
            return merged

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._summaries.clear()

    def to_prometheus_text(self) -> str:
        snapshot = self.snapshot()
        lines = []
        for key, value in sorted(snapshot.items()):
            metric = key.lower().replace("-", "_")
            lines.append(f"{self._prefix}_{metric} {value}")
        return "\n".join(lines) + "\n"


metrics = MetricsStore()
