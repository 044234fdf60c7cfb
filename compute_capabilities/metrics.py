from collections import Counter
from threading import Lock


DECISIONS = "lifecycle_decisions_total"
DENIALS = "lifecycle_denials_total"
RESOLUTIONS = "capability_resolutions_total"
RESOLUTION_FAILURES = "capability_resolution_failures_total"


class CapabilityMetrics:
    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: Counter[str] = Counter()

    def record_decision(self, allowed: bool) -> None:
        with self._lock:
            self._counters[DECISIONS] += 1
            if not allowed:
                self._counters[DENIALS] += 1

    def record_resolution(self, succeeded: bool) -> None:
        with self._lock:
            self._counters[RESOLUTIONS] += 1
            if not succeeded:
                self._counters[RESOLUTION_FAILURES] += 1

    def get(self, key: str) -> int:
        with self._lock:
            return self._counters[key]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()


metrics = CapabilityMetrics()
