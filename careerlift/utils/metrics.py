"""
In-process counters and duration samples.

Names are dotted "<area>.<event>": gemini.success, vertex.rejected,
analysis.persist_failed, courses.discovery, http.5xx. GET /metrics serves
get_snapshot().
"""
from collections import Counter, deque
from typing import Any, Deque, Dict, List

SAMPLE_WINDOW = 500

_counters: Counter = Counter()
_samples: Dict[str, Deque[float]] = {}


def inc(name: str, value: int = 1) -> None:
    _counters[name] += value


def observe(name: str, value: float) -> None:
    """Record a duration sample; only the last SAMPLE_WINDOW are kept."""
    _samples.setdefault(name, deque(maxlen=SAMPLE_WINDOW)).append(value)


def counters_for(area: str) -> Dict[str, int]:
    """Counters of one area keyed by event, e.g. counters_for("courses") -> {"vertex": 3}."""
    prefix = f"{area}."
    return {name[len(prefix):]: n for name, n in _counters.items() if name.startswith(prefix)}


def _summary(values: List[float]) -> Dict[str, Any]:
    ordered = sorted(values)
    last = len(ordered) - 1
    return {
        "count": len(ordered),
        "p50": round(ordered[min(int(len(ordered) * 0.5), last)], 1),
        "p95": round(ordered[min(int(len(ordered) * 0.95), last)], 1),
        "max": round(ordered[last], 1),
    }


def get_snapshot() -> Dict[str, Any]:
    return {
        "counters": dict(_counters),
        "histograms": {name: _summary(list(s)) for name, s in _samples.items() if s},
        # How learning-resource requests were answered
        "courseResolution": counters_for("courses"),
    }


def reset() -> None:
    """Tests only."""
    _counters.clear()
    _samples.clear()
