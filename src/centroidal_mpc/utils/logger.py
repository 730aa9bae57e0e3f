"""Telemetry of named numeric channels sampled once per control tick."""

from typing import Any, Callable, Dict, List, Tuple

import numpy as np


class DataLogger:
    """Collects numeric values from registered getters.

    Each entry is owned by a source object so that all entries of a component
    can be removed at once.
    """

    def __init__(self):
        self._entries: Dict[str, Tuple[Any, Callable[[], float]]] = {}
        self._times: Dict[str, List[float]] = {}
        self._values: Dict[str, List[float]] = {}

    def add_log_entry(self, name: str, source: Any, getter: Callable[[], float]):
        if name in self._entries:
            raise ValueError(f"Log entry already exists: {name}")
        self._entries[name] = (source, getter)
        self._times.setdefault(name, [])
        self._values.setdefault(name, [])

    def remove_log_entries(self, source: Any):
        """Stop logging all entries of ``source``; recorded samples are kept."""
        for name in [name for name, (src, _) in self._entries.items() if src is source]:
            del self._entries[name]

    def has_entry(self, name: str) -> bool:
        return name in self._entries

    def entry_names(self) -> List[str]:
        return list(self._entries)

    def log(self, t: float):
        """Sample every registered entry at time ``t``."""
        for name, (_, getter) in self._entries.items():
            self._times[name].append(t)
            self._values[name].append(float(getter()))

    def get(self, name: str) -> Tuple[np.ndarray, np.ndarray]:
        """Return (times, values) recorded for ``name``."""
        if name not in self._values:
            raise KeyError(f"Unknown log entry: {name}")
        return np.array(self._times[name]), np.array(self._values[name])

    def latest(self, name: str) -> float:
        _, values = self.get(name)
        if len(values) == 0:
            raise KeyError(f"No sample recorded for log entry: {name}")
        return float(values[-1])

    def to_dict(self) -> Dict[str, np.ndarray]:
        return {name: np.array(values) for name, values in self._values.items()}

    def clear(self):
        for name in self._values:
            self._times[name].clear()
            self._values[name].clear()
