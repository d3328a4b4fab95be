from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from path_engine.core.grid import Cell

HISTORY_CAPACITY = 5


@dataclass(frozen=True)
class SearchStats:
    path_found: bool
    path_length: int
    nodes_visited: int
    nodes_in_path: int
    execution_time: int  # ms
    path_cost: int = 0

    @property
    def efficiency(self) -> int:
        """Share of explored nodes that ended up on the path, in percent."""
        if not self.path_found or self.nodes_visited == 0:
            return 0
        return round(self.nodes_in_path / self.nodes_visited * 100)

    @property
    def exploration_ratio(self) -> int:
        if not self.path_found:
            return 0
        return round(self.nodes_visited / (self.nodes_in_path or 1) * 100)

    def as_dict(self) -> Dict[str, int]:
        return {
            "path_found": self.path_found,
            "path_length": self.path_length,
            "nodes_visited": self.nodes_visited,
            "nodes_in_path": self.nodes_in_path,
            "execution_time": self.execution_time,
            "path_cost": self.path_cost,
        }


@dataclass(frozen=True)
class SearchResult:
    algorithm: str
    path: Tuple[Cell, ...]
    visited: Tuple[Cell, ...]
    stats: SearchStats

    @property
    def found(self) -> bool:
        return self.stats.path_found


def performance_rating(stats: SearchStats, optimal: bool) -> Tuple[str, float]:
    """
    Letter grade for a run.
    40% efficiency, 30% speed (normalised to 2 seconds), 30% optimality guarantee.
    """
    if not stats.path_found:
        return "F", 0.0

    score = (stats.efficiency / 100) * 40
    score += max(0.0, 1 - stats.execution_time / 2000) * 30
    score += 30 if optimal else 15

    if score >= 85: return "A+", score
    if score >= 75: return "A", score
    if score >= 65: return "B+", score
    if score >= 55: return "B", score
    if score >= 45: return "C", score
    return "D", score


@dataclass(frozen=True)
class HistoryEntry:
    algorithm: str
    stats: SearchStats


class StatsHistory:
    """
    Rolling comparison buffer: newest last, one entry per algorithm,
    at most `capacity` entries.
    """
    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._entries: List[HistoryEntry] = []

    def record(self, algorithm: str, stats: SearchStats) -> HistoryEntry:
        entry = HistoryEntry(algorithm, stats)
        kept = [e for e in self._entries if e.algorithm != algorithm]
        kept.append(entry)
        self._entries = kept[-self.capacity:]
        return entry

    def record_result(self, result: SearchResult) -> HistoryEntry:
        return self.record(result.algorithm, result.stats)

    def get(self, algorithm: str) -> Optional[HistoryEntry]:
        for entry in self._entries:
            if entry.algorithm == algorithm:
                return entry
        return None

    def clear(self):
        self._entries = []

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
