"""Lane allocation for side-by-side rendering of overlapping calendar items.

Items are placed in start order. Each item takes the lowest lane not already
held by an item it overlaps (first fit). Items that overlap, directly or
through a chain of overlaps, form one cluster. Every member of a cluster
reports the same ``lane_count``, equal to the highest lane in the cluster
plus one. When a new item bridges two clusters, they merge and the count is
refreshed for the union.

The functions here are pure. Nothing is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable

DEFAULT_ITEM_DURATION = timedelta(minutes=60)

TimedItemKind = Literal["task", "event"]


@dataclass(frozen=True)
class TimedItem:
    """A calendar entry with a start instant and an optional end."""

    id: Hashable
    kind: TimedItemKind
    start: datetime
    end: datetime | None = None


@dataclass(frozen=True)
class LanePosition:
    """Lane assigned to one item and the lane count of its overlap cluster."""

    lane: int
    lane_count: int


def effective_interval(
    item: TimedItem,
    *,
    default_duration: timedelta = DEFAULT_ITEM_DURATION,
) -> tuple[datetime, datetime]:
    """Return the half-open ``[start, end)`` interval used for overlap tests.

    Items without an end, or whose end does not come after the start, get
    ``default_duration`` from their start.
    """
    if item.end is None or item.end <= item.start:
        return item.start, item.start + default_duration
    return item.start, item.end


def intervals_overlap(
    first: tuple[datetime, datetime],
    second: tuple[datetime, datetime],
) -> bool:
    """Half-open interval intersection; touching endpoints do not overlap."""
    return first[0] < second[1] and second[0] < first[1]


class _ClusterSets:
    """Union-find over placement indexes, tracking the top lane per cluster."""

    def __init__(self) -> None:
        self._parent: list[int] = []
        self._max_lane: list[int] = []

    def add(self, lane: int) -> int:
        index = len(self._parent)
        self._parent.append(index)
        self._max_lane.append(lane)
        return index

    def find(self, index: int) -> int:
        root = index
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[index] != root:
            self._parent[index], index = root, self._parent[index]
        return root

    def union(self, left: int, right: int) -> None:
        left_root = self.find(left)
        right_root = self.find(right)
        if left_root == right_root:
            return
        self._parent[right_root] = left_root
        self._max_lane[left_root] = max(self._max_lane[left_root], self._max_lane[right_root])

    def lane_count(self, index: int) -> int:
        return self._max_lane[self.find(index)] + 1


def allocate_lanes(
    items: Iterable[TimedItem],
    *,
    default_duration: timedelta = DEFAULT_ITEM_DURATION,
) -> dict[Hashable, LanePosition]:
    """Assign each item a lane so that overlapping items never share one."""
    ordered = sorted(items, key=lambda item: item.start)
    intervals: list[tuple[datetime, datetime]] = []
    lanes: list[int] = []
    clusters = _ClusterSets()

    for item in ordered:
        interval = effective_interval(item, default_duration=default_duration)
        conflicts = [
            index
            for index, placed in enumerate(intervals)
            if intervals_overlap(interval, placed)
        ]
        occupied = {lanes[index] for index in conflicts}
        lane = 0
        while lane in occupied:
            lane += 1

        index = clusters.add(lane)
        for conflict in conflicts:
            clusters.union(index, conflict)
        intervals.append(interval)
        lanes.append(lane)

    return {
        item.id: LanePosition(lane=lanes[index], lane_count=clusters.lane_count(index))
        for index, item in enumerate(ordered)
    }


def layout_geometry(position: LanePosition) -> tuple[float, float]:
    """Return ``(left_pct, width_pct)`` for rendering one positioned item."""
    width = 100 / position.lane_count
    return position.lane * width, width
