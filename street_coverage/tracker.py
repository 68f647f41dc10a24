"""
Live coverage tracking for one loaded area.

The tracker owns the area's street segments. Each position sample marks
every unvisited segment within the visit threshold as visited and then
re-selects the nearest unvisited segment as the navigation target.
Callers only ever see copies through ``get_state``.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from config import get_spatial_index_min_segments, get_visit_threshold_meters
from core.exceptions import InvalidGeometry, InvalidPosition
from street_coverage.models import CoverageState, Position, StreetSegment
from street_coverage.proximity import distance_to_segment
from street_coverage.segment_index import SegmentIndex

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


def validate_position(point: Position) -> Position:
    """Raise InvalidPosition for non-finite or out-of-range coordinates."""
    if not isinstance(point, Position) or not point.is_valid():
        lat = getattr(point, "lat", None)
        lng = getattr(point, "lng", None)
        msg = f"Invalid position ({lat}, {lng})"
        raise InvalidPosition(msg, {"lat": lat, "lng": lng})
    return point


class CoverageTracker:
    """Visited-street bookkeeping and target selection for one area."""

    def __init__(
        self,
        threshold_meters: float | None = None,
        *,
        use_index: bool | None = None,
    ) -> None:
        self.threshold_meters = (
            get_visit_threshold_meters()
            if threshold_meters is None
            else float(threshold_meters)
        )
        if self.threshold_meters < 0:
            msg = "Visit threshold must be non-negative."
            raise ValueError(msg)
        self._use_index = use_index
        self._lock = threading.RLock()
        self._segments: list[StreetSegment] = []
        self._index: SegmentIndex | None = None
        self._target_idx: int | None = None

    @property
    def has_index(self) -> bool:
        return self._index is not None

    def load_area(self, segments: Iterable[StreetSegment]) -> None:
        """
        Replace the whole segment set and clear the target.

        The new set is copied and indexed before the lock is taken, so
        readers see either the old area or the new one.

        Raises:
            InvalidGeometry: a segment has fewer than two coordinates; the
                current area stays loaded.
        """
        fresh = [seg.copy() for seg in segments]
        for seg in fresh:
            if len(seg.coordinates) < 2:
                msg = f"Segment {seg.id} has {len(seg.coordinates)} coordinates."
                raise InvalidGeometry(msg, {"segment_id": seg.id})
        index = self._build_index(fresh)

        with self._lock:
            self._segments = fresh
            self._index = index
            self._target_idx = None
        logger.info(
            "Loaded area with %d street segments (spatial index: %s)",
            len(fresh),
            "on" if index is not None else "off",
        )

    def _build_index(self, segments: list[StreetSegment]) -> SegmentIndex | None:
        enabled = self._use_index
        if enabled is None:
            enabled = len(segments) >= get_spatial_index_min_segments()
        if not enabled or not segments:
            return None
        return SegmentIndex(segments)

    def _visit_candidates(self, point: Position) -> list[int] | range:
        if self._index is not None:
            indices = self._index.candidates(point, self.threshold_meters)
            if indices is not None:
                return indices
        return range(len(self._segments))

    def update_position(self, point: Position) -> list[str]:
        """
        Apply one position sample.

        Marks every unvisited segment within the threshold visited, then
        selects the nearest remaining unvisited segment as the target
        (first in load order on ties). Returns the ids visited by this
        sample.

        Raises:
            InvalidPosition: the sample is rejected and state is unchanged.
        """
        validate_position(point)

        with self._lock:
            newly_visited: list[str] = []
            for idx in self._visit_candidates(point):
                segment = self._segments[idx]
                if segment.visited:
                    continue
                if distance_to_segment(point, segment) <= self.threshold_meters:
                    segment.mark_visited()
                    newly_visited.append(segment.id)

            self._target_idx = self._nearest_unvisited(point)

            if newly_visited:
                logger.info(
                    "Visited %d street segment(s): %s",
                    len(newly_visited),
                    ", ".join(newly_visited),
                )
                if self._target_idx is None:
                    logger.info(
                        "Coverage complete: all %d segments visited",
                        len(self._segments),
                    )
            logger.debug(
                "Position (%.6f, %.6f): target=%s",
                point.lat,
                point.lng,
                self._segments[self._target_idx].id
                if self._target_idx is not None
                else None,
            )
            return newly_visited

    def _nearest_unvisited(self, point: Position) -> int | None:
        nearest: int | None = None
        min_distance = float("inf")
        for idx, segment in enumerate(self._segments):
            if segment.visited:
                continue
            dist = distance_to_segment(point, segment)
            if dist < min_distance:
                min_distance = dist
                nearest = idx
        return nearest

    def get_state(self) -> CoverageState:
        with self._lock:
            copies = tuple(seg.copy() for seg in self._segments)
            target = copies[self._target_idx] if self._target_idx is not None else None
            return CoverageState(segments=copies, target=target)
