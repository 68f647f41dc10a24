"""Road-class filtering and audit helpers for network ingestion.

Inclusion is a hard allow-list on the OSM ``highway`` tag: a way either
counts toward coverage or it does not. There is no scoring.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from street_coverage.constants import DRIVEABLE_HIGHWAY_TYPES

REASON_INCLUDE = "include_driveable_highway"
REASON_NO_HIGHWAY = "exclude_missing_highway"
REASON_NOT_DRIVEABLE = "exclude_not_driveable_highway"
REASON_NOT_LINE = "exclude_not_linestring"


@dataclass(frozen=True, slots=True)
class RoadDecision:
    """Single classifier decision."""

    include: bool
    reason_code: str
    highway_type: str | None = None


@dataclass(slots=True)
class RoadFilterAudit:
    """Aggregated classifier diagnostics for one ingestion run."""

    sample_limit: int = 25
    included_count: int = 0
    excluded_count: int = 0
    excluded_by_reason: dict[str, int] = field(default_factory=dict)
    excluded_by_highway: dict[str, int] = field(default_factory=dict)
    sample_excluded_ids: list[str] = field(default_factory=list)

    def record(self, decision: RoadDecision, feature_id: Any = None) -> None:
        if decision.include:
            self.included_count += 1
            return

        self.excluded_count += 1
        self.excluded_by_reason[decision.reason_code] = (
            self.excluded_by_reason.get(decision.reason_code, 0) + 1
        )
        if decision.highway_type:
            self.excluded_by_highway[decision.highway_type] = (
                self.excluded_by_highway.get(decision.highway_type, 0) + 1
            )

        if feature_id is None or len(self.sample_excluded_ids) >= self.sample_limit:
            return
        sample_id = str(feature_id)
        if sample_id not in self.sample_excluded_ids:
            self.sample_excluded_ids.append(sample_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "included_count": self.included_count,
            "excluded_count": self.excluded_count,
            "excluded_by_reason": dict(self.excluded_by_reason),
            "excluded_by_highway": dict(self.excluded_by_highway),
            "sample_excluded_ids": list(self.sample_excluded_ids),
        }


def normalize_highway(value: Any) -> str | None:
    """Lower-cased, stripped highway tag value, or None when untagged."""
    if value is None:
        return None
    token = str(value).strip().lower()
    return token or None


def classify_highway(tags: Mapping[str, Any] | None) -> RoadDecision:
    """Decide whether a way with these tags counts toward coverage."""
    highway = normalize_highway((tags or {}).get("highway"))
    if highway is None:
        return RoadDecision(include=False, reason_code=REASON_NO_HIGHWAY)
    if highway not in DRIVEABLE_HIGHWAY_TYPES:
        return RoadDecision(
            include=False,
            reason_code=REASON_NOT_DRIVEABLE,
            highway_type=highway,
        )
    return RoadDecision(include=True, reason_code=REASON_INCLUDE, highway_type=highway)
