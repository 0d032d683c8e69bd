"""
Worst-Case Merge Engine for Cloud Cover Forecast

Reconciles the primary (Open-Meteo) hourly cloud series with the secondary
(Met.no) series and tracks where the two providers disagree.

Rules per hour and cloud level:
1. Both null            -> leave the primary null
2. Primary null         -> adopt the secondary value (fill)
3. Secondary null       -> keep the primary value
4. Both present         -> max(primary, secondary) is displayed

Disagreements larger than the threshold (percentage points) are recorded on
the row as provider_diff and counted in the DiffSummary. An hour counts once
in rows_with_differences no matter how many levels disagree.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from cloud_cover.geotime import hour_bucket
from cloud_cover.models import (
    CLOUD_LEVELS,
    CloudLevels,
    DiffSummary,
    HourlyCloudRow,
    LevelDiff,
    SecondaryHour,
)

logger = logging.getLogger(__name__)

DEFAULT_DIFF_THRESHOLD = 20


@dataclass
class MergeResult:
    """Merged rows plus the disagreement counters for one merge pass."""
    rows: List[HourlyCloudRow]
    summary: DiffSummary

    @property
    def has_differences(self) -> bool:
        return self.summary["rows_with_differences"] > 0


def empty_summary(threshold: int = DEFAULT_DIFF_THRESHOLD) -> DiffSummary:
    return {
        "rows_with_differences": 0,
        "per_level": {level: 0 for level in CLOUD_LEVELS},
        "threshold": threshold,
    }


def describe_differences(summary: Optional[DiffSummary]) -> List[str]:
    """Levels that disagreed at least once, in display order."""
    if not summary:
        return []
    per_level = summary.get("per_level", {})
    return [level for level in CLOUD_LEVELS if per_level.get(level, 0) > 0]


class ForecastMerger:
    """
    Worst-case merger for two hourly cloud-cover series.

    The merger holds no state between calls; merge() never mutates the rows
    it is given and returns fresh copies.
    """

    def __init__(self, threshold: int = DEFAULT_DIFF_THRESHOLD):
        self.threshold = int(threshold)
        logger.debug(f"[ForecastMerger] Initialized with threshold={self.threshold}%")

    def merge(
        self,
        primary_rows: List[HourlyCloudRow],
        secondary_hourly: Optional[Mapping[str, SecondaryHour]],
    ) -> MergeResult:
        """
        Merge the secondary series into the primary rows.

        Args:
            primary_rows: Rows from the primary provider (sorted by ts)
            secondary_hourly: Secondary values keyed by UTC "YYYY-MM-DD HH",
                              or None/empty when the secondary is unavailable

        Returns:
            MergeResult with merged rows and a DiffSummary
        """
        summary = empty_summary(self.threshold)

        if not secondary_hourly:
            logger.warning("[ForecastMerger] Secondary series unavailable - returning primary only")
            return MergeResult(rows=[dict(row) for row in primary_rows], summary=summary)

        merged: List[HourlyCloudRow] = []
        aligned = 0

        for source_row in primary_rows:
            row: HourlyCloudRow = dict(source_row)
            secondary = secondary_hourly.get(hour_bucket(row["ts"]))

            if secondary is None:
                merged.append(row)
                continue

            aligned += 1
            if self._merge_hour(row, secondary, summary):
                summary["rows_with_differences"] += 1

            merged.append(row)

        logger.info(
            f"[ForecastMerger] Aligned {aligned}/{len(primary_rows)} hours, "
            f"{summary['rows_with_differences']} differ by more than {self.threshold}%"
        )
        if summary["rows_with_differences"]:
            logger.debug(f"[ForecastMerger] Per-level differences: {summary['per_level']}")

        return MergeResult(rows=merged, summary=summary)

    def _merge_hour(
        self,
        row: HourlyCloudRow,
        secondary: Mapping[str, Optional[int]],
        summary: DiffSummary,
    ) -> bool:
        """Merge one aligned hour in place; True if any level exceeded the threshold."""
        primary_values: CloudLevels = {level: row.get(level) for level in CLOUD_LEVELS}
        secondary_values: CloudLevels = {level: secondary.get(level) for level in CLOUD_LEVELS}

        row["source_values"] = {
            "primary": primary_values,
            "secondary": secondary_values,
        }

        diffs: Dict[str, LevelDiff] = {}

        for level in CLOUD_LEVELS:
            primary_val = primary_values[level]
            secondary_val = secondary_values[level]

            if primary_val is None and secondary_val is None:
                continue

            if primary_val is None:
                row[level] = secondary_val
                continue

            if secondary_val is None:
                continue

            difference = abs(primary_val - secondary_val)
            if difference > self.threshold:
                summary["per_level"][level] += 1
                diffs[level] = {
                    "difference": difference,
                    "primary": primary_val,
                    "secondary": secondary_val,
                    "selected": "secondary" if secondary_val >= primary_val else "primary",
                }
                logger.debug(
                    f"[ForecastMerger] {row['time']} {level}: "
                    f"primary={primary_val}% secondary={secondary_val}% (diff {difference})"
                )

            row[level] = max(primary_val, secondary_val)

        if diffs:
            row["provider_diff"] = diffs
            return True
        return False


def merge_cloud_cover(
    primary_rows: List[HourlyCloudRow],
    secondary_hourly: Optional[Mapping[str, SecondaryHour]],
    threshold: int = DEFAULT_DIFF_THRESHOLD,
) -> MergeResult:
    """Convenience wrapper around ForecastMerger.merge()."""
    return ForecastMerger(threshold).merge(primary_rows, secondary_hourly)
