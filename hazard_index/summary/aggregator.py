"""
Hazard Summary Aggregation

Joins the per-hazard scores of every district into one summary row and
computes the reporting statistics.

    hazard_score      = heat + precip + wildfire + slr + flood
    hazard_score_hist = heat_hist + precip_hist + wildfire_hist + slr_hist + flood

Flood has no historical measurement, so its current score is reused in
the historical sum. A district missing a score is handled according to
the configured MissingDataPolicy and is always listed in missing_hazards.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import geopandas as gpd
import numpy as np
import pandas as pd

from hazard_index.config import MissingDataPolicy, SummaryConfig
from hazard_index.data.districts import DESCRIPTIVE_COLUMNS, passthrough_columns
from hazard_index.exceptions import MissingScoreError
from hazard_index.models import (
    HISTORICAL_HAZARDS,
    Hazard,
    HazardSummaryRecord,
    Period,
    is_absent,
    raw_column,
    score_column,
)
from hazard_index.scoring.binning import BinEdges
from hazard_index.scoring.hazards import HazardScores

logger = logging.getLogger(__name__)

SCORE_VALUES = list(range(6))


def hazard_periods():
    """(hazard, period) pairs carried in the summary, in column order."""
    pairs = []
    for hazard in Hazard:
        pairs.append((hazard, Period.PROJECTED))
        if hazard in HISTORICAL_HAZARDS:
            pairs.append((hazard, Period.HISTORICAL))
    return pairs


def projected_score_columns() -> List[str]:
    return [score_column(h, Period.PROJECTED) for h in Hazard]


def historical_score_columns() -> List[str]:
    """Historical sum terms; flood contributes its current score."""
    return [
        score_column(h, Period.HISTORICAL) if h in HISTORICAL_HAZARDS
        else score_column(h, Period.PROJECTED)
        for h in Hazard
    ]


def _missing_label(hazard: Hazard, period: Period) -> str:
    return hazard.value + ("_hist" if period is Period.HISTORICAL else "")


def _none_if_absent(value):
    return None if is_absent(value) else value


def _int_or_none(value):
    return None if is_absent(value) else int(value)


@dataclass
class HazardSummary:
    """
    Results of summary aggregation.

    Attributes:
        table: One row per district with raw values, scores and sums
        records: The same rows as HazardSummaryRecord objects
        edges: Bin edges used per hazard name
        statistics: Descriptive statistics per raw metric and summed score
        bin_counts: Districts per score value (columns 0-5) per score column
    """
    table: gpd.GeoDataFrame
    records: List[HazardSummaryRecord]
    edges: Dict[str, BinEdges] = field(default_factory=dict)
    statistics: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    bin_counts: Optional[pd.DataFrame] = None

    def to_dict(self) -> Dict[str, Any]:
        """Reporting payload without the table itself."""
        return {
            "district_count": len(self.table),
            "edges": {name: e.to_dict() for name, e in self.edges.items()},
            "statistics": self.statistics,
            "bin_counts": {
                row: {str(col): int(v) for col, v in counts.items()}
                for row, counts in self.bin_counts.iterrows()
            } if self.bin_counts is not None else {},
        }


class HazardSummaryAggregator:
    """
    Builds the per-district hazard summary.

    Every district in the master list gets a row. Scores for ids not in
    the master list are ignored with a warning.
    """

    def __init__(self, config: Optional[SummaryConfig] = None):
        self.config = config or SummaryConfig()

    def aggregate(
        self,
        districts: gpd.GeoDataFrame,
        scores: Dict[Hazard, HazardScores],
    ) -> HazardSummary:
        """
        Join scores onto the master district list.

        Args:
            districts: Prepared district layer (see prepare_districts)
            scores: HazardScores per hazard from HazardScorer

        Returns:
            HazardSummary

        Raises:
            MissingScoreError: Under the fail policy, if any district lacks
                a score for any hazard and period
        """
        ids = pd.Index(districts["district_id"], name="district_id")
        table = pd.DataFrame(index=ids)
        for col in DESCRIPTIVE_COLUMNS[1:] + passthrough_columns(districts):
            table[col] = districts[col].to_numpy()

        missing: Dict[str, List[str]] = {}
        for hazard, period in hazard_periods():
            raw, score = self._columns_for(hazard, period, scores.get(hazard), ids)
            table[raw_column(hazard, period)] = raw
            table[score_column(hazard, period)] = score
            absent = list(score.index[score.isna()])
            if absent:
                missing[_missing_label(hazard, period)] = absent

        if missing:
            summary = ", ".join(f"{k}: {v[:5]}" for k, v in missing.items())
            if self.config.missing_policy is MissingDataPolicy.FAIL:
                raise MissingScoreError(missing)
            logger.warning(
                f"Districts without scores ({summary}); policy={self.config.missing_policy.value}"
            )

        table["hazard_score"] = self._sum(table, projected_score_columns())
        table["hazard_score_hist"] = self._sum(table, historical_score_columns())
        absent_sets = {label: set(absent) for label, absent in missing.items()}
        table["missing_hazards"] = [
            ",".join(label for label, absent in absent_sets.items() if d in absent)
            for d in ids
        ]

        table = table.reset_index()
        geo = gpd.GeoDataFrame(
            table, geometry=districts.geometry.to_numpy(), crs=districts.crs
        )

        records = self._records(geo, passthrough_columns(districts))
        edges = {
            h.value: s.edges for h, s in scores.items()
            if s.edges is not None
        }
        statistics = self.describe(geo)
        bin_counts = self.count_bins(geo)

        logger.info(
            f"Summarized {len(geo)} districts; hazard_score mean "
            f"{statistics['hazard_score']['mean']}, "
            f"{int(geo['hazard_score'].isna().sum())} without a complete score"
        )
        return HazardSummary(geo, records, edges, statistics, bin_counts)

    def _columns_for(self, hazard, period, hazard_scores, ids):
        if hazard_scores is None or period not in hazard_scores.scores:
            logger.warning(f"No {_missing_label(hazard, period)} scores supplied")
            return (
                pd.Series(np.nan, index=ids, dtype=float),
                pd.Series(pd.NA, index=ids, dtype="Int64"),
            )

        raw = hazard_scores.raw[period]
        score = hazard_scores.scores[period]
        unknown = score.index.difference(ids)
        if len(unknown):
            logger.warning(
                f"{len(unknown)} {_missing_label(hazard, period)} score(s) for districts "
                f"not in the master list ignored: {list(unknown[:10])}"
            )
        return (
            raw.reindex(ids).astype(float),
            score.reindex(ids).astype("Int64"),
        )

    def _sum(self, table: pd.DataFrame, columns: List[str]) -> pd.Series:
        total = pd.Series(0, index=table.index, dtype="Int64")
        for col in columns:
            total = total + table[col].fillna(0)
        if self.config.missing_policy is not MissingDataPolicy.ZERO:
            total[table[columns].isna().any(axis=1)] = pd.NA
        return total

    def _records(self, table: pd.DataFrame, extra: List[str]) -> List[HazardSummaryRecord]:
        raw_cols = [raw_column(h, p) for h, p in hazard_periods()]
        score_cols = [score_column(h, p) for h, p in hazard_periods()]
        records = []
        for row in table.to_dict("records"):
            records.append(HazardSummaryRecord(
                district_id=row["district_id"],
                descriptive={c: row[c] for c in DESCRIPTIVE_COLUMNS[1:] + extra},
                raw_values={c: _none_if_absent(row[c]) for c in raw_cols},
                scores={c: _int_or_none(row[c]) for c in score_cols},
                hazard_score=_int_or_none(row["hazard_score"]),
                hazard_score_hist=_int_or_none(row["hazard_score_hist"]),
                missing_hazards=[m for m in row["missing_hazards"].split(",") if m],
            ))
        return records

    def describe(self, table: pd.DataFrame) -> Dict[str, Dict[str, Any]]:
        """
        Min, max, mean, standard deviation and counts per metric.

        Covers the raw metric of every hazard and period plus both
        summed scores. Absent values are excluded and counted.
        """
        columns = [raw_column(h, p) for h, p in hazard_periods()]
        columns += ["hazard_score", "hazard_score_hist"]
        stats = {}
        for col in columns:
            values = pd.to_numeric(table[col], errors="coerce").astype(float)
            valid = values.dropna()
            stats[col] = {
                "min": float(valid.min()) if len(valid) else None,
                "max": float(valid.max()) if len(valid) else None,
                "mean": float(valid.mean()) if len(valid) else None,
                "std": (
                    float(valid.std(ddof=self.config.ddof))
                    if len(valid) > self.config.ddof else None
                ),
                "count": int(len(valid)),
                "absent": int(values.isna().sum()),
            }
        return stats

    def count_bins(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Districts per score value for every score column.

        Returns:
            DataFrame indexed by score column with columns 0-5 and absent;
            every score value appears even with a zero count
        """
        rows = {}
        for hazard, period in hazard_periods():
            col = score_column(hazard, period)
            scores = table[col]
            counts = scores.dropna().astype(int).value_counts()
            row = counts.reindex(SCORE_VALUES, fill_value=0).astype(int).to_dict()
            row["absent"] = int(scores.isna().sum())
            rows[col] = row
        return pd.DataFrame.from_dict(rows, orient="index")[SCORE_VALUES + ["absent"]]
