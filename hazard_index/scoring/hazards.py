"""
Per-Hazard Scoring Rules

Applies the scoring rule of each hazard to its district-indexed raw
metrics:

    wildfire  zonal mean 0-5, rounded half up, (0, 1) forced to 1
    heat      equal-interval bins fit on projected day counts
    precip    equal-interval bins fit on projected day counts
    slr       equal-interval bins fit on projected percent of area
    flood     fixed 20-percent bins over [0, 100], current period only
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from hazard_index.config import FloodConfig
from hazard_index.models import Hazard, Period, RawMetric, ScoreRecord, is_absent
from hazard_index.scoring.binning import N_BINS, BinEdges, IntervalBinner

logger = logging.getLogger(__name__)

BINNED_HAZARDS = (Hazard.HEAT, Hazard.PRECIP, Hazard.SLR)


@dataclass
class HazardMetrics:
    """
    Raw district-indexed metrics for every hazard and period.

    Missing series, or NaN entries within a series, mean no data.
    Flood has no historical entry.
    """
    projected: Dict[Hazard, pd.Series] = field(default_factory=dict)
    historical: Dict[Hazard, pd.Series] = field(default_factory=dict)

    def get(self, hazard: Hazard, period: Period) -> Optional[pd.Series]:
        source = self.projected if period is Period.PROJECTED else self.historical
        return source.get(hazard)

    def to_raw_metrics(self) -> List[RawMetric]:
        """One RawMetric per district, hazard and period."""
        metrics = []
        for period, source in (
            (Period.PROJECTED, self.projected),
            (Period.HISTORICAL, self.historical),
        ):
            for hazard, values in source.items():
                for district_id, value in values.items():
                    metrics.append(RawMetric(
                        district_id=district_id,
                        hazard=hazard,
                        period=period,
                        value=None if is_absent(value) else float(value),
                    ))
        return metrics


@dataclass
class HazardScores:
    """
    Scores for one hazard.

    Attributes:
        hazard: Hazard scored
        raw: Raw values per period
        scores: Nullable Int64 scores per period
        edges: Bin edges used (None for wildfire)
    """
    hazard: Hazard
    raw: Dict[Period, pd.Series]
    scores: Dict[Period, pd.Series]
    edges: Optional[BinEdges] = None

    def to_records(self) -> List[ScoreRecord]:
        """Expand into one ScoreRecord per district and period."""
        records = []
        for period, scores in self.scores.items():
            raw = self.raw[period]
            for district_id, score in scores.items():
                value = raw.get(district_id)
                records.append(ScoreRecord(
                    district_id=district_id,
                    hazard=self.hazard,
                    period=period,
                    raw_value=None if is_absent(value) else float(value),
                    score=None if is_absent(score) else int(score),
                ))
        return records


def score_wildfire_value(mean: Optional[float]) -> Optional[int]:
    """
    Score a wildfire zonal mean.

    Rounds to the nearest integer with ties going up; a positive mean
    that would round to 0 scores 1 so residual risk is kept.
    """
    if is_absent(mean):
        return None
    if mean < 0:
        raise ValueError(f"Wildfire mean cannot be negative: {mean}")
    if mean == 0:
        return 0
    score = int(math.floor(mean + 0.5))
    return min(max(score, 1), N_BINS)


class HazardScorer:
    """
    Orchestrates per-hazard scoring.

    Edges fit on a projected distribution are reused for the paired
    historical distribution. Pass precomputed edges (for instance from
    an EdgeStore) to skip fitting entirely.
    """

    def __init__(
        self,
        flood_config: Optional[FloodConfig] = None,
        binner: Optional[IntervalBinner] = None,
    ):
        self.flood_config = flood_config or FloodConfig()
        self.binner = binner or IntervalBinner()
        self.flood_edges = BinEdges.fixed(
            0.0, self.flood_config.upper_bound, Hazard.FLOOD.value
        )

    def score_wildfire(
        self,
        projected: pd.Series,
        historical: Optional[pd.Series] = None,
    ) -> HazardScores:
        """Identity scoring of rounded wildfire zonal means."""
        raw = {Period.PROJECTED: projected}
        if historical is not None:
            raw[Period.HISTORICAL] = historical

        scores = {
            period: pd.Series(
                pd.array([score_wildfire_value(v) for v in series], dtype="Int64"),
                index=series.index,
            )
            for period, series in raw.items()
        }
        return HazardScores(Hazard.WILDFIRE, raw, scores)

    def score_binned(
        self,
        hazard: Hazard,
        projected: pd.Series,
        historical: Optional[pd.Series] = None,
        edges: Optional[BinEdges] = None,
    ) -> HazardScores:
        """
        Equal-interval scoring with projected edges reused for historical.

        Args:
            hazard: One of heat, precip, slr
            projected: Projected raw values
            historical: Historical raw values, if any
            edges: Previously fit edges; fitting is skipped when given
        """
        if hazard not in BINNED_HAZARDS:
            raise ValueError(f"{hazard.value} is not scored with interval bins")

        if edges is None:
            edges = self.binner.fit(projected, hazard.value)
        else:
            logger.info(f"Reusing stored {hazard.value} edges {edges.edges}")

        raw = {Period.PROJECTED: projected}
        scores = {Period.PROJECTED: self.binner.score_series(projected, edges)}
        if historical is not None:
            raw[Period.HISTORICAL] = historical
            scores[Period.HISTORICAL] = self.binner.score_series(historical, edges)
            above = int((historical.dropna() > edges.maximum).sum())
            if above:
                logger.info(
                    f"{above} historical {hazard.value} value(s) above projected "
                    f"maximum {edges.maximum:g} clamped to {N_BINS}"
                )

        return HazardScores(hazard, raw, scores, edges)

    def score_flood(self, percent: pd.Series) -> HazardScores:
        """Fixed-width bins over [0, upper_bound]; no historical period."""
        scores = self.binner.score_series(percent, self.flood_edges)
        return HazardScores(
            Hazard.FLOOD,
            {Period.PROJECTED: percent},
            {Period.PROJECTED: scores},
            self.flood_edges,
        )

    def score_all(
        self,
        metrics: HazardMetrics,
        edges: Optional[Dict[str, BinEdges]] = None,
    ) -> Dict[Hazard, HazardScores]:
        """
        Score every hazard present in metrics.

        Args:
            metrics: Raw metrics per hazard and period
            edges: Stored edges by hazard name, reused where present

        Returns:
            HazardScores per hazard
        """
        edges = edges or {}
        results: Dict[Hazard, HazardScores] = {}

        wildfire = metrics.get(Hazard.WILDFIRE, Period.PROJECTED)
        if wildfire is not None:
            results[Hazard.WILDFIRE] = self.score_wildfire(
                wildfire, metrics.get(Hazard.WILDFIRE, Period.HISTORICAL)
            )
        else:
            logger.warning("No projected wildfire metrics; hazard not scored")

        for hazard in BINNED_HAZARDS:
            projected = metrics.get(hazard, Period.PROJECTED)
            if projected is None:
                logger.warning(f"No projected {hazard.value} metrics; hazard not scored")
                continue
            results[hazard] = self.score_binned(
                hazard,
                projected,
                metrics.get(hazard, Period.HISTORICAL),
                edges.get(hazard.value),
            )

        flood = metrics.get(Hazard.FLOOD, Period.PROJECTED)
        if flood is not None:
            results[Hazard.FLOOD] = self.score_flood(flood)

        logger.info(f"Scored hazards: {', '.join(h.value for h in results)}")
        return results
