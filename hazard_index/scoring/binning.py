"""
Equal-Interval Binning of Hazard Metrics

Converts a raw hazard distribution (day counts, percentages) into ordinal
scores 1-5 by splitting the non-zero range into five equal-width intervals.
Zero is reserved for score 0. Edges fit on the projected distribution are
reapplied verbatim to the historical distribution so that the same raw
value earns the same score in either period.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from hazard_index.exceptions import DegenerateDistributionError
from hazard_index.models import is_absent

logger = logging.getLogger(__name__)

N_BINS = 5


@dataclass(frozen=True)
class BinEdges:
    """
    Six ordered boundaries defining five scoring intervals.

    Attributes:
        edges: Boundary values, edges[0] is the fitted minimum and
            edges[-1] the fitted maximum
        hazard: Name of the hazard the edges were fit for
        degenerate: True when the reference distribution had no value
            greater than zero
    """

    edges: Tuple[float, ...]
    hazard: Optional[str] = None
    degenerate: bool = False

    def __post_init__(self):
        """Validate edge count and ordering."""
        if len(self.edges) != N_BINS + 1:
            raise ValueError(f"Expected {N_BINS + 1} edges, got {len(self.edges)}")
        if any(b < a for a, b in zip(self.edges, self.edges[1:])):
            raise ValueError(f"Edges must be non-decreasing, got {self.edges}")

    @classmethod
    def fixed(cls, lower: float, upper: float, hazard: Optional[str] = None) -> "BinEdges":
        """Fixed-width edges over [lower, upper]."""
        return cls(tuple(float(e) for e in np.linspace(lower, upper, N_BINS + 1)), hazard)

    @property
    def minimum(self) -> float:
        return self.edges[0]

    @property
    def maximum(self) -> float:
        return self.edges[-1]

    @property
    def width(self) -> float:
        return (self.maximum - self.minimum) / N_BINS

    def intervals(self) -> List[Tuple[int, float, float]]:
        """(score, lower, upper) for each of the five bins."""
        return [(i + 1, self.edges[i], self.edges[i + 1]) for i in range(N_BINS)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "edges": list(self.edges),
            "hazard": self.hazard,
            "degenerate": self.degenerate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BinEdges":
        return cls(
            edges=tuple(float(e) for e in data["edges"]),
            hazard=data.get("hazard"),
            degenerate=bool(data.get("degenerate", False)),
        )


class IntervalBinner:
    """
    Fits equal-width bins over positive values and scores against them.

    Scoring rules:
        - exactly 0 scores 0
        - absent (None/NaN) stays absent
        - the global minimum and anything in (0, minimum) score 1
        - boundary values belong to the lower bin
        - anything above the fitted maximum scores 5
    """

    def __init__(self, strict: bool = False):
        """
        Initialize binner.

        Args:
            strict: Raise DegenerateDistributionError when a fit sees no
                positive value, instead of returning degenerate edges.
        """
        self.strict = strict

    def fit(self, values: Iterable[Optional[float]], hazard: Optional[str] = None) -> BinEdges:
        """
        Compute edges splitting [min, max] of the positive values into 5 bins.

        Args:
            values: Reference (projected) distribution; absent entries ignored
            hazard: Hazard name recorded on the edges

        Returns:
            BinEdges for the distribution

        Raises:
            ValueError: On negative or non-numeric entries
            DegenerateDistributionError: In strict mode, when no value is positive
        """
        raw = pd.Series(list(values), dtype=object)
        arr = pd.to_numeric(raw, errors="coerce")
        garbage = raw[arr.isna() & raw.notna()]
        if len(garbage):
            raise ValueError(
                f"{len(garbage)} non-numeric value(s) cannot be binned "
                f"(hazard={hazard}): {garbage.head(5).tolist()}"
            )
        arr = arr.dropna().to_numpy(dtype=float)

        if np.any(arr < 0):
            raise ValueError(f"Negative values cannot be binned (hazard={hazard})")

        positive = arr[arr > 0]
        if positive.size == 0:
            if self.strict:
                raise DegenerateDistributionError(hazard, int(arr.size))
            logger.warning(
                f"No values above zero for {hazard or 'distribution'} "
                f"({arr.size} values); all zero values will score 0"
            )
            return BinEdges((0.0,) * (N_BINS + 1), hazard, degenerate=True)

        lo, hi = float(positive.min()), float(positive.max())
        edges = tuple(float(e) for e in np.linspace(lo, hi, N_BINS + 1))
        if lo == hi:
            logger.warning(
                f"Single distinct positive value {lo} for {hazard or 'distribution'}; "
                f"bins have zero width"
            )
        logger.debug(f"Fit {hazard or 'distribution'} edges: {edges}")
        return BinEdges(edges, hazard)

    def score(self, value: Optional[float], edges: BinEdges) -> Optional[int]:
        """
        Score one value against fitted edges.

        Args:
            value: Raw value, or None/NaN when absent
            edges: Edges from fit() or BinEdges.fixed()

        Returns:
            Score 0-5, or None for an absent value
        """
        if is_absent(value):
            return None
        if value < 0:
            raise ValueError(f"Negative value cannot be scored: {value}")
        if value == 0:
            return 0
        for score, _, upper in edges.intervals():
            if value <= upper:
                return score
        return N_BINS

    def score_series(self, values: pd.Series, edges: BinEdges) -> pd.Series:
        """
        Score a district-indexed series.

        Returns:
            Nullable Int64 series on the same index, <NA> where absent
        """
        scores = [self.score(v, edges) for v in values]
        return pd.Series(
            pd.array(scores, dtype="Int64"), index=values.index, name=values.name
        )
