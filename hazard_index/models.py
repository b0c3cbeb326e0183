"""
Core data structures for district hazard scoring.

Per-hazard metrics move through the pipeline as pandas Series indexed by
district_id. A missing value (NaN / None / pd.NA) means no data was
obtained for that district and is kept distinct from a measured zero.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd


class Hazard(Enum):
    """Climate and environmental hazard categories."""
    HEAT = "heat"           # Days above a temperature threshold
    PRECIP = "precip"       # Days above a precipitation threshold
    WILDFIRE = "wildfire"   # Wildfire hazard potential, 0-5
    SLR = "slr"             # Sea-level-rise inundation, percent of area
    FLOOD = "flood"         # Flood zone coverage, percent of area


class Period(Enum):
    """Time window a metric describes."""
    PROJECTED = "projected"
    HISTORICAL = "historical"


class DistrictType(Enum):
    """School district types."""
    ELEMENTARY = "elementary"
    HIGH = "high"
    UNIFIED = "unified"

    @classmethod
    def parse(cls, value: str) -> "DistrictType":
        """Parse a type label such as 'Unified' or 'High School District'."""
        text = str(value).strip().lower()
        for member in cls:
            if text == member.value or text.startswith(member.value + " "):
                return member
        raise ValueError(f"Unknown district type: {value!r}")


# Raw value column per hazard; historical columns add HIST_SUFFIX.
RAW_COLUMNS: Dict[Hazard, str] = {
    Hazard.HEAT: "heat_days",
    Hazard.PRECIP: "precip_days",
    Hazard.WILDFIRE: "wildfire_mean",
    Hazard.SLR: "slr_percent",
    Hazard.FLOOD: "flood_percent",
}

HIST_SUFFIX = "_hist"

# Hazards with a separate historical measurement. Flood has none and
# its current score stands in for the historical one.
HISTORICAL_HAZARDS = (Hazard.HEAT, Hazard.PRECIP, Hazard.WILDFIRE, Hazard.SLR)

VALID_SCORES = frozenset(range(6))


def is_absent(value: Any) -> bool:
    """True for None, NaN and pd.NA; False for any real number including 0."""
    if value is None or value is pd.NA:
        return True
    try:
        return math.isnan(value)
    except TypeError:
        return False


def raw_column(hazard: Hazard, period: Period = Period.PROJECTED) -> str:
    """Summary column holding the raw value for a hazard and period."""
    name = RAW_COLUMNS[hazard]
    return name + HIST_SUFFIX if period is Period.HISTORICAL else name


def score_column(hazard: Hazard, period: Period = Period.PROJECTED) -> str:
    """Summary column holding the score for a hazard and period."""
    name = f"{hazard.value}_score"
    return name + HIST_SUFFIX if period is Period.HISTORICAL else name


@dataclass(frozen=True)
class District:
    """
    A school district, the unit of analysis.

    Attributes:
        district_id: Unique identifier code
        name: District name
        county: County the district belongs to
        district_type: Elementary, high or unified
        geometry: Shapely Polygon or MultiPolygon
        attributes: Enrollment and demographic passthrough fields
    """
    district_id: str
    name: str
    county: str
    district_type: Optional[DistrictType]
    geometry: Any
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RawMetric:
    """One district's raw measurement for a hazard and period."""
    district_id: str
    hazard: Hazard
    period: Period
    value: Optional[float]

    @property
    def is_absent(self) -> bool:
        return is_absent(self.value)


@dataclass(frozen=True)
class ScoreRecord:
    """
    One district's 0-5 score for a hazard and period.

    score is None exactly when raw_value is absent; otherwise score is 0
    if and only if raw_value is exactly 0.
    """
    district_id: str
    hazard: Hazard
    period: Period
    raw_value: Optional[float]
    score: Optional[int]

    def __post_init__(self):
        if is_absent(self.raw_value):
            if self.score is not None:
                raise ValueError(
                    f"{self.district_id}/{self.hazard.value}: absent raw value "
                    f"cannot carry score {self.score}"
                )
            return
        if self.score not in VALID_SCORES:
            raise ValueError(f"Score must be in 0-5, got {self.score}")
        if (self.score == 0) != (self.raw_value == 0):
            raise ValueError(
                f"{self.district_id}/{self.hazard.value}: score 0 requires raw value 0, "
                f"got raw={self.raw_value} score={self.score}"
            )


@dataclass(frozen=True)
class HazardSummaryRecord:
    """
    Per-district summary row.

    Attributes:
        district_id: District identifier
        descriptive: Name, county, type and passthrough fields
        raw_values: Raw value per summary column name
        scores: Score per summary column name (None when absent)
        hazard_score: Sum of projected scores (None when not computable)
        hazard_score_hist: Sum of historical scores with the flood score reused
        missing_hazards: Hazards for which no score was available
    """
    district_id: str
    descriptive: Dict[str, Any]
    raw_values: Dict[str, Optional[float]]
    scores: Dict[str, Optional[int]]
    hazard_score: Optional[int]
    hazard_score_hist: Optional[int]
    missing_hazards: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into a single tabular row."""
        row: Dict[str, Any] = {"district_id": self.district_id}
        row.update(self.descriptive)
        row.update(self.raw_values)
        row.update(self.scores)
        row["hazard_score"] = self.hazard_score
        row["hazard_score_hist"] = self.hazard_score_hist
        row["missing_hazards"] = ",".join(self.missing_hazards)
        return row
