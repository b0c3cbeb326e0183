"""
Configuration for Hazard Index Computation.

Provides dataclasses and utilities for configuring the district hazard
scoring pipeline: input column names, exceedance thresholds, wildfire
reclassification, flood bins, overlay behavior and the summary policy
for districts without data.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


class MissingDataPolicy(Enum):
    """How the summary treats a district with no score for a hazard."""
    FAIL = "fail"   # Raise MissingScoreError naming the districts
    FLAG = "flag"   # Emit the row with an absent summed score
    ZERO = "zero"   # Sum the absent score as 0, still flagged


# Wildfire hazard potential classes: 1-5 pass through, 6 (non-burnable)
# and 7 (water) carry no wildfire risk.
DEFAULT_WILDFIRE_RECLASS = {1: 1, 2: 2, 3: 3, 4: 4, 5: 5, 6: 0, 7: 0}


@dataclass
class ColumnConfig:
    """
    Column names of the master district table.

    Attributes:
        district_id: Unique district identifier column
        name: District name column
        county: County name column
        district_type: District type column (elementary/high/unified)
        passthrough: Extra columns carried into the summary; None keeps all
    """

    district_id: str = "district_id"
    name: str = "name"
    county: str = "county"
    district_type: str = "district_type"
    passthrough: Optional[List[str]] = None


@dataclass
class ExceedanceConfig:
    """
    Thresholds for day-count hazards, in the units of the daily series.

    Attributes:
        heat_threshold: Daily maximum temperature above which a day counts
        precip_threshold: Daily precipitation above which a day counts
        per_year: Report the mean count per year instead of the total
    """

    heat_threshold: float = 95.0
    precip_threshold: float = 1.0
    per_year: bool = True


@dataclass
class WildfireConfig:
    """
    Wildfire raster settings.

    Attributes:
        reclass_map: Raw raster class to numeric hazard value
        nodata: NoData value overriding the raster's own, if set
    """

    reclass_map: Dict[int, float] = field(
        default_factory=lambda: dict(DEFAULT_WILDFIRE_RECLASS)
    )
    nodata: Optional[float] = None


@dataclass
class FloodConfig:
    """
    Fixed-width flood coverage bins.

    Attributes:
        bin_width: Width of each bin in percent
        upper_bound: Upper end of the binned range in percent
    """

    bin_width: float = 20.0
    upper_bound: float = 100.0

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.bin_width <= 0:
            raise ValueError(f"bin_width must be positive, got {self.bin_width}")
        n_bins = self.upper_bound / self.bin_width
        if abs(n_bins - round(n_bins)) > 1e-9 or round(n_bins) != 5:
            raise ValueError(
                f"upper_bound / bin_width must give 5 bins, got {n_bins:g}"
            )


@dataclass
class OverlayConfig:
    """
    Area overlay behavior.

    Attributes:
        repair_invalid: Repair invalid geometries with make_valid; when off,
            an invalid district geometry raises InvalidGeometryError
        clamp_percent: Clamp summed coverage above 100 (overlapping extents)
    """

    repair_invalid: bool = True
    clamp_percent: bool = True


@dataclass
class SummaryConfig:
    """
    Summary aggregation behavior.

    Attributes:
        missing_policy: Treatment of districts without a hazard score
        ddof: Delta degrees of freedom for the reported standard deviation
    """

    missing_policy: MissingDataPolicy = MissingDataPolicy.FLAG
    ddof: int = 1

    def __post_init__(self):
        if isinstance(self.missing_policy, str):
            self.missing_policy = MissingDataPolicy(self.missing_policy.lower())


@dataclass
class HazardIndexConfig:
    """
    Complete configuration for a hazard index run.

    Attributes:
        columns: District table column names
        exceedance: Day-count thresholds
        wildfire: Wildfire raster settings
        flood: Flood bins
        overlay: Area overlay behavior
        summary: Summary aggregation behavior
        strict_fit: Raise instead of warn on an all-zero distribution
        edges_path: JSON file holding persisted bin edges
    """

    columns: ColumnConfig = field(default_factory=ColumnConfig)
    exceedance: ExceedanceConfig = field(default_factory=ExceedanceConfig)
    wildfire: WildfireConfig = field(default_factory=WildfireConfig)
    flood: FloodConfig = field(default_factory=FloodConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    strict_fit: bool = False
    edges_path: Optional[str] = None

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "HazardIndexConfig":
        """
        Create configuration from dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            HazardIndexConfig instance
        """
        wildfire_dict = dict(config_dict.get("wildfire", {}))
        if "reclass_map" in wildfire_dict:
            wildfire_dict["reclass_map"] = {
                int(k): float(v) for k, v in wildfire_dict["reclass_map"].items()
            }

        return cls(
            columns=ColumnConfig(**config_dict.get("columns", {})),
            exceedance=ExceedanceConfig(**config_dict.get("exceedance", {})),
            wildfire=WildfireConfig(**wildfire_dict),
            flood=FloodConfig(**config_dict.get("flood", {})),
            overlay=OverlayConfig(**config_dict.get("overlay", {})),
            summary=SummaryConfig(**config_dict.get("summary", {})),
            strict_fit=config_dict.get("strict_fit", False),
            edges_path=config_dict.get("edges_path"),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "HazardIndexConfig":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            HazardIndexConfig instance
        """
        path = Path(yaml_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(path, "r") as f:
            config_dict = yaml.safe_load(f) or {}

        # Extract hazard_index section if present
        if "hazard_index" in config_dict:
            config_dict = config_dict["hazard_index"]

        return cls.from_dict(config_dict)

    def apply_environment(self) -> "HazardIndexConfig":
        """
        Apply environment variable overrides in place.

        Environment variables:
        - HAZARD_INDEX_MISSING_POLICY
        - HAZARD_INDEX_EDGES_PATH
        - HAZARD_INDEX_HEAT_THRESHOLD
        - HAZARD_INDEX_PRECIP_THRESHOLD
        - HAZARD_INDEX_STRICT_FIT

        Returns:
            The same configuration, for chaining
        """
        if os.environ.get("HAZARD_INDEX_MISSING_POLICY"):
            self.summary.missing_policy = MissingDataPolicy(
                os.environ["HAZARD_INDEX_MISSING_POLICY"].lower()
            )

        if os.environ.get("HAZARD_INDEX_EDGES_PATH"):
            self.edges_path = os.environ["HAZARD_INDEX_EDGES_PATH"]

        for var, attr in (
            ("HAZARD_INDEX_HEAT_THRESHOLD", "heat_threshold"),
            ("HAZARD_INDEX_PRECIP_THRESHOLD", "precip_threshold"),
        ):
            if os.environ.get(var):
                setattr(self.exceedance, attr, float(os.environ[var]))

        if os.environ.get("HAZARD_INDEX_STRICT_FIT"):
            self.strict_fit = os.environ["HAZARD_INDEX_STRICT_FIT"].lower() == "true"

        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "columns": {
                "district_id": self.columns.district_id,
                "name": self.columns.name,
                "county": self.columns.county,
                "district_type": self.columns.district_type,
                "passthrough": self.columns.passthrough,
            },
            "exceedance": {
                "heat_threshold": self.exceedance.heat_threshold,
                "precip_threshold": self.exceedance.precip_threshold,
                "per_year": self.exceedance.per_year,
            },
            "wildfire": {
                "reclass_map": dict(self.wildfire.reclass_map),
                "nodata": self.wildfire.nodata,
            },
            "flood": {
                "bin_width": self.flood.bin_width,
                "upper_bound": self.flood.upper_bound,
            },
            "overlay": {
                "repair_invalid": self.overlay.repair_invalid,
                "clamp_percent": self.overlay.clamp_percent,
            },
            "summary": {
                "missing_policy": self.summary.missing_policy.value,
                "ddof": self.summary.ddof,
            },
            "strict_fit": self.strict_fit,
            "edges_path": self.edges_path,
        }


def load_config(
    yaml_path: Optional[str] = None,
    use_environment: bool = True,
) -> HazardIndexConfig:
    """
    Load hazard index configuration with fallbacks.

    Attempts to load configuration in order:
    1. From specified YAML path (if provided)
    2. From default config paths
    3. Fall back to defaults
    Environment variable overrides are applied last.

    Args:
        yaml_path: Optional explicit path to YAML config
        use_environment: Whether to apply environment variable overrides

    Returns:
        HazardIndexConfig instance
    """
    config = None

    if yaml_path:
        config = HazardIndexConfig.from_yaml(yaml_path)

    if config is None:
        default_paths = [
            Path("hazard_index.yaml"),
            Path("config/hazard_index.yaml"),
            Path("~/.hazard_index/config.yaml").expanduser(),
        ]
        for path in default_paths:
            if path.exists():
                config = HazardIndexConfig.from_yaml(str(path))
                break

    if config is None:
        config = HazardIndexConfig()

    if use_environment:
        config.apply_environment()

    return config
