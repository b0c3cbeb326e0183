"""
Custom Exceptions for Hazard Index Computation.

Provides a hierarchy of exceptions for the failure modes of the
district hazard scoring pipeline. Absent data is not an exception:
it travels through the pipeline as a missing value and is reported
at the summary stage.
"""


class HazardIndexError(Exception):
    """
    Base exception for hazard index failures.

    Attributes:
        message: Human-readable error description
        details: Additional context about the failure
    """

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class InputValidationError(HazardIndexError):
    """
    An input table, raster or layer is unusable as given.

    Raised for missing columns, mismatched coordinate reference systems
    and similar problems that must be fixed upstream.
    """


class DuplicateDistrictError(InputValidationError):
    """
    District identifiers are not unique across the master district table.

    Attributes:
        district_ids: The identifiers that occur more than once
    """

    def __init__(self, district_ids: list):
        message = f"{len(district_ids)} district identifier(s) are not unique"
        super().__init__(message, {"district_ids": district_ids})
        self.district_ids = district_ids


class ZeroAreaError(InputValidationError):
    """
    A district polygon has zero area, so coverage percent is undefined.

    Attributes:
        district_ids: Districts whose recorded area is zero
    """

    def __init__(self, district_ids: list):
        message = "District area is zero; coverage percent cannot be computed"
        super().__init__(message, {"district_ids": district_ids})
        self.district_ids = district_ids


class InvalidGeometryError(HazardIndexError):
    """
    A geometry is invalid and could not be repaired.

    Attributes:
        identifier: District id or extent row label of the geometry
        reason: Validity explanation reported by shapely
    """

    def __init__(self, identifier: str, reason: str = None):
        message = f"Geometry for '{identifier}' is invalid and could not be repaired"
        super().__init__(message, {"identifier": identifier, "reason": reason})
        self.identifier = identifier
        self.reason = reason


class DegenerateDistributionError(HazardIndexError):
    """
    Interval bins cannot be fit because no value is greater than zero.

    Only raised when fitting in strict mode; the default behavior is
    to return degenerate edges under which zero values score 0.

    Attributes:
        hazard: Hazard whose distribution was being fit
        n_values: Number of values that were offered
    """

    def __init__(self, hazard: str = None, n_values: int = 0):
        message = "Cannot fit interval bins: no values greater than zero"
        super().__init__(message, {"hazard": hazard, "n_values": n_values})
        self.hazard = hazard
        self.n_values = n_values


class MissingScoreError(HazardIndexError):
    """
    Districts in the master list lack a score for one or more hazards.

    Attributes:
        missing: Mapping of hazard name to the district ids lacking it
    """

    def __init__(self, missing: dict):
        n_districts = len({d for ids in missing.values() for d in ids})
        message = f"{n_districts} district(s) are missing hazard scores"
        super().__init__(message, {k: v for k, v in missing.items()})
        self.missing = missing
