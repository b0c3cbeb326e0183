"""
Fault-tolerant collection of per-district values.

The climate data client is supplied by the caller. Collection is a fold
over the district list: every district yields either a value or an error,
failures never abort the batch, and failed districts get one retry through
an optional degraded fallback. Nothing is accumulated in shared state.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from hazard_index.models import District, is_absent

logger = logging.getLogger(__name__)

Fetcher = Callable[[District], Optional[float]]


@dataclass
class CollectionResult:
    """
    Outcome of collecting one metric for every district.

    Attributes:
        values: Value per district_id, NaN where nothing was obtained
        failures: Error message per district_id that failed every attempt
        fallback_ids: Districts served by the fallback fetcher
    """
    values: pd.Series
    failures: Dict[str, str] = field(default_factory=dict)
    fallback_ids: List[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if len(self.values) == 0:
            return 0.0
        return float(self.values.notna().mean())


def _attempt(fetch: Fetcher, district: District) -> Tuple[Optional[float], Optional[str]]:
    try:
        value = fetch(district)
    except Exception as e:
        return None, f"{type(e).__name__}: {e}"
    if is_absent(value):
        return None, "no value returned"
    return float(value), None


def collect_district_metrics(
    districts: Iterable[District],
    fetch: Fetcher,
    fallback: Optional[Fetcher] = None,
    name: Optional[str] = None,
) -> CollectionResult:
    """
    Fetch one value per district without letting failures stop the batch.

    Args:
        districts: Districts to query
        fetch: Primary per-district query
        fallback: Degraded query tried once for districts that failed
        name: Name given to the returned series

    Returns:
        CollectionResult partitioning values, failures and fallback use
    """
    outcomes = [(d, _attempt(fetch, d)) for d in districts]

    retried = []
    for district, (value, error) in outcomes:
        if error is not None and fallback is not None:
            logger.debug(f"Retrying {district.district_id} with fallback after: {error}")
            retry_value, retry_error = _attempt(fallback, district)
            retried.append((district, retry_value, retry_error, retry_error is None))
        else:
            retried.append((district, value, error, False))

    values = pd.Series(
        [np.nan if v is None else v for _, v, _, _ in retried],
        index=pd.Index([d.district_id for d, _, _, _ in retried], name="district_id"),
        name=name,
        dtype=float,
    )
    failures = {d.district_id: err for d, _, err, _ in retried if err is not None}
    fallback_ids = [d.district_id for d, _, _, used in retried if used]

    if failures:
        logger.warning(
            f"{len(failures)}/{len(values)} district(s) returned no {name or 'value'}; "
            f"they are carried as absent"
        )
    if fallback_ids:
        logger.info(f"{len(fallback_ids)} district(s) served by fallback query")

    return CollectionResult(values=values, failures=failures, fallback_ids=fallback_ids)
