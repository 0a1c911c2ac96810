import itertools
from enum import StrEnum

from ragvec.core.exceptions import ConfigurationError


class DistanceMetric(StrEnum):
    MANHATTAN = "MANHATTAN"
    EUCLIDEAN = "EUCLIDEAN"
    DOT = "DOT"
    COSINE = "COSINE"


# pgvector comparator methods on a ``Vector`` column. Every one of them is a
# distance: smaller means more similar, so results are always ordered ASC.
# ``max_inner_product`` is the negated dot product (the ``<#>`` operator).
RANKING_FUNCTIONS: dict[DistanceMetric, str] = {
    DistanceMetric.MANHATTAN: "l1_distance",
    DistanceMetric.EUCLIDEAN: "l2_distance",
    DistanceMetric.DOT: "max_inner_product",
    DistanceMetric.COSINE: "cosine_distance",
}


def parse_metric(name: str | DistanceMetric) -> DistanceMetric:
    """Parse a metric name (case-insensitive) into a DistanceMetric."""
    if isinstance(name, DistanceMetric):
        return name
    try:
        return DistanceMetric(str(name).strip().upper())
    except ValueError as e:
        allowed = ", ".join(m.value for m in DistanceMetric)
        raise ConfigurationError(
            f"Unknown distance metric '{name}'. Allowed values are: {allowed}"
        ) from e


def ranking_function(metric: str | DistanceMetric) -> str:
    """Return the ranking-function identifier used to order search results."""
    return RANKING_FUNCTIONS[parse_metric(metric)]


# Oldest vector extension release that ships the metric's operator.
MIN_EXTENSION_VERSION: dict[DistanceMetric, tuple[int, ...]] = {
    DistanceMetric.MANHATTAN: (0, 7, 0),  # <+>
}


def parse_version(version: str) -> tuple[int, ...]:
    """``"0.7.4"`` -> ``(0, 7, 4)``. Non-numeric suffixes are ignored."""
    parts: list[int] = []
    for piece in version.split("."):
        digits = "".join(itertools.takewhile(str.isdigit, piece))
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)
