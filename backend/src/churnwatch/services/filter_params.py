"""
Query parameter building for the /queue endpoint.

Pure functions: identical filter state always yields identical params.
Bounds are coerced to finite numbers (invalid input falls back to the
field's floor or ceiling), clamped into [0, ceiling], and each minimum is
then clamped to at most its maximum. Clamping is idempotent.
"""
from typing import Any

from churnwatch.schemas.filters import (
    ALL_REGIONS,
    MRR_CEILING,
    RENEWAL_CEILING,
    RISK_CEILING,
    FilterState,
)
from churnwatch.services.normalizer import safe_number

# (min field, max field, ceiling, wire name prefix)
_RANGES = (
    ("mrr_min", "mrr_max", MRR_CEILING, "mrr"),
    ("risk_min", "risk_max", RISK_CEILING, "risco"),
    ("renewal_min", "renewal_max", RENEWAL_CEILING, "renovacao"),
)


def to_number(value: Any, default: float) -> float:
    """
    Coerce raw filter input to a finite number.

    None, empty strings, booleans, non-numeric, non-finite and out-of-float
    range input all yield ``default``.
    """
    return safe_number(value, default)


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def sanitize_filters(filters: FilterState) -> FilterState:
    """Return a copy of the filter state with every numeric bound coerced and clamped."""
    update: dict[str, float] = {}
    for min_field, max_field, ceiling, _ in _RANGES:
        upper = clamp(to_number(getattr(filters, max_field), ceiling), 0, ceiling)
        lower = clamp(to_number(getattr(filters, min_field), 0), 0, upper)
        update[min_field] = lower
        update[max_field] = upper
    return filters.model_copy(update=update)


def format_param(value: float) -> str:
    """Render a number for a query string ("10" rather than "10.0")."""
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def build_queue_params(filters: FilterState, offset: int, limit: int) -> dict[str, str]:
    """
    Build the /queue query parameters.

    Args:
        filters: Current filter state (raw user input)
        offset: Row offset of the requested page or batch
        limit: Rows requested

    Returns:
        Query parameters; ``uf`` is present only when a state is selected
    """
    clean = sanitize_filters(filters)
    params = {
        "limit": str(max(0, int(limit))),
        "offset": str(max(0, int(offset))),
    }
    for min_field, max_field, _, wire in _RANGES:
        params[f"{wire}_min"] = format_param(getattr(clean, min_field))
        params[f"{wire}_max"] = format_param(getattr(clean, max_field))
    if clean.region and clean.region != ALL_REGIONS:
        params["uf"] = clean.region
    return params
