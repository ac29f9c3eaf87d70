"""
Normalization of raw analytics API records.

Every function here is total: any JSON value goes in, a fully typed value
comes out. Missing, null, non-numeric and non-finite numbers become the
caller's default; empty text becomes the UNKNOWN sentinel.

Wire field names are the backend's (Portuguese) keys; the models use
English attribute names.
"""
import math
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from churnwatch.schemas.customer import UNKNOWN, CustomerRiskRecord
from churnwatch.schemas.datasets import (
    DimensionSummaryRow,
    KpiSummary,
    NpsByRisk,
    RenewalWindowBucket,
    TimeSeriesPoint,
    WaterfallStep,
)

T = TypeVar("T")

# KPI keys the summary cards read as numbers
KPI_NUMERIC_KEYS = ("churn_logos_pct", "clientes_em_risco", "save_rate_pct", "nrr_pct")


def safe_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce a JSON value to a finite float.

    Args:
        value: Raw value (number, numeric string, or anything else)
        default: Value returned when coercion is not possible

    Returns:
        The finite float, or ``default``

    Examples:
        >>> safe_number("12.5")
        12.5
        >>> safe_number(float("nan"), default=3)
        3.0
    """
    if isinstance(value, bool):
        return float(default)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return float(default)
    elif isinstance(value, str):
        number = parse_numeric_text(value)
        if number is None:
            return float(default)
    else:
        return float(default)
    return number if math.isfinite(number) else float(default)


def parse_numeric_text(text: str) -> float | None:
    """
    Parse a decimal number written as text, or return None.

    Digit-group underscores ("1_000") are Python literal syntax, not data,
    and are rejected.
    """
    text = text.strip()
    if not text or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def safe_int(value: Any, default: int = 0) -> int:
    number = safe_number(value, default)
    return int(number)


def safe_text(value: Any) -> str:
    """Return the value as stripped text, or UNKNOWN when there is none."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(value) if math.isfinite(value) else UNKNOWN
    if isinstance(value, str) and value.strip():
        return value.strip()
    return UNKNOWN


def optional_number(value: Any) -> float | str:
    """Return the finite number, or UNKNOWN for fields with no neutral default."""
    number = safe_number(value, math.nan)
    return UNKNOWN if math.isnan(number) else number


def optional_int(value: Any) -> int | str:
    number = optional_number(value)
    return UNKNOWN if number == UNKNOWN else int(number)


def normalize_reasons(value: Any) -> list[str]:
    """
    Normalize churn reasons to a list of tags.

    The backend sends either a list or a ``;``-separated string. Order is
    kept and duplicates are not removed.
    """
    if isinstance(value, str):
        parts: Iterable[Any] = value.split(";")
    elif isinstance(value, (list, tuple)):
        parts = value
    else:
        return []
    return [text for text in (safe_text(part) for part in parts) if text != UNKNOWN]


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def normalize_customer(raw: Mapping[str, Any], row_id: str) -> CustomerRiskRecord:
    """
    Build a CustomerRiskRecord from a raw /queue item.

    Args:
        raw: Raw queue item
        row_id: Composite render identity assigned by the queue retriever

    Returns:
        Normalized record
    """
    identifier = raw.get("id")
    if identifier is None:
        identifier = raw.get("cliente")

    sla = optional_number(raw.get("sla"))
    if sla != UNKNOWN:
        sla = _clamp(sla, 0.0, 100.0)

    return CustomerRiskRecord(
        row_id=row_id,
        id=safe_text(identifier),
        name=safe_text(raw.get("cliente")),
        mrr=max(0.0, safe_number(raw.get("mrr"))),
        risk=_clamp(safe_number(raw.get("risco")), 0.0, 100.0),
        renewal_days=max(0, safe_int(raw.get("renovacao"))),
        cluster=safe_text(raw.get("cluster")),
        usage_trend=safe_text(raw.get("uso30")),
        tickets_30d=optional_int(raw.get("tickets30")),
        sla_pct=sla,
        nps=optional_number(raw.get("nps")),
        reasons=normalize_reasons(raw.get("motivos")),
        playbook=safe_text(raw.get("playbook")),
        owner=safe_text(raw.get("dono")),
        segment=safe_text(raw.get("segmento")),
        region=safe_text(raw.get("uf")),
        revenue_band=safe_text(raw.get("faixa")),
    )


def normalize_trend_point(raw: Mapping[str, Any]) -> TimeSeriesPoint:
    return TimeSeriesPoint(
        month=safe_text(raw.get("mes")),
        logo_churn_pct=safe_number(raw.get("churnRate")),
        revenue_churn=safe_number(raw.get("revChurn")),
        grr_pct=safe_number(raw.get("grr")),
        nrr_pct=safe_number(raw.get("nrr")),
    )


def normalize_waterfall_step(raw: Mapping[str, Any]) -> WaterfallStep:
    return WaterfallStep(stage=safe_text(raw.get("etapa")), value=safe_number(raw.get("valor")))


def normalize_summary_row(raw: Mapping[str, Any]) -> DimensionSummaryRow:
    return DimensionSummaryRow(
        category=safe_text(raw.get("cat")),
        low=max(0.0, safe_number(raw.get("baixo"))),
        medium=max(0.0, safe_number(raw.get("medio"))),
        high=max(0.0, safe_number(raw.get("alto"))),
        mrr_low=safe_number(raw.get("mrr_baixo")),
        mrr_medium=safe_number(raw.get("mrr_medio")),
        mrr_high=safe_number(raw.get("mrr_alto")),
    )


def normalize_nps_row(raw: Mapping[str, Any]) -> NpsByRisk:
    return NpsByRisk(risk_bucket=safe_text(raw.get("risco")), score=safe_number(raw.get("nps")))


def normalize_renewal_bucket(raw: Mapping[str, Any]) -> RenewalWindowBucket:
    return RenewalWindowBucket(
        window=safe_text(raw.get("janela")),
        mrr=max(0.0, safe_number(raw.get("mrr"))),
        customers=max(0, safe_int(raw.get("clientes"))),
    )


def normalize_kpis(raw: Any) -> KpiSummary:
    """Normalize the KPI mapping; known numeric keys always come out as floats."""
    metrics = dict(raw) if isinstance(raw, Mapping) else {}
    for key in KPI_NUMERIC_KEYS:
        metrics[key] = safe_number(metrics.get(key))
    return KpiSummary(metrics=metrics)


def normalize_many(records: Any, normalize: Callable[[Mapping[str, Any]], T]) -> list[T]:
    """Normalize a list-shaped dataset, dropping entries that are not objects."""
    if not isinstance(records, list):
        return []
    return [normalize(record) for record in records if isinstance(record, Mapping)]
