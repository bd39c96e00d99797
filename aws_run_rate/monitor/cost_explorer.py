"""
Linked-account spend from AWS Cost Explorer.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import CostQueryError

logger = logging.getLogger(__name__)

DEFAULT_METRIC = "AmortizedCost"

# Requested together to keep the query shape of the existing report;
# only one of them is summed.
REQUESTED_METRICS: Tuple[str, ...] = (
    "AmortizedCost",
    "BlendedCost",
    "NetAmortizedCost",
    "NetUnblendedCost",
    "NormalizedUsageAmount",
    "UnblendedCost",
    "UsageQuantity",
)


class Granularity(str, Enum):
    DAILY = "DAILY"
    MONTHLY = "MONTHLY"


@dataclass(frozen=True)
class CostGroup:
    keys: Tuple[str, ...]
    metrics: Mapping[str, Any]

    @property
    def account_id(self) -> str:
        return self.keys[0]

    def amount(self, metric: str) -> float:
        entry = self.metrics.get(metric)
        if entry is None:
            raise CostQueryError(f"Metric {metric} missing for account {self.account_id}")
        if not isinstance(entry, dict) or entry.get("Amount") is None:
            raise CostQueryError(f"Metric {metric} for account {self.account_id} has no amount")
        raw = entry["Amount"]
        try:
            value = float(raw)
        except (TypeError, ValueError) as exc:
            raise CostQueryError(
                f"Invalid {metric} amount {raw!r} for account {self.account_id}"
            ) from exc
        if not math.isfinite(value):
            raise CostQueryError(f"Invalid {metric} amount {raw!r} for account {self.account_id}")
        return value


@dataclass(frozen=True)
class ResultByTime:
    groups: Tuple[CostGroup, ...]


@dataclass(frozen=True)
class CostPage:
    results_by_time: Tuple[ResultByTime, ...]
    next_page_token: Optional[str] = None


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _parse_group(raw: Any) -> CostGroup:
    if not isinstance(raw, dict):
        raise CostQueryError("Cost Explorer group is not an object")

    keys = raw.get("Keys")
    if not isinstance(keys, list) or not keys or not all(isinstance(k, str) for k in keys):
        raise CostQueryError("Cost Explorer group has no linked account key")

    metrics = raw.get("Metrics")
    if not isinstance(metrics, dict):
        raise CostQueryError(f"Cost Explorer group {keys[0]} has no metrics")

    return CostGroup(keys=tuple(keys), metrics=metrics)


def parse_page(raw: Any) -> CostPage:
    """Validate one GetCostAndUsage response page."""
    if not isinstance(raw, dict):
        raise CostQueryError("Cost Explorer response is not an object")

    results = raw.get("ResultsByTime", [])
    if not isinstance(results, list):
        raise CostQueryError("Cost Explorer response has malformed ResultsByTime")

    parsed: List[ResultByTime] = []
    for bucket in results:
        if not isinstance(bucket, dict):
            raise CostQueryError("Cost Explorer time bucket is not an object")
        groups = bucket.get("Groups", [])
        if not isinstance(groups, list):
            raise CostQueryError("Cost Explorer time bucket has malformed Groups")
        parsed.append(ResultByTime(groups=tuple(_parse_group(g) for g in groups)))

    return CostPage(results_by_time=tuple(parsed), next_page_token=raw.get("NextPageToken") or None)


def query_window(granularity: Granularity, now: Optional[dt.datetime] = None) -> Tuple[dt.date, dt.date]:
    """Return the (start, end) dates queried for a granularity, in UTC."""
    now = now or _utc_now()
    if now.tzinfo is not None:
        now = now.astimezone(dt.timezone.utc)

    try:
        granularity = Granularity(granularity)
    except ValueError as exc:
        raise CostQueryError(f"unknown granularity: {granularity}") from exc

    end = now.date()
    if granularity is Granularity.DAILY:
        start = (now - dt.timedelta(hours=24)).date()
    else:
        start = end.replace(day=1)
    return start, end


def sum_page(page: CostPage, metric: str, totals: Dict[str, float]) -> None:
    """Add the positive `metric` amounts of a page into `totals`."""
    for bucket in page.results_by_time:
        for group in bucket.groups:
            cost = group.amount(metric)
            if cost > 0:
                totals[group.account_id] = totals.get(group.account_id, 0.0) + cost


def fetch_costs(
    ce: Any,
    granularity: Granularity,
    now: Optional[dt.datetime] = None,
    metric: str = DEFAULT_METRIC,
    metrics: Sequence[str] = REQUESTED_METRICS,
) -> Dict[str, float]:
    """Sum `metric` per linked account over the granularity's window.

    `ce` is a boto3 `ce` client. The query always uses DAILY buckets; every
    page and every bucket is summed. Non-positive amounts are skipped.
    """
    start, end = query_window(granularity, now)
    label = Granularity(granularity).value

    if start >= end:
        logger.info(f"{label} window {start}..{end} is empty, skipping Cost Explorer query")
        return {}

    requested = list(metrics)
    if metric not in requested:
        requested.append(metric)

    base_kwargs: Dict[str, Any] = {
        "TimePeriod": {"Start": start.isoformat(), "End": end.isoformat()},
        "Granularity": "DAILY",
        "Metrics": requested,
        "GroupBy": [{"Type": "DIMENSION", "Key": "LINKED_ACCOUNT"}],
    }

    totals: Dict[str, float] = {}
    token = None
    pages = 0

    while True:
        kwargs = dict(base_kwargs)
        if token:
            kwargs["NextPageToken"] = token

        try:
            resp = ce.get_cost_and_usage(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise CostQueryError(f"Cost Explorer {label} query failed: {e}") from e

        page = parse_page(resp)
        sum_page(page, metric, totals)
        pages += 1

        token = page.next_page_token
        if not token:
            break

    logger.info(f"{label} {metric} for {len(totals)} accounts ({start}..{end}, {pages} page(s))")
    return totals
