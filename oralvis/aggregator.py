"""
Scan aggregation – dashboard statistics, search/region filtering, recency labels.

Aggregation does not depend on the viewer's role: technicians and dentists
see the same numbers for the same collection.
"""

import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from oralvis.config import RECENT_SCANS_LIMIT, SCAN_REGIONS
from oralvis.models import AggregateView, ScanRecord, as_aware


def _frame(records: Sequence[ScanRecord]) -> pd.DataFrame:
    """One row per record, in fetch order (RangeIndex == position in *records*)."""
    return pd.DataFrame({
        "patient_id": pd.Series([r.patient_id for r in records], dtype="object"),
        "region": pd.Series([r.region for r in records], dtype="object"),
        "upload_date": pd.Series(
            pd.to_datetime([r.upload_date for r in records], utc=True)
        ),
    })


# ── Aggregate view ───────────────────────────────────────────────────

def aggregate(records: Sequence[ScanRecord], now: datetime) -> AggregateView:
    """
    Totals, distinct patients, uploads in the current calendar month and the
    five most recent uploads (newest first, ties kept in fetch order).
    """
    records = list(records)
    now = as_aware(now)
    if not records:
        return AggregateView(0, 0, 0, ())

    df = _frame(records)

    local_dates = df["upload_date"].dt.tz_convert(now.tzinfo)
    in_month = (local_dates.dt.year == now.year) & (local_dates.dt.month == now.month)

    newest_first = df.sort_values("upload_date", ascending=False, kind="stable")
    recent = tuple(records[i] for i in newest_first.index[:RECENT_SCANS_LIMIT])

    return AggregateView(
        total_count=len(records),
        unique_patient_count=int(df["patient_id"].nunique()),
        current_month_count=int(in_month.sum()),
        recent_five=recent,
    )


def region_breakdown(records: Sequence[ScanRecord]) -> Dict[str, int]:
    """Scan counts per region; known regions are always present."""
    counts = {region: 0 for region in SCAN_REGIONS}
    if records:
        for region, count in _frame(records)["region"].value_counts().items():
            counts[region] = int(count)
    return counts


# ── Filtering ────────────────────────────────────────────────────────

def filter_scans(records: Iterable[ScanRecord], search_term: Optional[str] = "",
                 region: Optional[str] = "") -> List[ScanRecord]:
    """Case-insensitive search over name / patient id / scan type, AND an exact region."""
    term = (search_term or "").lower()
    out = []
    for r in records:
        matches_search = (
            term in r.patient_name.lower()
            or term in r.patient_id.lower()
            or term in r.scan_type.lower()
        )
        matches_region = not region or r.region == region
        if matches_search and matches_region:
            out.append(r)
    return out


# ── Recency ──────────────────────────────────────────────────────────

def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'' if n == 1 else 's'} ago"


def time_ago(date: datetime, now: datetime) -> str:
    hours = math.floor((as_aware(now) - as_aware(date)).total_seconds() / 3600)
    if hours < 1:
        return "Just now"
    if hours < 24:
        return _plural(hours, "hour")

    days = hours // 24
    if days < 7:
        return _plural(days, "day")
    return _plural(days // 7, "week")


def recent_activity(view: AggregateView, now: datetime) -> List[dict]:
    return [
        {
            "id": scan.id,
            "type": "scan_uploaded",
            "patient": scan.patient_name,
            "patientId": scan.patient_id,
            "timestamp": time_ago(scan.upload_date, now),
            "status": "completed",
        }
        for scan in view.recent_five
    ]


# ── Memoised aggregate ───────────────────────────────────────────────

class ScanAggregator:
    """
    Holds the latest fetched collection. `view(now)` is cached on the
    collection version and the minute of *now*; `replace()` bumps the version.
    """

    def __init__(self, records: Iterable[ScanRecord] = ()):
        self._records: Tuple[ScanRecord, ...] = tuple(records)
        self.version = 0
        self._cache: Optional[Tuple[tuple, AggregateView]] = None

    @property
    def records(self) -> Tuple[ScanRecord, ...]:
        return self._records

    def replace(self, records: Iterable[ScanRecord]) -> None:
        self._records = tuple(records)
        self.version += 1
        self._cache = None

    def view(self, now: datetime) -> AggregateView:
        now = as_aware(now)
        key = (self.version, now.replace(second=0, microsecond=0))
        if self._cache is None or self._cache[0] != key:
            self._cache = (key, aggregate(self._records, now))
        return self._cache[1]

    def filtered(self, search_term: Optional[str] = "", region: Optional[str] = "") -> List[ScanRecord]:
        return filter_scans(self._records, search_term, region)

    def find(self, scan_id: str) -> Optional[ScanRecord]:
        for r in self._records:
            if r.id == str(scan_id):
                return r
        return None
