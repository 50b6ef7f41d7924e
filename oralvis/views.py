"""
Screen payloads shared by the CLI and the web portal.
"""

from datetime import datetime
from typing import Optional, Sequence

from oralvis.aggregator import filter_scans, recent_activity, region_breakdown
from oralvis.config import SCAN_REGIONS
from oralvis.gate import capabilities, nav_items, quick_actions
from oralvis.models import AggregateView, ScanRecord


def greeting(hour: int) -> str:
    if hour < 12:
        return "Good morning"
    if hour < 18:
        return "Good afternoon"
    return "Good evening"


def user_payload(session) -> Optional[dict]:
    if not session.is_authenticated:
        return None
    return {"name": session.user.name, "role": session.user.role}


def dashboard_view(session, view: AggregateView, now: datetime, current_path: str = "") -> dict:
    return {
        "greeting": greeting(now.hour),
        "user": user_payload(session),
        "navigation": nav_items(session, current_path),
        "capabilities": capabilities(session),
        "stats": {
            "totalScans": view.total_count,
            "activePatients": view.unique_patient_count,
            "monthlyScans": view.current_month_count,
        },
        "recentActivity": recent_activity(view, now),
        "quickActions": quick_actions(session),
    }


def scan_list_view(records: Sequence[ScanRecord], search_term: str = "", region: str = "") -> dict:
    matches = filter_scans(records, search_term, region)
    return {
        "search": search_term or "",
        "region": region or "",
        "regions": list(SCAN_REGIONS),
        "total": len(records),
        "count": len(matches),
        "byRegion": region_breakdown(records),
        "scans": [r.to_dict() for r in matches],
    }
