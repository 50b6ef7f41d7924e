"""
Authorization gate – route reachability and role-specific affordances.

Everything here is a pure function of the current session; nothing is cached.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from oralvis.config import LANDING_ROUTE, LOGIN_ROUTE, SCANS_ROUTE, UPLOAD_ROUTE
from oralvis.models import DENTIST, TECHNICIAN

ROOT_ROUTE = "/"

LOADING = "loading"
RENDER = "render"
REDIRECT = "redirect"

# Routes each role may navigate to.
ROLE_ROUTES: Dict[str, FrozenSet[str]] = {
    TECHNICIAN: frozenset({LANDING_ROUTE, UPLOAD_ROUTE}),
    DENTIST: frozenset({LANDING_ROUTE, SCANS_ROUTE}),
}

PROTECTED_ROUTES: FrozenSet[str] = frozenset().union(*ROLE_ROUTES.values())

# Sidebar entries, in display order.
NAVIGATION = (
    {"name": "Dashboard", "href": LANDING_ROUTE, "description": "Overview and analytics"},
    {"name": "Upload Scan", "href": UPLOAD_ROUTE, "description": "Add new patient scans"},
    {"name": "View Scans", "href": SCANS_ROUTE, "description": "Browse and analyze scans"},
)

QUICK_ACTIONS = (
    {"title": "Upload New Scan", "description": "Add a new patient scan with details",
     "href": UPLOAD_ROUTE, "action": "Upload"},
    {"title": "View All Scans", "description": "Browse and analyze patient scans",
     "href": SCANS_ROUTE, "action": "View"},
)


@dataclass(frozen=True)
class GateDecision:
    action: str                    # LOADING, RENDER or REDIRECT
    target: Optional[str] = None   # redirect destination

    @property
    def allowed(self) -> bool:
        return self.action == RENDER


def route_for(path: str) -> str:
    """Map a request path to the route that gates it (`/scans/7/pdf` -> `/scans`)."""
    segments = [s for s in (path or "").split("?", 1)[0].split("/") if s]
    if not segments:
        return ROOT_ROUTE
    return "/" + segments[0]


def allowed_routes(session) -> FrozenSet[str]:
    if session.initializing or not session.is_authenticated:
        return frozenset()
    return ROLE_ROUTES.get(session.user.role, frozenset())


def decide(path: str, session) -> GateDecision:
    """Decide what to do with a navigation to *path* given the session."""
    if session.initializing:
        return GateDecision(LOADING)

    route = route_for(path)

    if route == LOGIN_ROUTE:
        if session.is_authenticated:
            return GateDecision(REDIRECT, LANDING_ROUTE)
        return GateDecision(RENDER)

    if route == ROOT_ROUTE:
        return GateDecision(REDIRECT, LANDING_ROUTE if session.is_authenticated else LOGIN_ROUTE)

    if route in PROTECTED_ROUTES and not session.is_authenticated:
        return GateDecision(REDIRECT, LOGIN_ROUTE)

    if route in allowed_routes(session):
        return GateDecision(RENDER)

    # Unknown, or not registered for this role.
    return GateDecision(REDIRECT, LANDING_ROUTE)


def nav_items(session, current_path: str = "") -> List[dict]:
    reachable = allowed_routes(session)
    current = route_for(current_path)
    return [
        dict(item, current=item["href"] == current)
        for item in NAVIGATION
        if item["href"] in reachable
    ]


def quick_actions(session) -> List[dict]:
    reachable = allowed_routes(session)
    return [dict(action) for action in QUICK_ACTIONS if action["href"] in reachable]


def capabilities(session) -> Dict[str, bool]:
    reachable = allowed_routes(session)
    return {
        "upload": UPLOAD_ROUTE in reachable,
        "review": SCANS_ROUTE in reachable,
    }
