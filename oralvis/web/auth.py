"""
Session plumbing for the Flask portal: the token lives in the signed session
cookie and every gated view consults the authorization gate first.
"""

from functools import wraps
from typing import Optional

from flask import g, jsonify, redirect, request, session

from oralvis.config import TOKEN_STORAGE_KEY
from oralvis.gate import LOADING, REDIRECT, decide
from oralvis.session import SessionStore


class FlaskSessionTokenStore:
    """Token store backed by `flask.session` (one cookie per browser)."""

    def __init__(self, key: str = TOKEN_STORAGE_KEY):
        self.key = key

    def load(self) -> Optional[str]:
        token = session.get(self.key)
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        session.permanent = True
        session[self.key] = token

    def clear(self) -> None:
        session.pop(self.key, None)


def load_portal_session(client_factory) -> SessionStore:
    """Build the request's SessionStore and run its bootstrap check."""
    portal_session = SessionStore(client_factory(), FlaskSessionTokenStore())
    portal_session.bootstrap()
    g.portal_session = portal_session
    return portal_session


def gated(f):
    """Decorator that routes a view through the authorization gate."""
    @wraps(f)
    def decorated(*args, **kwargs):
        decision = decide(request.path, g.portal_session)
        if decision.action == LOADING:
            return jsonify({"status": "loading"}), 503
        if decision.action == REDIRECT:
            return redirect(decision.target)
        return f(*args, **kwargs)

    return decorated
