"""
Session store: token + user identity, and the bootstrap/login/logout transitions.

States: unbootstrapped -> bootstrapping -> {authenticated, anonymous}.
logout() moves to anonymous, a successful login() to authenticated.
"""

import sys
from typing import Optional

from oralvis.errors import ApiError
from oralvis.models import DENTIST, TECHNICIAN, LoginResult, UserIdentity

UNBOOTSTRAPPED = "unbootstrapped"
BOOTSTRAPPING = "bootstrapping"
AUTHENTICATED = "authenticated"
ANONYMOUS = "anonymous"
_READY = "ready"

LOGIN_FAILED = "Login failed"


class SessionStore:
    """Holds the current session; all mutations go through bootstrap/login/logout."""

    def __init__(self, client, token_store):
        self.client = client
        self.token_store = token_store
        self.token: Optional[str] = None
        self.user: Optional[UserIdentity] = None
        self.initializing = True
        self._phase = UNBOOTSTRAPPED

    # ── Derived predicates ───────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_technician(self) -> bool:
        return self.user is not None and self.user.role == TECHNICIAN

    @property
    def is_dentist(self) -> bool:
        return self.user is not None and self.user.role == DENTIST

    @property
    def state(self) -> str:
        if self._phase in (UNBOOTSTRAPPED, BOOTSTRAPPING):
            return self._phase
        return AUTHENTICATED if self.is_authenticated else ANONYMOUS

    # ── Transitions ──────────────────────────────────────────────────

    def bootstrap(self) -> str:
        """Validate a persisted token against the backend, once."""
        if self._phase != UNBOOTSTRAPPED:
            return self.state

        self._phase = BOOTSTRAPPING
        try:
            token = self.token_store.load()
            if token:
                self.client.token = token
                try:
                    user = UserIdentity.from_api(self.client.profile().get("user"))
                except (ApiError, ValueError) as e:
                    print(f"[auth] Session check failed, continuing signed out: {e}",
                          file=sys.stderr)
                    self.client.token = None
                    self.token_store.clear()
                else:
                    self.token = token
                    self.user = user
        finally:
            self._finish_bootstrap()
        return self.state

    def login(self, email: str, password: str) -> LoginResult:
        try:
            data = self.client.login(email, password)
            token = data.get("token")
            if not isinstance(token, str) or not token:
                raise ValueError("Login response carried no token.")
            user = UserIdentity.from_api(data.get("user"))
        except ApiError as e:
            return LoginResult(False, e.message or LOGIN_FAILED)
        except ValueError as e:
            print(f"[auth] Rejected login response: {e}", file=sys.stderr)
            return LoginResult(False, LOGIN_FAILED)

        self.token_store.save(token)
        self.client.token = token
        self.token = token
        self.user = user
        self._finish_bootstrap()
        return LoginResult(True)

    def logout(self) -> None:
        self.token_store.clear()
        self.client.token = None
        self.token = None
        self.user = None
        self._finish_bootstrap()

    def _finish_bootstrap(self) -> None:
        if self.initializing:
            self.initializing = False
        if self._phase in (UNBOOTSTRAPPED, BOOTSTRAPPING):
            self._phase = _READY
