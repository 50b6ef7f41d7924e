"""
HTTP client for the scan backend (login, profile, scans, uploads, PDF reports).
"""

from typing import Any, Dict, List, Optional

import requests

from oralvis.config import API_BASE_URL, REQUEST_TIMEOUT_SECONDS
from oralvis.errors import ApiError
from oralvis.models import ScanFile


def _error_message(response) -> Optional[str]:
    """Pull the backend's `message` field out of an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        return str(message) if message else None
    return None


class PortalClient:
    """Thin wrapper over a `requests.Session`; the token is set by the session store."""

    def __init__(self, base_url: str = API_BASE_URL, http=None,
                 timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None

    def _request(self, method: str, path: str, **kwargs):
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, headers=headers,
                                         timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ApiError(None, detail=f"{method} {path} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise ApiError(response.status_code, _error_message(response),
                           detail=f"{method} {path} returned {response.status_code}")
        return response

    def _json(self, response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise ApiError(response.status_code, detail="Response was not valid JSON") from e
        if not isinstance(body, dict):
            raise ApiError(response.status_code, detail="Response was not a JSON object")
        return body

    # ── Auth ─────────────────────────────────────────────────────────

    def login(self, email: str, password: str) -> Dict[str, Any]:
        response = self._request("POST", "/auth/login",
                                 json={"email": email, "password": password})
        return self._json(response)

    def profile(self) -> Dict[str, Any]:
        return self._json(self._request("GET", "/auth/profile"))

    # ── Scans ────────────────────────────────────────────────────────

    def list_scans(self) -> List[Dict[str, Any]]:
        body = self._json(self._request("GET", "/scans"))
        scans = body.get("scans", [])
        if not isinstance(scans, list):
            raise ApiError(200, detail="'scans' was not a list")
        return scans

    def upload_scan(self, fields: Dict[str, str], file: ScanFile) -> Dict[str, Any]:
        files = {"scanImage": (file.filename, file.data, file.content_type)}
        response = self._request("POST", "/scans/upload", data=fields, files=files)
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def download_pdf(self, scan_id: str) -> bytes:
        response = self._request("GET", f"/scans/{scan_id}/pdf")
        return response.content
