"""
Shared fakes for the backend HTTP layer.
"""

import pytest
import requests

from oralvis.api.client import PortalClient

BASE_URL = "http://backend.test/api"


class FakeResponse:
    """Mimic the parts of requests.Response the client uses."""
    def __init__(self, status_code=200, payload=None, content=b""):
        self.status_code = status_code
        self._payload = payload
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeHttp:
    """
    Mimic requests.Session.request(). *routes* maps (method, path) to a
    FakeResponse, an exception to raise, or a callable(call) -> FakeResponse.
    """
    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        call = {"method": method, "path": path, "headers": dict(headers or {}),
                "timeout": timeout, **kwargs}
        self.calls.append(call)

        handler = self.routes.get((method, path))
        if handler is None:
            return FakeResponse(404, {"message": "Not found"})
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(call)
        return handler

    def paths(self):
        return [(c["method"], c["path"]) for c in self.calls]


def profile_route(valid_token="good-token", user=None):
    """GET /auth/profile that only accepts *valid_token*."""
    user = user or {"name": "Dr Molar", "role": "dentist"}

    def handler(call):
        if call["headers"].get("Authorization") == f"Bearer {valid_token}":
            return FakeResponse(200, {"user": user})
        return FakeResponse(401, {"message": "Invalid token"})

    return handler


def scan_payload(scan_id, patient_id="P-001", upload_date="2026-10-18T09:00:00Z",
                 patient_name="Jane Doe", scan_type="Intraoral", region="Frontal"):
    return {
        "id": scan_id,
        "patientName": patient_name,
        "patientId": patient_id,
        "scanType": scan_type,
        "region": region,
        "uploadDate": upload_date,
        "uploadedBy": "Tech Tina",
        "imageUrl": f"https://img.test/{scan_id}.jpg",
        "thumbnailUrl": f"https://img.test/{scan_id}_t.jpg",
    }


NETWORK_DOWN = requests.ConnectionError("connection refused")


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def client(fake_http):
    return PortalClient(BASE_URL, http=fake_http)
