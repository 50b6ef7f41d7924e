"""
Unit tests for the scan feed – refresh fallbacks and PDF downloads.
"""

from conftest import NETWORK_DOWN, FakeResponse, scan_payload
from oralvis.scans import ScanFeed


def test_refresh_loads_records(client, fake_http):
    fake_http.routes[("GET", "/scans")] = FakeResponse(200, {"scans": [scan_payload("1"), scan_payload("2")]})
    feed = ScanFeed(client)
    assert feed.refresh() is True
    assert [r.id for r in feed.aggregator.records] == ["1", "2"]
    assert feed.aggregator.version == 1


def test_refresh_failure_keeps_last_known(client, fake_http):
    notices = []
    fake_http.routes[("GET", "/scans")] = FakeResponse(200, {"scans": [scan_payload("1")]})
    feed = ScanFeed(client, notify=notices.append)
    feed.refresh()

    fake_http.routes[("GET", "/scans")] = NETWORK_DOWN
    assert feed.refresh() is False
    assert [r.id for r in feed.aggregator.records] == ["1"]
    assert notices == ["Failed to load scans"]


def test_refresh_failure_on_first_load_is_empty(client, fake_http):
    fake_http.routes[("GET", "/scans")] = FakeResponse(500, {"message": "boom"})
    feed = ScanFeed(client, notify=lambda msg: None)
    feed.refresh()
    assert feed.aggregator.records == ()


def test_malformed_records_are_skipped(client, fake_http, capsys):
    bad = {"id": "x", "patientName": "No Date"}
    fake_http.routes[("GET", "/scans")] = FakeResponse(200, {"scans": [bad, scan_payload("2")]})
    feed = ScanFeed(client)
    feed.refresh()
    assert [r.id for r in feed.aggregator.records] == ["2"]
    assert "Skipping record" in capsys.readouterr().err


def test_late_response_after_close_is_dropped(client, fake_http):
    feed = ScanFeed(client)

    def handler(call):
        feed.close()
        return FakeResponse(200, {"scans": [scan_payload("1")]})

    fake_http.routes[("GET", "/scans")] = handler
    assert feed.refresh() is False
    assert feed.aggregator.records == ()
    assert feed.aggregator.version == 0


def test_download_pdf_writes_named_file(client, fake_http, tmp_path):
    fake_http.routes[("GET", "/scans/42/pdf")] = FakeResponse(200, content=b"%PDF-1.7")
    path = ScanFeed(client).download_pdf("42", tmp_path / "reports")
    assert path.name == "scan-42.pdf"
    assert path.read_bytes() == b"%PDF-1.7"


def test_download_pdf_failure_notifies(client, fake_http, tmp_path):
    notices = []
    feed = ScanFeed(client, notify=notices.append)
    assert feed.download_pdf("404", tmp_path) is None
    assert notices == ["Failed to download PDF report"]
    assert list(tmp_path.iterdir()) == []
