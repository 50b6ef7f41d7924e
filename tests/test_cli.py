"""
Tests for CLI command dispatch.
"""

from datetime import datetime, timezone

from conftest import FakeResponse, scan_payload
from oralvis.cli import CONTINUE, QUIT, handle_command, parse_scan_query
from oralvis.scans import ScanFeed
from oralvis.session import SessionStore
from oralvis.storage import MemoryTokenStore
from oralvis.upload import UploadPipeline

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def setup_session(client, fake_http, role):
    fake_http.routes[("POST", "/auth/login")] = FakeResponse(
        200, {"token": "tok", "user": {"name": "Casey", "role": role}})
    fake_http.routes[("GET", "/scans")] = FakeResponse(200, {"scans": [
        scan_payload("1", "A", "2026-10-19T09:00:00Z", patient_name="Alice"),
        scan_payload("2", "B", "2026-09-01T09:00:00Z", patient_name="Bob", region="Upper Arch"),
    ]})
    session = SessionStore(client, MemoryTokenStore())
    session.bootstrap()
    session.login("casey@oralvis.test", "pw")
    feed = ScanFeed(client)
    return session, feed, UploadPipeline(client, on_uploaded=lambda r: feed.refresh())


def test_parse_scan_query():
    assert parse_scan_query(["alice", "region=Upper Arch"]) == ("alice", "Upper Arch")
    assert parse_scan_query([]) == ("", "")


def test_quit_and_blank(client, fake_http):
    session, feed, pipeline = setup_session(client, fake_http, "dentist")
    assert handle_command("", session, feed, pipeline, NOW) == CONTINUE
    assert handle_command("quit", session, feed, pipeline, NOW) == QUIT


def test_dashboard_output(client, fake_http, capsys):
    session, feed, pipeline = setup_session(client, fake_http, "dentist")
    handle_command("dashboard", session, feed, pipeline, NOW)
    out = capsys.readouterr().out
    assert "Good afternoon, Casey (dentist)" in out
    assert "Total scans:     2" in out
    assert "This month:      1" in out
    assert "Alice (A) · 3 hours ago" in out


def test_technician_scans_command_falls_back_to_dashboard(client, fake_http, capsys):
    session, feed, pipeline = setup_session(client, fake_http, "technician")
    handle_command("scans", session, feed, pipeline, NOW)
    out = capsys.readouterr().out
    assert "[gate] /scans is not available for your role" in out
    assert "Total scans:" in out


def test_dentist_scan_search(client, fake_http, capsys):
    session, feed, pipeline = setup_session(client, fake_http, "dentist")
    handle_command('scans region="Upper Arch"', session, feed, pipeline, NOW)
    out = capsys.readouterr().out
    assert "[1 of 2 scans]" in out
    assert "Bob" in out and "Alice" not in out


def test_upload_prompts(client, fake_http, tmp_path, capsys):
    image = tmp_path / "scan.png"
    image.write_bytes(b"\x89PNG")
    fake_http.routes[("POST", "/scans/upload")] = FakeResponse(201, {"message": "Scan uploaded successfully!"})
    session, feed, pipeline = setup_session(client, fake_http, "technician")
    answers = iter([str(image), "Jane Doe", "PT-100", "Panoramic", "Frontal"])

    handle_command("upload", session, feed, pipeline, NOW, ask=lambda prompt: next(answers))

    assert "[upload] Scan uploaded successfully!" in capsys.readouterr().out
    assert feed.aggregator.version == 1


def test_logout_command(client, fake_http):
    session, feed, pipeline = setup_session(client, fake_http, "dentist")
    assert handle_command("logout", session, feed, pipeline, NOW) == CONTINUE
    assert not session.is_authenticated
