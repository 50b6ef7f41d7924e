"""
Interactive CLI for the OralVis scan portal.
Log in, review dashboard statistics and scans, upload new scan images.
"""

import shlex
from datetime import datetime
from getpass import getpass

import pandas as pd

from oralvis.aggregator import time_ago
from oralvis.api.client import PortalClient
from oralvis.config import LANDING_ROUTE, SCAN_REGIONS, SCANS_ROUTE, UPLOAD_ROUTE
from oralvis.errors import DraftInvalid, UploadError
from oralvis.gate import REDIRECT, decide
from oralvis.models import ScanFile
from oralvis.scans import ScanFeed
from oralvis.session import SessionStore
from oralvis.storage import FileTokenStore
from oralvis.upload import UploadPipeline
from oralvis.views import dashboard_view, scan_list_view

QUIT = "quit"
CONTINUE = "continue"

COMMAND_ROUTES = {
    "dashboard": LANDING_ROUTE,
    "upload": UPLOAD_ROUTE,
    "scans": SCANS_ROUTE,
    "view": SCANS_ROUTE,
    "pdf": SCANS_ROUTE,
}

HELP = """Commands:
  dashboard                       statistics and recent uploads
  upload                          upload a scan image (technician)
  scans [term] [region=<Region>]  search scans (dentist)
  view <id>                       show one scan (dentist)
  pdf <id> [dir]                  download the PDF report (dentist)
  logout | help | quit"""


def now_local() -> datetime:
    return datetime.now().astimezone()


def parse_scan_query(args):
    """Split `scans` arguments into (search term, region)."""
    terms, region = [], ""
    for arg in args:
        if arg.lower().startswith("region="):
            region = arg.split("=", 1)[1]
        else:
            terms.append(arg)
    return " ".join(terms), region


# ── Screens ──────────────────────────────────────────────────────────

def print_dashboard(session, feed, now):
    feed.refresh()
    data = dashboard_view(session, feed.aggregator.view(now), now, LANDING_ROUTE)
    stats = data["stats"]
    print(f"\n{data['greeting']}, {data['user']['name']} ({data['user']['role']})")
    print(f"  Total scans:     {stats['totalScans']}")
    print(f"  Active patients: {stats['activePatients']}")
    print(f"  This month:      {stats['monthlyScans']}")

    print("\n[Recent activity]")
    if not data["recentActivity"]:
        print("(no scans uploaded yet)")
    for item in data["recentActivity"]:
        print(f"  - {item['patient']} ({item['patientId']}) · {item['timestamp']}")

    if data["quickActions"]:
        print("\n[Quick actions]")
        for action in data["quickActions"]:
            print(f"  - {action['title']}: {action['description']}")


def print_scans(feed, args):
    feed.refresh()
    term, region = parse_scan_query(args)
    if region and region not in SCAN_REGIONS:
        print(f"Unknown region '{region}'. Choose one of: {', '.join(SCAN_REGIONS)}")
        return
    data = scan_list_view(feed.aggregator.records, term, region)
    print(f"\n[{data['count']} of {data['total']} scans]")
    if not data["scans"]:
        print("(no scans match)")
        return
    df = pd.DataFrame(data["scans"])[["id", "patientName", "patientId", "scanType", "region", "uploadDate"]]
    print(df.to_string(index=False))


def print_scan(feed, scan_id, now):
    scan = feed.aggregator.find(scan_id)
    if scan is None:
        feed.refresh()
        scan = feed.aggregator.find(scan_id)
    if scan is None:
        print(f"No scan with id {scan_id}.")
        return
    print(f"\nScan {scan.id} – {scan.patient_name} ({scan.patient_id})")
    print(f"  Type:        {scan.scan_type}")
    print(f"  Region:      {scan.region}")
    print(f"  Uploaded:    {scan.upload_date:%Y-%m-%d %H:%M} ({time_ago(scan.upload_date, now)})")
    if scan.uploaded_by:
        print(f"  Uploaded by: {scan.uploaded_by}")
    if scan.image_url:
        print(f"  Image:       {scan.image_url}")


def run_upload(pipeline, ask=input):
    path = ask("Scan image path: ").strip()
    if not path:
        return
    try:
        task = pipeline.select_file(ScanFile.from_path(path))
    except OSError as e:
        print(f"[upload] Could not read {path}: {e}")
        return
    except UploadError as e:
        print(f"[upload] {e}")
        return
    task.run()

    patient_name = ask("Patient name: ")
    patient_id = ask("Patient ID: ")
    scan_type = ask("Scan type: ")
    region = ask(f"Region ({' / '.join(SCAN_REGIONS)}): ")
    try:
        result = pipeline.submit(patient_name, patient_id, scan_type, region)
    except DraftInvalid as e:
        for err in e.errors:
            print(f"  - {err.message}")
        pipeline.clear_file()
        return
    print(f"[upload] {result.message}")
    if not result.success:
        pipeline.clear_file()


# ── Command dispatch ─────────────────────────────────────────────────

def handle_command(line, session, feed, pipeline, now=None, ask=input):
    """Run one REPL command; returns QUIT or CONTINUE."""
    try:
        parts = shlex.split(line)
    except ValueError as e:
        print(f"Could not parse command: {e}")
        return CONTINUE
    if not parts:
        return CONTINUE

    command, args = parts[0].lower(), parts[1:]
    now = now or now_local()

    if command in {"quit", "exit"}:
        return QUIT
    if command == "help":
        print(HELP)
        return CONTINUE
    if command == "logout":
        session.logout()
        print("[auth] Logged out.")
        return CONTINUE

    route = COMMAND_ROUTES.get(command)
    if route is None:
        print(f"Unknown command '{command}'. Type 'help'.")
        return CONTINUE

    decision = decide(route, session)
    if decision.action == REDIRECT:
        if decision.target != LANDING_ROUTE:
            return CONTINUE
        print(f"[gate] {route} is not available for your role; showing the dashboard.")
        print_dashboard(session, feed, now)
        return CONTINUE

    if command == "dashboard":
        print_dashboard(session, feed, now)
    elif command == "upload":
        run_upload(pipeline, ask)
    elif command == "scans":
        print_scans(feed, args)
    elif not args:
        print(f"Usage: {command} <id>")
    elif command == "view":
        print_scan(feed, args[0], now)
    else:
        path = feed.download_pdf(args[0], args[1] if len(args) > 1 else ".")
        if path is not None:
            print(f"[scans] PDF report saved to {path}")
    return CONTINUE


def login_prompt(session) -> bool:
    """Ask for credentials until login succeeds; False if the user gives up."""
    while not session.is_authenticated:
        try:
            email = input("\nEmail (or 'quit'): ").strip()
            if not email or email.lower() in {"quit", "exit"}:
                return False
            password = getpass("Password: ")
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            return False

        result = session.login(email, password)
        if not result.success:
            print(f"[auth] {result.message}")
    return True


def main():
    print("=== OralVis Scan Portal ===\n")

    client = PortalClient()
    session = SessionStore(client, FileTokenStore())
    session.bootstrap()

    feed = ScanFeed(client, notify=lambda msg: print(f"[error] {msg}"))
    pipeline = UploadPipeline(client, on_uploaded=lambda _result: feed.refresh())

    while True:
        if not session.is_authenticated and not login_prompt(session):
            print("Goodbye.")
            break

        print(f"\n[auth] Logged in as: {session.user.name} (role={session.user.role})")
        print(HELP)

        while session.is_authenticated:
            try:
                line = input("\noralvis> ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nExiting.")
                feed.close()
                return
            if handle_command(line, session, feed, pipeline) == QUIT:
                print("Goodbye.")
                feed.close()
                return


if __name__ == "__main__":
    main()
