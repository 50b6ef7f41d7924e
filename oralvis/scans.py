"""
Scan feed – loads GET /scans into an aggregator and fetches PDF reports.
"""

import sys
from pathlib import Path
from typing import Callable, List, Optional

from oralvis.aggregator import ScanAggregator
from oralvis.errors import ApiError
from oralvis.models import ScanRecord

LOAD_FAILED = "Failed to load scans"
PDF_FAILED = "Failed to download PDF report"


def _stderr_notice(message: str) -> None:
    print(f"[scans] {message}", file=sys.stderr)


def pdf_filename(scan_id) -> str:
    return f"scan-{scan_id}.pdf"


def parse_scans(payload: List[dict]) -> List[ScanRecord]:
    """Convert API dicts, skipping malformed entries."""
    records = []
    for item in payload:
        try:
            records.append(ScanRecord.from_api(item))
        except ValueError as e:
            print(f"[scans] Skipping record: {e}", file=sys.stderr)
    return records


class ScanFeed:
    """
    On failure the aggregator keeps its last-known collection and *notify*
    receives a short message. Responses arriving after close() are dropped.
    """

    def __init__(self, client, aggregator: Optional[ScanAggregator] = None,
                 notify: Callable[[str], None] = _stderr_notice):
        self.client = client
        self.aggregator = aggregator if aggregator is not None else ScanAggregator()
        self.notify = notify
        self.closed = False

    def refresh(self) -> bool:
        if self.closed:
            return False
        try:
            payload = self.client.list_scans()
        except ApiError as e:
            print(f"[scans] Error fetching scans: {e}", file=sys.stderr)
            self.notify(LOAD_FAILED)
            return False

        if self.closed:
            return False
        self.aggregator.replace(parse_scans(payload))
        return True

    def close(self) -> None:
        self.closed = True

    def fetch_pdf(self, scan_id) -> Optional[bytes]:
        try:
            return self.client.download_pdf(str(scan_id))
        except ApiError as e:
            print(f"[scans] Error downloading PDF: {e}", file=sys.stderr)
            self.notify(PDF_FAILED)
            return None

    def download_pdf(self, scan_id, dest_dir=".") -> Optional[Path]:
        """Save the report as `scan-<id>.pdf` under *dest_dir*."""
        content = self.fetch_pdf(scan_id)
        if content is None:
            return None
        dest = Path(dest_dir)
        dest.mkdir(parents=True, exist_ok=True)
        path = dest / pdf_filename(scan_id)
        path.write_bytes(content)
        return path
