"""
Upload pipeline – file checks, preview generation and the multipart submission.
"""

import sys
from typing import Callable, List, Optional

from oralvis.config import (
    MAX_UPLOAD_BYTES,
    MIN_PATIENT_ID_CHARS,
    MIN_PATIENT_NAME_CHARS,
    MIN_SCAN_TYPE_CHARS,
    SCAN_REGIONS,
)
from oralvis.errors import (
    ApiError,
    DraftInvalid,
    InvalidFormat,
    MissingField,
    MissingFile,
    TooLarge,
)
from oralvis.models import ScanFile, UploadDraft, UploadResult

UPLOAD_FAILED = "Upload failed"

# (field, label, minimum length)
TEXT_FIELDS = (
    ("patientName", "Patient name", MIN_PATIENT_NAME_CHARS),
    ("patientId", "Patient ID", MIN_PATIENT_ID_CHARS),
    ("scanType", "Scan type", MIN_SCAN_TYPE_CHARS),
)


def check_file(file: ScanFile) -> None:
    if not (file.content_type or "").lower().startswith("image/"):
        raise InvalidFormat("Please select an image file (JPG, PNG)")
    if file.size > MAX_UPLOAD_BYTES:
        raise TooLarge("File size must be less than 10MB")


def validate_metadata(fields: dict) -> List[MissingField]:
    errors = []
    for name, label, min_chars in TEXT_FIELDS:
        value = fields.get(name, "")
        if not value:
            errors.append(MissingField(name, f"{label} is required"))
        elif len(value) < min_chars:
            errors.append(MissingField(name, f"{label} must be at least {min_chars} characters"))

    region = fields.get("region", "")
    if not region:
        errors.append(MissingField("region", "Region is required"))
    elif region not in SCAN_REGIONS:
        errors.append(MissingField("region", f"Unknown region '{region}'"))
    return errors


class PreviewTask:
    """
    Deferred preview of one selected file. The result is applied only if the
    task was not cancelled and its file is still the one selected.
    """

    def __init__(self, pipeline: "UploadPipeline", file: ScanFile):
        self._pipeline = pipeline
        self.file = file
        self.cancelled = False
        self.done = False

    def cancel(self) -> None:
        self.cancelled = True

    def run(self) -> Optional[str]:
        if self.cancelled or self.done:
            return None
        data_uri = self.file.data_uri()
        self.done = True
        draft = self._pipeline.draft
        if self.cancelled or draft.file is not self.file:
            return None
        draft.preview_data_uri = data_uri
        return data_uri


class UploadPipeline:
    def __init__(self, client, on_uploaded: Optional[Callable[[UploadResult], None]] = None):
        self.client = client
        self.draft = UploadDraft()
        self._preview_task: Optional[PreviewTask] = None
        self._listeners: List[Callable[[UploadResult], None]] = []
        if on_uploaded is not None:
            self._listeners.append(on_uploaded)

    def on_uploaded(self, callback: Callable[[UploadResult], None]) -> None:
        self._listeners.append(callback)

    def select_file(self, file: ScanFile) -> PreviewTask:
        """Validate and keep *file*; returns the task that builds its preview."""
        check_file(file)
        self._cancel_preview()
        self.draft.file = file
        self.draft.preview_data_uri = None
        self._preview_task = PreviewTask(self, file)
        return self._preview_task

    def clear_file(self) -> None:
        self._cancel_preview()
        self.draft.file = None
        self.draft.preview_data_uri = None

    def submit(self, patient_name: str, patient_id: str, scan_type: str, region: str) -> UploadResult:
        """Validate locally, then send metadata + file as one multipart request."""
        if self.draft.file is None:
            raise MissingFile("Please select a scan image")

        fields = {
            "patientName": (patient_name or "").strip(),
            "patientId": (patient_id or "").strip(),
            "scanType": (scan_type or "").strip(),
            "region": (region or "").strip(),
        }
        errors = validate_metadata(fields)
        if errors:
            raise DraftInvalid(errors)

        self.draft.patient_name = fields["patientName"]
        self.draft.patient_id = fields["patientId"]
        self.draft.scan_type = fields["scanType"]
        self.draft.region = fields["region"]

        try:
            body = self.client.upload_scan(fields, self.draft.file)
        except ApiError as e:
            print(f"[upload] Upload rejected: {e}", file=sys.stderr)
            return UploadResult(False, e.message or UPLOAD_FAILED)

        result = UploadResult(True, body.get("message") or "Scan uploaded successfully!",
                              scan=body.get("scan"))
        self._cancel_preview()
        self.draft = UploadDraft()
        for callback in self._listeners:
            callback(result)
        return result

    def _cancel_preview(self) -> None:
        if self._preview_task is not None:
            self._preview_task.cancel()
            self._preview_task = None
